"""Built-in validation rules and filters.

Each rule is a callable with the signature::

    def rule(value: str) -> str | None:
        '''Return error message, or None if valid.'''

Parameterized rules are factories returning a rule. Custom rules follow
the same protocol — any ``(str) -> str | None`` callable works with
``validate()``.

Only ``required`` rejects a blank value. The length, format, choice and
type rules accept ``""`` so an optional field may be left empty; pair
them with ``required`` when a value must be given.

Filters are ``(str) -> str`` callables applied to a field's value before
its rules run. ``FILTERS`` maps the names accepted by
``Field.filter("trim")`` to their implementations.
"""

import functools
import re
from collections.abc import Callable

type Validator = Callable[[str], str | None]
type Filter = Callable[[str], str]


# ---------------------------------------------------------------------------
# Presence
# ---------------------------------------------------------------------------


def required(value: str) -> str | None:
    """Field must be present and non-empty."""
    if not value or not value.strip():
        return "This field is required"
    return None


# ---------------------------------------------------------------------------
# Length
# ---------------------------------------------------------------------------


def max_length(n: int) -> Validator:
    """String must be at most *n* characters."""

    def check(value: str) -> str | None:
        if len(value) > n:
            return f"Must be at most {n} characters"
        return None

    return check


def min_length(n: int) -> Validator:
    """String must be at least *n* characters."""

    def check(value: str) -> str | None:
        if value and len(value) < n:
            return f"Must be at least {n} characters"
        return None

    return check


# ---------------------------------------------------------------------------
# Format
# ---------------------------------------------------------------------------

# Structure only, not deliverability
_EMAIL_RE = re.compile(r"^[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}$")

_URL_RE = re.compile(r"^https?://[^\s/$.?#].\S*$", re.IGNORECASE)


def email(value: str) -> str | None:
    """Value must be a valid email address (basic format check)."""
    if value and not _EMAIL_RE.match(value):
        return "Must be a valid email address"
    return None


def url(value: str) -> str | None:
    """Value must be an http or https URL."""
    if value and not _URL_RE.match(value):
        return "Must be a valid URL"
    return None


def matches(pattern: str | re.Pattern[str], message: str | None = None) -> Validator:
    """Value must match the given regex pattern (anchored at the start)."""
    compiled = re.compile(pattern)

    def check(value: str) -> str | None:
        if value and not compiled.match(value):
            return message or f"Must match pattern: {compiled.pattern}"
        return None

    return check


# ---------------------------------------------------------------------------
# Comparison
# ---------------------------------------------------------------------------


def equals(other_value: str, other_name: str) -> Validator:
    """Value must equal *other_value*, the value of the field *other_name*."""

    def check(value: str) -> str | None:
        if value != other_value:
            return f"Must match {other_name}"
        return None

    return check


def one_of(*choices: str) -> Validator:
    """Value must be one of the given choices."""
    allowed = frozenset(str(c) for c in choices)

    def check(value: str) -> str | None:
        if value and value not in allowed:
            options = ", ".join(sorted(allowed))
            return f"Must be one of: {options}"
        return None

    return check


# ---------------------------------------------------------------------------
# Type
# ---------------------------------------------------------------------------


def integer(value: str) -> str | None:
    """Value must be a valid integer."""
    if not value:
        return None
    try:
        int(value)
    except (ValueError, TypeError):
        return "Must be a whole number"
    return None


def number(value: str) -> str | None:
    """Value must be a valid number (int or float)."""
    if not value:
        return None
    try:
        float(value)
    except (ValueError, TypeError):
        return "Must be a number"
    return None


# ---------------------------------------------------------------------------
# Custom
# ---------------------------------------------------------------------------


def check(func: Callable[[str], bool], message: str = "Invalid value") -> Validator:
    """Wrap a predicate: the value is valid when ``func(value)`` is truthy."""

    def run(value: str) -> str | None:
        return None if func(value) else message

    return run


def with_message(validator: Validator, message: str) -> Validator:
    """Replace a rule's error message, keeping the rule itself reachable."""

    @functools.wraps(validator)
    def run(value: str) -> str | None:
        return message if validator(value) is not None else None

    return run


# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------

_WS_RE = re.compile(r"\s+")


def trim(value: str) -> str:
    """Remove leading and trailing whitespace."""
    return value.strip()


def strip(value: str) -> str:
    """Trim and collapse runs of inner whitespace to one space."""
    return _WS_RE.sub(" ", value).strip()


FILTERS: dict[str, Filter] = {
    "trim": trim,
    "strip": strip,
    "lower": str.lower,
    "upper": str.upper,
}
