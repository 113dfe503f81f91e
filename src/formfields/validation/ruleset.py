"""Rule declarations and the per-request rule set.

Field handles declare rules (``field.required().min_length(8)``); the
``RuleSet`` owns those declarations, turns them into rule callables when
validation is requested, and keeps the ``ValidationResult`` until a new
rule or filter is declared.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any

from formfields.errors import ConfigurationError
from formfields.paths import UNRESOLVED
from formfields.render import stringify
from formfields.validation import rules as _rules
from formfields.validation import validate
from formfields.validation.result import ValidationResult
from formfields.validation.rules import FILTERS, Filter, Validator

logger = logging.getLogger("formfields.validation")

_UNARY: dict[str, Validator] = {
    "required": _rules.required,
    "email": _rules.email,
    "url": _rules.url,
    "integer": _rules.integer,
    "number": _rules.number,
}

_FACTORIES: dict[str, Callable[..., Validator]] = {
    "matches": _rules.matches,
    "min_length": _rules.min_length,
    "max_length": _rules.max_length,
    "one_of": _rules.one_of,
    "check": _rules.check,
}

RULE_KINDS = frozenset(_UNARY) | frozenset(_FACTORIES) | {"equals"}


@dataclass(frozen=True, slots=True)
class Rule:
    """One declared rule: ``kind`` applied to ``field`` with ``params``.

    ``root`` is the explicit root the field was declared against, or
    ``UNRESOLVED`` when the field resolves from the stash.
    """

    field: str
    kind: str
    params: tuple[Any, ...] = ()
    message: str | None = None
    root: Any = UNRESOLVED


class RuleSet:
    """Declared rules and filters for one request, validated on demand.

    Args:
        lookup: ``lookup(name, root)`` returns the current value for a full
            field name. Called once per field each time validation
            actually runs.
    """

    __slots__ = ("_filters", "_lookup", "_result", "_roots", "_rules")

    def __init__(self, lookup: Callable[[str, Any], Any]) -> None:
        self._lookup = lookup
        self._rules: list[Rule] = []
        self._filters: dict[str, list[Filter]] = {}
        self._result: ValidationResult | None = None
        self._roots: dict[str, Any] = {}

    # -- Declaration --

    def add_rule(
        self,
        field: str,
        kind: str,
        *params: Any,
        message: str | None = None,
        root: Any = UNRESOLVED,
    ) -> Rule:
        """Declare a rule for *field*. Clears any cached result.

        The field is read against *root* when given; the latest
        declaration for a field decides its root.
        """
        if kind not in RULE_KINDS:
            msg = f"Unknown rule {kind!r}; expected one of: {', '.join(sorted(RULE_KINDS))}"
            raise ConfigurationError(msg)
        rule = Rule(field, kind, params, message, root)
        self._rules.append(rule)
        self._roots[field] = root
        self._result = None
        return rule

    def add_filter(self, field: str, *filters: str | Filter, root: Any = UNRESOLVED) -> None:
        """Declare filters applied, in order, to *field* before its rules."""
        resolved: list[Filter] = []
        for f in filters:
            if callable(f):
                resolved.append(f)
            elif f in FILTERS:
                resolved.append(FILTERS[f])
            else:
                msg = f"Unknown filter {f!r}; expected a callable or one of: {', '.join(sorted(FILTERS))}"
                raise ConfigurationError(msg)
        self._filters.setdefault(field, []).extend(resolved)
        self._roots[field] = root
        self._result = None

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    @property
    def fields(self) -> tuple[str, ...]:
        """Names with rules or filters, in declaration order."""
        names = dict.fromkeys(r.field for r in self._rules)
        names.update(dict.fromkeys(self._filters))
        return tuple(names)

    # -- Validation --

    @property
    def validated(self) -> bool:
        """True when a result is cached for the current declarations."""
        return self._result is not None

    def validate(self) -> ValidationResult:
        """Run every declared rule, or return the cached result."""
        if self._result is not None:
            return self._result

        # The other side of an equals reads against the declaring field's root
        roots = {r.params[0]: r.root for r in self._rules if r.kind == "equals"}
        roots.update(self._roots)
        raw = {name: self._lookup(name, root) for name, root in roots.items()}
        multi = {name: self._filtered_list(name, value) for name, value in raw.items() if _is_multi(value)}
        data = {name: self._filtered(name, value) for name, value in raw.items()}

        rules: dict[str, list[Validator]] = {}
        for name in self.fields:
            rules[name] = [self._validator(r, data, multi) for r in self._rules if r.field == name]

        logger.debug("running %d rules over %d fields", len(self._rules), len(rules))
        self._result = validate(data, rules)
        return self._result

    def error_for(self, field: str) -> str | None:
        """The first failing rule's message for *field*, or None."""
        return self.validate().first_error(field)

    def errors_for(self, field: str) -> list[str]:
        return list(self.validate().errors.get(field, []))

    def is_valid(self, field: str | None = None) -> bool:
        """Validity of one field, or of every field when *field* is None."""
        result = self.validate()
        if field is None:
            return result.is_valid
        return field not in result.errors

    def _apply_filters(self, name: str, value: str) -> str:
        for f in self._filters.get(name, ()):
            value = f(value)
        return value

    def _filtered(self, name: str, value: Any) -> str:
        """The filtered string value; a multi-valued field gives its first non-blank value."""
        if _is_multi(value):
            return next((v for v in self._filtered_list(name, value) if v.strip()), "")
        return self._apply_filters(name, stringify(value) or "")

    def _filtered_list(self, name: str, values: list[Any] | tuple[Any, ...]) -> list[str]:
        return [self._apply_filters(name, stringify(v) or "") for v in values]

    def _validator(self, rule: Rule, data: dict[str, str], multi: dict[str, list[str]]) -> Validator:
        if rule.kind in _UNARY:
            if rule.params:
                msg = f"Rule {rule.kind!r} takes no parameters"
                raise ConfigurationError(msg)
            validator = _UNARY[rule.kind]
        elif rule.kind == "equals":
            other = rule.params[0]
            validator = _rules.equals(data.get(other, ""), other)
        elif rule.kind == "check":
            run = _rules.check(*rule.params, rule.message or "Invalid value")
            if rule.field in multi:
                # Custom checks see every submitted value of a group
                values = multi[rule.field]
                return lambda _value: run(values)
            return run
        elif rule.kind == "matches" and rule.message:
            return _rules.matches(*rule.params, rule.message)
        else:
            validator = _FACTORIES[rule.kind](*rule.params)
        if rule.message:
            return _rules.with_message(validator, rule.message)
        return validator


def _is_multi(value: Any) -> bool:
    return isinstance(value, (list, tuple))
