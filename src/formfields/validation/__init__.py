"""Field validation — composable rules, clean results.

Rules are plain callables returning an error message or ``None``;
``validate()`` runs them over a mapping of values. ``RuleSet`` sits on
top: it collects the rules and filters declared on field handles,
translates them into rule callables, and memoizes the result for the
rest of the request.

Usage::

    from formfields.validation import validate, required, max_length, email

    result = validate(values, {
        "user.name": [required, max_length(50)],
        "user.email": [required, email],
    })
    if not result:
        ...  # result.errors == {"user.email": ["Must be a valid email address"]}
"""

import inspect
import logging
from collections.abc import Mapping

from formfields.validation.result import ValidationResult
from formfields.validation.rules import (
    FILTERS,
    Filter,
    Validator,
    check,
    email,
    equals,
    integer,
    matches,
    max_length,
    min_length,
    number,
    one_of,
    required,
    url,
    with_message,
)

logger = logging.getLogger("formfields.validation")

__all__ = [
    "FILTERS",
    "Filter",
    "Rule",
    "RuleSet",
    "ValidationResult",
    "Validator",
    "check",
    "email",
    "equals",
    "integer",
    "matches",
    "max_length",
    "min_length",
    "number",
    "one_of",
    "required",
    "url",
    "validate",
    "with_message",
]


def validate(
    data: Mapping[str, str],
    rules: Mapping[str, list[Validator]],
) -> ValidationResult:
    """Validate data against a set of rules.

    Args:
        data: Field names to string values.
        rules: Field names to lists of rules. Each rule returns an
            error message string on failure, or ``None`` on success.

    Returns:
        A ``ValidationResult`` with ``.data`` (values of fields that
        passed) and ``.errors`` (field → messages in rule order).
    """
    errors: dict[str, list[str]] = {}
    cleaned: dict[str, str] = {}

    for field_name, validators in rules.items():
        value = data.get(field_name) or ""

        field_errors: list[str] = []
        for validator in validators:
            error = validator(value)
            if error is not None:
                field_errors.append(error)
                # Nothing else is meaningful on a missing value
                if inspect.unwrap(validator) is required:
                    break

        if field_errors:
            errors[field_name] = field_errors
        else:
            cleaned[field_name] = value

    logger.debug("validated %d fields, %d invalid", len(rules), len(errors))
    return ValidationResult(data=cleaned, errors=errors)


# Imported last: the rule set builds on validate()
from formfields.validation.ruleset import Rule, RuleSet  # noqa: E402
