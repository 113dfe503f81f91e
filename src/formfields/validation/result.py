"""Validation result — immutable outcome of one validation pass."""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """The outcome of running every declared rule once.

    ``is_valid`` is True when there are no errors.
    The result is falsy when invalid, so you can write::

        result = form.rules.validate()
        if not result:
            return Template("signup.html", errors=result.errors)

    ``data`` holds the filtered values of every field that passed.

    ``errors`` maps field names to messages in declaration order::

        {"user.name": ["This field is required"],
         "user.password_confirm": ["Must match user.password"]}
    """

    data: dict[str, str]
    errors: dict[str, list[str]]

    @property
    def is_valid(self) -> bool:
        """True if validation passed with no errors."""
        return not self.errors

    def first_error(self, field: str) -> str | None:
        """The first message recorded for *field*, or None."""
        messages = self.errors.get(field)
        return messages[0] if messages else None

    def __bool__(self) -> bool:
        """Falsy when invalid — enables ``if not result:`` pattern."""
        return self.is_valid
