"""Plugin configuration.

FormFieldsConfig is a frozen dataclass — immutable after creation, checked
once at install time.
"""

from dataclasses import dataclass

from formfields.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class FormFieldsConfig:
    """formfields configuration. Immutable after creation.

    The two method names only rename the controller-facing validation
    queries; they change no behavior::

        config = FormFieldsConfig(valid_method="form_valid", errors_method="form_errors")
    """

    # Controller-facing validation queries
    valid_method: str = "valid"
    errors_method: str = "errors"

    # Rendering
    error_class: str = "field-with-error"  # Appended to invalid controls after validation
    id_separator: str = "-"  # Joins path tokens into the DOM id

    def __post_init__(self) -> None:
        for option in ("valid_method", "errors_method"):
            value = getattr(self, option)
            if not value.isidentifier():
                msg = f"{option} must be a valid identifier, got {value!r}"
                raise ConfigurationError(msg)
        if self.valid_method == self.errors_method:
            msg = f"valid_method and errors_method must differ, both are {self.valid_method!r}"
            raise ConfigurationError(msg)
        if not self.id_separator or "." in self.id_separator:
            msg = f"id_separator must be non-empty and not contain '.', got {self.id_separator!r}"
            raise ConfigurationError(msg)
