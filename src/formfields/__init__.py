"""formfields — bind HTML form controls to dotted paths, validate them.

Resolve ``user.addresses.0.street`` against the stash or the submitted
parameters, render the matching control, and declare chained validation
rules on the same handle.

Basic usage::

    from formfields import FormFields

    form = FormFields(stash={"user": {"name": "sshaw", "age": 0}})
    form.field("user.name").text()
    # <input type="text" name="user.name" id="user-name" value="sshaw">

    form.field("user.name").required().min_length(3)
    form.valid()

Template integration (kida)::

    from formfields.integration import bind, install
    install(env)
    with bind(form):
        env.get_template("user.html").render({})
"""

__version__ = "0.1.0"
__all__ = [
    "UNRESOLVED",
    "AccessorError",
    "ConfigurationError",
    "Field",
    "Fields",
    "FormFields",
    "FormFieldsConfig",
    "FormFieldsError",
    "Params",
    "Path",
    "PathError",
    "UnresolvedRootError",
    "ValidationResult",
    "get_form",
    "resolve",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import formfields`` fast while providing a clean top-level API.
    """
    if name == "FormFields":
        from formfields.form import FormFields

        return FormFields

    if name == "FormFieldsConfig":
        from formfields.config import FormFieldsConfig

        return FormFieldsConfig

    if name in ("Field", "Fields"):
        from formfields import fields as _fields

        return getattr(_fields, name)

    if name in ("Path", "UNRESOLVED", "resolve"):
        from formfields import paths as _paths

        return getattr(_paths, name)

    if name == "Params":
        from formfields.params import Params

        return Params

    if name == "ValidationResult":
        from formfields.validation import ValidationResult

        return ValidationResult

    if name == "get_form":
        from formfields.context import get_form

        return get_form

    if name in ("AccessorError", "ConfigurationError", "FormFieldsError", "PathError", "UnresolvedRootError"):
        from formfields import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
