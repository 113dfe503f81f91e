"""Kida environment integration.

``install()`` registers template globals that reach the current request's
``FormFields`` through ``formfields.context.form_var``; ``bind()`` sets
that variable around rendering::

    env = Environment(autoescape=True)
    install(env)

    form = FormFields(stash={"user": user}, params=params)
    with bind(form):
        html = env.get_template("user.html").render({})

    # user.html
    {{ field("user.name").label() }} {{ field("user.name").text(size=20) }}
    {% for address in fields("user.addresses") %}
      {{ address.text("street") }}
    {% end %}
"""

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

from kida import Environment

from formfields.config import FormFieldsConfig
from formfields.context import form_var, get_form
from formfields.fields import Field, Fields
from formfields.form import FormFields
from formfields.paths import UNRESOLVED


def field_errors(errors: Any, field_name: str) -> list[str]:
    """Extract validation errors for a single field.

    Accepts a ``FormFields`` (validating if needed) or a
    ``{field: message | [messages]}`` dict; anything else yields no errors.

    Example:
        {% for msg in form | field_errors("user.name") %}
          <span class="error">{{ msg }}</span>
        {% end %}
    """
    if isinstance(errors, FormFields):
        return errors.rules.errors_for(field_name)
    if isinstance(errors, dict):
        val = errors.get(field_name)
        if not val:
            return []
        return [val] if isinstance(val, str) else list(val)
    return []


def _field(name: str, root: Any = UNRESOLVED) -> Field:
    return get_form().field(name, root)


def _fields(name: str, root: Any = UNRESOLVED) -> Fields:
    return get_form().fields(name, root)


def helpers(form: FormFields) -> dict[str, Callable[..., Any]]:
    """Handler-facing callables, with validation queries under configured names.

    Example:
        config = FormFieldsConfig(valid_method="form_valid")
        h = helpers(FormFields(params=params, config=config))
        h["form_valid"]()  # FormFields.valid
    """
    return {
        "field": form.field,
        "fields": form.fields,
        form.config.valid_method: form.valid,
        form.config.errors_method: form.errors,
    }


def install(env: Environment, config: FormFieldsConfig | None = None) -> Environment:
    """Register ``field``/``fields`` globals and the ``field_errors`` filter.

    The validation queries are registered too, under ``config``'s names,
    and always act on the form bound with ``bind()``.
    """
    config = config or FormFieldsConfig()
    env.add_global("field", _field)
    env.add_global("fields", _fields)
    env.add_global(config.valid_method, lambda name=None: get_form().valid(name))
    env.add_global(config.errors_method, lambda name=None: get_form().errors(name))
    env.update_filters({"field_errors": field_errors})
    return env


@contextmanager
def bind(form: FormFields) -> Iterator[FormFields]:
    """Make *form* the current form for the duration of the block."""
    token = form_var.set(form)
    try:
        yield form
    finally:
        form_var.reset(token)
