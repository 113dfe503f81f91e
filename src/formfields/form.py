"""The per-request form helper.

``FormFields`` is what a handler creates once per request: it holds the
binding context (stash + submitted parameters) and the rule set, and it
hands out field and scope handles::

    form = FormFields(stash={"user": user}, params=await request.form())
    form.field("user.name").required().min_length(3)
    form.field("user.password_confirm").equals("user.password")
    if not form.valid():
        return Template("signup.html", errors=form.errors())
"""

from collections.abc import Mapping
from typing import Any

from formfields.config import FormFieldsConfig
from formfields.context import BindingContext
from formfields.fields import Field, Fields
from formfields.paths import UNRESOLVED, Path, resolve
from formfields.validation import RuleSet


class FormFields:
    """Field handles, rules, and validation state for one request.

    Args:
        stash: Root names to bound values (``{"user": user}``).
        params: Submitted values keyed by flattened field name. A plain
            mapping or ``Params``; list values mean repeated names.
        config: Naming and rendering options.
    """

    def __init__(
        self,
        stash: Mapping[str, Any] | None = None,
        params: Mapping[str, Any] | None = None,
        *,
        config: FormFieldsConfig | None = None,
    ) -> None:
        self.config = config or FormFieldsConfig()
        self.context = BindingContext.create(stash, params)
        self.rules = RuleSet(self.resolve)

    def __repr__(self) -> str:
        return f"<FormFields stash={sorted(self.context.stash)!r} rules={len(self.rules)}>"

    # -- Handles --

    def field(self, name: str, root: Any = UNRESOLVED) -> Field:
        """A handle for the control bound to *name*.

        Raises:
            ConfigurationError: If *name* is malformed or its root is missing.
        """
        return Field(self, name, root)

    def fields(self, name: str, root: Any = UNRESOLVED) -> Fields:
        """A scope handle bound to the prefix *name*."""
        return Fields(self, name, root)

    # -- Resolution --

    def resolve(self, path: str | Path, root: Any = UNRESOLVED) -> Any:
        return resolve(path, self.context, root)

    # -- Validation queries --

    def valid(self, name: str | None = None) -> bool:
        """Validity of one field, or of the whole form when *name* is None.

        Runs validation on first use; later calls reuse the result until
        another rule is declared.
        """
        return self.rules.is_valid(name)

    def errors(self, name: str | None = None) -> dict[str, str] | str | None:
        """First error message per invalid field, or for one field."""
        if name is not None:
            return self.rules.error_for(Path.parse(name).name)
        result = self.rules.validate()
        return {field: messages[0] for field, messages in result.errors.items()}

    @property
    def values(self) -> dict[str, str]:
        """Filtered values of every field that passed validation."""
        return dict(self.rules.validate().data)
