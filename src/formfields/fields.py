"""Field and scope handles.

``Field`` binds one dotted path; ``Fields`` binds a path prefix and takes
the field-local name on every call::

    form.field("user.name").text(size=20)
    user = form.fields("user")
    user.text("name")                 # same markup as above
    for address in form.fields("user.addresses"):
        address.text("street")        # user.addresses.0.street, ...

Resolution happens when a handle is created, so a misspelled root fails
right where the template asks for it. Rendering never fails on a missing
value: unresolved values render as absent.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
from typing import TYPE_CHECKING, Any

from kida.template import Markup

from formfields.errors import ConfigurationError
from formfields.paths import UNRESOLVED, Path
from formfields.render import render

if TYPE_CHECKING:
    from formfields.form import FormFields


def humanize(path: Path) -> str:
    """Default label text: the last non-numeric token, spaced and capitalized."""
    token = next((t for t in reversed(path.tokens) if not t.isdigit()), path.last)
    words = token.replace("_", " ").replace("-", " ").strip()
    return words[:1].upper() + words[1:]


class Field:
    """A form control bound to one dotted path.

    Rendering methods return ``Markup``. Rule methods return the field so
    declarations chain::

        form.field("user.password").required().min_length(8)
        form.field("user.password_confirm").equals("user.password")
    """

    __slots__ = ("_form", "_root", "path")

    def __init__(self, form: FormFields, path: str | Path, root: Any = UNRESOLVED) -> None:
        self._form = form
        self._root = root
        self.path = Path.parse(path)
        # Raises now for a missing root or a bad accessor
        form.resolve(self.path, root)

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def id(self) -> str:
        return self.path.dom_id(self._form.config.id_separator)

    @property
    def value(self) -> Any:
        """The submitted value if there is one, else the bound value."""
        return self._form.resolve(self.path, self._root)

    def __repr__(self) -> str:
        return f"Field({self.name!r})"

    # -- Rendering --

    def _render(self, kind: str, **attrs: Any) -> Markup:
        rules = self._form.rules
        if rules.validated and not rules.is_valid(self.name):
            existing = attrs.pop("class_", None) or attrs.pop("class", None)
            error_class = self._form.config.error_class
            attrs["class_"] = f"{existing} {error_class}" if existing else error_class
        return render(kind, self.name, self.id, self.value, **attrs)

    def input(self, type_: str, **attrs: Any) -> Markup:
        """Render ``<input type=type_>`` for any input type."""
        return self._render(type_, **attrs)

    def text(self, **attrs: Any) -> Markup:
        return self._render("text", **attrs)

    def password(self, **attrs: Any) -> Markup:
        """Render a password input. The bound value is never rendered."""
        return self._render("password", **attrs)

    def hidden(self, **attrs: Any) -> Markup:
        return self._render("hidden", **attrs)

    def file(self, **attrs: Any) -> Markup:
        return self._render("file", **attrs)

    def textarea(self, size: str | None = None, **attrs: Any) -> Markup:
        """Render a textarea; ``size="10x40"`` sets rows and cols."""
        return self._render("textarea", size=size, **attrs)

    def checkbox(self, value: Any = "1", **attrs: Any) -> Markup:
        """Render a checkbox, checked when the field's value equals *value*.

        A list of values (or ``(label, value)`` pairs) renders a labelled group.
        """
        return self._render("checkbox", value=value, **attrs)

    def radio(self, value: Any, **attrs: Any) -> Markup:
        """Render a radio button for *value*, or a labelled group for a list."""
        return self._render("radio", value=value, **attrs)

    def select(self, options: Sequence[Any], **attrs: Any) -> Markup:
        """Render a select; the option matching the field's value is selected."""
        return self._render("select", options=options, **attrs)

    def label(self, text: Any = None, **attrs: Any) -> Markup:
        """Render a label for this field.

        The text defaults to the humanized last path token
        (``user.first_name`` → ``First name``).
        """
        if text is None:
            text = humanize(self.path)
        return render("label", self.name, self.id, None, text=text, **attrs)

    # -- Validation queries --

    def error(self) -> str | None:
        """The first error message for this field, validating if needed."""
        return self._form.rules.error_for(self.name)

    def errors(self) -> list[str]:
        return self._form.rules.errors_for(self.name)

    def valid(self) -> bool:
        return self._form.rules.is_valid(self.name)

    # -- Rules --

    def _rule(self, kind: str, *params: Any, message: str | None = None) -> Field:
        self._form.rules.add_rule(self.name, kind, *params, message=message, root=self._root)
        return self

    def required(self, message: str | None = None) -> Field:
        return self._rule("required", message=message)

    def equals(self, other: str, message: str | None = None) -> Field:
        """Require the same value as the field named *other* (a full dotted name)."""
        return self._rule("equals", Path.parse(other).name, message=message)

    def matches(self, pattern: str, message: str | None = None) -> Field:
        return self._rule("matches", pattern, message=message)

    def min_length(self, n: int, message: str | None = None) -> Field:
        return self._rule("min_length", n, message=message)

    def max_length(self, n: int, message: str | None = None) -> Field:
        return self._rule("max_length", n, message=message)

    def email(self, message: str | None = None) -> Field:
        return self._rule("email", message=message)

    def url(self, message: str | None = None) -> Field:
        return self._rule("url", message=message)

    def one_of(self, *choices: Any, message: str | None = None) -> Field:
        return self._rule("one_of", *choices, message=message)

    def integer(self, message: str | None = None) -> Field:
        return self._rule("integer", message=message)

    def number(self, message: str | None = None) -> Field:
        return self._rule("number", message=message)

    def check(self, func: Callable[[str], bool], message: str | None = None) -> Field:
        """Add a custom predicate; the value is valid when it returns truthy.

        A name submitted more than once passes the list of its values.
        """
        return self._rule("check", func, message=message)

    def filter(self, *filters: str | Callable[[str], str]) -> Field:
        """Filter the value before its rules run: ``trim``, ``strip``, ``lower``,
        ``upper``, or any ``(str) -> str`` callable."""
        self._form.rules.add_filter(self.name, *filters, root=self._root)
        return self


class Fields:
    """A scope handle bound to a path prefix.

    Every operation takes the field-local name first and delegates to the
    ``Field`` for ``prefix.name``. Iterating a scope over a sequence
    yields one nested scope per element, each knowing its ``index()``.
    """

    __slots__ = ("_form", "_index", "_root", "path")

    def __init__(
        self,
        form: FormFields,
        path: str | Path,
        root: Any = UNRESOLVED,
        index: int | None = None,
    ) -> None:
        self._form = form
        self._root = root
        self._index = index
        self.path = Path.parse(path)
        form.resolve(self.path, root)

    def __repr__(self) -> str:
        return f"Fields({self.path.name!r})"

    # -- Scoping --

    def field(self, name: str) -> Field:
        """The field ``prefix.name``."""
        return Field(self._form, self.path.join(name), self._root)

    def fields(self, name: str) -> Fields:
        """A nested scope ``prefix.name``."""
        return Fields(self._form, self.path.join(name), self._root)

    def object(self) -> Any:
        """The value this scope is bound to."""
        return self._form.resolve(self.path, self._root)

    def index(self) -> int | None:
        """The element index when produced by ``each()``, else None."""
        return self._index

    def each(self) -> list[Fields]:
        """A nested scope for every element of the bound sequence.

        An unresolved or ``None`` value gives an empty list.

        Raises:
            ConfigurationError: If the bound value is not a sequence.
        """
        items = self.object()
        if items is UNRESOLVED or items is None:
            return []
        if isinstance(items, (str, bytes)) or not isinstance(items, Sequence):
            msg = f"{self.path.name!r} is not a sequence (got {type(items).__name__})"
            raise ConfigurationError(msg)
        return [Fields(self._form, self.path.join(i), self._root, index=i) for i in range(len(items))]

    def __iter__(self) -> Iterator[Fields]:
        return iter(self.each())

    # -- Rendering --

    def input(self, name: str, type_: str, **attrs: Any) -> Markup:
        return self.field(name).input(type_, **attrs)

    def text(self, name: str, **attrs: Any) -> Markup:
        return self.field(name).text(**attrs)

    def password(self, name: str, **attrs: Any) -> Markup:
        return self.field(name).password(**attrs)

    def hidden(self, name: str, **attrs: Any) -> Markup:
        return self.field(name).hidden(**attrs)

    def file(self, name: str, **attrs: Any) -> Markup:
        return self.field(name).file(**attrs)

    def textarea(self, name: str, size: str | None = None, **attrs: Any) -> Markup:
        return self.field(name).textarea(size=size, **attrs)

    def checkbox(self, name: str, value: Any = "1", **attrs: Any) -> Markup:
        return self.field(name).checkbox(value, **attrs)

    def radio(self, name: str, value: Any, **attrs: Any) -> Markup:
        return self.field(name).radio(value, **attrs)

    def select(self, name: str, options: Sequence[Any], **attrs: Any) -> Markup:
        return self.field(name).select(options, **attrs)

    def label(self, name: str, text: Any = None, **attrs: Any) -> Markup:
        return self.field(name).label(text, **attrs)

    # -- Validation queries --

    def error(self, name: str) -> str | None:
        return self.field(name).error()

    def errors(self, name: str) -> list[str]:
        return self.field(name).errors()

    def valid(self, name: str | None = None) -> bool:
        """Validity of ``prefix.name``, or of every field under the scope."""
        if name is not None:
            return self.field(name).valid()
        prefix = f"{self.path.name}."
        return not any(f.startswith(prefix) for f in self._form.rules.validate().errors)

    # -- Rules --

    def required(self, name: str, message: str | None = None) -> Fields:
        self.field(name).required(message)
        return self

    def equals(self, name: str, other: str, message: str | None = None) -> Fields:
        """Require ``prefix.name`` to equal ``prefix.other``."""
        self.field(name).equals(self.path.join(other).name, message)
        return self

    def matches(self, name: str, pattern: str, message: str | None = None) -> Fields:
        self.field(name).matches(pattern, message)
        return self

    def min_length(self, name: str, n: int, message: str | None = None) -> Fields:
        self.field(name).min_length(n, message)
        return self

    def max_length(self, name: str, n: int, message: str | None = None) -> Fields:
        self.field(name).max_length(n, message)
        return self

    def email(self, name: str, message: str | None = None) -> Fields:
        self.field(name).email(message)
        return self

    def url(self, name: str, message: str | None = None) -> Fields:
        self.field(name).url(message)
        return self

    def one_of(self, name: str, *choices: Any, message: str | None = None) -> Fields:
        self.field(name).one_of(*choices, message=message)
        return self

    def integer(self, name: str, message: str | None = None) -> Fields:
        self.field(name).integer(message)
        return self

    def number(self, name: str, message: str | None = None) -> Fields:
        self.field(name).number(message)
        return self

    def check(self, name: str, func: Callable[[str], bool], message: str | None = None) -> Fields:
        self.field(name).check(func, message)
        return self

    def filter(self, name: str, *filters: str | Callable[[str], str]) -> Fields:
        self.field(name).filter(*filters)
        return self
