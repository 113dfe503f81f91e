"""HTML rendering for form controls.

Pure functions: given a control kind, the field's name, id, current value
and extra attributes, produce the control's markup as kida ``Markup`` so
autoescaping templates embed it as-is. Attribute values and text content
are escaped here.

Attribute conventions:
- ``True`` renders a bare attribute (``required``), ``False``/``None`` drop it
- a trailing underscore is stripped (``class_`` → ``class``, ``for_`` → ``for``)
  and remaining underscores become hyphens (``aria_label`` → ``aria-label``)
- a mapping value expands into prefixed attributes
  (``data={"id": 7}`` → ``data-id="7"``)
"""

import html
import re
from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from kida.template import Markup

from formfields.paths import UNRESOLVED

# Kinds that never render the bound value
_VALUELESS = frozenset({"password", "file"})

_ID_UNSAFE_RE = re.compile(r"[^\w-]+")


# ---------------------------------------------------------------------------
# Values and attributes
# ---------------------------------------------------------------------------


def stringify(value: Any) -> str | None:
    """Convert a bound value to its form representation.

    ``None`` and unresolved values (falsy sentinels) become ``None``;
    booleans become ``"1"``/``"0"``; a list renders its first element.
    """
    if value is None or value is UNRESOLVED:
        return None
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, (list, tuple)):
        return stringify(value[0]) if value else None
    return str(value)


def is_selected(current: Any, choice: Any) -> bool:
    """True when *choice* matches the current value (or any of its values)."""
    wanted = stringify(choice)
    if isinstance(current, (list, tuple, set, frozenset)):
        return any(stringify(c) == wanted for c in current)
    return stringify(current) == wanted


def _attr_name(key: str) -> str:
    return key.rstrip("_").replace("_", "-")


def _flatten(attrs: Mapping[str, Any]) -> Iterator[tuple[str, Any]]:
    for key, value in attrs.items():
        name = _attr_name(key)
        if isinstance(value, Mapping):
            for sub, sub_value in _flatten(value):
                yield f"{name}-{sub}", sub_value
        else:
            yield name, value


def attributes(**attrs: Any) -> Markup:
    """Render keyword arguments as an HTML attribute string.

    Example:
        attributes(type="text", required=True, data={"row": 2})
        → ' type="text" required data-row="2"'
    """
    parts: list[str] = []
    for name, value in _flatten(attrs):
        if value is None or value is False:
            continue
        if value is True:
            parts.append(f" {name}")
        else:
            parts.append(f' {name}="{html.escape(str(value), quote=True)}"')
    return Markup("".join(parts))


def _text(value: Any) -> str:
    if hasattr(value, "__html__"):
        return str(value.__html__())
    text = stringify(value)
    return html.escape(text) if text is not None else ""


def _choices(options: Iterable[Any]) -> Iterator[tuple[str, Any]]:
    """Yield ``(label, value)`` from plain values or ``(label, value)`` pairs."""
    for option in options:
        if isinstance(option, (list, tuple)) and len(option) == 2:
            yield str(option[0]), option[1]
        else:
            yield str(option), option


def _id_suffix(value: Any) -> str:
    return _ID_UNSAFE_RE.sub("-", stringify(value) or "").strip("-")


# ---------------------------------------------------------------------------
# Controls
# ---------------------------------------------------------------------------


def input_tag(type_: str, name: str, id: str, value: Any = None, **attrs: Any) -> Markup:
    """Render ``<input>`` of any type."""
    shown = None if type_ in _VALUELESS else stringify(value)
    return Markup(f"<input{attributes(type=type_, name=name, id=id, value=shown, **attrs)}>")


def checkbox(name: str, id: str, current: Any, value: Any = "1", **attrs: Any) -> Markup:
    """Render one checkbox, or a group when *value* is a list of choices."""
    if isinstance(value, (list, tuple)):
        return _group("checkbox", name, id, current, value, **attrs)
    checked = attrs.pop("checked", None)
    if checked is None:
        checked = is_selected(current, value)
    return Markup(
        f"<input{attributes(type='checkbox', name=name, id=id, value=stringify(value), checked=checked, **attrs)}>"
    )


def radio(name: str, id: str, current: Any, value: Any, **attrs: Any) -> Markup:
    """Render one radio button (id suffixed with its value), or a group."""
    if isinstance(value, (list, tuple)):
        return _group("radio", name, id, current, value, **attrs)
    checked = attrs.pop("checked", None)
    if checked is None:
        checked = is_selected(current, value)
    radio_id = f"{id}-{_id_suffix(value)}"
    return Markup(
        f"<input{attributes(type='radio', name=name, id=radio_id, value=stringify(value), checked=checked, **attrs)}>"
    )


def _group(kind: str, name: str, id: str, current: Any, options: Iterable[Any], **attrs: Any) -> Markup:
    parts: list[str] = []
    attrs.pop("checked", None)
    for label, value in _choices(options):
        choice_id = f"{id}-{_id_suffix(value)}"
        control = attributes(
            type=kind,
            name=name,
            id=choice_id,
            value=stringify(value),
            checked=is_selected(current, value),
            **attrs,
        )
        parts.append(f'<label for="{html.escape(choice_id)}"><input{control}> {html.escape(label)}</label>')
    return Markup("".join(parts))


def _options(current: Any, options: Iterable[Any]) -> Iterator[str]:
    for option in options:
        if isinstance(option, Mapping):
            for group, grouped in option.items():
                inner = "".join(_options(current, grouped))
                yield f'<optgroup label="{html.escape(str(group))}">{inner}</optgroup>'
            continue
        for label, value in _choices((option,)):
            flags = attributes(value=stringify(value) or "", selected=is_selected(current, value))
            yield f"<option{flags}>{html.escape(label)}</option>"


def select(name: str, id: str, current: Any, options: Iterable[Any] = (), **attrs: Any) -> Markup:
    """Render ``<select>``; options may be values, pairs, or ``{group: [...]}``."""
    inner = "".join(_options(current, options))
    return Markup(f"<select{attributes(name=name, id=id, **attrs)}>{inner}</select>")


def textarea(name: str, id: str, value: Any = None, size: str | None = None, **attrs: Any) -> Markup:
    """Render ``<textarea>``; ``size="10x40"`` sets rows and cols."""
    if size:
        rows, _, cols = str(size).partition("x")
        attrs.setdefault("rows", rows)
        if cols:
            attrs.setdefault("cols", cols)
    return Markup(f"<textarea{attributes(name=name, id=id, **attrs)}>{_text(value)}</textarea>")


def label(id: str, text: Any, **attrs: Any) -> Markup:
    """Render ``<label>`` pointing at *id* unless ``for`` is given."""
    target = attrs.pop("for_", None) or attrs.pop("for", None) or id
    return Markup(f"<label{attributes(for_=target, **attrs)}>{_text(text)}</label>")


def render(kind: str, name: str, id: str, value: Any = None, /, **attrs: Any) -> Markup:
    """Render a control of the given kind.

    Args:
        kind: ``text``, ``password``, ``hidden``, ``file``, ``checkbox``,
            ``radio``, ``select``, ``textarea``, ``label``, ``input`` (whose
            ``type`` attribute defaults to ``text``), or any other string,
            which renders ``<input type=kind>``.
        name: The control's ``name`` attribute.
        id: The control's ``id`` attribute.
        value: The current bound value.
        **attrs: Extra attributes. ``value`` (checkbox/radio), ``options``
            (select), ``size`` (textarea), ``text`` and ``for`` (label)
            are consumed by their control.
    """
    match kind:
        case "checkbox":
            return checkbox(name, id, value, attrs.pop("value", "1"), **attrs)
        case "radio":
            if "value" not in attrs:
                msg = "radio requires a value"
                raise TypeError(msg)
            return radio(name, id, value, attrs.pop("value"), **attrs)
        case "select":
            return select(name, id, value, attrs.pop("options", ()), **attrs)
        case "textarea":
            return textarea(name, id, value, **attrs)
        case "label":
            return label(id, attrs.pop("text", name), **attrs)
        case "input":
            type_ = attrs.pop("type_", None) or attrs.pop("type", None) or "text"
            return input_tag(type_, name, id, value, **attrs)
        case _:
            return input_tag(kind, name, id, value, **attrs)
