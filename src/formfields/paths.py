"""Dotted field paths and their resolution against bound values.

A field name such as ``user.addresses.0.street`` is split into tokens.
The first token names the root (an explicit value or a stash entry);
every other token is applied by the first accessor that accepts the
current value, in the order listed in ``ACCESSORS``:

1. ``SequenceAccessor`` — list/tuple indexed by a non-negative integer token
2. ``MappingAccessor`` — key lookup on any ``Mapping``
3. ``AttributeAccessor`` — attribute lookup on any other object;
   callable attributes are invoked with no arguments

Submitted parameters win over bound values: when the request carries a
value for the full flattened name it is returned without touching the
stash. This keeps re-rendered invalid forms showing what was typed.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Final, Protocol

from formfields.context import BindingContext
from formfields.errors import AccessorError, PathError, UnresolvedRootError

logger = logging.getLogger("formfields.paths")


class _Unresolved:
    """Sentinel for a path that could not be followed to a value."""

    __slots__ = ()
    _instance: _Unresolved | None = None

    def __new__(cls) -> _Unresolved:
        if cls._instance is None:
            cls._instance = object.__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNRESOLVED"


UNRESOLVED: Final = _Unresolved()


@dataclass(frozen=True, slots=True)
class Path:
    """An immutable, non-empty sequence of non-empty name tokens."""

    tokens: tuple[str, ...]

    @classmethod
    def parse(cls, name: str | Path | None) -> Path:
        """Split a dotted name into a Path.

        Raises:
            PathError: If the name is missing, empty, or has an empty token.
        """
        if isinstance(name, Path):
            return name
        if name is None or not str(name).strip():
            msg = "A field name is required"
            raise PathError(msg)
        tokens = tuple(str(name).split("."))
        if any(not t for t in tokens):
            msg = f"Invalid field name {name!r}: empty path segment"
            raise PathError(msg)
        return cls(tokens)

    @property
    def name(self) -> str:
        """The flattened dotted name, used as the control's ``name``."""
        return ".".join(self.tokens)

    def dom_id(self, separator: str = "-") -> str:
        """The tokens joined for use as a DOM id (``user-name``)."""
        return separator.join(self.tokens)

    @property
    def head(self) -> str:
        return self.tokens[0]

    @property
    def tail(self) -> tuple[str, ...]:
        return self.tokens[1:]

    @property
    def last(self) -> str:
        return self.tokens[-1]

    def join(self, *names: str | int | Path) -> Path:
        """Return a longer path with each name's tokens appended."""
        tokens = list(self.tokens)
        for name in names:
            tokens.extend(Path.parse(str(name) if isinstance(name, int) else name).tokens)
        return Path(tuple(tokens))

    def __str__(self) -> str:
        return self.name


# ---------------------------------------------------------------------------
# Accessors
# ---------------------------------------------------------------------------


class Accessor(Protocol):
    """Something that can apply one path token to a value."""

    def accepts(self, value: Any, token: str) -> bool: ...

    def get(self, value: Any, token: str) -> Any:
        """Return the value under *token*, or ``UNRESOLVED`` when absent."""
        ...


class SequenceAccessor:
    """Index into a list or tuple with a non-negative integer token."""

    def accepts(self, value: Any, token: str) -> bool:
        return (
            isinstance(value, Sequence)
            and not isinstance(value, (str, bytes, bytearray))
            and token.isascii()
            and token.isdigit()
        )

    def get(self, value: Any, token: str) -> Any:
        index = int(token)
        if index >= len(value):
            return UNRESOLVED
        return value[index]


class MappingAccessor:
    """Look the token up as a key."""

    def accepts(self, value: Any, token: str) -> bool:
        return isinstance(value, Mapping)

    def get(self, value: Any, token: str) -> Any:
        try:
            return value[token]
        except KeyError:
            return UNRESOLVED


class AttributeAccessor:
    """Read an attribute, calling it when it is a zero-argument callable."""

    def accepts(self, value: Any, token: str) -> bool:
        return not token.startswith("_")

    def get(self, value: Any, token: str) -> Any:
        attr = getattr(value, token, UNRESOLVED)
        if attr is UNRESOLVED or not callable(attr) or isinstance(attr, type):
            return attr
        if not _takes_no_arguments(attr):
            msg = f"{type(value).__name__}.{token} requires arguments and cannot be used in a field path"
            raise AccessorError(msg)
        return attr()


def _takes_no_arguments(func: Any) -> bool:
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        # Builtins without introspectable signatures
        return True
    return all(
        p.default is not p.empty or p.kind in (p.VAR_POSITIONAL, p.VAR_KEYWORD)
        for p in signature.parameters.values()
    )


ACCESSORS: tuple[Accessor, ...] = (SequenceAccessor(), MappingAccessor(), AttributeAccessor())
"""Accessors in the order they are tried for each token."""


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


def resolve(
    path: str | Path,
    context: BindingContext,
    root: Any = UNRESOLVED,
) -> Any:
    """Resolve a field path to its current value.

    Args:
        path: A dotted name or ``Path``.
        context: The stash and submitted parameters for this request.
        root: The value the first token stands for. When omitted the
            first token is looked up in ``context.stash``.

    Returns:
        The submitted value for the full name if there is one, otherwise
        the bound value at the path, or ``UNRESOLVED`` when some token
        after the first cannot be applied.

    Raises:
        PathError: If the name is empty or malformed.
        UnresolvedRootError: If the first token names no root.
        AccessorError: If a token names a method that needs arguments.
    """
    path = Path.parse(path)

    found, submitted = context.submitted(path.name)
    if found:
        logger.debug("%s: using submitted value", path.name)
        return submitted

    if root is UNRESOLVED:
        if path.head not in context.stash:
            raise UnresolvedRootError(path.name, path.head)
        root = context.stash[path.head]

    return walk(root, path.tail, name=path.name)


def walk(value: Any, tokens: Sequence[str], *, name: str = "") -> Any:
    """Apply *tokens* to *value* in order, returning ``UNRESOLVED`` on a miss."""
    for token in tokens:
        if value is None or value is UNRESOLVED:
            return UNRESOLVED
        for accessor in ACCESSORS:
            if accessor.accepts(value, token):
                value = accessor.get(value, token)
                break
        else:
            value = UNRESOLVED
        if value is UNRESOLVED:
            logger.debug("%s: cannot apply %r", name or ".".join(tokens), token)
            return UNRESOLVED
    return value
