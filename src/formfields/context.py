"""Binding context and the request-scoped current form.

Provides:
- ``BindingContext``: the stash and submitted parameters one request
  resolves field paths against, passed explicitly to the resolver.
- ``form_var``: the current ``FormFields`` for this task/thread, used by
  the template globals installed by ``formfields.integration``.

Thread safety:
    ``ContextVar`` is task-local under asyncio and thread-local under
    free-threading. No locks needed.
"""

from __future__ import annotations

from collections.abc import Mapping
from contextvars import ContextVar
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from formfields.params import Params

if TYPE_CHECKING:
    from formfields.form import FormFields


@dataclass(frozen=True, slots=True)
class BindingContext:
    """Read-only inputs for resolving field paths during one request.

    ``stash`` maps root names to bound values (``{"user": user}``).
    ``params`` holds the submitted values keyed by flattened field name.
    """

    stash: Mapping[str, Any] = field(default_factory=dict)
    params: Params = field(default_factory=Params)

    @classmethod
    def create(
        cls,
        stash: Mapping[str, Any] | None = None,
        params: Mapping[str, Any] | None = None,
    ) -> BindingContext:
        """Build a context, normalizing plain dicts of submitted values."""
        return cls(
            stash=MappingProxyType(dict(stash or {})),
            params=Params.from_mapping(params or {}),
        )

    def submitted(self, name: str) -> tuple[bool, Any]:
        """Return ``(found, value)`` for a submitted flattened name."""
        return self.params.lookup(name)


# -- Current form --

form_var: ContextVar[FormFields] = ContextVar("formfields_form")
"""The current request's form helper. Set by ``integration.bind()``."""


def get_form() -> FormFields:
    """Return the current request's ``FormFields``.

    Raises ``LookupError`` if called outside ``integration.bind()``.
    """
    return form_var.get()
