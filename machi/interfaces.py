"""
Collaborator interfaces.

The engine only resolves flows. Whatever stores the context or moves the user
between screens lives behind these protocols:
- ContextStore: persists the context between sessions
- Navigator: shows the screen for an entry id
- FlowMachine: anything that resolves a flow (FlowEngine, make_machine result)
"""

from __future__ import annotations
from typing import Any, Protocol

from .types import ExecutionResult


class ContextStore(Protocol):
    """
    Key-value persistence for flow contexts.

    Contexts at this layer are plain JSON-compatible dicts.
    """

    def load(self, key: str) -> dict[str, Any] | None:
        """Return the stored context, or None if nothing is stored under key."""
        ...

    def save(self, key: str, data: dict[str, Any]) -> None:
        ...

    def clear(self, key: str) -> None:
        ...


class Navigator(Protocol):
    """Moves the user between screens, identified by entry id."""

    def navigate(self, entry_id: str) -> None:
        """Show the screen for ``entry_id``."""
        ...

    def reset(self, entry_ids: list[str]) -> None:
        """Replace the navigation stack, last id on top."""
        ...


class FlowMachine(Protocol):

    def __call__(self, context: Any, current_entry_id: str | None = None) -> ExecutionResult | None:
        ...
