"""
Flow Runner

Drives a flow on behalf of an application: persists the context, asks the
engine for the next entry and hands its id to a navigator. This is the
update → resolve → navigate loop an app would otherwise write around the
engine itself.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from copy import deepcopy
from pathlib import Path
from typing import Any

from ..config import get_machi_config
from ..interfaces import ContextStore, FlowMachine, Navigator
from ..trees.flow_tree import NormalizedEntry
from ..types import ExecutionResult

logger = logging.getLogger(__name__)


class InMemoryContextStore:
    """ContextStore keeping contexts in a dict. Handy for tests and scripts."""

    def __init__(self) -> None:
        self._data: dict[str, dict[str, Any]] = {}

    def load(self, key: str) -> dict[str, Any] | None:
        data = self._data.get(key)
        return deepcopy(data) if data is not None else None

    def save(self, key: str, data: dict[str, Any]) -> None:
        self._data[key] = deepcopy(data)

    def clear(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileContextStore:
    """ContextStore backed by a single JSON file mapping key -> context."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        with self.path.open(encoding="utf-8") as f:
            return json.load(f)

    def _write(self, contents: dict[str, Any]) -> None:
        # serialize before touching the file so a bad context cannot truncate it
        text = json.dumps(contents, indent=2, sort_keys=True)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
            os.replace(tmp_name, self.path)
        except Exception:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def load(self, key: str) -> dict[str, Any] | None:
        return self._read().get(key)

    def save(self, key: str, data: dict[str, Any]) -> None:
        contents = self._read()
        contents[key] = data
        self._write(contents)

    def clear(self, key: str) -> None:
        contents = self._read()
        if key in contents:
            del contents[key]
            self._write(contents)


class FlowRunner:
    """
    Keeps one user's context and position in a flow.

    ``current_entry`` is the entry on screen. Its internal id is passed to the
    engine on every update so that, after going back, the user moves forwards
    through the steps they already saw. The internal id pins the position even
    when the same entry id appears more than once in history.
    """

    def __init__(
        self,
        machine: FlowMachine,
        store: ContextStore,
        navigator: Navigator,
        initial_context: dict[str, Any] | None = None,
        storage_key: str | None = None,
    ):
        self.machine = machine
        self.store = store
        self.navigator = navigator
        self.initial_context: dict[str, Any] = dict(initial_context or {})
        self.storage_key = storage_key or get_machi_config().storage_key
        self.context: dict[str, Any] = dict(self.initial_context)
        self.current_entry: NormalizedEntry | None = None
        self.last_result: ExecutionResult | None = None

    @property
    def current_entry_id(self) -> str | None:
        """Entry id of the screen being shown."""
        return self.current_entry.id if self.current_entry is not None else None

    def _persist(self, context: dict[str, Any]) -> None:
        try:
            self.store.save(self.storage_key, context)
        except (OSError, TypeError, ValueError) as e:
            # Still move on in memory; only rehydration is affected
            logger.warning("Could not persist context under %s: %s", self.storage_key, e)

    def update(self, context: dict[str, Any], navigate: bool = True) -> ExecutionResult | None:
        """Store ``context`` and move to the entry the flow resolves to."""
        self._persist(context)
        self.context = context

        position = self.current_entry.internal_id if self.current_entry is not None else None
        result = self.machine(context, position)
        self.last_result = result
        if result is None:
            logger.warning("Next entry not found - reached the end of the flow")
            return None

        self.current_entry = result.entry
        if navigate:
            logger.info("Navigating to %s", result.entry.id)
            self.navigator.navigate(result.entry.id)
        return result

    def rehydrate(self) -> ExecutionResult | None:
        """
        Restore the persisted context and rebuild the navigation stack from
        the resolved history.
        """
        try:
            persisted = self.store.load(self.storage_key)
        except (OSError, ValueError) as e:
            logger.warning("Failed to read persisted context, starting fresh: %s", e)
            persisted = None

        if persisted is None:
            logger.info("No persisted context found under %s", self.storage_key)
            persisted = dict(self.initial_context)

        self.context = persisted
        result = self.machine(persisted)
        self.last_result = result
        if result is None:
            logger.warning("Persisted context completes the flow, nothing to show")
            return None

        entry_ids = [*result.entry_ids, result.entry.id]
        self.current_entry = result.entry
        self.navigator.reset(entry_ids)
        return result

    def go_back(self) -> str | None:
        """
        Step back to the previous entry in history and navigate there.

        Returns the entry id now on screen, or None if already at the start.
        """
        if self.last_result is None:
            return None

        entries = self.last_result.entries
        positions = [entry.internal_id for entry in entries]
        if self.current_entry is not None and self.current_entry.internal_id in positions:
            index = positions.index(self.current_entry.internal_id)
        else:
            index = len(entries)
        if index == 0:
            return None

        self.current_entry = entries[index - 1]
        self.navigator.navigate(self.current_entry_id)
        return self.current_entry_id

    def clear(self) -> None:
        """Forget the persisted context and start over."""
        self.store.clear(self.storage_key)
        self.context = dict(self.initial_context)
        self.current_entry = None
        self.last_result = None


def create_flow_runner(
    machine: FlowMachine,
    navigator: Navigator,
    store: ContextStore | None = None,
    initial_context: dict[str, Any] | None = None,
) -> FlowRunner:
    """Create a FlowRunner, defaulting to in-memory storage."""
    return FlowRunner(machine, store or InMemoryContextStore(), navigator, initial_context)
