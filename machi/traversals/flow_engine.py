"""
Flow Resolution Engine

Walks a normalized flow tree against a context snapshot and works out which
entry is next and which nodes were passed through to get there.

Rules, applied to each level in declaration order:
- a fork whose requirements all hold is entered: it goes into history and its
  children are resolved before any later sibling. If nothing inside it is left
  to do, resolution carries on with the next sibling.
- a fork whose requirements do not all hold is skipped entirely.
- an entry whose isDone conditions all hold is done and goes into history.
- the first entry that is not done is the current entry.

The engine keeps no state between calls. History is threaded through the walk
as a tuple so no two branches ever share a buffer.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Callable

from .. import MACHI_API_VERSION
from ..errors import UnknownConditionError
from ..trees.flow_tree import FlowTree, NormalizedEntry, NormalizedNode, build_tree
from ..types import ConditionsMap, ExecutionResult, Node
from .conditions import EvaluatedConditions, all_hold, any_fails, evaluate_conditions

logger = logging.getLogger(__name__)

History = tuple[NormalizedNode, ...]


def is_fork_entered(node: NormalizedNode, context: Any, evaluated: EvaluatedConditions) -> bool:
    """True when ``node`` is a fork and every requirement holds."""
    return node.is_fork and all_hold(node.requirements, context, evaluated)


def is_entry_done(node: NormalizedNode, context: Any, evaluated: EvaluatedConditions) -> bool:
    """True when ``node`` is an entry with at least one isDone condition, all holding."""
    return node.is_entry and bool(node.is_done) and all_hold(node.is_done, context, evaluated)


def is_entry_next(node: NormalizedNode, context: Any, evaluated: EvaluatedConditions) -> bool:
    """True when ``node`` is an entry that still needs doing."""
    return node.is_entry and (not node.is_done or any_fails(node.is_done, context, evaluated))


def resolve(
    nodes: list[NormalizedNode],
    context: Any,
    evaluated: EvaluatedConditions,
    history: History = (),
) -> tuple[NormalizedEntry | None, History]:
    """
    Resolve one level of the tree.

    Returns ``(entry, history)``. ``entry`` is None when every entry reachable
    from ``nodes`` is done; ``history`` then holds everything passed through so
    the caller can continue with the next sibling.
    """
    for node in nodes:
        if node.is_fork:
            if not is_fork_entered(node, context, evaluated):
                logger.debug("Skipping fork %s", node.internal_id)
                continue
            logger.debug("Entering fork %s", node.internal_id)
            entry, history = resolve(list(node.children), context, evaluated, history + (node,))
            if entry is not None:
                return entry, history
            continue

        if is_entry_done(node, context, evaluated):
            history = history + (node,)
            continue

        logger.debug("Resolved entry %s", node.internal_id)
        return node, history

    return None, history


def next_entry_in_history(result: ExecutionResult, current_entry_id: str) -> NormalizedEntry | None:
    """
    The entry that follows ``current_entry_id`` in the result's history.

    Matches on the entry id or the internal id; the first match wins. Returns
    None when the id is not in history or is the last entry there.
    """
    entries = result.entries
    for index, entry in enumerate(entries):
        if current_entry_id in (entry.id, entry.internal_id):
            if index + 1 < len(entries):
                return entries[index + 1]
            return None
    return None


class FlowEngine:
    """
    Resolves a flow for a given context.

    The tree is normalized and every named condition it uses is checked against
    ``conditions`` when the engine is built, so authoring mistakes surface
    before the first execution.
    """

    implements_core_version = MACHI_API_VERSION

    def __init__(self, states: list[Node], conditions: ConditionsMap | None = None):
        self.states = list(states)
        self.conditions: ConditionsMap = dict(conditions or {})
        self.tree: FlowTree = build_tree(self.states)
        self._check_condition_keys()

    def _check_condition_keys(self) -> None:
        for key, node in self.tree.condition_keys():
            if key not in self.conditions:
                raise UnknownConditionError(key, node.label)

    def evaluate_conditions(self, context: Any) -> EvaluatedConditions:
        """Evaluate the conditions map once for ``context``."""
        return evaluate_conditions(self.conditions, context)

    def resolve(self, context: Any) -> ExecutionResult | None:
        """Natural resolution, ignoring any current entry."""
        evaluated = self.evaluate_conditions(context)
        entry, history = resolve(self.tree.nodes, context, evaluated)
        if entry is None:
            logger.debug("Flow finished after %d nodes", len(history))
            return None
        return ExecutionResult(entry=entry, history=history)

    def execute(self, context: Any, current_entry_id: str | None = None) -> ExecutionResult | None:
        """
        Resolve the flow for ``context``.

        When ``current_entry_id`` names an entry in the resolved history, the
        entry right after it is returned instead of the naturally resolved one,
        so a user who went back moves forward through the steps they already
        saw. If the context change took the flow down another branch the id is
        no longer in history and the natural result is returned.
        """
        result = self.resolve(context)
        if result is None or current_entry_id is None:
            return result

        following = next_entry_in_history(result, current_entry_id)
        if following is None:
            return result

        logger.debug("Resuming after %s at %s", current_entry_id, following.internal_id)
        return replace(result, entry=following)

    __call__ = execute


def create_flow_engine(states: list[Node], conditions: ConditionsMap | None = None) -> FlowEngine:
    """Create a FlowEngine."""
    return FlowEngine(states, conditions)


def make_machine(
    states: list[Node],
    conditions: ConditionsMap | None = None,
) -> Callable[..., ExecutionResult | None]:
    """
    Build a machine and return its ``execute`` function.

    ``execute(context, current_entry_id=None)`` returns an ExecutionResult, or
    None once every entry is done.
    """
    return FlowEngine(states, conditions).execute
