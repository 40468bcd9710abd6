"""
Flow Tree Normalization
=======================

Turns an authored list of entries and forks into an anytree-backed tree where
every node carries a positional ``internal_id``. The same entry id can then be
used under several forks (or the same entry object reused in several places)
and still be told apart by the engine and the chart generators.

Id scheme (pure function of the node's position, no counters):

    <kind>:<sanitized label>[~<variant>].<parent internal id>

``kind`` is ``e`` for entries and ``f`` for forks. ``variant`` is the node's
ordinal among siblings of the same kind whose sanitized labels are equal, and
is only written out when non-zero.
"""

from __future__ import annotations

import re
from typing import Any, Iterator

from anytree import NodeMixin, PreOrderIter

from ..errors import MalformedTreeError
from ..types import ConditionKind, ConditionRef, Node, is_fork, label_of

ID_SEPARATOR = "."
VARIANT_SEPARATOR = "~"

ENTRY_PREFIX = "e"
FORK_PREFIX = "f"


def stringify_to_id(label: str) -> str:
    """Replace every non-alphanumeric character with '_' and lowercase."""
    return re.sub(r"[^a-zA-Z0-9]", "_", label).lower()


def derive_internal_id(prefix: str, label: str, variant_id: int, parent_id: str = "") -> tuple[str, str]:
    """
    Build ``(internal_id, variant_key)`` for a node.

    ``variant_key`` is the id without the variant suffix, so sibling forks that
    share a label also share it.
    """
    segment = f"{prefix}:{stringify_to_id(label)}"
    own = segment if variant_id == 0 else f"{segment}{VARIANT_SEPARATOR}{variant_id}"
    if parent_id:
        return f"{own}{ID_SEPARATOR}{parent_id}", f"{segment}{ID_SEPARATOR}{parent_id}"
    return own, segment


class NormalizedNode(NodeMixin):
    """A node of the authored tree placed at one position of the flow."""

    def __init__(
        self,
        source: Node,
        internal_id: str,
        variant_key: str,
        variant_id: int,
        parent: NodeMixin | None = None,
    ):
        super().__init__()
        self.source = source
        self.internal_id = internal_id
        self.variant_key = variant_key
        self.variant_id = variant_id
        self.parent = parent

    @property
    def label(self) -> str:
        return label_of(self.source)

    @property
    def is_entry(self) -> bool:
        return False

    @property
    def is_fork(self) -> bool:
        return False

    @property
    def conditions(self) -> tuple[ConditionRef, ...]:
        """The conditions that gate this node (isDone or requirements)."""
        return ()

    @property
    def fork_ancestors(self) -> list[NormalizedFork]:
        """Enclosing forks, outermost first."""
        return [a for a in self.ancestors if isinstance(a, NormalizedFork)]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.label!r}, internal_id={self.internal_id!r})"


class NormalizedEntry(NormalizedNode):

    @property
    def id(self) -> str:
        return self.source.id

    @property
    def is_done(self) -> tuple[ConditionRef, ...]:
        return self.source.is_done

    @property
    def additional_data(self) -> Any:
        return self.source.additional_data

    @property
    def is_entry(self) -> bool:
        return True

    @property
    def conditions(self) -> tuple[ConditionRef, ...]:
        return self.is_done


class NormalizedFork(NormalizedNode):

    @property
    def name(self) -> str:
        return self.source.name

    @property
    def requirements(self) -> tuple[ConditionRef, ...]:
        return self.source.requirements

    @property
    def chart_group(self) -> str | None:
        return self.source.chart_group

    @property
    def is_fork(self) -> bool:
        return True

    @property
    def conditions(self) -> tuple[ConditionRef, ...]:
        return self.requirements


class FlowRoot(NodeMixin):
    """Invisible root holding the top-level nodes of a flow."""

    internal_id = ""

    def __repr__(self) -> str:
        return "FlowRoot()"


def normalize(states: list[Node], parent_id: str = "") -> list[NormalizedNode]:
    """
    Normalize a (possibly nested) list of entries and forks.

    Returns new nodes; the authored nodes are left untouched. Fork children are
    normalized recursively with the fork's internal id folded into their ids.
    """
    normalized: list[NormalizedNode] = []
    variants: dict[tuple[str, str], int] = {}

    for state in states:
        prefix = FORK_PREFIX if is_fork(state) else ENTRY_PREFIX
        label = label_of(state)
        variant_slot = (prefix, stringify_to_id(label))
        variant_id = variants.get(variant_slot, 0)
        variants[variant_slot] = variant_id + 1

        internal_id, variant_key = derive_internal_id(prefix, label, variant_id, parent_id)

        if is_fork(state):
            if not state.children:
                raise MalformedTreeError(f"Fork {state.name!r} has no children")
            node = NormalizedFork(state, internal_id, variant_key, variant_id)
            node.children = normalize(state.children, internal_id)
        else:
            node = NormalizedEntry(state, internal_id, variant_key, variant_id)
        normalized.append(node)

    return normalized


class FlowTree:
    """
    Normalized flow with lookup indexes.

    Mirrors the navigator pattern: build once, then look nodes up by internal
    id, entry id or fork name without walking the tree.
    """

    def __init__(self, nodes: list[NormalizedNode]) -> None:
        self.root = FlowRoot()
        self.root.children = nodes
        self._build_indexes()

    def _build_indexes(self) -> None:
        self.id_to_node: dict[str, NormalizedNode] = {}
        self.entries_by_id: dict[str, list[NormalizedEntry]] = {}
        self.forks_by_name: dict[str, list[NormalizedFork]] = {}

        for node in self.iter_nodes():
            self.id_to_node[node.internal_id] = node
            if node.is_fork:
                self.forks_by_name.setdefault(node.name, []).append(node)
            else:
                self.entries_by_id.setdefault(node.id, []).append(node)

    @property
    def nodes(self) -> list[NormalizedNode]:
        """Top-level nodes in declaration order."""
        return list(self.root.children)

    def iter_nodes(self) -> Iterator[NormalizedNode]:
        """All nodes in logical (pre-order) order, forks before their children."""
        return PreOrderIter(self.root, filter_=lambda n: isinstance(n, NormalizedNode))

    def entries(self) -> list[NormalizedEntry]:
        return [n for n in self.iter_nodes() if n.is_entry]

    def forks(self) -> list[NormalizedFork]:
        return [n for n in self.iter_nodes() if n.is_fork]

    def find(self, internal_id: str) -> NormalizedNode | None:
        """O(1) lookup by internal id."""
        return self.id_to_node.get(internal_id)

    def find_by_id(self, entry_id: str) -> list[NormalizedEntry]:
        """Every position of an entry id, in logical order."""
        return list(self.entries_by_id.get(entry_id, []))

    def find_by_name(self, fork_name: str) -> list[NormalizedFork]:
        """Every position of a fork name, in logical order."""
        return list(self.forks_by_name.get(fork_name, []))

    def ancestors(self, internal_id: str) -> list[NormalizedFork]:
        """Enclosing forks ordered parent -> outermost."""
        node = self.find(internal_id)
        if node is None:
            return []
        return list(reversed(node.fork_ancestors))

    def path_to_root(self, internal_id: str) -> list[NormalizedNode]:
        """The node followed by its enclosing forks, innermost first."""
        node = self.find(internal_id)
        if node is None:
            return []
        return [node, *self.ancestors(internal_id)]

    def condition_keys(self) -> list[tuple[str, NormalizedNode]]:
        """Every named condition used in the tree with the node using it."""
        refs: list[tuple[str, NormalizedNode]] = []
        for node in self.iter_nodes():
            for condition in node.conditions:
                if condition.kind is ConditionKind.NAMED:
                    refs.append((condition.key, node))
        return refs


def build_tree(states: list[Node]) -> FlowTree:
    """Normalize ``states`` and index the result."""
    return FlowTree(normalize(states))


__all__ = [
    "FlowRoot",
    "FlowTree",
    "NormalizedEntry",
    "NormalizedFork",
    "NormalizedNode",
    "build_tree",
    "derive_internal_id",
    "normalize",
    "stringify_to_id",
]
