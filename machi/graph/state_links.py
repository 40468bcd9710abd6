"""
State link generation.

Folds a static flow into the list of links a chart is drawn from. Only the
tree is looked at, never a context: every fork produces both an "entered" link
to its first child and a "skipped" link to whatever comes after it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from ..trees.flow_tree import FlowTree, NormalizedNode, build_tree
from ..types import ConditionRef, Node


class Reason(str, Enum):
    """Why one node leads to another."""
    ENTRY_DONE = "ENTRY_DONE"
    FORK_ENTERED = "FORK_ENTERED"
    FORK_SKIPPED = "FORK_SKIPPED"


@dataclass
class StateLink:
    source: NormalizedNode
    target: NormalizedNode
    reason: Reason
    # conditions labelling the edge; merged across fork variants for skips
    conditions: list[ConditionRef] = field(default_factory=list)


@dataclass(frozen=True)
class GroupMarker:
    """Start (or end) of a chart subgraph for a fork's chart_group."""
    id: str
    end: bool = False


Link = Union[StateLink, GroupMarker]


def condition_names(conditions: list[ConditionRef] | tuple[ConditionRef, ...]) -> list[str]:
    """Chart labels for conditions: the key, or the predicate's function name."""
    return [condition.name for condition in conditions]


def _existing_skipped_link(links: list[Link], source: NormalizedNode, target: NormalizedNode) -> StateLink | None:
    """
    A skipped link from another variant of ``source`` to the same target.

    Forks sharing a label are alternatives of one decision, so their skip
    conditions are combined on one edge rather than drawn once per variant.
    """
    for link in links:
        if (
            isinstance(link, StateLink)
            and link.reason is Reason.FORK_SKIPPED
            and link.source.variant_key == source.variant_key
            and link.target.internal_id == target.internal_id
        ):
            return link
    return None


def _collect_links(nodes: list[NormalizedNode], links: list[Link], next_in_parent: NormalizedNode | None = None) -> None:
    for i, node in enumerate(nodes):
        # sibling variants of the same fork are never each other's successor
        next_node = next((n for n in nodes[i + 1:] if n.variant_key != node.variant_key), None)
        target = next_node or next_in_parent

        if node.is_fork:
            links.append(StateLink(node, node.children[0], Reason.FORK_ENTERED, list(node.requirements)))
            if node.chart_group:
                links.append(GroupMarker(node.chart_group))
            _collect_links(list(node.children), links, target)
            if node.chart_group:
                links.append(GroupMarker(node.chart_group, end=True))

            if target is not None:
                existing = _existing_skipped_link(links, node, target)
                if existing is not None:
                    existing.conditions.extend(node.requirements)
                else:
                    links.append(StateLink(node, target, Reason.FORK_SKIPPED, list(node.requirements)))

        elif node.is_done and target is not None:
            # entries with no isDone conditions are terminal
            links.append(StateLink(node, target, Reason.ENTRY_DONE, list(node.is_done)))


def deduplicate_links(links: list[Link]) -> list[Link]:
    """Drop links whose source, target and reason repeat an earlier link."""
    seen: set[tuple[str, str, Reason]] = set()
    unique: list[Link] = []
    for link in links:
        if isinstance(link, StateLink):
            key = (link.source.internal_id, link.target.internal_id, link.reason)
            if key in seen:
                continue
            seen.add(key)
        unique.append(link)
    return unique


def filter_invalid_links(tree: FlowTree, links: list[Link]) -> list[Link]:
    """Keep only links pointing forwards in the flow's logical order."""
    order = {node.internal_id: ix for ix, node in enumerate(tree.iter_nodes())}
    valid: list[Link] = []
    for link in links:
        if isinstance(link, StateLink):
            from_ix = order.get(link.source.internal_id, -1)
            to_ix = order.get(link.target.internal_id, -1)
            if from_ix < 0 or to_ix < 0 or from_ix >= to_ix:
                continue
        valid.append(link)
    return valid


def generate_state_links(states: list[Node] | FlowTree) -> list[Link]:
    """
    Links between the states of a flow, in logical order.

    Accepts authored states or an already built FlowTree.
    """
    tree = states if isinstance(states, FlowTree) else build_tree(states)
    links: list[Link] = []
    _collect_links(tree.nodes, links)
    return filter_invalid_links(tree, deduplicate_links(links))


def state_links_only(links: list[Link]) -> list[StateLink]:
    return [link for link in links if isinstance(link, StateLink)]
