"""
Possible pathways through a flow.

Walks the state links backwards from a target node to the start of the flow
and returns every chain of links that reaches it, shortest first.
"""

from __future__ import annotations

from ..trees.flow_tree import FlowTree
from ..types import Node
from .state_links import StateLink, generate_state_links, state_links_only


def get_pathways_to_state(
    name: str,
    states: list[Node] | FlowTree,
    links: list[StateLink] | None = None,
) -> list[list[StateLink]]:
    """
    Every chain of links leading to the entry id or fork name ``name``.

    Incoming links are grouped by variant key, so a fork that is declared
    several times with the same name is reached through whatever leads to any
    of its variants.
    """
    if links is None:
        links = state_links_only(generate_state_links(states))

    incoming: dict[str, list[StateLink]] = {}
    for link in links:
        incoming.setdefault(link.target.variant_key, []).append(link)

    def walk(variant_key: str, seen: frozenset[str]) -> list[list[StateLink]]:
        pathways: list[list[StateLink]] = []
        for link in incoming.get(variant_key, []):
            upstream_key = link.source.variant_key
            if upstream_key in seen:
                continue
            upstream = walk(upstream_key, seen | {upstream_key})
            if upstream:
                pathways.extend([*way, link] for way in upstream)
            else:
                pathways.append([link])
        return pathways

    targets: list[str] = []
    for link in links:
        key = link.target.variant_key
        if link.target.label == name and key not in targets:
            targets.append(key)

    result = [way for key in targets for way in walk(key, frozenset({key}))]
    return sorted(result, key=len)


def extract_from_names(links: list[StateLink]) -> list[str]:
    """The label each link starts from."""
    return [link.source.label for link in links]
