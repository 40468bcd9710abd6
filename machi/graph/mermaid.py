"""
Mermaid chart text generation from state links.
"""

from __future__ import annotations

import hashlib
import json
from typing import Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ..trees.flow_tree import FlowTree, NormalizedNode, stringify_to_id
from ..types import Node
from .state_links import GroupMarker, Link, Reason, StateLink, condition_names, generate_state_links

Direction = Literal["vertical", "horizontal"]


class Theme(BaseModel):
    """Mermaid theme variables (dumped in camelCase)."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    dark_mode: bool
    background: str
    primary_color: str
    secondary_color: str
    tertiary_color: str
    note_bkg_color: str
    main_bkg: str
    line_color: str
    edge_label_background: str


DARK_THEME = Theme(
    dark_mode=True,
    background="#000000",
    primary_color="#444444",
    secondary_color="#888888",
    tertiary_color="#111111",
    note_bkg_color="transparent",
    main_bkg="#222222",
    line_color="#666666",
    edge_label_background="transparent",
)

LIGHT_THEME = Theme(
    dark_mode=False,
    background="#ffffff",
    primary_color="#aaaaaa",
    secondary_color="#999999",
    tertiary_color="#f8f8f8",
    note_bkg_color="transparent",
    main_bkg="#eeeeee",
    line_color="#555555",
    edge_label_background="transparent",
)

THEMES = {"dark": DARK_THEME, "light": LIGHT_THEME}


def chart_id(node: NormalizedNode, suffix: str = "") -> str:
    """
    Mermaid-safe node id: readable label plus a short digest of the internal id.
    """
    digest = hashlib.sha1(node.internal_id.encode("utf-8")).hexdigest()[:8]
    return f"{stringify_to_id(node.label)}_{digest}{suffix}"


def _shape(node: NormalizedNode, suffix: str = "") -> str:
    text = '"' + node.label.replace('"', "#quot;") + '"'
    if node.is_fork:
        return f"{chart_id(node, suffix)}{{{text}}}"
    return f"{chart_id(node, suffix)}[{text}]"


def _edge_label(link: StateLink) -> str:
    is_are = "are" if len(link.conditions) > 1 else "is"
    truthy = "false" if link.reason is Reason.FORK_SKIPPED else "true"
    return f"|{' and '.join(condition_names(link.conditions))} {is_are} {truthy}|"


def links_to_mermaid(links: list[Link], suffix: str = "") -> list[str]:
    """One mermaid line per link (or subgraph marker)."""
    lines: list[str] = []
    for link in links:
        if isinstance(link, GroupMarker):
            lines.append("end" if link.end else f"subgraph {stringify_to_id(link.id)} [{link.id}]")
            continue
        arrow = "-.->" if link.reason is Reason.FORK_SKIPPED else "-->"
        lines.append(f"{_shape(link.source, suffix)} {arrow} {_edge_label(link)} {_shape(link.target, suffix)}")
    return lines


def _header(theme: Theme, direction: Direction) -> str:
    init = json.dumps(
        {"theme": "base", "themeVariables": theme.model_dump(by_alias=True)},
        separators=(",", ":"),
    )
    graph = "LR" if direction == "horizontal" else "TD"
    return f"%%{{init: {init}}}%%\ngraph {graph}"


def generate_mermaid_from_links(
    links: list[Link],
    theme: Theme = DARK_THEME,
    direction: Direction = "vertical",
) -> str:
    return "\n".join([_header(theme, direction), *links_to_mermaid(links)])


def generate_mermaid(
    states: list[Node] | FlowTree,
    theme: Theme = DARK_THEME,
    direction: Direction = "vertical",
) -> str:
    """Mermaid flowchart of every link in the flow."""
    return generate_mermaid_from_links(generate_state_links(states), theme, direction)


def generate_mermaid_from_pathways(
    pathways: list[list[StateLink]],
    theme: Theme = DARK_THEME,
    direction: Direction = "vertical",
) -> str:
    """Draw each pathway as its own disconnected chain."""
    lines = [_header(theme, direction)]
    for i, pathway in enumerate(pathways):
        lines.extend(links_to_mermaid(pathway, suffix=f"_{i}"))
    return "\n".join(lines)
