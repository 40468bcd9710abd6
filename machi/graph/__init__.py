"""
Chart generation for flows.

Everything here works on the static tree only; no context is involved.
"""

from .state_links import GroupMarker, Link, Reason, StateLink, condition_names, generate_state_links
from .mermaid import (
    DARK_THEME,
    LIGHT_THEME,
    Theme,
    generate_mermaid,
    generate_mermaid_from_links,
    generate_mermaid_from_pathways,
    links_to_mermaid,
)
from .pathways import extract_from_names, get_pathways_to_state
from .chart import ChartOptions, generate_chart, generate_chart_from_links, generate_chart_from_pathways

__all__ = [
    "ChartOptions",
    "DARK_THEME",
    "GroupMarker",
    "LIGHT_THEME",
    "Link",
    "Reason",
    "StateLink",
    "Theme",
    "condition_names",
    "extract_from_names",
    "generate_chart",
    "generate_chart_from_links",
    "generate_chart_from_pathways",
    "generate_mermaid",
    "generate_mermaid_from_links",
    "generate_mermaid_from_pathways",
    "generate_state_links",
    "get_pathways_to_state",
    "links_to_mermaid",
]
