"""
Flow tree normalization and lookup.
"""

from .flow_tree import (
    FlowTree,
    NormalizedEntry,
    NormalizedFork,
    NormalizedNode,
    build_tree,
    normalize,
    stringify_to_id,
)

__all__ = [
    "FlowTree",
    "NormalizedEntry",
    "NormalizedFork",
    "NormalizedNode",
    "build_tree",
    "normalize",
    "stringify_to_id",
]
