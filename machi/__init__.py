"""
machi: declarative flow resolution.

A flow is an ordered list of entries (steps) and forks (decision points). Given
a context, the engine works out the next entry to show and the history of
nodes passed through to reach it:

- Trees (machi.trees) normalize authored flows into positional ids
- Traversals (machi.traversals) resolve a flow against a context
- Orchestrators (machi.orchestrators) persist context and drive navigation
- Graph (machi.graph) turns a flow into mermaid charts

Version: 1.0.0
"""

MACHI_API_VERSION = "1.0.0"

from .types import (
    ConditionKind,
    ConditionRef,
    ConditionsMap,
    Entry,
    ExecutionResult,
    Fork,
    InlineCondition,
    NamedCondition,
    as_condition,
    is_entry,
    is_fork,
)

from .errors import (
    ChartRenderError,
    MachiError,
    MalformedTreeError,
    UnknownConditionError,
)

from .interfaces import ContextStore, FlowMachine, Navigator

from .trees import (
    FlowTree,
    NormalizedEntry,
    NormalizedFork,
    NormalizedNode,
    build_tree,
    normalize,
)

from .traversals import (
    FlowEngine,
    create_flow_engine,
    make_machine,
)

from .config import MachiConfig, get_machi_config, set_machi_config

__all__ = [
    "MACHI_API_VERSION",
    # Types
    "ConditionKind",
    "ConditionRef",
    "ConditionsMap",
    "Entry",
    "ExecutionResult",
    "Fork",
    "InlineCondition",
    "NamedCondition",
    "as_condition",
    "is_entry",
    "is_fork",
    # Errors
    "ChartRenderError",
    "MachiError",
    "MalformedTreeError",
    "UnknownConditionError",
    # Interfaces
    "ContextStore",
    "FlowMachine",
    "Navigator",
    # Trees
    "FlowTree",
    "NormalizedEntry",
    "NormalizedFork",
    "NormalizedNode",
    "build_tree",
    "normalize",
    # Traversals
    "FlowEngine",
    "create_flow_engine",
    "make_machine",
    # Configuration
    "MachiConfig",
    "get_machi_config",
    "set_machi_config",
]
