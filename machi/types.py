"""
Core types for the flow-resolution engine.

Trees are authored from these plain dataclasses. Conditions are stored as a
tagged union (NamedCondition | InlineCondition) which is built once, when the
node is constructed, so evaluation never has to guess what a condition is.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Union

if TYPE_CHECKING:
    from .trees.flow_tree import NormalizedEntry, NormalizedNode

# Type aliases
Context = Any
Predicate = Callable[[Any], bool]
ConditionsMap = dict[str, Predicate]


class ConditionKind(str, Enum):
    """Discriminator for the two ways a condition can be referenced."""
    NAMED = "named"      # key into the machine's conditions map
    INLINE = "inline"    # predicate embedded directly in the tree


@dataclass(frozen=True)
class NamedCondition:
    """A condition referenced by its key in the conditions map."""
    key: str
    kind: ConditionKind = field(default=ConditionKind.NAMED, init=False)

    @property
    def name(self) -> str:
        return self.key


@dataclass(frozen=True)
class InlineCondition:
    """A predicate embedded in the tree, called with the context."""
    predicate: Predicate
    kind: ConditionKind = field(default=ConditionKind.INLINE, init=False)

    @property
    def name(self) -> str:
        # Lambdas have no useful name for charts
        fn_name = getattr(self.predicate, "__name__", "")
        return fn_name if fn_name and fn_name != "<lambda>" else "unknown"


ConditionRef = Union[NamedCondition, InlineCondition]


def as_condition(raw: str | Predicate | ConditionRef) -> ConditionRef:
    """
    Coerce an authored condition into its tagged form.

    Accepts a conditions-map key, a predicate, or an already tagged condition.
    """
    if isinstance(raw, (NamedCondition, InlineCondition)):
        return raw
    if isinstance(raw, str):
        return NamedCondition(raw)
    if callable(raw):
        return InlineCondition(raw)
    raise TypeError(f"Unsupported condition: {raw!r}")


def _as_conditions(raw: Any) -> tuple[ConditionRef, ...]:
    if raw is None:
        return ()
    if isinstance(raw, (str, NamedCondition, InlineCondition)) or callable(raw):
        raw = [raw]
    return tuple(as_condition(c) for c in raw)


@dataclass
class Entry:
    """
    A single step in the flow.

    The entry is done when every condition in ``is_done`` holds. An entry with
    no conditions is never done, which makes it a natural end-of-flow screen.
    """
    id: str
    is_done: tuple[ConditionRef, ...] = ()
    additional_data: Any = None  # opaque to the engine

    def __post_init__(self):
        self.is_done = _as_conditions(self.is_done)


@dataclass
class Fork:
    """
    A decision point. Its children are only traversed when every requirement
    holds against the context.
    """
    name: str
    requirements: tuple[ConditionRef, ...] = ()
    children: list[Node] = field(default_factory=list)
    chart_group: str | None = None  # only used when generating charts

    def __post_init__(self):
        self.requirements = _as_conditions(self.requirements)
        self.children = list(self.children)


Node = Union[Entry, Fork]


def is_fork(node: Any) -> bool:
    return isinstance(node, Fork)


def is_entry(node: Any) -> bool:
    return isinstance(node, Entry)


def label_of(node: Node) -> str:
    """User-facing label: the entry id or the fork name."""
    return node.name if is_fork(node) else node.id


@dataclass(frozen=True)
class ExecutionResult:
    """Result of resolving a flow against one context snapshot."""
    entry: NormalizedEntry
    history: tuple[NormalizedNode, ...] = ()

    @property
    def entries(self) -> list[NormalizedEntry]:
        """Entries in history, in traversal order."""
        return [node for node in self.history if node.is_entry]

    @property
    def entry_ids(self) -> list[str]:
        return [node.id for node in self.entries]

    @property
    def history_labels(self) -> list[str]:
        return [node.label for node in self.history]
