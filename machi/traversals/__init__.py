"""
Flow resolution.

This package contains the engine that resolves a normalized flow against a
context.
"""

from .flow_engine import (
    FlowEngine,
    create_flow_engine,
    is_entry_done,
    is_entry_next,
    is_fork_entered,
    make_machine,
    resolve,
)
from .conditions import evaluate_condition, evaluate_conditions

__all__ = [
    "FlowEngine",
    "create_flow_engine",
    "evaluate_condition",
    "evaluate_conditions",
    "is_entry_done",
    "is_entry_next",
    "is_fork_entered",
    "make_machine",
    "resolve",
]
