"""
Runners that drive a flow for an application.
"""

from .flow_runner import FlowRunner, InMemoryContextStore, JsonFileContextStore, create_flow_runner

__all__ = [
    "FlowRunner",
    "InMemoryContextStore",
    "JsonFileContextStore",
    "create_flow_runner",
]
