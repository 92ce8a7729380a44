# appforge/graph/__init__.py
"""
Execution graph - router, tool and generation nodes over a fixed topology.
"""
from .engine import ExecutionGraph, next_node
from .events import GraphEvent, EventType
from .state import GraphExecutionState, TurnContext

__all__ = ["ExecutionGraph", "next_node", "GraphEvent", "EventType", "GraphExecutionState", "TurnContext"]
