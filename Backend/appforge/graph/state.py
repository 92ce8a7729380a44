# appforge/graph/state.py
"""
Per-turn execution state and the read-only context the nodes draw from.

A GraphExecutionState is created for one turn and dropped when the turn
ends; it is never reused.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from appforge.core.constants import NodeName
from appforge.extraction.routing import RoutingDecision


@dataclass
class TurnContext:
    """Everything the generation node needs beyond the message list."""
    model: str
    project_id: str = ""
    fix: bool = False
    history: List[Dict[str, Any]] = field(default_factory=list)
    code_bundle: Any = None
    gallery: List[Dict[str, Any]] = field(default_factory=list)
    image_urls: List[str] = field(default_factory=list)


@dataclass
class GraphExecutionState:
    messages: List[Dict[str, Any]] = field(default_factory=list)
    routing_decision: Optional[RoutingDecision] = None
    tool_results: List[Dict[str, Any]] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    tool_hops: int = 0
    visited: List[NodeName] = field(default_factory=list)
    generation_output: Optional[str] = None
    streamed_chars: int = 0
