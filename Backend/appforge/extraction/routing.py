# appforge/extraction/routing.py
"""
Routing decisions parsed from coordinator output.

A decision is one of three variants; anything the coordinator says that is
not an explicit, known destination terminates the turn.
"""
import re
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from appforge.core.constants import NEXT_NODE_GENERATE, NEXT_NODE_TOOLS
from appforge.llm.envelope import ModelResponse, ToolCall


# Tolerates JSON-escaped quotes when the router output was re-serialized
NEXT_NODE_RE = re.compile(r'\\?"NextNode\\?"\s*:\s*\\?"([^"\\]+)')


@dataclass(frozen=True)
class Generate:
    pass


@dataclass(frozen=True)
class UseTools:
    tool_calls: Tuple[ToolCall, ...]


@dataclass(frozen=True)
class Terminal:
    reason: str


RoutingDecision = Union[Generate, UseTools, Terminal]


def parse_next_node(text: str) -> Optional[str]:
    if not isinstance(text, str):
        return None
    match = NEXT_NODE_RE.search(text)
    return match.group(1).strip() if match else None


def decide_route(response: ModelResponse) -> RoutingDecision:
    """Map router output to a decision. Deterministic in the response."""
    if response.tool_calls:
        return UseTools(tuple(response.tool_calls))

    next_node = parse_next_node(response.text)
    if next_node == NEXT_NODE_GENERATE:
        return Generate()
    if next_node == NEXT_NODE_TOOLS:
        return Terminal("tools requested without tool calls")
    if next_node is None:
        return Terminal("no NextNode in router output")
    return Terminal(f"unknown NextNode: {next_node}")
