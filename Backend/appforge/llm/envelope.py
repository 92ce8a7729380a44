# appforge/llm/envelope.py
"""
Response envelope returned by every gateway call.

Provider payloads are normalized into a ModelResponse right after the
provider call returns, so downstream code only ever sees `.text`.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional


Transport = Literal["primary", "direct"]


@dataclass(frozen=True)
class ToolCall:
    """A capability invocation requested by the model."""
    id: str
    name: str
    arguments: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ModelResponse:
    text: str
    model: str = ""
    transport: Transport = "primary"
    tool_calls: List[ToolCall] = field(default_factory=list)
    usage: Dict[str, int] = field(default_factory=dict)
    finish_reason: Optional[str] = None
