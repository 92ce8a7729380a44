# appforge/graph/events.py
"""
Events emitted by the execution graph, in producer order.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Optional

from appforge.core.constants import NodeName


class EventType(str, Enum):
    TOKEN = "token"            # content for the client
    NODE_START = "node_start"
    NODE_END = "node_end"
    ERROR = "error"            # turn aborted
    COMPLETE = "complete"      # always the last event


@dataclass(frozen=True)
class GraphEvent:
    type: EventType
    data: str = ""
    node: Optional[NodeName] = None

    @classmethod
    def token(cls, text: str, node: Optional[NodeName] = None) -> "GraphEvent":
        return cls(EventType.TOKEN, text, node)

    @classmethod
    def error(cls, message: str) -> "GraphEvent":
        return cls(EventType.ERROR, message)

    @classmethod
    def complete(cls) -> "GraphEvent":
        return cls(EventType.COMPLETE)


Emit = Callable[[GraphEvent], Awaitable[None]]
