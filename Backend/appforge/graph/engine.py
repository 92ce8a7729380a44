# appforge/graph/engine.py
"""
Execution graph engine.

Fixed topology with a single entry node:

    router --Generate--> generate --> terminal
    router --UseTools--> tool --> router      (at most one tool hop)
    router --Terminal--> terminal

Anything not covered by the transition table goes to terminal.
"""
import asyncio
from contextlib import suppress
from typing import AsyncIterator, Dict, Optional, Tuple, Type

from appforge.core.constants import NodeName
from appforge.core.logging import log
from appforge.extraction.routing import Generate, RoutingDecision, Terminal, UseTools
from appforge.graph.events import GraphEvent, EventType
from appforge.graph.nodes import GenerationNode, RouterNode, ToolNode
from appforge.graph.state import GraphExecutionState, TurnContext
from appforge.llm.gateway import ModelGateway
from appforge.media.images import ImagePipeline
from appforge.tools.registry import ToolRegistry


# ═══════════════════════════════════════════════════════════════════════════════
# TRANSITION TABLE
# ═══════════════════════════════════════════════════════════════════════════════

DECISION_EDGES: Dict[Tuple[NodeName, Type], NodeName] = {
    (NodeName.ROUTER, Generate): NodeName.GENERATE,
    (NodeName.ROUTER, UseTools): NodeName.TOOL,
    (NodeName.ROUTER, Terminal): NodeName.TERMINAL,
}

STATIC_EDGES: Dict[NodeName, NodeName] = {
    NodeName.TOOL: NodeName.ROUTER,
    NodeName.GENERATE: NodeName.TERMINAL,
}

MAX_TOOL_HOPS = 1

_DONE = object()


def next_node(
    current: NodeName,
    decision: Optional[RoutingDecision],
    tool_hops: int,
    max_tool_hops: int = MAX_TOOL_HOPS,
) -> NodeName:
    if current in STATIC_EDGES:
        return STATIC_EDGES[current]

    target = DECISION_EDGES.get((current, type(decision)), NodeName.TERMINAL)
    if target == NodeName.TOOL and tool_hops >= max_tool_hops:
        return NodeName.TERMINAL
    return target


class ExecutionGraph:
    """Compiled once at startup; run() is called once per turn."""

    def __init__(
        self,
        gateway: ModelGateway,
        tools: ToolRegistry,
        images: ImagePipeline,
        max_tool_hops: int = MAX_TOOL_HOPS,
    ):
        self.max_tool_hops = max_tool_hops
        self.nodes = {
            NodeName.ROUTER: RouterNode(gateway),
            NodeName.TOOL: ToolNode(tools),
            NodeName.GENERATE: GenerationNode(gateway, images),
        }

    async def _execute(self, state: GraphExecutionState, ctx: TurnContext, emit) -> None:
        current = NodeName.ROUTER
        while current != NodeName.TERMINAL:
            state.visited.append(current)
            await emit(GraphEvent(EventType.NODE_START, node=current))
            await self.nodes[current].run(state, ctx, emit)
            await emit(GraphEvent(EventType.NODE_END, node=current))

            following = next_node(current, state.routing_decision, state.tool_hops, self.max_tool_hops)
            log("GRAPH", f"{current.value} -> {following.value}", project_id=ctx.project_id)
            current = following

    async def run(self, state: GraphExecutionState, ctx: TurnContext) -> AsyncIterator[GraphEvent]:
        """
        Drive one turn, yielding events in producer order.

        The last event is always COMPLETE. Closing the iterator early (client
        went away) cancels the running node.
        """
        queue: "asyncio.Queue" = asyncio.Queue()

        async def emit(event: GraphEvent) -> None:
            await queue.put(event)

        async def drive() -> None:
            try:
                await self._execute(state, ctx, emit)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                log("GRAPH", f"Graph aborted: {e}", project_id=ctx.project_id)
                await queue.put(GraphEvent.error(str(e)))
            finally:
                queue.put_nowait(_DONE)

        task = asyncio.create_task(drive())
        try:
            while True:
                event = await queue.get()
                if event is _DONE:
                    break
                yield event
            yield GraphEvent.complete()
        finally:
            if not task.done():
                task.cancel()
                with suppress(asyncio.CancelledError):
                    await task
