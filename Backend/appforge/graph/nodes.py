# appforge/graph/nodes.py
"""
Execution graph nodes.

Every node catches its own failures: the error is logged and a fallback
text is emitted in-band as the node's output, so the graph always moves on.
"""
import json
from typing import Any, Dict, List

from appforge.core.constants import (
    NodeName,
    START_MARKER,
    END_MARKER,
    ROUTER_FALLBACK_TEXT,
    FALLBACK_PACKAGE_JSON,
)
from appforge.core.logging import log
from appforge.extraction.routing import Terminal, UseTools, decide_route
from appforge.graph.events import Emit, GraphEvent
from appforge.graph.state import GraphExecutionState, TurnContext
from appforge.llm.gateway import ModelGateway
from appforge.llm.messages import (
    assistant_message,
    latest_user_text,
    system_message,
    tool_message,
    user_message,
)
from appforge.llm.prompts import COORDINATOR_PROMPT, generation_prompt
from appforge.media.images import ImagePipeline
from appforge.tools.registry import ToolRegistry, format_tool_result


def fallback_generation_output() -> str:
    """Minimal marker-wrapped bundle used when generation fails."""
    payload = {
        "Steps": ["Create a React TypeScript application scaffold"],
        "generatedFiles": {
            "frontend/package.json": {"code": json.dumps(FALLBACK_PACKAGE_JSON, indent=2)},
        },
        "files": ["frontend/package.json"],
        "filesCount": 1,
    }
    return f"{START_MARKER}\n{json.dumps(payload, indent=2)}\n{END_MARKER}"


def _wire_tool_calls(decision: UseTools) -> List[Dict[str, Any]]:
    return [
        {
            "id": call.id,
            "type": "function",
            "function": {"name": call.name, "arguments": json.dumps(call.arguments)},
        }
        for call in decision.tool_calls
    ]


def _token_forwarder(state: GraphExecutionState, emit: Emit, node: NodeName):
    async def on_token(text: str) -> None:
        state.streamed_chars += len(text)
        await emit(GraphEvent.token(text, node))
    return on_token


class RouterNode:
    """Coordinator call: fixed instruction plus the latest user message."""
    name = NodeName.ROUTER

    def __init__(self, gateway: ModelGateway):
        self.gateway = gateway

    def build_messages(self, state: GraphExecutionState) -> List[Dict[str, Any]]:
        messages = [system_message(COORDINATOR_PROMPT), user_message(latest_user_text(state.messages))]
        # After a tool hop the router also sees the call and its results
        if state.tool_hops:
            messages.extend(m for m in state.messages if m.get("role") in ("assistant", "tool"))
        return messages

    async def run(self, state: GraphExecutionState, ctx: TurnContext, emit: Emit) -> None:
        try:
            response = await self.gateway.invoke(
                self.build_messages(state),
                model=ctx.model,
                bind_tools=True,
                on_token=_token_forwarder(state, emit, self.name),
            )
            decision = decide_route(response)
            tool_calls = _wire_tool_calls(decision) if isinstance(decision, UseTools) else None
            state.messages.append(assistant_message(response.text, tool_calls))
            state.routing_decision = decision
        except Exception as e:
            log("GRAPH", f"Router node failed: {e}", project_id=ctx.project_id)
            state.messages.append(assistant_message(ROUTER_FALLBACK_TEXT))
            state.routing_decision = Terminal(f"router error: {e}")
            await emit(GraphEvent.token(ROUTER_FALLBACK_TEXT, self.name))


class ToolNode:
    """Runs the capabilities the router asked for and records their results."""
    name = NodeName.TOOL

    def __init__(self, tools: ToolRegistry):
        self.tools = tools

    async def run(self, state: GraphExecutionState, ctx: TurnContext, emit: Emit) -> None:
        decision = state.routing_decision
        state.tool_hops += 1
        if not isinstance(decision, UseTools):
            return

        for call in decision.tool_calls:
            result = await self.tools.run(call.name, call.arguments)
            state.tool_results.append({"id": call.id, "name": call.name, **result})
            state.messages.append(tool_message(call.id, format_tool_result(result)))
            log("TOOLS", f"{call.name}: success={result.get('success')}", project_id=ctx.project_id)


class GenerationNode:
    """Large role-specific generation call with full context, tools unbound."""
    name = NodeName.GENERATE

    def __init__(self, gateway: ModelGateway, images: ImagePipeline):
        self.gateway = gateway
        self.images = images

    def build_text(self, state: GraphExecutionState, ctx: TurnContext) -> str:
        return (
            f"{latest_user_text(state.messages)}"
            f" + All the Code: {json.dumps(ctx.code_bundle, default=str)}"
            f" + Previous Messages - {json.dumps(ctx.history, default=str)}"
            f" + Gallery Images - {json.dumps(ctx.gallery, default=str)}"
        )

    async def run(self, state: GraphExecutionState, ctx: TurnContext, emit: Emit) -> None:
        try:
            image_parts = await self.images.parts(ctx.image_urls)
            log("GRAPH", f"Generation with {len(image_parts)} images (fix={ctx.fix})", project_id=ctx.project_id)

            response = await self.gateway.invoke(
                [
                    system_message(generation_prompt(ctx.fix)),
                    user_message(self.build_text(state, ctx), image_parts),
                ],
                model=ctx.model,
                bind_tools=False,
                on_token=_token_forwarder(state, emit, self.name),
            )
            if not response.text:
                raise ValueError("Empty response from model")

            state.generation_output = response.text
            state.messages.append(assistant_message(response.text))
        except Exception as e:
            log("GRAPH", f"Generation node failed: {e}", project_id=ctx.project_id)
            fallback = fallback_generation_output()
            state.generation_output = fallback
            state.metadata["generation_fallback"] = True
            state.messages.append(assistant_message(fallback))
            await emit(GraphEvent.token(fallback, self.name))
