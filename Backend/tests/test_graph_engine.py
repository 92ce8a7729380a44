# tests/test_graph_engine.py
"""
Tests for the execution graph: paths through the transition table, node
fallbacks and cancellation.
"""
import asyncio

import pytest

from appforge.core.constants import NodeName, ROUTER_FALLBACK_TEXT, START_MARKER
from appforge.extraction.extractor import extract
from appforge.extraction.routing import Terminal
from appforge.graph.engine import ExecutionGraph
from appforge.graph.events import EventType
from appforge.graph.state import GraphExecutionState, TurnContext
from appforge.llm.envelope import ModelResponse
from appforge.llm.messages import user_message

from conftest import ScriptedProvider, make_gateway, tool_call


GENERATED = '___start___{"files": ["src/App.tsx"], "filesCount": 1, "generatedFiles": {"src/App.tsx": {"code": "x"}}}___end___'


def _state(text: str = "Build me a todo app") -> GraphExecutionState:
    return GraphExecutionState(messages=[user_message(text)])


def _ctx(**overrides) -> TurnContext:
    values = {"model": "gpt-4.1", "project_id": "proj-1"}
    values.update(overrides)
    return TurnContext(**values)


async def _collect(graph, state, ctx):
    return [event async for event in graph.run(state, ctx)]


def _tokens(events):
    return [e.data for e in events if e.type == EventType.TOKEN]


class TestGraphPaths:

    @pytest.mark.asyncio
    async def test_router_then_generation(self, tool_registry, image_pipeline):
        """
        GIVEN a router that answers NextNode=frontend
        WHEN the graph runs
        THEN generation runs once and its output is streamed after the router's
        """
        primary = ScriptedProvider('{"NextNode": "frontend"}', GENERATED)
        graph = ExecutionGraph(make_gateway(primary), tool_registry, image_pipeline)
        state = _state()

        events = await _collect(graph, state, _ctx())

        assert state.visited == [NodeName.ROUTER, NodeName.GENERATE]
        assert _tokens(events) == ['{"NextNode": "frontend"}', GENERATED]
        assert events[-1].type == EventType.COMPLETE
        assert state.generation_output == GENERATED
        assert extract(state.generation_output).data["filesCount"] == 1

    @pytest.mark.asyncio
    async def test_router_without_route_terminates(self, tool_registry, image_pipeline):
        primary = ScriptedProvider("Hi! What would you like to build?")
        graph = ExecutionGraph(make_gateway(primary), tool_registry, image_pipeline)
        state = _state("hello")

        events = await _collect(graph, state, _ctx())

        assert state.visited == [NodeName.ROUTER]
        assert isinstance(state.routing_decision, Terminal)
        assert _tokens(events) == ["Hi! What would you like to build?"]
        assert len(primary.calls) == 1

    @pytest.mark.asyncio
    async def test_single_tool_hop(self, tool_registry, image_pipeline):
        primary = ScriptedProvider(
            ModelResponse(text="", tool_calls=[tool_call("search_web", query="todo apps")]),
            '{"NextNode": "frontend"}',
            GENERATED,
        )
        graph = ExecutionGraph(make_gateway(primary), tool_registry, image_pipeline)
        state = _state()

        await _collect(graph, state, _ctx())

        assert state.visited == [NodeName.ROUTER, NodeName.TOOL, NodeName.ROUTER, NodeName.GENERATE]
        assert state.tool_results[0]["success"]
        # second router call sees the tool call and its result
        second_router_roles = [m["role"] for m in primary.calls[1]["messages"]]
        assert second_router_roles == ["system", "user", "assistant", "tool"]

    @pytest.mark.asyncio
    async def test_second_tool_request_fails_closed(self, tool_registry, image_pipeline):
        primary = ScriptedProvider(
            ModelResponse(text="", tool_calls=[tool_call("search_web", query="a")]),
            ModelResponse(text="", tool_calls=[tool_call("search_web", query="b")]),
        )
        graph = ExecutionGraph(make_gateway(primary), tool_registry, image_pipeline)
        state = _state()

        events = await _collect(graph, state, _ctx())

        assert state.visited == [NodeName.ROUTER, NodeName.TOOL, NodeName.ROUTER]
        assert state.tool_hops == 1
        assert events[-1].type == EventType.COMPLETE

    @pytest.mark.asyncio
    async def test_generation_receives_context_and_images(self, tool_registry, image_pipeline, fake_fetcher):
        primary = ScriptedProvider('{"NextNode": "frontend"}', GENERATED)
        graph = ExecutionGraph(make_gateway(primary), tool_registry, image_pipeline)
        ctx = _ctx(
            code_bundle={"src/App.tsx": {"code": "old"}},
            history=[{"role": "user", "text": "earlier"}],
            image_urls=["https://cdn.example.com/ref.png"],
        )

        await _collect(graph, _state(), ctx)

        generation = primary.calls[1]
        assert generation["tools"] is None
        content = generation["messages"][1]["content"]
        assert "All the Code:" in content[0]["text"]
        assert "earlier" in content[0]["text"]
        assert content[1]["type"] == "image_url"
        assert fake_fetcher.requested == ["https://cdn.example.com/ref.png"]


class TestNodeFailures:

    @pytest.mark.asyncio
    async def test_router_error_emits_fallback_and_terminates(self, tool_registry, image_pipeline):
        primary = ScriptedProvider(RuntimeError("provider down"))
        graph = ExecutionGraph(make_gateway(primary), tool_registry, image_pipeline)
        state = _state()

        events = await _collect(graph, state, _ctx())

        assert _tokens(events) == [ROUTER_FALLBACK_TEXT]
        assert state.visited == [NodeName.ROUTER]
        assert events[-1].type == EventType.COMPLETE
        assert not any(e.type == EventType.ERROR for e in events)

    @pytest.mark.asyncio
    async def test_generation_error_emits_scaffold(self, tool_registry, image_pipeline):
        primary = ScriptedProvider('{"NextNode": "frontend"}', RuntimeError("timeout"))
        graph = ExecutionGraph(make_gateway(primary), tool_registry, image_pipeline)
        state = _state()

        events = await _collect(graph, state, _ctx())

        fallback = _tokens(events)[-1]
        assert fallback.startswith(START_MARKER)
        assert state.metadata["generation_fallback"] is True
        assert "frontend/package.json" in extract(fallback).data["generatedFiles"]

    @pytest.mark.asyncio
    async def test_empty_generation_counts_as_failure(self, tool_registry, image_pipeline):
        primary = ScriptedProvider('{"NextNode": "frontend"}', "")
        graph = ExecutionGraph(make_gateway(primary), tool_registry, image_pipeline)
        state = _state()

        await _collect(graph, state, _ctx())

        assert state.metadata.get("generation_fallback") is True

    @pytest.mark.asyncio
    async def test_unhandled_node_error_becomes_error_event(self, tool_registry, image_pipeline):
        class ExplodingNode:
            async def run(self, state, ctx, emit):
                raise RuntimeError("kaboom")

        graph = ExecutionGraph(make_gateway(ScriptedProvider()), tool_registry, image_pipeline)
        graph.nodes[NodeName.ROUTER] = ExplodingNode()

        events = await _collect(graph, _state(), _ctx())

        assert [e.type for e in events[-2:]] == [EventType.ERROR, EventType.COMPLETE]
        assert events[-2].data == "kaboom"


class TestCancellation:

    @pytest.mark.asyncio
    async def test_closing_the_stream_cancels_the_running_node(self, tool_registry, image_pipeline):
        cancelled = asyncio.Event()

        async def hanging_provider(client, messages, model, **kwargs):
            try:
                await asyncio.Event().wait()
            except asyncio.CancelledError:
                cancelled.set()
                raise

        graph = ExecutionGraph(make_gateway(hanging_provider), tool_registry, image_pipeline)
        events = graph.run(_state(), _ctx())

        first = await events.__anext__()
        await events.aclose()

        assert first.type == EventType.NODE_START
        assert cancelled.is_set()
