# appforge/services/agent_service.py
"""
Agent turn orchestration.

Loads the conversation, assembles the turn prompt, runs the execution graph
through the streaming relay and persists the assistant message afterwards.
"""
import json
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, List, Optional

from appforge.core.config import settings
from appforge.core.exceptions import EntityNotFoundError
from appforge.core.logging import log, log_section
from appforge.extraction.extractor import (
    check_file_consistency,
    extract,
    extract_message,
    salvage_generated_files,
    to_plan_record,
)
from appforge.graph.engine import ExecutionGraph
from appforge.graph.state import GraphExecutionState, TurnContext
from appforge.lib.monitoring import active_agent_streams, model_fallbacks
from appforge.llm.messages import user_message
from appforge.services.conversation import ConversationSnapshot, ConversationStore
from appforge.streaming.relay import DisconnectCheck, StreamRelay


@dataclass
class AgentTurnRequest:
    prompt: str
    project_id: str
    owner: str
    model: str = field(default_factory=lambda: settings.llm.default_model)
    images: List[str] = field(default_factory=list)
    fix: bool = False
    terminal: Any = None
    memory: Optional[str] = None
    css_library: str = "tailwindcss"
    framework: Optional[str] = None


def build_turn_prompt(request: AgentTurnRequest, images: List[str], gallery: list) -> str:
    return json.dumps({
        "userInput": request.prompt,
        "terminal": request.terminal,
        "memory": request.memory,
        "cssLib": request.css_library,
        "framework": request.framework,
        "images": images,
        "galleryImages": gallery,
    })


class AgentService:
    def __init__(self, graph: ExecutionGraph, store: ConversationStore, relay: StreamRelay):
        self.graph = graph
        self.store = store
        self.relay = relay

    async def stream_turn(
        self,
        request: AgentTurnRequest,
        is_disconnected: Optional[DisconnectCheck] = None,
    ) -> AsyncIterator[str]:
        """SSE frames for one turn. Never raises to the caller."""
        log_section("AGENT", f"Turn for {request.project_id} ({request.model})", project_id=request.project_id)

        try:
            snapshot = await self.store.load(request.project_id, request.owner)
        except EntityNotFoundError as e:
            log("AGENT", f"Aborting turn: {e.message}", project_id=request.project_id)
            async for frame in self.relay.abort(e.message):
                yield frame
            return
        except Exception as e:
            log("AGENT", f"Could not load conversation: {e}", project_id=request.project_id)
            async for frame in self.relay.abort(str(e)):
                yield frame
            return

        images = [*request.images, *snapshot.previous_images]
        state = GraphExecutionState(
            messages=[user_message(build_turn_prompt(request, images, snapshot.gallery))],
        )
        ctx = TurnContext(
            model=request.model,
            project_id=request.project_id,
            fix=request.fix,
            history=[
                {"role": turn.role, "text": turn.text, "images": turn.images}
                for turn in snapshot.history
            ],
            code_bundle=snapshot.code_bundle,
            gallery=snapshot.gallery,
            image_urls=images,
        )
        log(
            "AGENT",
            f"Images available: {len(images)} (input {len(request.images)}, previous {len(snapshot.previous_images)})",
            project_id=request.project_id,
        )

        active_agent_streams.inc()
        try:
            async for frame in self.relay.relay(self.graph.run(state, ctx), is_disconnected):
                yield frame
        finally:
            active_agent_streams.dec()

        await self._persist(state, snapshot, request.project_id)

    async def _persist(self, state: GraphExecutionState, snapshot: ConversationSnapshot, project_id: str) -> None:
        """Store the assistant message carried by the generation output."""
        output = state.generation_output
        if not output:
            return
        if state.metadata.get("generation_fallback"):
            model_fallbacks.inc()
            return

        record = None
        try:
            result = extract(output)
            data = result.data
            if result.is_synthetic:
                salvaged = salvage_generated_files(output)
                data = {"generatedFiles": salvaged} if salvaged else None
                log("AGENT", f"Generation payload unparsable, salvaged {len(salvaged or {})} files", project_id=project_id)

            if isinstance(data, dict):
                check_file_consistency(data, project_id=project_id)
                record = to_plan_record(data)
                log("AGENT", f"Generated {record.file_count} files", project_id=project_id)
        except Exception as e:
            log("AGENT", f"Error reading generation payload: {e}", project_id=project_id)

        message = extract_message(output) or (record.message if record else None)
        if not message:
            return
        try:
            await self.store.save_message(snapshot.project, snapshot.user, message, role="ai")
            log("AGENT", "Assistant message saved", project_id=project_id)
        except Exception as e:
            log("AGENT", f"Error saving message: {e}", project_id=project_id)
