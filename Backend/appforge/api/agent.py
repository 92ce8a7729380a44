# appforge/api/agent.py
"""
Agent streaming route - one conversational turn as text/event-stream.
"""
from typing import Any, List, Optional

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field
from starlette.responses import JSONResponse, StreamingResponse

from appforge.core.config import settings
from appforge.services.agent_service import AgentTurnRequest
from appforge.streaming.relay import SSE_HEADERS

router = APIRouter(prefix="/api", tags=["Agent"])


class AgentRequest(BaseModel):
    # Validated by hand so a bad prompt yields 400 instead of 422
    prompt: Any = None
    projectId: str = ""
    owner: str = ""
    model: Optional[str] = None
    images: List[Any] = Field(default_factory=list)
    fix: bool = False
    terminal: Optional[Any] = None
    memory: Optional[str] = None
    cssLib: Optional[str] = None
    framework: Optional[str] = None


@router.post("/agent")
async def run_agent(request: Request, data: AgentRequest):
    """Stream one agent turn."""
    if not data.prompt or not isinstance(data.prompt, str):
        return JSONResponse(
            status_code=400,
            content={"error": "Prompt is required and must be a string"},
        )

    services = request.app.state.services
    turn = AgentTurnRequest(
        prompt=data.prompt,
        project_id=data.projectId,
        owner=data.owner,
        model=data.model or settings.llm.default_model,
        images=list(data.images or []),
        fix=data.fix,
        terminal=data.terminal,
        memory=data.memory,
        css_library=data.cssLib or "tailwindcss",
        framework=data.framework,
    )

    return StreamingResponse(
        services.agent.stream_turn(turn, request.is_disconnected),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
