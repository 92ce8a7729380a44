# appforge/api/plans.py
"""
Planning route.
"""
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field

router = APIRouter(prefix="/api", tags=["Plans"])


class PlanRequest(BaseModel):
    input: str
    images: List[str] = Field(default_factory=list)
    memory: Optional[str] = None
    cssLib: Optional[str] = None
    framework: Optional[str] = None
    model: Optional[str] = None


class PlanResponse(BaseModel):
    title: str
    message: str
    plan: str
    url: str = ""


@router.post("/plan", response_model=PlanResponse)
async def create_plan(request: Request, data: PlanRequest):
    """Draft a development plan for a new project."""
    if not data.input.strip():
        raise HTTPException(status_code=400, detail="input is required")

    planner = request.app.state.services.planner
    return await planner.create_plan(
        data.input,
        images=data.images,
        memory=data.memory,
        css_library=data.cssLib,
        framework=data.framework,
        model=data.model,
    )
