# appforge/api/builds.py
"""
Build request route - deduplicated per project.
"""
from fastapi import APIRouter, Request
from pydantic import BaseModel
from starlette.responses import JSONResponse

from appforge.core.config import settings
from appforge.core.exceptions import EntityNotFoundError, QueueError
from appforge.core.logging import log
from appforge.core.types import BuildJob
from appforge.lib.monitoring import build_requests

router = APIRouter(prefix="/api", tags=["Builds"])


class BuildRequest(BaseModel):
    email: str
    projectId: str


@router.post("/build")
async def build_code(request: Request, data: BuildRequest):
    """Queue a build unless one is already pending for this project."""
    services = request.app.state.services

    try:
        project, user = await services.store.resolve(data.projectId, data.email)
    except EntityNotFoundError:
        project = user = None

    if not user or not project or not project.url:
        build_requests.labels(outcome="rejected").inc()
        return JSONResponse(
            status_code=400,
            content={"success": False, "message": "User or Project or Project url not found!"},
        )

    job = BuildJob(
        project_key=project.generated_name,
        payload={
            "projectId": project.generated_name,
            "userId": str(user.id),
            "email": user.email,
            "url": project.url,
        },
        attempts=settings.queue.attempts,
        priority=1,
        delay=0,
    )

    try:
        result = await services.build_queue.enqueue(job)
    except QueueError as e:
        log("BUILD-QUEUE", f"Error queuing build job: {e.message}", project_id=data.projectId)
        build_requests.labels(outcome="error").inc()
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": "Server error. Please try again later."},
        )

    if result.exists:
        build_requests.labels(outcome="duplicate").inc()
        return JSONResponse(status_code=201, content={"success": True, "message": "Already building!"})

    user.is_building = True
    await user.save()

    build_requests.labels(outcome="queued").inc()
    return {"success": True, "message": "Build queued successfully", "jobId": result.job_id}
