# appforge/api/files.py
"""
Project file tree for the editor.
"""
import re

from fastapi import APIRouter, HTTPException, Request

from appforge.core.exceptions import EntityNotFoundError
from appforge.extraction.file_tree import build_file_tree

router = APIRouter(prefix="/api/projects", tags=["Files"])


def validate_project_id(project_id: str) -> bool:
    """Generated project names: alphanumeric, hyphens and underscores (1-100 chars)."""
    return bool(re.match(r"^[a-zA-Z0-9_-]{1,100}$", project_id or ""))


@router.get("/{project_id}/tree")
async def get_file_tree(request: Request, project_id: str, email: str):
    """Nested tree of the project's current code bundle, rooted at frontend/."""
    if not validate_project_id(project_id):
        raise HTTPException(status_code=400, detail="Invalid project ID format")

    store = request.app.state.services.store
    try:
        project, _ = await store.resolve(project_id, email)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)

    bundle = await store.load_code_bundle(project.url)
    files = bundle.get("generatedFiles", bundle) if isinstance(bundle, dict) else {}
    return {"projectId": project_id, "tree": build_file_tree(files)}
