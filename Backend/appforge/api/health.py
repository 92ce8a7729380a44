# appforge/api/health.py
"""
Health check endpoints.
"""
from datetime import datetime, timezone
from fastapi import APIRouter

from appforge import db

router = APIRouter(tags=["Health"])


@router.get("/healthz")
async def healthz():
    """Simple liveness check."""
    return {"ok": True, "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get("/api/health")
async def api_health():
    """API health check with database status."""
    payload = {
        "status": "healthy",
        "database": "connected" if db.is_connected() else "unavailable",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    error = db.get_connection_error()
    if error:
        payload["database_error"] = error
    return payload
