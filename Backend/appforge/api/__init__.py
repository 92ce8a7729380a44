# appforge/api/__init__.py
"""
API module - All route handlers.
"""
from . import health, agent, plans, builds, files

__all__ = [
    "health",
    "agent",
    "plans",
    "builds",
    "files",
]
