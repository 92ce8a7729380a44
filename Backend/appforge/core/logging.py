# appforge/core/logging.py
"""
Scoped console logging.

Lines look like ``[12:30:01] [GATEWAY] [proj-123] message``. Scopes in
INFO_SCOPES always print; any other scope prints only when APPFORGE_DEBUG
is true.
"""
import os
import sys
from datetime import datetime
from typing import Any, Optional


INFO_SCOPES = frozenset({
    "AGENT", "GRAPH", "GATEWAY", "FALLBACK", "EXTRACT",
    "BUILD-QUEUE", "PLANNER", "DB", "MONITORING",
})

# Noisy per-chunk / per-asset scopes
DEBUG_SCOPES = frozenset({"IMAGES", "TOOLS", "STREAM", "CONTEXT"})

SECTION_RULE = "=" * 60


def debug_enabled() -> bool:
    return os.getenv("APPFORGE_DEBUG", "false").lower() == "true"


def scope_enabled(scope: str) -> bool:
    return scope in INFO_SCOPES or debug_enabled()


def _prefix(scope: str, project_id: Optional[str]) -> str:
    parts = [datetime.now().strftime("%H:%M:%S"), scope]
    if project_id:
        parts.append(project_id[:8])
    return " ".join(f"[{part}]" for part in parts)


def _emit(*lines: str) -> None:
    sys.stdout.write("\n".join(lines) + "\n")
    sys.stdout.flush()


def log(scope: str, message: str, data: Any = None, project_id: Optional[str] = None) -> None:
    """Print one scoped line, plus an indented data line when data is given."""
    if not scope_enabled(scope):
        return
    lines = [f"{_prefix(scope, project_id)} {message}"]
    if data:
        lines.append(f"  Data: {data}")
    _emit(*lines)


def log_section(scope: str, title: str, project_id: Optional[str] = None) -> None:
    """Print a ruled header that marks the start of a turn or plan."""
    if not scope_enabled(scope):
        return
    _emit("", SECTION_RULE, f"{_prefix(scope, project_id)} {title}", SECTION_RULE)
