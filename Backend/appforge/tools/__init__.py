# appforge/tools/__init__.py
from .registry import ToolDefinition, ToolRegistry, format_tool_result
from .capabilities import RemoteCapabilities, build_registry

__all__ = ["ToolDefinition", "ToolRegistry", "format_tool_result", "RemoteCapabilities", "build_registry"]
