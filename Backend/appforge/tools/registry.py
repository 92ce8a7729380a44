# appforge/tools/registry.py
"""
═══════════════════════════════════════════════════════════════════════════════
CAPABILITY REGISTRY

External helper services the router may call as tools. Each entry carries
its OpenAI function schema and an async implementation.
═══════════════════════════════════════════════════════════════════════════════
"""
import json
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional

from appforge.core.logging import log


ToolFunc = Callable[[Dict[str, Any]], Awaitable[Dict[str, Any]]]


@dataclass
class ToolDefinition:
    """Complete definition of a tool."""
    id: str
    func: ToolFunc
    description: str
    parameters: Dict[str, Any] = field(default_factory=lambda: {"type": "object", "properties": {}})
    required_args: List[str] = field(default_factory=list)

    def schema(self) -> Dict[str, Any]:
        """OpenAI function-calling schema."""
        params = dict(self.parameters)
        if self.required_args:
            params["required"] = list(self.required_args)
        return {
            "type": "function",
            "function": {
                "name": self.id,
                "description": self.description,
                "parameters": params,
            },
        }


class ToolRegistry:
    """Named capabilities. Built once at startup."""

    def __init__(self, tools: Optional[List[ToolDefinition]] = None):
        self._tools: Dict[str, ToolDefinition] = {}
        for tool in tools or []:
            self.register(tool)

    def register(self, tool: ToolDefinition) -> None:
        self._tools[tool.id] = tool

    def get(self, tool_id: str) -> Optional[ToolDefinition]:
        return self._tools.get(tool_id)

    def ids(self) -> List[str]:
        return list(self._tools)

    def schemas(self) -> List[Dict[str, Any]]:
        return [tool.schema() for tool in self._tools.values()]

    async def run(self, tool_id: str, args: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Run a tool by ID. Failures come back as {"success": False, "error": ...}.
        """
        tool = self._tools.get(tool_id)
        if not tool:
            return {"success": False, "error": f"Unknown tool: {tool_id}"}

        args = args or {}
        missing = [name for name in tool.required_args if name not in args]
        if missing:
            return {"success": False, "error": f"Missing arguments: {', '.join(missing)}", "tool": tool_id}

        try:
            result = await tool.func(args)
        except Exception as e:
            log("TOOLS", f"{tool_id} failed: {e}")
            return {"success": False, "error": str(e), "tool": tool_id}

        log("TOOLS", f"{tool_id} completed")
        return {"success": True, "tool": tool_id, "result": result}


def format_tool_result(result: Dict[str, Any]) -> str:
    """Serialize a run() result for a tool message."""
    return json.dumps(result, default=str)
