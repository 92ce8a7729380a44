# tests/test_tools.py
"""
Tests for the capability registry.
"""
import json

import pytest

from appforge.core.exceptions import ToolError
from appforge.tools.capabilities import RemoteCapabilities, build_registry
from appforge.tools.registry import ToolDefinition, ToolRegistry, format_tool_result


class TestToolRegistry:

    def test_schemas(self, tool_registry):
        schemas = tool_registry.schemas()

        assert [s["function"]["name"] for s in schemas] == ["search_web", "screenshot"]
        assert schemas[0]["function"]["parameters"]["required"] == ["query"]

    @pytest.mark.asyncio
    async def test_run_success(self, tool_registry):
        result = await tool_registry.run("search_web", {"query": "react"})

        assert result == {"success": True, "tool": "search_web", "result": {"results": ["result for react"]}}

    @pytest.mark.asyncio
    async def test_unknown_tool(self, tool_registry):
        result = await tool_registry.run("deploy", {})

        assert result["success"] is False
        assert "Unknown tool" in result["error"]

    @pytest.mark.asyncio
    async def test_missing_arguments(self, tool_registry):
        result = await tool_registry.run("screenshot", {})

        assert result["success"] is False
        assert "url" in result["error"]

    @pytest.mark.asyncio
    async def test_tool_exception_is_reported(self):
        async def broken(args):
            raise ToolError("broken", "HTTP 500")

        registry = ToolRegistry([ToolDefinition(id="broken", func=broken, description="x")])

        result = await registry.run("broken")

        assert result["success"] is False
        assert "HTTP 500" in result["error"]

    def test_format_tool_result(self):
        assert json.loads(format_tool_result({"success": True, "result": 1})) == {"success": True, "result": 1}


class TestRemoteCapabilities:

    def test_registry_exposes_both_capabilities(self):
        registry = build_registry(RemoteCapabilities(base_url="https://relics.example.com"))

        assert registry.ids() == ["search_web", "screenshot"]

    @pytest.mark.asyncio
    async def test_unconfigured_service(self, monkeypatch):
        capabilities = RemoteCapabilities(base_url="")
        monkeypatch.setattr(capabilities, "base_url", "")
        registry = build_registry(capabilities)

        result = await registry.run("screenshot", {"url": "https://stripe.com"})

        assert result["success"] is False
        assert "RELICS_API_URL" in result["error"]
