# appforge/tools/capabilities.py
"""
Remote capability client (search and screenshot helper service).
"""
import aiohttp
from typing import Any, Dict, Optional

from appforge.core.config import settings
from appforge.core.exceptions import ToolError
from appforge.tools.registry import ToolDefinition, ToolRegistry


class RemoteCapabilities:
    """Thin aiohttp client for the helper service."""

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None):
        self.base_url = (base_url or settings.capabilities.relics_url or "").rstrip("/")
        self.timeout = timeout or settings.capabilities.timeout

    async def _get(self, tool: str, path: str, params: Dict[str, str]) -> Dict[str, Any]:
        if not self.base_url:
            raise ToolError(tool, "RELICS_API_URL not configured")

        async with aiohttp.ClientSession() as session:
            async with session.get(
                f"{self.base_url}/{path}",
                params=params,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as response:
                if response.status != 200:
                    text = await response.text()
                    raise ToolError(tool, f"HTTP {response.status}: {text[:200]}")
                return await response.json()

    async def search_web(self, args: Dict[str, Any]) -> Dict[str, Any]:
        return await self._get("search_web", "search", {"q": str(args["query"])})

    async def screenshot(self, args: Dict[str, Any]) -> Dict[str, Any]:
        """
        Returns the service payload: {"screenshotUrl": ..., "html": {"images": [...]}}.
        """
        return await self._get("screenshot", "screenshot", {"url": str(args["url"])})


def build_registry(capabilities: RemoteCapabilities) -> ToolRegistry:
    return ToolRegistry([
        ToolDefinition(
            id="search_web",
            func=capabilities.search_web,
            description="Search the web and return the top results for a query.",
            parameters={
                "type": "object",
                "properties": {"query": {"type": "string", "description": "Search query"}},
            },
            required_args=["query"],
        ),
        ToolDefinition(
            id="screenshot",
            func=capabilities.screenshot,
            description="Capture a screenshot of a web page and list the images it uses.",
            parameters={
                "type": "object",
                "properties": {"url": {"type": "string", "description": "Absolute page URL"}},
            },
            required_args=["url"],
        ),
    ])
