# tests/conftest.py
"""
Shared pytest fixtures for the AppForge backend tests.

Provides:
- Scripted model transports (no network)
- In-memory image fetcher
- Fake conversation store and build queue
- Async HTTP client bound to the FastAPI app
"""
import pytest
import pytest_asyncio
from types import SimpleNamespace
from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock

from appforge.core.exceptions import EntityNotFoundError
from appforge.llm.envelope import ModelResponse, ToolCall
from appforge.llm.gateway import ModelGateway
from appforge.media.images import ImagePipeline
from appforge.services.conversation import ConversationSnapshot, ConversationStore
from appforge.tools.registry import ToolDefinition, ToolRegistry


# ═══════════════════════════════════════════════════════
# MOCK TRANSPORTS
# ═══════════════════════════════════════════════════════

class ScriptedProvider:
    """
    Stands in for a provider transport. Each call consumes the next scripted
    output: a ModelResponse, a str (wrapped into one) or an Exception (raised).
    Text is forwarded to on_token when the caller streams.
    """

    def __init__(self, *outputs: Any):
        self.outputs: List[Any] = list(outputs)
        self.calls: List[Dict[str, Any]] = []

    async def __call__(self, client, messages, model, temperature=None, max_tokens=None, tools=None, on_token=None):
        self.calls.append({"messages": messages, "model": model, "tools": tools, "streamed": on_token is not None})
        if not self.outputs:
            raise AssertionError("ScriptedProvider ran out of outputs")
        output = self.outputs.pop(0)
        if isinstance(output, Exception):
            raise output
        if isinstance(output, str):
            output = ModelResponse(text=output, model=model)
        if on_token is not None and output.text:
            await on_token(output.text)
        return output


class ScriptedDirect:
    """Stands in for the direct HTTP fallback."""

    def __init__(self, *outputs: Any):
        self.outputs: List[Any] = list(outputs)
        self.calls: List[Dict[str, Any]] = []

    async def __call__(self, messages, model, temperature=None, max_tokens=None):
        self.calls.append({"messages": messages, "model": model})
        output = self.outputs.pop(0)
        if isinstance(output, Exception):
            raise output
        return ModelResponse(text=output, model=model, transport="direct")


def make_gateway(primary: ScriptedProvider, direct: Optional[ScriptedDirect] = None, tool_schemas=None) -> ModelGateway:
    return ModelGateway(
        client=MagicMock(),
        tool_schemas=tool_schemas,
        primary=primary,
        fallback=direct or ScriptedDirect(),
    )


def tool_call(name: str, **arguments) -> ToolCall:
    return ToolCall(id=f"call_{name}", name=name, arguments=arguments)


# ═══════════════════════════════════════════════════════
# FIXTURES - Images
# ═══════════════════════════════════════════════════════

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


class FakeFetcher:
    """url -> (body, content-type) or Exception."""

    def __init__(self, responses: Optional[Dict[str, Any]] = None):
        self.responses = responses or {}
        self.requested: List[str] = []

    async def __call__(self, url: str):
        self.requested.append(url)
        response = self.responses.get(url, (PNG_BYTES, None))
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def fake_fetcher():
    return FakeFetcher()


@pytest.fixture
def image_pipeline(fake_fetcher):
    return ImagePipeline(fetch=fake_fetcher)


# ═══════════════════════════════════════════════════════
# FIXTURES - Tools
# ═══════════════════════════════════════════════════════

@pytest.fixture
def tool_registry():
    async def search(args):
        return {"results": [f"result for {args['query']}"]}

    async def screenshot(args):
        return {"screenshotUrl": "https://cdn.example.com/shot.png", "html": {"images": []}}

    return ToolRegistry([
        ToolDefinition(id="search_web", func=search, description="Search", required_args=["query"]),
        ToolDefinition(id="screenshot", func=screenshot, description="Screenshot", required_args=["url"]),
    ])


# ═══════════════════════════════════════════════════════
# FIXTURES - Conversation
# ═══════════════════════════════════════════════════════

class FakeConversationStore(ConversationStore):
    """Serves one in-memory project/user pair and records saved messages."""

    def __init__(self, project_key: str = "proj-1", email: str = "dev@example.com", bundle: Any = None):
        super().__init__(bundle_loader=self._bundle)
        self.project = SimpleNamespace(id="p-oid", generated_name=project_key, url="https://cdn.example.com/bundle.json", enh_prompt=None)
        self.user = SimpleNamespace(id="u-oid", email=email, is_building=False)
        self.bundle = bundle if bundle is not None else {"src/App.tsx": {"code": "export default 1"}}
        self.saved: List[Dict[str, Any]] = []
        self.user_saves = 0
        self.user.save = self._save_user

    async def _bundle(self, url):
        return self.bundle

    async def _save_user(self):
        self.user_saves += 1

    async def resolve(self, project_key, email):
        if project_key != self.project.generated_name:
            raise EntityNotFoundError("Project", project_key)
        if email != self.user.email:
            raise EntityNotFoundError("User", email)
        return self.project, self.user

    async def load(self, project_key, email):
        project, user = await self.resolve(project_key, email)
        return ConversationSnapshot(
            project=project,
            user=user,
            code_bundle=await self.load_code_bundle(project.url),
            gallery=[{"label": "logo", "url": "https://cdn.example.com/logo.png"}],
        )

    async def save_message(self, project, user, text, role="ai", images=None, plan=None):
        self.saved.append({"text": text, "role": role})
        return SimpleNamespace(text=text, role=role)


@pytest.fixture
def conversation_store():
    return FakeConversationStore()


# ═══════════════════════════════════════════════════════
# FIXTURES - HTTP
# ═══════════════════════════════════════════════════════

@pytest.fixture
def services():
    """Placeholder container; tests assign the collaborators they need."""
    return SimpleNamespace(agent=None, planner=None, store=None, build_queue=None, gateway=None)


@pytest_asyncio.fixture
async def async_client(services):
    """Async client for the FastAPI app (lifespan not run)."""
    from httpx import ASGITransport, AsyncClient
    from appforge.main import app

    previous = app.state.services
    app.state.services = services
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.state.services = previous
