# appforge/llm/gateway.py
"""
Model invocation gateway - single interface for every model call.

Handles:
- Logical model name resolution (unknown names use the default)
- Tool binding (skipped for denylisted models or when the caller opts out)
- Streaming token forwarding
- One-shot direct fallback for fallback-eligible (Claude family) models

Constructed once at startup and shared by reference.
"""
from typing import Any, Awaitable, Callable, Dict, List, Optional

from openai import AsyncOpenAI

from appforge.core.config import settings
from appforge.core.exceptions import LLMError, FallbackExhaustedError
from appforge.core.logging import log
from appforge.llm.envelope import ModelResponse
from appforge.llm.messages import flatten_messages
from appforge.llm.providers import openrouter, direct
from appforge.llm.registry import ModelProfile, resolve_model


TokenCallback = Callable[[str], Awaitable[None]]
PrimaryCall = Callable[..., Awaitable[ModelResponse]]
DirectCall = Callable[..., Awaitable[ModelResponse]]


class ModelGateway:
    """Resolves models, invokes the primary transport and falls back once."""

    def __init__(
        self,
        client: Optional[AsyncOpenAI] = None,
        tool_schemas: Optional[List[Dict[str, Any]]] = None,
        primary: Optional[PrimaryCall] = None,
        fallback: Optional[DirectCall] = None,
    ):
        self._client = client
        self._tool_schemas = list(tool_schemas or [])
        self._primary = primary or openrouter.call
        self._fallback = fallback or direct.call
        self.temperature = settings.llm.temperature
        self.max_tokens = settings.llm.max_tokens

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = openrouter.create_client()
        return self._client

    def resolve(self, name: Optional[str]) -> ModelProfile:
        return resolve_model(name or settings.llm.default_model)

    async def invoke(
        self,
        messages: List[Dict[str, Any]],
        model: Optional[str] = None,
        bind_tools: bool = True,
        on_token: Optional[TokenCallback] = None,
    ) -> ModelResponse:
        """
        Invoke a model.

        Args:
            messages: OpenAI-shaped chat messages (content may be multimodal)
            model: Logical model name
            bind_tools: Attach capability schemas when the model supports them
            on_token: Receives each text delta in order (enables streaming)

        Raises:
            LLMError: primary call failed and the model is not fallback-eligible
            FallbackExhaustedError: primary and direct calls both failed
        """
        profile = self.resolve(model)
        tools = self._tool_schemas if (bind_tools and profile.supports_tools) else None
        streamed: List[str] = []

        async def forward(text: str) -> None:
            streamed.append(text)
            await on_token(text)

        try:
            response = await self._primary(
                self.client,
                messages,
                profile.provider_model,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                tools=tools,
                on_token=forward if on_token is not None else None,
            )
            log("GATEWAY", f"{profile.name}: {len(response.text)} chars, {len(response.tool_calls)} tool calls")
            return response
        except Exception as primary_error:
            log("GATEWAY", f"{profile.name} primary call failed: {primary_error}")
            if not profile.fallback_eligible:
                raise LLMError(profile.name, str(primary_error)) from primary_error
            if streamed:
                log("FALLBACK", f"{profile.name} failed after {len(streamed)} streamed chunks, direct output not re-streamed")
            return await self._invoke_direct(profile, messages, primary_error, None if streamed else on_token)

    async def _invoke_direct(
        self,
        profile: ModelProfile,
        messages: List[Dict[str, Any]],
        primary_error: Exception,
        on_token: Optional[TokenCallback],
    ) -> ModelResponse:
        log("FALLBACK", f"Attempting direct call for {profile.name}")
        try:
            response = await self._fallback(flatten_messages(messages), profile.provider_model)
        except Exception as fallback_error:
            log("FALLBACK", f"Direct call for {profile.name} also failed: {fallback_error}")
            raise FallbackExhaustedError(profile.name, primary_error, fallback_error) from fallback_error

        if on_token is not None and response.text:
            await on_token(response.text)
        return response

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None
