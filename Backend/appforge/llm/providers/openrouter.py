# appforge/llm/providers/openrouter.py
"""
Primary transport: OpenAI-compatible chat completions through OpenRouter.

Retries with exponential backoff are delegated to the SDK client
(`max_retries`). Streaming calls forward every text delta to `on_token`
in arrival order and assemble tool-call fragments by index.
"""
import json
from typing import Any, Awaitable, Callable, Dict, List, Optional

from openai import AsyncOpenAI

from appforge.core.config import settings
from appforge.llm.envelope import ModelResponse, ToolCall


TokenCallback = Callable[[str], Awaitable[None]]


def create_client(
    api_key: Optional[str] = None,
    base_url: Optional[str] = None,
) -> AsyncOpenAI:
    """Build the shared SDK client. Created once at startup."""
    return AsyncOpenAI(
        api_key=api_key or settings.llm.api_key or "missing-key",
        base_url=base_url or settings.llm.base_url,
        max_retries=settings.llm.max_retries,
        timeout=settings.llm.request_timeout,
    )


def _parse_arguments(raw: Optional[str]) -> Dict[str, Any]:
    if not raw:
        return {}
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        return {"input": raw}
    return parsed if isinstance(parsed, dict) else {"input": parsed}


def _usage(usage: Any) -> Dict[str, int]:
    if usage is None:
        return {}
    return {
        "input": int(getattr(usage, "prompt_tokens", 0) or 0),
        "output": int(getattr(usage, "completion_tokens", 0) or 0),
    }


async def call(
    client: AsyncOpenAI,
    messages: List[Dict[str, Any]],
    model: str,
    temperature: float,
    max_tokens: int,
    tools: Optional[List[Dict[str, Any]]] = None,
    on_token: Optional[TokenCallback] = None,
) -> ModelResponse:
    """
    Call the chat completions endpoint.

    Returns:
        ModelResponse with transport="primary"

    Raises:
        openai.OpenAIError (or subclasses) once SDK retries are exhausted
    """
    kwargs: Dict[str, Any] = {
        "model": model,
        "messages": messages,
        "temperature": temperature,
        "max_tokens": max_tokens,
    }
    if tools:
        kwargs["tools"] = tools
        kwargs["tool_choice"] = "auto"

    if on_token is None:
        resp = await client.chat.completions.create(**kwargs)
        if not resp.choices:
            raise ValueError(f"No choices in response from {model}")

        choice = resp.choices[0]
        tool_calls = [
            ToolCall(
                id=tc.id,
                name=tc.function.name,
                arguments=_parse_arguments(tc.function.arguments),
            )
            for tc in (choice.message.tool_calls or [])
        ]
        return ModelResponse(
            text=choice.message.content or "",
            model=model,
            transport="primary",
            tool_calls=tool_calls,
            usage=_usage(resp.usage),
            finish_reason=choice.finish_reason,
        )

    stream = await client.chat.completions.create(
        **kwargs,
        stream=True,
        stream_options={"include_usage": True},
    )

    text_parts: List[str] = []
    pending: Dict[int, Dict[str, str]] = {}
    usage: Dict[str, int] = {}
    finish_reason = None

    async for chunk in stream:
        if getattr(chunk, "usage", None):
            usage = _usage(chunk.usage)
        if not chunk.choices:
            continue

        choice = chunk.choices[0]
        delta = choice.delta
        if choice.finish_reason:
            finish_reason = choice.finish_reason

        if delta.content:
            text_parts.append(delta.content)
            await on_token(delta.content)

        for fragment in delta.tool_calls or []:
            slot = pending.setdefault(fragment.index, {"id": "", "name": "", "arguments": ""})
            if fragment.id:
                slot["id"] = fragment.id
            if fragment.function:
                if fragment.function.name:
                    slot["name"] += fragment.function.name
                if fragment.function.arguments:
                    slot["arguments"] += fragment.function.arguments

    tool_calls = [
        ToolCall(
            id=slot["id"] or f"call_{index}",
            name=slot["name"],
            arguments=_parse_arguments(slot["arguments"]),
        )
        for index, slot in sorted(pending.items())
    ]

    return ModelResponse(
        text="".join(text_parts),
        model=model,
        transport="primary",
        tool_calls=tool_calls,
        usage=usage,
        finish_reason=finish_reason,
    )
