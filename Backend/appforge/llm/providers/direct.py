# appforge/llm/providers/direct.py
"""
Direct HTTP transport to OpenRouter, used as the one-shot fallback when the
primary SDK call fails. Accepts plain-text messages only.
"""
import aiohttp
from typing import Any, Dict, List, Optional

from appforge.core.config import settings
from appforge.core.exceptions import LLMError
from appforge.llm.envelope import ModelResponse


PROVIDER = "openrouter-direct"


async def call(
    messages: List[Dict[str, Any]],
    model: str,
    temperature: Optional[float] = None,
    max_tokens: Optional[int] = None,
) -> ModelResponse:
    """
    POST chat/completions with flattened messages.

    Returns:
        ModelResponse with transport="direct"

    Raises:
        LLMError on HTTP or payload errors
    """
    api_key = settings.llm.api_key
    if not api_key:
        raise LLMError(PROVIDER, "OPENROUTER_API_KEY not configured")

    payload = {
        "model": model,
        "messages": messages,
        "temperature": settings.llm.fallback_temperature if temperature is None else temperature,
        "max_tokens": max_tokens or settings.llm.fallback_max_tokens,
    }

    headers = {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
    }

    url = f"{settings.llm.base_url.rstrip('/')}/chat/completions"

    async with aiohttp.ClientSession() as session:
        async with session.post(
            url,
            json=payload,
            headers=headers,
            timeout=aiohttp.ClientTimeout(total=settings.llm.request_timeout),
        ) as response:
            if response.status != 200:
                text = await response.text()
                raise LLMError(PROVIDER, f"API error {response.status}: {text[:200]}")

            data = await response.json()

    choices = data.get("choices") or []
    if not choices or not isinstance(choices[0].get("message"), dict):
        raise LLMError(PROVIDER, "Invalid response format from OpenRouter API")

    usage = data.get("usage") or {}
    return ModelResponse(
        text=choices[0]["message"].get("content") or "",
        model=model,
        transport="direct",
        usage={
            "input": int(usage.get("prompt_tokens", 0) or 0),
            "output": int(usage.get("completion_tokens", 0) or 0),
        },
        finish_reason=choices[0].get("finish_reason"),
    )
