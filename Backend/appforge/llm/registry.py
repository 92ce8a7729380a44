# appforge/llm/registry.py
"""
Logical model names exposed to clients and their provider identifiers.
"""
from dataclasses import dataclass
from typing import Dict, List, Optional

from appforge.core.config import settings


@dataclass(frozen=True)
class ModelProfile:
    name: str
    provider_model: str
    supports_tools: bool
    fallback_eligible: bool


MODEL_REGISTRY: Dict[str, str] = {
    "gpt-4.1": "gpt-4.1",
    "gpt-5-chat": "gpt-5",
    "kimi-k2": "moonshotai/kimi-k2",
    "claude-sonnet-4": "anthropic/claude-sonnet-4",
    "claude-3.7-sonnet": "anthropic/claude-3.7-sonnet",
    "gemini-2.5-pro": "google/gemini-2.5-pro",
    "grok-3": "x-ai/grok-3",
}


def resolve_model(name: str, denylist: Optional[List[str]] = None) -> ModelProfile:
    """
    Resolve a logical model name. Unknown names use the configured default.

    The tool denylist is matched against both the logical and provider names.
    """
    denylist = settings.llm.tool_denylist if denylist is None else denylist
    if name not in MODEL_REGISTRY:
        name = settings.llm.default_model if settings.llm.default_model in MODEL_REGISTRY else "gpt-4.1"

    provider_model = MODEL_REGISTRY[name]
    return ModelProfile(
        name=name,
        provider_model=provider_model,
        supports_tools=name not in denylist and provider_model not in denylist,
        fallback_eligible=settings.llm.fallback_marker in name,
    )


def available_models() -> List[str]:
    return list(MODEL_REGISTRY)
