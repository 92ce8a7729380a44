# appforge/core/config.py
"""
Application configuration - single source of truth for all settings.
"""
import os
from dataclasses import dataclass, field
from typing import List, Optional
from dotenv import load_dotenv

load_dotenv()


def _env_list(name: str, default: str) -> List[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass
class LLMSettings:
    """Model gateway configuration (OpenRouter-compatible endpoint)."""
    api_key: Optional[str] = field(default_factory=lambda: os.getenv("OPENROUTER_API_KEY") or os.getenv("MODEL_API_KEY"))
    base_url: str = field(default_factory=lambda: os.getenv("OPENROUTER_BASE_URL", "https://openrouter.ai/api/v1"))
    default_model: str = field(default_factory=lambda: os.getenv("DEFAULT_LLM_MODEL", "gpt-4.1"))
    temperature: float = 0.2
    max_retries: int = 3
    max_tokens: int = 60000
    request_timeout: float = field(default_factory=lambda: float(os.getenv("LLM_REQUEST_TIMEOUT", "300")))
    # Provider models that reject tool binding
    tool_denylist: List[str] = field(default_factory=lambda: _env_list(
        "LLM_TOOL_DENYLIST", "gpt-5-chat,moonshotai/kimi-k2,x-ai/grok-3"
    ))
    # Logical model names containing this marker get the raw HTTP fallback
    fallback_marker: str = "claude"
    fallback_temperature: float = 0.8
    fallback_max_tokens: int = 4000


@dataclass
class ImageSettings:
    """Remote image ingestion limits."""
    # 4 MiB keeps payloads under the strictest provider ceiling (5 MB)
    max_bytes: int = 4 * 1024 * 1024
    fetch_timeout: float = field(default_factory=lambda: float(os.getenv("IMAGE_FETCH_TIMEOUT", "30")))
    planner_image_limit: int = 2


@dataclass
class ConversationSettings:
    """Context window assembled for each turn."""
    history_limit: int = 10
    gallery_limit: int = 20
    bundle_timeout: float = 60.0


@dataclass
class QueueSettings:
    """Build dedup queue (Redis + RQ)."""
    redis_url: str = field(default_factory=lambda: os.getenv("REDIS_URL", "redis://localhost:6379/0"))
    queue_name: str = field(default_factory=lambda: os.getenv("BUILD_QUEUE_NAME", "build-queue3"))
    # Dotted path of the worker-side build function
    job_func: str = field(default_factory=lambda: os.getenv("BUILD_JOB_FUNC", "builder.tasks.build_project"))
    attempts: int = 3
    backoff_base: int = 2
    job_timeout: int = 900
    result_ttl: int = 3600
    failure_ttl: int = 3600


@dataclass
class CapabilitySettings:
    """External helper services exposed to the router as tools."""
    relics_url: Optional[str] = field(default_factory=lambda: os.getenv("RELICS_API_URL"))
    timeout: float = 60.0


@dataclass
class StreamSettings:
    """Wire literals of the event stream."""
    start_token: str = "stream_start"
    done_token: str = "[DONE]"
    placeholder: str = "I'm processing your request..."
    error_prefix: str = "Error processing your request: "


@dataclass
class Settings:
    """Main application settings."""
    llm: LLMSettings = field(default_factory=LLMSettings)
    images: ImageSettings = field(default_factory=ImageSettings)
    conversation: ConversationSettings = field(default_factory=ConversationSettings)
    queue: QueueSettings = field(default_factory=QueueSettings)
    capabilities: CapabilitySettings = field(default_factory=CapabilitySettings)
    stream: StreamSettings = field(default_factory=StreamSettings)

    mongodb_url: str = field(default_factory=lambda: os.getenv("MONGODB_URL", "mongodb://localhost:27017"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "8000")))
    debug: bool = field(default_factory=lambda: os.getenv("DEBUG", "false").lower() == "true")


# Singleton instance
settings = Settings()
