# appforge/core/exceptions.py
"""
Custom exceptions for the application.
"""
from typing import Optional, Dict, Any


class AppForgeError(Exception):
    """Base exception for all AppForge errors."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class LLMError(AppForgeError):
    """LLM provider error."""
    def __init__(self, provider: str, message: str):
        super().__init__(
            f"LLM error ({provider}): {message}",
            {"provider": provider}
        )
        self.provider = provider


class FallbackExhaustedError(LLMError):
    """Primary call and the direct fallback both failed."""
    def __init__(self, model: str, primary: BaseException, fallback: BaseException):
        super().__init__(
            model,
            f"primary call failed: {primary}. Direct call also failed: {fallback}"
        )
        self.details.update({"primary": str(primary), "fallback": str(fallback)})
        self.primary = primary
        self.fallback = fallback


class ImageFetchError(AppForgeError):
    """A single image could not be ingested."""
    def __init__(self, url: str, message: str):
        super().__init__(f"Image {url}: {message}", {"url": url})
        self.url = url


class EntityNotFoundError(AppForgeError):
    """Project or user referenced by a request does not exist."""
    def __init__(self, entity: str, key: str):
        super().__init__(f"{entity} not found: {key}", {"entity": entity, "key": key})
        self.entity = entity
        self.key = key


class QueueError(AppForgeError):
    """Build queue (Redis) error."""
    pass


class ToolError(AppForgeError):
    """External capability invocation failed."""
    def __init__(self, tool: str, message: str):
        super().__init__(f"Tool {tool} failed: {message}", {"tool": tool})
        self.tool = tool
