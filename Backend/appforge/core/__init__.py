# appforge/core/__init__.py
"""
Core module - configuration, logging, errors and shared types.
"""
from .config import settings, Settings
from .logging import log, log_section
from .exceptions import (
    AppForgeError,
    LLMError,
    FallbackExhaustedError,
    ImageFetchError,
    EntityNotFoundError,
    QueueError,
    ToolError,
)
from .constants import NodeName
from .types import Turn, PlanRecord, ImageAsset, BuildJob

__all__ = [
    "settings",
    "Settings",
    "log",
    "log_section",
    "AppForgeError",
    "LLMError",
    "FallbackExhaustedError",
    "ImageFetchError",
    "EntityNotFoundError",
    "QueueError",
    "ToolError",
    "NodeName",
    "Turn",
    "PlanRecord",
    "ImageAsset",
    "BuildJob",
]
