# appforge/llm/__init__.py
"""
LLM module - gateway, response envelope and message helpers.
"""
from .envelope import ModelResponse, ToolCall
from .gateway import ModelGateway
from .registry import ModelProfile, MODEL_REGISTRY, resolve_model

__all__ = ["ModelGateway", "ModelResponse", "ToolCall", "ModelProfile", "MODEL_REGISTRY", "resolve_model"]
