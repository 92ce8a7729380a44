# appforge/llm/providers/__init__.py
"""
LLM provider transports.
"""
from . import openrouter, direct

__all__ = ["openrouter", "direct"]
