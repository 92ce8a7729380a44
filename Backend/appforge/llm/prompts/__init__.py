# appforge/llm/prompts/__init__.py
from .coordinator import COORDINATOR_PROMPT
from .frontend import FRONTEND_PROMPT, FRONTEND_FIX_PROMPT, generation_prompt

__all__ = ["COORDINATOR_PROMPT", "FRONTEND_PROMPT", "FRONTEND_FIX_PROMPT", "generation_prompt"]
