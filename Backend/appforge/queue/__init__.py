# appforge/queue/__init__.py
from .build_queue import BuildQueue, EnqueueResult, backoff_intervals

__all__ = ["BuildQueue", "EnqueueResult", "backoff_intervals"]
