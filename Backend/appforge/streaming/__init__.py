# appforge/streaming/__init__.py
from .relay import StreamRelay, sse_frame, SSE_HEADERS

__all__ = ["StreamRelay", "sse_frame", "SSE_HEADERS"]
