# appforge/streaming/relay.py
"""
Streaming relay - graph events to text/event-stream frames.

Frame order:
    data: stream_start
    data: <token>              (one frame per TOKEN event, no coalescing)
    data: I'm processing...    (only if no token was produced)
    data: [DONE]               (exactly once, also after errors)

Nothing more is written once the client has disconnected.
"""
from typing import AsyncIterator, Awaitable, Callable, Optional

from appforge.core.config import settings, StreamSettings
from appforge.core.logging import log
from appforge.graph.events import EventType, GraphEvent


DisconnectCheck = Callable[[], Awaitable[bool]]

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def sse_frame(payload: str) -> str:
    """One SSE event; multi-line payloads become consecutive data: lines."""
    return "".join(f"data: {line}\n" for line in payload.split("\n")) + "\n"


class StreamRelay:
    def __init__(self, stream: Optional[StreamSettings] = None):
        self.stream = stream or settings.stream

    def error_frames(self, message: str) -> list:
        return [sse_frame(f"{self.stream.error_prefix}{message}"), sse_frame(self.stream.done_token)]

    async def abort(self, message: str) -> AsyncIterator[str]:
        """Single terminal error for turns that fail before the graph starts."""
        for frame in self.error_frames(message):
            yield frame

    async def relay(
        self,
        events: AsyncIterator[GraphEvent],
        is_disconnected: Optional[DisconnectCheck] = None,
    ) -> AsyncIterator[str]:
        produced = False
        try:
            yield sse_frame(self.stream.start_token)

            async for event in events:
                if is_disconnected is not None and await is_disconnected():
                    log("STREAM", "Client disconnected, stopping relay")
                    return

                if event.type == EventType.TOKEN and event.data:
                    produced = True
                    yield sse_frame(event.data)
                elif event.type == EventType.ERROR:
                    for frame in self.error_frames(event.data):
                        yield frame
                    return
                elif event.type == EventType.COMPLETE:
                    break
        except Exception as e:
            log("STREAM", f"Relay failed: {e}")
            for frame in self.error_frames(str(e)):
                yield frame
            return
        finally:
            aclose = getattr(events, "aclose", None)
            if aclose is not None:
                await aclose()

        if not produced:
            yield sse_frame(self.stream.placeholder)
        yield sse_frame(self.stream.done_token)
