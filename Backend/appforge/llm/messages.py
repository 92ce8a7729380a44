# appforge/llm/messages.py
"""
Chat message helpers (OpenAI wire shape).
"""
from typing import Any, Dict, List, Optional

Message = Dict[str, Any]

IMAGE_PLACEHOLDER = "[Image]"


def system_message(text: str) -> Message:
    return {"role": "system", "content": text}


def user_message(text: str, image_parts: Optional[List[Dict[str, Any]]] = None) -> Message:
    """User message; multimodal content list when images are attached."""
    if not image_parts:
        return {"role": "user", "content": text}
    return {"role": "user", "content": [{"type": "text", "text": text}, *image_parts]}


def assistant_message(text: str, tool_calls: Optional[List[Dict[str, Any]]] = None) -> Message:
    message: Message = {"role": "assistant", "content": text}
    if tool_calls:
        message["tool_calls"] = tool_calls
    return message


def tool_message(tool_call_id: str, content: str) -> Message:
    return {"role": "tool", "tool_call_id": tool_call_id, "content": content}


def flatten_content(content: Any) -> str:
    """Collapse multimodal content to plain text, eliding images."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, dict) and part.get("type") == "text":
                parts.append(str(part.get("text", "")))
            else:
                parts.append(IMAGE_PLACEHOLDER)
        return "\n".join(parts)
    if content is None:
        return ""
    return str(content)


def flatten_messages(messages: List[Message]) -> List[Message]:
    """
    Plain-text copy of a conversation for the direct transport.

    Tool plumbing is dropped: tool results become user text and assistant
    tool-call metadata is removed.
    """
    flat: List[Message] = []
    for message in messages:
        role = message.get("role", "user")
        if role == "tool":
            role = "user"
        flat.append({"role": role, "content": flatten_content(message.get("content"))})
    return flat


def latest_user_text(messages: List[Message]) -> str:
    for message in reversed(messages):
        if message.get("role") == "user":
            return flatten_content(message.get("content"))
    return "No user input provided"
