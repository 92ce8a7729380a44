from datetime import datetime, timezone
from typing import List, Literal, Optional
from beanie import Document, Indexed
from pydantic import Field


MessageRole = Literal["user", "ai"]


class Message(Document):
    """One persisted turn. Never updated after insert."""
    project_id: Indexed(str)
    user_id: str
    text: str
    role: MessageRole
    images: List[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Settings:
        name = "messages"


class Plan(Document):
    project_id: Indexed(str)
    user_id: str
    text: str
    role: MessageRole = "ai"
    image_to_clone: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Settings:
        name = "plans"


class GalleryImage(Document):
    # Keyed by the project's generated name
    project_id: Indexed(str)
    label: str
    image_url: str
    image_name: Optional[str] = None
    description: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    status: Literal["active", "deleted"] = "active"
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Settings:
        name = "gallery"
