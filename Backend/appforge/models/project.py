from datetime import datetime, timezone
from typing import Optional, Literal
from beanie import Document, Indexed
from pydantic import Field


ProjectStatus = Literal["active", "archived", "deleted"]


class Project(Document):
    generated_name: Indexed(str, unique=True)
    owner: str
    title: str = ""
    # Latest generated bundle (JSON on object storage)
    url: Optional[str] = None
    # JSON string; carries the reference image url when the project started from one
    enh_prompt: Optional[str] = None
    memory: Optional[str] = None
    css_library: str = "tailwindcss"
    framework: str = "react"
    last_responder: Optional[str] = None
    status: ProjectStatus = "active"
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Settings:
        name = "projects"


class User(Document):
    email: Indexed(str, unique=True)
    prompt_count: int = 0
    is_building: bool = False
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Settings:
        name = "users"
