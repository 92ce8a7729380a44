# appforge/core/types.py
"""
Domain value types shared across the pipeline.
"""
import base64
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


TurnRole = Literal["user", "assistant"]
ImageFormat = Literal["openai", "gemini"]


class Turn(BaseModel):
    """One persisted conversational exchange. Immutable once stored."""
    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    role: TurnRole
    text: str
    images: List[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class PlanRecord(BaseModel):
    """
    Structured description of one generation result.

    `file_list` and the keys of `generated_files` always name the same set of
    paths and `file_count` is their size; construction fails otherwise.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str = ""
    narrative_steps: List[str] = Field(default_factory=list, alias="Steps")
    generated_files: Dict[str, str] = Field(default_factory=dict, alias="generatedFiles")
    file_list: List[str] = Field(default_factory=list, alias="files")
    file_count: int = Field(default=0, alias="filesCount")
    frontend_files: List[str] = Field(default_factory=list, alias="frontendFiles")
    backend_routes: List[Dict[str, Any]] = Field(default_factory=list, alias="backendRoutes")
    brand_kit: Dict[str, Any] = Field(default_factory=dict, alias="brandKit")
    replication_strategy: Optional[Dict[str, Any]] = None
    url: Optional[str] = None
    message: Optional[str] = None

    @model_validator(mode="after")
    def _files_consistent(self) -> "PlanRecord":
        if set(self.file_list) != set(self.generated_files):
            raise ValueError("file_list and generated_files name different paths")
        if len(set(self.file_list)) != len(self.file_list):
            raise ValueError("file_list contains duplicate paths")
        if self.file_count != len(self.file_list):
            raise ValueError(
                f"file_count {self.file_count} != {len(self.file_list)} listed files"
            )
        return self


@dataclass(frozen=True)
class ImageAsset:
    """A fetched image that passed the size gate."""
    source_url: str
    mime_type: str
    size_bytes: int
    encoded_payload: str

    @classmethod
    def from_bytes(cls, url: str, mime_type: str, data: bytes) -> "ImageAsset":
        return cls(
            source_url=url,
            mime_type=mime_type,
            size_bytes=len(data),
            encoded_payload=base64.b64encode(data).decode("ascii"),
        )

    def to_part(self, fmt: ImageFormat = "openai") -> Dict[str, Any]:
        """Render as a provider-specific message content part."""
        if fmt == "openai":
            return {
                "type": "image_url",
                "image_url": {"url": f"data:{self.mime_type};base64,{self.encoded_payload}"},
            }
        return {"inlineData": {"mimeType": self.mime_type, "data": self.encoded_payload}}


@dataclass
class BuildJob:
    """A build request keyed by project."""
    project_key: str
    payload: Dict[str, Any]
    attempts: int = 3
    priority: int = 1
    delay: int = 0
    meta: Dict[str, Any] = field(default_factory=dict)
