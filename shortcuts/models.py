"""Records exchanged with the database and the AI model."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class VideoStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class ShortSuggestion(BaseModel):
    """One clip suggestion returned by the ``save_shorts`` function call."""

    model_config = ConfigDict(extra="ignore")

    short_number: int
    title: str = Field(min_length=1)
    hook_line: str
    description: str
    start_timestamp: str = Field(min_length=1)
    end_timestamp: str = Field(min_length=1)
    duration_seconds: int = Field(ge=0)

    @field_validator("short_number", "duration_seconds", mode="before")
    @classmethod
    def _round_numbers(cls, value: Any) -> Any:
        if isinstance(value, float):
            return int(round(value))
        if isinstance(value, str) and value.strip():
            try:
                return int(round(float(value)))
            except ValueError:
                return value
        return value

    @field_validator("title", "hook_line", "description", "start_timestamp", "end_timestamp")
    @classmethod
    def _strip(cls, value: str) -> str:
        return value.strip()

    def to_row(self, video_id: str) -> Dict[str, Any]:
        row = self.model_dump()
        row["video_id"] = video_id
        return row


class Video(BaseModel):
    """Row of the ``videos`` table."""

    model_config = ConfigDict(extra="ignore")

    id: str
    user_id: str
    youtube_url: Optional[str] = None
    youtube_video_id: Optional[str] = None
    file_url: Optional[str] = None
    title: Optional[str] = None
    thumbnail_url: Optional[str] = None
    status: VideoStatus = VideoStatus.PENDING
    error_message: Optional[str] = None
    created_at: Optional[str] = None


class Short(BaseModel):
    """Row of the ``shorts`` table."""

    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    video_id: str
    short_number: int
    title: str
    hook_line: str
    description: str
    start_timestamp: str
    end_timestamp: str
    duration_seconds: Optional[int] = None


class YouTubeConnection(BaseModel):
    """Row of the ``youtube_connections`` table with decrypted tokens."""

    model_config = ConfigDict(extra="ignore")

    user_id: str
    access_token: str
    refresh_token: Optional[str] = None
    token_expires_at: Optional[str] = None
    channel_id: Optional[str] = None
    channel_title: Optional[str] = None


class VideoDetail(BaseModel):
    video: Video
    shorts: List[Short] = Field(default_factory=list)


__all__ = [
    "Short",
    "ShortSuggestion",
    "Video",
    "VideoDetail",
    "VideoStatus",
    "YouTubeConnection",
]
