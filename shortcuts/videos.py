"""Video submissions by URL or by file upload."""

from __future__ import annotations

import logging
import re
import uuid
from pathlib import PurePosixPath
from urllib.parse import unquote, urlparse

from .errors import BadRequestError
from .helpers.youtube_urls import extract_video_id, thumbnail_url
from .models import Video, VideoStatus
from .store import AuthUser, SupabaseStore

logger = logging.getLogger(__name__)

ALLOWED_UPLOAD_TYPES = ("video/",)
_UNSAFE_NAME_RE = re.compile(r"[^A-Za-z0-9._-]+")
_STORAGE_PREFIX_RE = re.compile(r"^[0-9a-f]{32}-")


def sanitize_filename(name: str) -> str:
    """Return a storage-safe version of ``name``."""
    base = PurePosixPath(name.replace("\\", "/")).name
    cleaned = _UNSAFE_NAME_RE.sub("_", base).strip("._")
    return cleaned or "video.mp4"


def display_title(name: str) -> str:
    """Title for an uploaded file: its own stem, whitespace collapsed."""
    stem = PurePosixPath(name.replace("\\", "/")).stem
    return " ".join(stem.split())


def stored_file_name(file_url: str | None) -> str | None:
    """Name of an uploaded file from its storage URL, without the upload prefix."""
    if not file_url:
        return None
    name = PurePosixPath(unquote(urlparse(file_url).path)).name
    return _STORAGE_PREFIX_RE.sub("", name) or None


def submit_url(
    store: SupabaseStore, user: AuthUser, url: str, *, status: VideoStatus = VideoStatus.PENDING
) -> Video:
    """Create a video row for a YouTube URL."""

    url = (url or "").strip()
    video_id = extract_video_id(url)
    if not video_id:
        raise BadRequestError("Please enter a valid YouTube URL.")
    video = store.create_video(
        {
            "user_id": user.id,
            "youtube_url": url,
            "youtube_video_id": video_id,
            "thumbnail_url": thumbnail_url(video_id),
            "status": status.value,
        }
    )
    logger.info("Created video %s for %s", video.id, video_id)
    return video


def submit_upload(
    store: SupabaseStore,
    user: AuthUser,
    filename: str,
    content: bytes,
    content_type: str | None,
) -> Video:
    """Store an uploaded file and create a video row pointing at it."""

    content_type = (content_type or "").strip() or "application/octet-stream"
    if not content_type.startswith(ALLOWED_UPLOAD_TYPES):
        raise BadRequestError("Uploaded file must be a video.")
    if not content:
        raise BadRequestError("Uploaded file is empty.")

    safe_name = sanitize_filename(filename)
    path = f"{user.id}/{uuid.uuid4().hex}-{safe_name}"
    file_url = store.upload_file(path, content, content_type)
    video = store.create_video(
        {
            "user_id": user.id,
            "file_url": file_url,
            "title": display_title(filename) or PurePosixPath(safe_name).stem,
            "status": VideoStatus.PENDING.value,
        }
    )
    logger.info("Stored upload %s as video %s", path, video.id)
    return video


__all__ = [
    "display_title",
    "sanitize_filename",
    "stored_file_name",
    "submit_upload",
    "submit_url",
]
