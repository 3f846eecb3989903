"""Resumable upload of a stored video file to the connected YouTube channel."""

from __future__ import annotations

import logging
import mimetypes
import tempfile
from pathlib import Path
from typing import Any, Dict

import requests
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaFileUpload
from requests import RequestException

from ..config import (
    CHUNKSIZE,
    DEFAULT_SHORT_DESCRIPTION,
    DEFAULT_SHORT_TITLE,
    VIDEO_DOWNLOAD_TIMEOUT,
    YOUTUBE_CATEGORY_ID,
    YOUTUBE_DESC_LIMIT,
    YOUTUBE_PRIVACY,
    YOUTUBE_TITLE_LIMIT,
)
from ..errors import BadRequestError, NotFoundError, YouTubeError
from ..helpers.formatting import truncate
from ..helpers.logging import log_timing
from ..helpers.youtube_urls import shorts_url
from ..models import Video
from ..store import AuthUser, SupabaseStore
from .connections import YouTubeConnections
from .oauth import build_service

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "video/mp4"


def build_metadata(
    video: Video,
    short_title: str | None = None,
    short_description: str | None = None,
) -> Dict[str, Any]:
    title = (short_title or "").strip() or (video.title or "").strip() or DEFAULT_SHORT_TITLE
    description = (short_description or "").strip() or DEFAULT_SHORT_DESCRIPTION
    return {
        "snippet": {
            "title": truncate(title, YOUTUBE_TITLE_LIMIT),
            "description": truncate(description, YOUTUBE_DESC_LIMIT),
            "categoryId": YOUTUBE_CATEGORY_ID,
        },
        "status": {
            "privacyStatus": YOUTUBE_PRIVACY,
            "selfDeclaredMadeForKids": False,
        },
    }


def download_video_file(url: str, dest: Path) -> str:
    """Stream ``url`` into ``dest`` and return the file's content type."""

    try:
        with requests.get(url, stream=True, timeout=VIDEO_DOWNLOAD_TIMEOUT) as resp:
            if not resp.ok:
                logger.error("Video file download returned %s for %s", resp.status_code, url)
                raise YouTubeError("Failed to fetch video file")
            content_type = (resp.headers.get("Content-Type") or "").split(";")[0].strip()
            with dest.open("wb") as fh:
                for chunk in resp.iter_content(chunk_size=1024 * 1024):
                    if chunk:
                        fh.write(chunk)
    except RequestException as exc:
        logger.error("Video file download failed for %s: %s", url, exc)
        raise YouTubeError("Failed to fetch video file") from exc

    if not content_type.startswith("video/"):
        content_type = mimetypes.guess_type(dest.name)[0] or DEFAULT_CONTENT_TYPE
    return content_type


def upload_video(
    path: Path,
    metadata: Dict[str, Any],
    access_token: str,
    content_type: str = DEFAULT_CONTENT_TYPE,
) -> Dict[str, Any]:
    """Insert ``path`` as a new video using a chunked resumable session."""

    media = MediaFileUpload(
        filename=str(path),
        mimetype=content_type,
        chunksize=CHUNKSIZE,
        resumable=True,
    )
    request = build_service(access_token).videos().insert(
        part="snippet,status",
        body=metadata,
        media_body=media,
    )

    response = None
    try:
        while response is None:
            status, response = request.next_chunk()
            if status:
                logger.info("Upload progress: %d%%", int(status.progress() * 100))
    except HttpError as exc:
        logger.error("YouTube upload error: %s", exc)
        raise YouTubeError("YouTube upload failed") from exc
    return response


def publish_short(
    store: SupabaseStore,
    connections: YouTubeConnections,
    user: AuthUser,
    video_id: str | None,
    short_title: str | None = None,
    short_description: str | None = None,
) -> Dict[str, Any]:
    """Upload the stored file of ``video_id`` to the caller's channel as a private Short."""

    if not video_id:
        raise BadRequestError("Missing videoId")

    access_token = connections.access_token(user.id)

    video = store.get_video(video_id, user.id)
    if video is None or not video.file_url:
        raise NotFoundError("No video file found")

    metadata = build_metadata(video, short_title, short_description)
    with tempfile.TemporaryDirectory(prefix="shortcuts-") as tmp:
        suffix = Path(video.file_url.split("?")[0]).suffix or ".mp4"
        local_path = Path(tmp) / f"{video.id}{suffix}"
        with log_timing(f"Downloading video file for {video.id}"):
            content_type = download_video_file(video.file_url, local_path)
        with log_timing(f"Uploading {video.id} to YouTube", notify=True):
            response = upload_video(local_path, metadata, access_token, content_type)

    youtube_id = response.get("id")
    if not youtube_id:
        raise YouTubeError("YouTube upload failed")
    return {
        "success": True,
        "youtubeVideoId": youtube_id,
        "youtubeUrl": shorts_url(youtube_id),
    }


__all__ = ["build_metadata", "download_video_file", "publish_short", "upload_video"]
