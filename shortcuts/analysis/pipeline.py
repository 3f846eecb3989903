"""End-to-end analysis of one submitted video."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List

from ..errors import BadRequestError, NotFoundError, ShortCutsError, StoreError
from ..helpers.logging import run_step
from ..models import ShortSuggestion, Video, VideoStatus
from ..settings import AiSettings
from ..store import AuthUser, SupabaseStore
from ..videos import stored_file_name
from .ai import request_shorts
from .metadata import fetch_video_title
from .prompts import build_prompt
from .transcript import fetch_transcript

logger = logging.getLogger(__name__)


@dataclass
class AnalysisResult:
    video_id: str
    title: str
    used_transcript: bool
    shorts: List[ShortSuggestion] = field(default_factory=list)


def _mark_failed(store: SupabaseStore, video_id: str, message: str) -> None:
    try:
        store.update_video(
            video_id, {"status": VideoStatus.FAILED.value, "error_message": message}
        )
    except StoreError:
        logger.exception("Could not record failure for video %s", video_id)


def _resolve_title(store: SupabaseStore, video: Video, youtube_id: str | None) -> str:
    if not youtube_id:
        return video.title or ""
    title = run_step("Looking up video title", fetch_video_title, youtube_id)
    if title and title != video.title:
        store.update_video(video.id, {"title": title})
    return title or video.title or ""


def analyze_video(
    store: SupabaseStore,
    user: AuthUser,
    video_id: str | None,
    youtube_video_id: str | None,
    ai_settings: AiSettings,
) -> AnalysisResult:
    """Derive clip suggestions for ``video_id`` and persist them.

    The video moves to ``processing`` and then to ``completed`` or
    ``failed``. Failures are written to the row before being re-raised.
    """

    if not video_id:
        raise BadRequestError("Missing videoId or youtubeVideoId")

    video = store.get_video(video_id, user.id)
    if video is None:
        raise NotFoundError("Video not found")

    youtube_id = youtube_video_id or video.youtube_video_id
    if not youtube_id and not video.file_url:
        raise BadRequestError("Missing videoId or youtubeVideoId")

    store.update_video(
        video_id, {"status": VideoStatus.PROCESSING.value, "error_message": None}
    )

    try:
        transcript = (
            run_step("Fetching transcript", fetch_transcript, youtube_id) if youtube_id else ""
        )
        title = _resolve_title(store, video, youtube_id)

        prompt = build_prompt(
            title=title,
            transcript=transcript,
            youtube_video_id=youtube_id,
            file_name=stored_file_name(video.file_url),
        )
        if prompt.uses_transcript:
            logger.info("Transcript found, running AI analysis for %s", video_id)
        else:
            logger.info("No transcript found, analyzing %s from title/metadata", video_id)

        shorts = run_step("Running AI analysis", request_shorts, prompt, ai_settings)
        rows = [short.to_row(video_id) for short in shorts]
        run_step("Saving shorts", store.replace_shorts, video_id, rows)

        store.update_video(
            video_id, {"status": VideoStatus.COMPLETED.value, "error_message": None}
        )
    except ShortCutsError as exc:
        _mark_failed(store, video_id, getattr(exc, "record_message", exc.message))
        raise
    except Exception as exc:
        logger.exception("analyze-video failed for %s", video_id)
        _mark_failed(store, video_id, str(exc) or "Unknown error")
        raise

    return AnalysisResult(
        video_id=video_id,
        title=title,
        used_transcript=prompt.uses_transcript,
        shorts=shorts,
    )


__all__ = ["AnalysisResult", "analyze_video"]
