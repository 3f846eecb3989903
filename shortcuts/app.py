"""FastAPI application exposing video analysis and YouTube publishing."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Dict, List, Optional

from fastapi import (
    Body,
    Depends,
    FastAPI,
    File,
    Query,
    Request,
    UploadFile,
    status,
)
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse
from pydantic import BaseModel, ConfigDict, Field

from .analysis.pipeline import analyze_video
from .auth import authenticate
from .common.token_cipher import TokenCipher
from .config import OAUTH_STATE_TTL_SECONDS
from .errors import BadRequestError, NotFoundError, ShortCutsError, YouTubeError
from .export import format_shorts
from .models import Short, Video, VideoDetail, VideoStatus
from .settings import Settings, load_settings
from .store import AuthUser, SupabaseStore
from .videos import submit_upload, submit_url
from .youtube.connections import YouTubeConnections
from .youtube.oauth import build_auth_url, exchange_code, fetch_channel, redirect_uri_for
from .youtube.upload import publish_short

logger = logging.getLogger(__name__)


# --- Dependencies ---------------------------------------------------------------

@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()


@lru_cache(maxsize=1)
def _default_store() -> SupabaseStore:
    return SupabaseStore.from_settings(get_settings().supabase)


def get_store() -> SupabaseStore:
    return _default_store()


def current_user(request: Request, store: SupabaseStore = Depends(get_store)) -> AuthUser:
    return authenticate(request, store)


# --- Request models -------------------------------------------------------------

class AnalyzeRequest(BaseModel):
    """Payload for analyzing an existing video row."""

    model_config = ConfigDict(populate_by_name=True)

    video_id: Optional[str] = Field(default=None, alias="videoId")
    youtube_video_id: Optional[str] = Field(default=None, alias="youtubeVideoId")


class YouTubeUploadRequest(BaseModel):
    """Payload for publishing a stored video to YouTube."""

    model_config = ConfigDict(populate_by_name=True)

    video_id: Optional[str] = Field(default=None, alias="videoId")
    short_title: Optional[str] = Field(default=None, alias="shortTitle")
    short_description: Optional[str] = Field(default=None, alias="shortDescription")


class SubmitVideoRequest(BaseModel):
    """Payload for submitting a YouTube URL."""

    url: str = ""
    analyze: bool = True


# --- Application ----------------------------------------------------------------

app = FastAPI(title="ShortCuts API")

_cors = load_settings().cors
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors.allow_origins,
    allow_methods=_cors.allow_methods,
    allow_headers=_cors.allow_headers,
)


@app.exception_handler(ShortCutsError)
async def _handle_shortcuts_error(request: Request, exc: ShortCutsError) -> JSONResponse:
    logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse({"error": exc.message}, status_code=exc.status_code)


@app.exception_handler(Exception)
async def _handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("%s %s failed", request.method, request.url.path)
    return JSONResponse(
        {"error": str(exc) or "Unknown error"},
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


# --- Analysis -------------------------------------------------------------------

@app.post("/api/analyze-video")
def analyze_video_endpoint(
    payload: Optional[AnalyzeRequest] = Body(default=None),
    user: AuthUser = Depends(current_user),
    store: SupabaseStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> Dict[str, Any]:
    """Fetch a transcript, ask the model for clip ideas and persist them."""

    body = payload or AnalyzeRequest()
    result = analyze_video(store, user, body.video_id, body.youtube_video_id, settings.ai)
    return {
        "success": True,
        "videoId": result.video_id,
        "usedTranscript": result.used_transcript,
        "shortsCount": len(result.shorts),
    }


# --- Video submissions ----------------------------------------------------------

@app.post("/api/videos", status_code=status.HTTP_201_CREATED, response_model=VideoDetail)
def submit_video(
    payload: SubmitVideoRequest,
    user: AuthUser = Depends(current_user),
    store: SupabaseStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> VideoDetail:
    """Create a video from a YouTube URL and optionally analyze it right away."""

    initial = VideoStatus.PROCESSING if payload.analyze else VideoStatus.PENDING
    video = submit_url(store, user, payload.url, status=initial)
    if payload.analyze:
        analyze_video(store, user, video.id, video.youtube_video_id, settings.ai)
    return _video_detail(store, user, video.id)


@app.post("/api/videos/upload", status_code=status.HTTP_201_CREATED, response_model=Video)
def upload_video_file(
    file: UploadFile = File(...),
    user: AuthUser = Depends(current_user),
    store: SupabaseStore = Depends(get_store),
) -> Video:
    """Store an uploaded video file; analyze it later via ``/api/analyze-video``."""

    content = file.file.read()
    return submit_upload(store, user, file.filename or "video.mp4", content, file.content_type)


@app.get("/api/videos", response_model=List[Video])
def list_videos(
    user: AuthUser = Depends(current_user),
    store: SupabaseStore = Depends(get_store),
) -> List[Video]:
    return store.list_videos(user.id)


@app.get("/api/videos/{video_id}", response_model=VideoDetail)
def get_video(
    video_id: str,
    user: AuthUser = Depends(current_user),
    store: SupabaseStore = Depends(get_store),
) -> VideoDetail:
    return _video_detail(store, user, video_id)


@app.get("/api/videos/{video_id}/export", response_class=PlainTextResponse)
def export_video_shorts(
    video_id: str,
    user: AuthUser = Depends(current_user),
    store: SupabaseStore = Depends(get_store),
) -> str:
    """Return every clip suggestion as copyable plain text."""

    detail = _video_detail(store, user, video_id)
    return format_shorts(detail.shorts)


def _video_detail(store: SupabaseStore, user: AuthUser, video_id: str) -> VideoDetail:
    video = store.get_video(video_id, user.id)
    if video is None:
        raise NotFoundError("Video not found")
    shorts: List[Short] = store.list_shorts(video_id)
    return VideoDetail(video=video, shorts=shorts)


# --- YouTube --------------------------------------------------------------------

@app.api_route("/api/youtube-upload", methods=["GET", "POST"])
def youtube_upload(
    request: Request,
    action: Optional[str] = Query(default=None),
    code: Optional[str] = Query(default=None),
    state: Optional[str] = Query(default=None),
    payload: Optional[YouTubeUploadRequest] = Body(default=None),
    store: SupabaseStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    """OAuth connection, connection status and publishing, selected by ``action``."""

    cipher = TokenCipher(settings.token_key)
    connections = YouTubeConnections(store, cipher, settings.google)
    redirect_uri = redirect_uri_for(settings.public_base_url)

    # Google redirects the browser here without a bearer token.
    if action == "callback":
        if not code or not state:
            raise BadRequestError("Missing code or state")
        try:
            user_id = cipher.read_state(state, ttl=OAUTH_STATE_TTL_SECONDS)
        except ValueError as exc:
            raise YouTubeError("Invalid or expired OAuth state", status_code=400) from exc
        tokens = exchange_code(settings.google, code, redirect_uri)
        channel = fetch_channel(tokens["access_token"])
        connections.save(user_id, tokens, channel)
        logger.info("Connected YouTube channel %s for %s", (channel or {}).get("id"), user_id)
        return RedirectResponse(
            f"{settings.app_url}/dashboard?yt=connected",
            status_code=status.HTTP_303_SEE_OTHER,
        )

    user = authenticate(request, store)

    if action == "auth-url":
        auth_url = build_auth_url(settings.google, redirect_uri, cipher.sign_state(user.id))
        return {"authUrl": auth_url}

    if action == "status":
        return connections.status(user.id)

    if action == "upload":
        body = payload or YouTubeUploadRequest()
        return publish_short(
            store,
            connections,
            user,
            body.video_id,
            body.short_title,
            body.short_description,
        )

    raise BadRequestError("Invalid action")


def register_legacy_routes(application: FastAPI) -> None:
    """Expose the endpoints under the managed-functions paths used by older clients."""

    application.add_api_route(
        "/functions/v1/analyze-video",
        analyze_video_endpoint,
        methods=["POST"],
        include_in_schema=False,
    )
    application.add_api_route(
        "/functions/v1/youtube-upload",
        youtube_upload,
        methods=["GET", "POST"],
        include_in_schema=False,
    )


register_legacy_routes(app)
