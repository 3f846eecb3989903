"""Supabase-backed persistence for videos, clip suggestions and YouTube connections."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from postgrest import APIError
from supabase import Client, create_client

from .errors import ConfigurationError, StoreError
from .models import Short, Video
from .settings import SupabaseSettings

logger = logging.getLogger(__name__)

VIDEOS_TABLE = "videos"
SHORTS_TABLE = "shorts"
CONNECTIONS_TABLE = "youtube_connections"


@dataclass(frozen=True)
class AuthUser:
    id: str
    email: Optional[str] = None


class SupabaseStore:
    """Thin wrapper over the Supabase client used by the endpoints.

    ``client`` uses the service-role key and bypasses row-level security, so
    every video query is filtered by owner explicitly. ``auth_client`` uses
    the anon key and only verifies caller access tokens.
    """

    def __init__(self, client: Client, auth_client: Client, *, bucket: str = "videos") -> None:
        self.client = client
        self.auth_client = auth_client
        self.bucket = bucket

    @classmethod
    def from_settings(cls, settings: SupabaseSettings) -> "SupabaseStore":
        if not settings.url or not settings.service_role_key or not settings.anon_key:
            raise ConfigurationError(
                "SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY and SUPABASE_ANON_KEY must be set"
            )
        return cls(
            create_client(settings.url, settings.service_role_key),
            create_client(settings.url, settings.anon_key),
            bucket=settings.storage_bucket,
        )

    # ------------------------------------------------------------------
    def get_user(self, access_token: str) -> AuthUser | None:
        """Return the user owning ``access_token`` or ``None`` if it is invalid."""

        try:
            response = self.auth_client.auth.get_user(access_token)
        except Exception as exc:  # auth client raises version-specific error types
            logger.info("Access token rejected: %s", exc)
            return None
        user = getattr(response, "user", None)
        if user is None or not getattr(user, "id", None):
            return None
        return AuthUser(id=str(user.id), email=getattr(user, "email", None))

    # ------------------------------------------------------------------
    def create_video(self, record: Dict[str, Any]) -> Video:
        rows = self._execute(
            self.client.table(VIDEOS_TABLE).insert(record), "Failed to create video"
        )
        if not rows:
            raise StoreError("Failed to create video")
        return Video.model_validate(rows[0])

    def list_videos(self, user_id: str) -> List[Video]:
        rows = self._execute(
            self.client.table(VIDEOS_TABLE)
            .select("*")
            .eq("user_id", user_id)
            .order("created_at", desc=True),
            "Failed to load videos",
        )
        return [Video.model_validate(row) for row in rows]

    def get_video(self, video_id: str, user_id: str) -> Video | None:
        rows = self._execute(
            self.client.table(VIDEOS_TABLE)
            .select("*")
            .eq("id", video_id)
            .eq("user_id", user_id)
            .limit(1),
            "Failed to load video",
        )
        return Video.model_validate(rows[0]) if rows else None

    def update_video(self, video_id: str, fields: Dict[str, Any]) -> None:
        self._execute(
            self.client.table(VIDEOS_TABLE).update(fields).eq("id", video_id),
            "Failed to update video",
        )

    # ------------------------------------------------------------------
    def replace_shorts(self, video_id: str, rows: List[Dict[str, Any]]) -> None:
        self._execute(
            self.client.table(SHORTS_TABLE).delete().eq("video_id", video_id),
            "Failed to save shorts",
        )
        if rows:
            self._execute(self.client.table(SHORTS_TABLE).insert(rows), "Failed to save shorts")

    def list_shorts(self, video_id: str) -> List[Short]:
        rows = self._execute(
            self.client.table(SHORTS_TABLE)
            .select("*")
            .eq("video_id", video_id)
            .order("short_number"),
            "Failed to load shorts",
        )
        return [Short.model_validate(row) for row in rows]

    # ------------------------------------------------------------------
    def get_connection(self, user_id: str) -> Dict[str, Any] | None:
        rows = self._execute(
            self.client.table(CONNECTIONS_TABLE).select("*").eq("user_id", user_id).limit(1),
            "Failed to load YouTube connection",
        )
        return rows[0] if rows else None

    def upsert_connection(self, record: Dict[str, Any]) -> None:
        self._execute(
            self.client.table(CONNECTIONS_TABLE).upsert(record, on_conflict="user_id"),
            "Failed to save YouTube connection",
        )

    def update_connection(self, user_id: str, fields: Dict[str, Any]) -> None:
        self._execute(
            self.client.table(CONNECTIONS_TABLE).update(fields).eq("user_id", user_id),
            "Failed to save YouTube connection",
        )

    # ------------------------------------------------------------------
    def upload_file(self, path: str, content: bytes, content_type: str) -> str:
        """Store ``content`` at ``path`` in the bucket and return its public URL."""

        bucket = self.client.storage.from_(self.bucket)
        try:
            bucket.upload(path, content, {"content-type": content_type})
        except Exception as exc:  # storage client raises version-specific error types
            logger.error("Storage upload failed for %s: %s", path, exc)
            raise StoreError("Failed to store uploaded file") from exc
        return bucket.get_public_url(path)

    # ------------------------------------------------------------------
    @staticmethod
    def _execute(query: Any, message: str) -> List[Dict[str, Any]]:
        try:
            response = query.execute()
        except APIError as exc:
            logger.error("%s: %s", message, exc)
            raise StoreError(message) from exc
        data = getattr(response, "data", None)
        return list(data) if isinstance(data, list) else []


__all__ = ["AuthUser", "SupabaseStore"]
