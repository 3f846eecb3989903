"""Per-user YouTube connections persisted in the ``youtube_connections`` table.

Access and refresh tokens are encrypted with Fernet before they are stored.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict

from ..common.token_cipher import TokenCipher
from ..errors import YouTubeError
from ..models import YouTubeConnection
from ..settings import GoogleSettings
from ..store import SupabaseStore
from .oauth import expires_at_from, is_expired, refresh_access_token

logger = logging.getLogger(__name__)


class YouTubeConnections:
    def __init__(self, store: SupabaseStore, cipher: TokenCipher, google: GoogleSettings) -> None:
        self.store = store
        self.cipher = cipher
        self.google = google

    # ------------------------------------------------------------------
    def save(
        self,
        user_id: str,
        tokens: Dict[str, Any],
        channel: Dict[str, Any] | None,
        *,
        now: datetime | None = None,
    ) -> None:
        """Upsert the connection for ``user_id`` from a token response."""

        record: Dict[str, Any] = {
            "user_id": user_id,
            "access_token": self.cipher.encrypt(tokens["access_token"]),
            "token_expires_at": expires_at_from(tokens.get("expires_in"), now),
            "channel_id": (channel or {}).get("id"),
            "channel_title": (channel or {}).get("title"),
        }
        # Google omits the refresh token on repeat consent; keep the stored one.
        if tokens.get("refresh_token"):
            record["refresh_token"] = self.cipher.encrypt(tokens["refresh_token"])
        self.store.upsert_connection(record)

    # ------------------------------------------------------------------
    def load(self, user_id: str) -> YouTubeConnection | None:
        row = self.store.get_connection(user_id)
        if not row:
            return None
        try:
            access_token = self.cipher.decrypt(row["access_token"])
            refresh_token = (
                self.cipher.decrypt(row["refresh_token"]) if row.get("refresh_token") else None
            )
        except (KeyError, ValueError) as exc:
            logger.error("Stored YouTube tokens for %s are unreadable: %s", user_id, exc)
            raise YouTubeError("Stored YouTube credentials are invalid. Reconnect YouTube.") from exc
        return YouTubeConnection(
            user_id=user_id,
            access_token=access_token,
            refresh_token=refresh_token,
            token_expires_at=row.get("token_expires_at"),
            channel_id=row.get("channel_id"),
            channel_title=row.get("channel_title"),
        )

    # ------------------------------------------------------------------
    def status(self, user_id: str) -> Dict[str, Any]:
        row = self.store.get_connection(user_id)
        if not row:
            return {"connected": False, "channel": None}
        return {
            "connected": True,
            "channel": {
                "channel_id": row.get("channel_id"),
                "channel_title": row.get("channel_title"),
                "token_expires_at": row.get("token_expires_at"),
            },
        }

    # ------------------------------------------------------------------
    def access_token(self, user_id: str, *, now: datetime | None = None) -> str:
        """Return a usable access token, refreshing and persisting it if expired."""

        conn = self.load(user_id)
        if conn is None:
            raise YouTubeError("YouTube not connected")
        if not is_expired(conn.token_expires_at, now):
            return conn.access_token
        if not conn.refresh_token:
            raise YouTubeError("Failed to refresh YouTube token")

        logger.info("Refreshing YouTube access token for %s", user_id)
        refreshed = refresh_access_token(self.google, conn.refresh_token)
        fields: Dict[str, Any] = {
            "access_token": self.cipher.encrypt(refreshed["access_token"]),
            "token_expires_at": expires_at_from(refreshed.get("expires_in"), now),
        }
        if refreshed.get("refresh_token"):
            fields["refresh_token"] = self.cipher.encrypt(refreshed["refresh_token"])
        self.store.update_connection(user_id, fields)
        return refreshed["access_token"]


__all__ = ["YouTubeConnections"]
