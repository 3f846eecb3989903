"""Shared fixtures: an in-memory stand-in for the Supabase store and test settings."""

from __future__ import annotations

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, List

import pytest
from cryptography.fernet import Fernet

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from shortcuts.errors import StoreError
from shortcuts.models import Short, Video
from shortcuts.settings import (
    AiSettings,
    CorsSettings,
    GoogleSettings,
    Settings,
    SupabaseSettings,
)
from shortcuts.store import AuthUser

ALICE_TOKEN = "token-alice"
BOB_TOKEN = "token-bob"


class FakeStore:
    """Dict-backed replacement for :class:`shortcuts.store.SupabaseStore`."""

    def __init__(self) -> None:
        self.users = {
            ALICE_TOKEN: AuthUser(id="user-alice", email="alice@example.com"),
            BOB_TOKEN: AuthUser(id="user-bob", email="bob@example.com"),
        }
        self.videos: Dict[str, Dict[str, Any]] = {}
        self.shorts: Dict[str, List[Dict[str, Any]]] = {}
        self.connections: Dict[str, Dict[str, Any]] = {}
        self.files: Dict[str, bytes] = {}
        self.status_history: Dict[str, List[str]] = {}
        self.fail_shorts = False
        self._clock = datetime(2024, 5, 1, tzinfo=timezone.utc)

    # -- helpers used by tests -------------------------------------------
    def add_video(self, **fields: Any) -> Video:
        record = {"user_id": "user-alice", "status": "pending"}
        record.update(fields)
        return self.create_video(record)

    # -- store interface --------------------------------------------------
    def get_user(self, access_token: str) -> AuthUser | None:
        return self.users.get(access_token)

    def create_video(self, record: Dict[str, Any]) -> Video:
        video_id = record.get("id") or f"video-{len(self.videos) + 1}"
        self._clock += timedelta(minutes=1)
        row = {"id": video_id, "created_at": self._clock.isoformat(), **record}
        self.videos[video_id] = row
        self.status_history[video_id] = [row.get("status", "pending")]
        return Video.model_validate(row)

    def list_videos(self, user_id: str) -> List[Video]:
        rows = [row for row in self.videos.values() if row["user_id"] == user_id]
        rows.sort(key=lambda row: row["created_at"], reverse=True)
        return [Video.model_validate(row) for row in rows]

    def get_video(self, video_id: str, user_id: str) -> Video | None:
        row = self.videos.get(video_id)
        if row is None or row["user_id"] != user_id:
            return None
        return Video.model_validate(row)

    def update_video(self, video_id: str, fields: Dict[str, Any]) -> None:
        self.videos[video_id].update(fields)
        if "status" in fields:
            self.status_history[video_id].append(fields["status"])

    def replace_shorts(self, video_id: str, rows: List[Dict[str, Any]]) -> None:
        if self.fail_shorts:
            raise StoreError("Failed to save shorts")
        self.shorts[video_id] = [
            dict(row, id=f"{video_id}-short-{row['short_number']}") for row in rows
        ]

    def list_shorts(self, video_id: str) -> List[Short]:
        rows = sorted(self.shorts.get(video_id, []), key=lambda row: row["short_number"])
        return [Short.model_validate(row) for row in rows]

    def get_connection(self, user_id: str) -> Dict[str, Any] | None:
        row = self.connections.get(user_id)
        return dict(row) if row else None

    def upsert_connection(self, record: Dict[str, Any]) -> None:
        existing = self.connections.get(record["user_id"], {})
        existing.update(record)
        self.connections[record["user_id"]] = existing

    def update_connection(self, user_id: str, fields: Dict[str, Any]) -> None:
        self.connections[user_id].update(fields)

    def upload_file(self, path: str, content: bytes, content_type: str) -> str:
        self.files[path] = content
        return f"https://storage.example.com/videos/{path}"


@pytest.fixture
def fake_store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase=SupabaseSettings(
            url="https://project.supabase.co",
            service_role_key="service-key",
            anon_key="anon-key",
            storage_bucket="videos",
        ),
        ai=AiSettings(
            api_url="https://ai.example.com/v1/chat/completions",
            api_key="ai-key",
            model="test-model",
        ),
        google=GoogleSettings(client_id="client-id", client_secret="client-secret"),
        cors=CorsSettings(allow_origins=["*"], allow_methods=["*"], allow_headers=["*"]),
        public_base_url="https://api.example.com",
        app_url="https://app.example.com",
        token_key=Fernet.generate_key().decode(),
    )


@pytest.fixture
def client(fake_store: FakeStore, settings: Settings):
    from fastapi.testclient import TestClient

    from shortcuts.app import app, get_settings, get_store

    app.dependency_overrides[get_store] = lambda: fake_store
    app.dependency_overrides[get_settings] = lambda: settings
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def auth_headers(token: str = ALICE_TOKEN) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


class DummyResp:
    """Minimal stand-in for :class:`requests.Response`."""

    def __init__(
        self,
        status_code: int = 200,
        *,
        json_data: Any = None,
        text: str = "",
        headers: Dict[str, str] | None = None,
        chunks: List[bytes] | None = None,
    ) -> None:
        self.status_code = status_code
        self._json = json_data
        self.text = text
        self.headers = headers or {}
        self._chunks = chunks or []

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400

    def json(self) -> Any:
        if self._json is None:
            raise ValueError("No JSON body")
        return self._json

    def raise_for_status(self) -> None:
        if not self.ok:
            from requests import HTTPError

            raise HTTPError(f"HTTP {self.status_code}")

    def iter_content(self, chunk_size: int = 1):
        yield from self._chunks

    def __enter__(self) -> "DummyResp":
        return self

    def __exit__(self, *exc: Any) -> None:
        return None
