from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Iterable, List

from dotenv import load_dotenv


@dataclass(frozen=True)
class SupabaseSettings:
    url: str
    service_role_key: str
    anon_key: str
    storage_bucket: str


@dataclass(frozen=True)
class AiSettings:
    api_url: str
    api_key: str
    model: str


@dataclass(frozen=True)
class GoogleSettings:
    client_id: str
    client_secret: str


@dataclass(frozen=True)
class CorsSettings:
    allow_origins: List[str]
    allow_methods: List[str]
    allow_headers: List[str]


@dataclass(frozen=True)
class Settings:
    supabase: SupabaseSettings
    ai: AiSettings
    google: GoogleSettings
    cors: CorsSettings
    public_base_url: str
    app_url: str
    token_key: str


def _parse_csv(name: str, default: Iterable[str]) -> List[str]:
    raw = os.environ.get(name)
    if raw is None:
        return list(default)
    values = [item.strip() for item in raw.split(",") if item.strip()]
    return values or list(default)


def _strip_slash(value: str) -> str:
    return value.rstrip("/")


def load_settings() -> Settings:
    load_dotenv()

    supabase = SupabaseSettings(
        url=_strip_slash(os.environ.get("SUPABASE_URL", "")),
        service_role_key=os.environ.get("SUPABASE_SERVICE_ROLE_KEY", ""),
        anon_key=os.environ.get("SUPABASE_ANON_KEY", ""),
        storage_bucket=os.environ.get("SUPABASE_STORAGE_BUCKET", "videos"),
    )

    ai = AiSettings(
        api_url=os.environ.get(
            "AI_GATEWAY_URL", "https://ai.gateway.lovable.dev/v1/chat/completions"
        ),
        api_key=os.environ.get("LOVABLE_API_KEY", ""),
        model=os.environ.get("AI_MODEL", "google/gemini-3-flash-preview"),
    )

    google = GoogleSettings(
        client_id=os.environ.get("GOOGLE_CLIENT_ID", ""),
        client_secret=os.environ.get("GOOGLE_CLIENT_SECRET", ""),
    )

    cors = CorsSettings(
        allow_origins=_parse_csv("API_CORS_ALLOW_ORIGINS", ["*"]),
        allow_methods=_parse_csv("API_CORS_ALLOW_METHODS", ["GET", "POST", "OPTIONS"]),
        allow_headers=_parse_csv(
            "API_CORS_ALLOW_HEADERS",
            ["authorization", "x-client-info", "apikey", "content-type"],
        ),
    )

    public_base_url = _strip_slash(
        os.environ.get("PUBLIC_BASE_URL") or supabase.url or "http://localhost:8000"
    )

    return Settings(
        supabase=supabase,
        ai=ai,
        google=google,
        cors=cors,
        public_base_url=public_base_url,
        app_url=_strip_slash(os.environ.get("APP_URL", "http://localhost:5173")),
        token_key=os.environ.get("TOKEN_FERNET_KEY", ""),
    )


__all__ = [
    "AiSettings",
    "CorsSettings",
    "GoogleSettings",
    "Settings",
    "SupabaseSettings",
    "load_settings",
]
