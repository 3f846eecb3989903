"""OAuth2 authorization-code flow for the YouTube Data API."""

from __future__ import annotations

import logging
import re
import urllib.parse
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import requests
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from requests import RequestException

from ..config import (
    GOOGLE_AUTH_URL,
    GOOGLE_TOKEN_URL,
    HTTP_TIMEOUT,
    TOKEN_EXPIRY_LEEWAY_SECONDS,
    YOUTUBE_SCOPES,
)
from ..errors import ConfigurationError, YouTubeError
from ..settings import GoogleSettings

logger = logging.getLogger(__name__)

CALLBACK_PATH = "/api/youtube-upload?action=callback"
_FRACTION_RE = re.compile(r"\.(\d+)")


def redirect_uri_for(public_base_url: str) -> str:
    return f"{public_base_url.rstrip('/')}{CALLBACK_PATH}"


def build_auth_url(google: GoogleSettings, redirect_uri: str, state: str) -> str:
    """Return the consent-screen URL requesting offline access."""

    if not google.client_id:
        raise ConfigurationError("YouTube integration not configured")
    params = {
        "client_id": google.client_id,
        "redirect_uri": redirect_uri,
        "response_type": "code",
        "scope": " ".join(YOUTUBE_SCOPES),
        "access_type": "offline",
        "prompt": "consent",
        "state": state,
    }
    return f"{GOOGLE_AUTH_URL}?{urllib.parse.urlencode(params, quote_via=urllib.parse.quote)}"


def _post_token(data: Dict[str, str], failure: str) -> Dict[str, Any]:
    try:
        resp = requests.post(GOOGLE_TOKEN_URL, data=data, timeout=HTTP_TIMEOUT)
        payload = resp.json()
    except (RequestException, ValueError) as exc:
        logger.error("Token endpoint request failed: %s", exc)
        raise YouTubeError(failure) from exc
    if not isinstance(payload, dict) or not payload.get("access_token"):
        error = payload.get("error") if isinstance(payload, dict) else None
        logger.error("Token endpoint returned %s: %s", resp.status_code, error)
        raise YouTubeError(failure)
    return payload


def exchange_code(google: GoogleSettings, code: str, redirect_uri: str) -> Dict[str, Any]:
    """Trade an authorization ``code`` for access and refresh tokens."""

    if not google.client_id or not google.client_secret:
        raise ConfigurationError("YouTube integration not configured")
    return _post_token(
        {
            "code": code,
            "client_id": google.client_id,
            "client_secret": google.client_secret,
            "redirect_uri": redirect_uri,
            "grant_type": "authorization_code",
        },
        "Failed to get tokens",
    )


def refresh_access_token(google: GoogleSettings, refresh_token: str) -> Dict[str, Any]:
    if not google.client_id or not google.client_secret:
        raise ConfigurationError("YouTube integration not configured")
    return _post_token(
        {
            "client_id": google.client_id,
            "client_secret": google.client_secret,
            "refresh_token": refresh_token,
            "grant_type": "refresh_token",
        },
        "Failed to refresh YouTube token",
    )


def expires_at_from(expires_in: Any, now: datetime | None = None) -> str:
    """ISO timestamp ``expires_in`` seconds after ``now`` (default one hour)."""

    now = now or datetime.now(timezone.utc)
    try:
        seconds = int(expires_in)
    except (TypeError, ValueError):
        seconds = 3600
    return (now + timedelta(seconds=seconds)).isoformat()


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO timestamp as stored by Postgres.

    Fractional seconds are padded or cut to microseconds and a trailing ``Z``
    is accepted, neither of which ``fromisoformat`` handles before 3.11.
    """

    text = value.strip().replace("Z", "+00:00")
    text = _FRACTION_RE.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    return datetime.fromisoformat(text)


def is_expired(
    token_expires_at: str | None,
    now: datetime | None = None,
    *,
    leeway: int = TOKEN_EXPIRY_LEEWAY_SECONDS,
) -> bool:
    """Return True when the token expires within ``leeway`` seconds.

    A missing or unparseable expiry counts as not expired.
    """

    if not token_expires_at:
        return False
    try:
        expires = parse_timestamp(token_expires_at)
    except ValueError:
        return False
    if expires.tzinfo is None:
        expires = expires.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    return expires <= now + timedelta(seconds=leeway)


def build_service(access_token: str):
    """Return a YouTube Data API v3 client authorized with ``access_token``."""

    creds = Credentials(token=access_token)
    return build("youtube", "v3", credentials=creds, cache_discovery=False)


def fetch_channel(access_token: str) -> Dict[str, Any] | None:
    """Return ``{"id", "title"}`` for the authorized channel, if any."""

    try:
        response = build_service(access_token).channels().list(part="snippet", mine=True).execute()
    except HttpError as exc:
        logger.warning("Channel lookup failed: %s", exc)
        return None
    items = response.get("items") or []
    if not items:
        return None
    channel = items[0]
    return {"id": channel.get("id"), "title": (channel.get("snippet") or {}).get("title")}


__all__ = [
    "CALLBACK_PATH",
    "build_auth_url",
    "build_service",
    "exchange_code",
    "expires_at_from",
    "fetch_channel",
    "is_expired",
    "parse_timestamp",
    "redirect_uri_for",
    "refresh_access_token",
]
