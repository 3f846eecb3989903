"""Video title lookup."""

from __future__ import annotations

import logging

import requests
import yt_dlp
from requests import RequestException
from yt_dlp.utils import DownloadError

from ..config import HTTP_TIMEOUT, NOEMBED_URL
from ..helpers.youtube_urls import watch_url

logger = logging.getLogger(__name__)


def fetch_noembed_title(video_id: str, *, timeout: int = HTTP_TIMEOUT) -> str:
    resp = requests.get(NOEMBED_URL, params={"url": watch_url(video_id)}, timeout=timeout)
    resp.raise_for_status()
    data = resp.json()
    if not isinstance(data, dict):
        return ""
    return str(data.get("title") or "").strip()


def fetch_ytdlp_title(video_id: str) -> str:
    ydl_opts = {
        "quiet": True,
        "extract_flat": True,
        "no_warnings": True,
        "skip_download": True,
    }
    with yt_dlp.YoutubeDL(ydl_opts) as ydl:
        info = ydl.extract_info(watch_url(video_id), download=False)
    if not info:
        return ""
    return str(info.get("title") or "").strip()


def fetch_video_title(video_id: str) -> str:
    """Return the video's title, or ``""`` when neither source knows it."""

    try:
        title = fetch_noembed_title(video_id)
    except (RequestException, ValueError) as exc:
        logger.warning("noembed lookup failed for %s: %s", video_id, exc)
        title = ""
    except Exception:
        logger.exception("Unexpected noembed failure for %s", video_id)
        title = ""
    if title:
        return title

    try:
        return fetch_ytdlp_title(video_id)
    except DownloadError as exc:
        logger.warning("yt-dlp metadata lookup failed for %s: %s", video_id, exc)
        return ""
    except Exception:
        logger.exception("Unexpected yt-dlp failure for %s", video_id)
        return ""


__all__ = ["fetch_noembed_title", "fetch_video_title", "fetch_ytdlp_title"]
