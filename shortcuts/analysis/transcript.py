"""Transcript acquisition for YouTube videos.

The watch page embeds the player's caption track list. The first matching
track is downloaded as timed-text XML and rendered one line per cue as
``[M:SS] text``. When the page exposes no usable track the same video is
tried through ``youtube-transcript-api``. Failures never propagate: an
empty string means "no transcript".
"""

from __future__ import annotations

import html
import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Sequence

import requests
from requests import RequestException
from youtube_transcript_api import YouTubeTranscriptApi
from youtube_transcript_api._errors import CouldNotRetrieveTranscript

from ..config import (
    HTTP_TIMEOUT,
    SCRAPE_USER_AGENT,
    TRANSCRIPT_LANGUAGES,
    USE_TRANSCRIPT_API_FALLBACK,
)
from ..helpers.formatting import format_timestamp
from ..helpers.youtube_urls import watch_url

logger = logging.getLogger(__name__)

CAPTIONS_RE = re.compile(
    r'"captions":\s*(\{.*?"playerCaptionsTracklistRenderer".*?\})\s*,\s*"videoDetails"',
    re.DOTALL,
)
CAPTION_TEXT_RE = re.compile(
    r'<text start="([^"]*)" dur="([^"]*)"[^>]*>(.*?)</text>', re.DOTALL
)
_TAG_RE = re.compile(r"<[^>]*>")
_WS_RE = re.compile(r"\s+")


@dataclass
class TranscriptLine:
    start: float
    text: str

    def render(self) -> str:
        return f"[{format_timestamp(self.start)}] {self.text}"


def _clean_text(raw: str) -> str:
    # Timed text is often double-escaped (``&amp;#39;``).
    text = html.unescape(html.unescape(raw))
    text = _TAG_RE.sub("", text)
    return _WS_RE.sub(" ", text).strip()


def extract_caption_tracks(page_html: str) -> List[dict]:
    """Return the caption track descriptors embedded in a watch page."""

    match = CAPTIONS_RE.search(page_html)
    if not match:
        return []
    try:
        captions = json.loads(match.group(1))
    except ValueError:
        logger.debug("Caption blob on watch page is not valid JSON")
        return []
    renderer = captions.get("playerCaptionsTracklistRenderer") if isinstance(captions, dict) else None
    tracks = renderer.get("captionTracks") if isinstance(renderer, dict) else None
    if not isinstance(tracks, list):
        return []
    return [track for track in tracks if isinstance(track, dict) and track.get("baseUrl")]


def choose_track(tracks: Sequence[dict], languages: Iterable[str]) -> Optional[dict]:
    """Prefer the first track in ``languages`` order, else the first track."""

    if not tracks:
        return None
    for lang in languages:
        lang = lang.lower()
        for track in tracks:
            code = str(track.get("languageCode") or "").lower()
            if code == lang:
                return track
    for lang in languages:
        prefix = lang.lower().split("-")[0]
        for track in tracks:
            code = str(track.get("languageCode") or "").lower()
            if code.split("-")[0] == prefix:
                return track
    return tracks[0]


def parse_caption_xml(xml: str) -> List[TranscriptLine]:
    """Parse ``<text start=".." dur="..">`` cues from timed-text XML."""

    lines: List[TranscriptLine] = []
    for start_raw, _dur, body in CAPTION_TEXT_RE.findall(xml):
        try:
            start = float(start_raw)
        except ValueError:
            continue
        text = _clean_text(body)
        if not text:
            continue
        lines.append(TranscriptLine(start=start, text=text))
    return lines


def render_transcript(lines: Iterable[TranscriptLine]) -> str:
    return "\n".join(line.render() for line in lines)


def scrape_transcript(
    video_id: str,
    *,
    languages: Sequence[str] = TRANSCRIPT_LANGUAGES,
    timeout: int = HTTP_TIMEOUT,
) -> str:
    """Fetch the caption track advertised on the watch page.

    Network errors propagate; callers decide whether they are fatal.
    """

    resp = requests.get(
        watch_url(video_id),
        headers={"User-Agent": SCRAPE_USER_AGENT, "Accept-Language": "en-US,en;q=0.8"},
        timeout=timeout,
    )
    resp.raise_for_status()

    track = choose_track(extract_caption_tracks(resp.text), languages)
    if track is None:
        logger.info("No caption tracks on watch page for %s", video_id)
        return ""

    caption_resp = requests.get(track["baseUrl"], timeout=timeout)
    caption_resp.raise_for_status()
    return render_transcript(parse_caption_xml(caption_resp.text))


def _snippet_fields(snippet: Any) -> tuple[float, str]:
    # ``fetch`` yields snippet objects; older releases returned dicts.
    try:
        return float(snippet.start or 0.0), snippet.text or ""
    except AttributeError:
        return float(snippet.get("start", 0.0) or 0.0), snippet.get("text", "") or ""


def fetch_transcript_api(
    video_id: str, *, languages: Sequence[str] = TRANSCRIPT_LANGUAGES
) -> str:
    """Fetch captions through ``youtube-transcript-api``."""

    api = YouTubeTranscriptApi()
    fetched = api.fetch(video_id, languages=list(languages))
    lines: List[TranscriptLine] = []
    for snippet in fetched:
        start, raw = _snippet_fields(snippet)
        text = _clean_text(raw)
        if text:
            lines.append(TranscriptLine(start=start, text=text))
    return render_transcript(lines)


def fetch_transcript(
    video_id: str, *, languages: Sequence[str] = TRANSCRIPT_LANGUAGES
) -> str:
    """Return the rendered transcript for ``video_id`` or ``""`` when unavailable."""

    logger.info("Fetching transcript for: %s", video_id)
    transcript = ""
    try:
        transcript = scrape_transcript(video_id, languages=languages)
    except (RequestException, ValueError) as exc:
        logger.error("Transcript fetch error for %s: %s", video_id, exc)
    except Exception:
        logger.exception("Unexpected transcript scrape failure for %s", video_id)

    if transcript or not USE_TRANSCRIPT_API_FALLBACK:
        return transcript

    try:
        transcript = fetch_transcript_api(video_id, languages=languages)
    except CouldNotRetrieveTranscript as exc:
        logger.info("Transcript API has no captions for %s: %s", video_id, exc.__class__.__name__)
    except (RequestException, ValueError) as exc:
        logger.error("Transcript API error for %s: %s", video_id, exc)
    except Exception:
        logger.exception("Unexpected transcript API failure for %s", video_id)
    return transcript


__all__ = [
    "TranscriptLine",
    "choose_track",
    "extract_caption_tracks",
    "fetch_transcript",
    "fetch_transcript_api",
    "parse_caption_xml",
    "render_transcript",
    "scrape_transcript",
]
