from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List

from ..config import (
    AI_TOOL_NAME,
    MAX_SHORT_SECONDS,
    MAX_SHORTS,
    MIN_SHORT_SECONDS,
    SHORT_TITLE_MAX_CHARS,
    TRANSCRIPT_MAX_CHARS,
    TRANSCRIPT_MIN_CHARS,
)

_FIELD_LIST = (
    f"- short_number (1-{MAX_SHORTS})\n"
    f"- title: a catchy, platform-ready title (max {SHORT_TITLE_MAX_CHARS} chars)\n"
    "- hook_line: the opening line that would stop someone from scrolling (1 sentence)\n"
)

TRANSCRIPT_PROMPT = (
    "You are an expert short-form content strategist. Analyze the given video transcript "
    f"and identify the {MAX_SHORTS} best moments to turn into short-form videos "
    "(TikTok, YouTube Shorts, Reels).\n\n"
    "For each moment, return:\n"
    f"{_FIELD_LIST}"
    "- description: why this moment works as a short (2-3 sentences)\n"
    '- start_timestamp: format "M:SS"\n'
    '- end_timestamp: format "M:SS"\n'
    f"- duration_seconds: estimated duration in seconds ({MIN_SHORT_SECONDS}-{MAX_SHORT_SECONDS} range)\n\n"
    "Prioritize moments with: emotional peaks, surprising statements, actionable tips, "
    'humor, controversy, or "aha" moments.'
)

TITLE_ONLY_PROMPT = (
    "You are an expert short-form content strategist. Based on the video title provided, "
    f"suggest {MAX_SHORTS} creative short-form video ideas that could be extracted from this "
    "type of content (TikTok, YouTube Shorts, Reels).\n\n"
    "Since no transcript is available, use the title to infer the topic and suggest likely "
    "compelling moments/angles.\n\n"
    "For each moment, return:\n"
    f"{_FIELD_LIST}"
    "- description: why this angle works as a short (2-3 sentences)\n"
    '- start_timestamp: format "0:00" (estimated)\n'
    '- end_timestamp: format "0:30" (estimated)\n'
    f"- duration_seconds: estimated duration in seconds ({MIN_SHORT_SECONDS}-{MAX_SHORT_SECONDS} range)\n\n"
    "Be creative and focus on angles that tend to go viral."
)

SHORT_FIELDS = [
    "short_number",
    "title",
    "hook_line",
    "description",
    "start_timestamp",
    "end_timestamp",
    "duration_seconds",
]

SAVE_SHORTS_TOOL: Dict[str, Any] = {
    "type": "function",
    "function": {
        "name": AI_TOOL_NAME,
        "description": f"Save the {MAX_SHORTS} identified short-form video moments",
        "parameters": {
            "type": "object",
            "properties": {
                "shorts": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "short_number": {"type": "number"},
                            "title": {"type": "string"},
                            "hook_line": {"type": "string"},
                            "description": {"type": "string"},
                            "start_timestamp": {"type": "string"},
                            "end_timestamp": {"type": "string"},
                            "duration_seconds": {"type": "number"},
                        },
                        "required": SHORT_FIELDS,
                    },
                },
            },
            "required": ["shorts"],
        },
    },
}

TOOL_CHOICE: Dict[str, Any] = {"type": "function", "function": {"name": AI_TOOL_NAME}}


def has_usable_transcript(transcript: str | None) -> bool:
    return bool(transcript) and len(transcript) >= TRANSCRIPT_MIN_CHARS


@dataclass
class AnalysisPrompt:
    """System and user messages for one analysis request."""

    system: str
    user: str
    uses_transcript: bool

    def messages(self) -> List[Dict[str, str]]:
        return [
            {"role": "system", "content": self.system},
            {"role": "user", "content": self.user},
        ]


def build_prompt(
    *,
    title: str,
    transcript: str = "",
    youtube_video_id: str | None = None,
    file_name: str | None = None,
) -> AnalysisPrompt:
    """Choose transcript or title-only prompting based on the transcript length."""

    if has_usable_transcript(transcript):
        return AnalysisPrompt(
            system=TRANSCRIPT_PROMPT,
            user=(
                f'Here is the transcript of the video "{title}":\n\n'
                f"{transcript[:TRANSCRIPT_MAX_CHARS]}"
            ),
            uses_transcript=True,
        )

    if youtube_video_id:
        source = f"(YouTube ID: {youtube_video_id})"
    elif file_name:
        source = f"(uploaded file: {file_name})"
    else:
        source = "(source unknown)"
    return AnalysisPrompt(
        system=TITLE_ONLY_PROMPT,
        user=(
            f'Video title: "{title or "Unknown"}" {source}. '
            f"No transcript/captions available. Suggest {MAX_SHORTS} short-form video "
            "ideas based on the topic."
        ),
        uses_transcript=False,
    )


__all__ = [
    "AnalysisPrompt",
    "SAVE_SHORTS_TOOL",
    "SHORT_FIELDS",
    "TITLE_ONLY_PROMPT",
    "TOOL_CHOICE",
    "TRANSCRIPT_PROMPT",
    "build_prompt",
    "has_usable_transcript",
]
