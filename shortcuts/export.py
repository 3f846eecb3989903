"""Plain-text rendering of clip suggestions for copying into notes or posts."""

from __future__ import annotations

from typing import Iterable

from .models import Short

SEPARATOR = "\n\n---\n\n"


def format_short(short: Short) -> str:
    return (
        f"#{short.short_number} — {short.title}\n"
        f"Timestamp: {short.start_timestamp} – {short.end_timestamp}\n"
        f"Hook: {short.hook_line}\n"
        f"{short.description}"
    )


def format_shorts(shorts: Iterable[Short]) -> str:
    ordered = sorted(shorts, key=lambda short: short.short_number)
    return SEPARATOR.join(format_short(short) for short in ordered)


__all__ = ["format_short", "format_shorts"]
