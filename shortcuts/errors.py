"""Exceptions raised by the analysis and publishing endpoints.

Each error carries the HTTP status and the message returned to the caller.
"""

from __future__ import annotations


class ShortCutsError(Exception):
    """Base error rendered as ``{"error": message}``."""

    status_code = 500

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class BadRequestError(ShortCutsError):
    status_code = 400


class AuthenticationError(ShortCutsError):
    status_code = 401


class NotFoundError(ShortCutsError):
    status_code = 404


class ConfigurationError(ShortCutsError):
    """Raised when a required credential or URL is not configured."""


class StoreError(ShortCutsError):
    """Raised when the managed database or storage rejects a request."""


class AIError(ShortCutsError):
    """Raised when the chat-completions call fails or returns unusable data.

    ``record_message`` is written to the video row; it defaults to the
    caller-facing message.
    """

    def __init__(
        self,
        message: str,
        *,
        record_message: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, status_code=status_code)
        self.record_message = record_message or message


class AIRateLimitError(AIError):
    status_code = 429

    def __init__(self) -> None:
        super().__init__(
            "Rate limited. Please try again in a moment.",
            record_message="Rate limited. Try again later.",
        )


class AICreditsExhaustedError(AIError):
    status_code = 402

    def __init__(self) -> None:
        super().__init__(
            "AI credits exhausted. Please add credits.",
            record_message="AI credits exhausted.",
        )


class YouTubeError(ShortCutsError):
    """Raised for OAuth and upload failures against YouTube."""


__all__ = [
    "AIError",
    "AICreditsExhaustedError",
    "AIRateLimitError",
    "AuthenticationError",
    "BadRequestError",
    "ConfigurationError",
    "NotFoundError",
    "ShortCutsError",
    "StoreError",
    "YouTubeError",
]
