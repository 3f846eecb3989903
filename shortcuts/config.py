"""Central configuration for the analysis pipeline and YouTube publishing.

Sections are grouped by feature for easier editing.
"""

import os

# ---------------------------------------
# Transcript acquisition settings
# ---------------------------------------
# Caption languages tried first when a video exposes several tracks
TRANSCRIPT_LANGUAGES = [
    lang.strip()
    for lang in os.environ.get("TRANSCRIPT_LANGUAGES", "en,en-US,en-GB").split(",")
    if lang.strip()
]
# Transcripts shorter than this are treated as missing
TRANSCRIPT_MIN_CHARS = 50
# Transcript text sent to the model is cut to this length
TRANSCRIPT_MAX_CHARS = 30_000
# Try youtube-transcript-api when the watch page has no usable caption track
USE_TRANSCRIPT_API_FALLBACK = True

# ---------------------------------------
# Outbound HTTP
# ---------------------------------------
HTTP_TIMEOUT = 30  # seconds
AI_API_TIMEOUT = 120  # seconds
VIDEO_DOWNLOAD_TIMEOUT = 300  # seconds
# Browser-like UA so the watch page includes the player response
SCRAPE_USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
)
NOEMBED_URL = "https://noembed.com/embed"

# ---------------------------------------
# Clip suggestions
# ---------------------------------------
MAX_SHORTS = 10
SHORT_TITLE_MAX_CHARS = 60
MIN_SHORT_SECONDS = 15
MAX_SHORT_SECONDS = 60
AI_TOOL_NAME = "save_shorts"

# ---------------------------------------
# YouTube publishing
# ---------------------------------------
YOUTUBE_SCOPES = [
    "https://www.googleapis.com/auth/youtube.upload",
    "https://www.googleapis.com/auth/youtube.readonly",
]
GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
# Signed OAuth state is rejected after this many seconds
OAUTH_STATE_TTL_SECONDS = 600
# Refresh access tokens this many seconds before they expire
TOKEN_EXPIRY_LEEWAY_SECONDS = 60

YOUTUBE_PRIVACY = "private"
YOUTUBE_CATEGORY_ID = "22"  # People & Blogs
YOUTUBE_TITLE_LIMIT = 100
YOUTUBE_DESC_LIMIT = 5000
DEFAULT_SHORT_TITLE = "Short"
DEFAULT_SHORT_DESCRIPTION = "Created with ShortCuts"

CHUNKSIZE = 8 * 1024 * 1024  # 8MB works well; library handles resumable uploading

__all__ = [
    "TRANSCRIPT_LANGUAGES",
    "TRANSCRIPT_MIN_CHARS",
    "TRANSCRIPT_MAX_CHARS",
    "USE_TRANSCRIPT_API_FALLBACK",
    "HTTP_TIMEOUT",
    "AI_API_TIMEOUT",
    "VIDEO_DOWNLOAD_TIMEOUT",
    "SCRAPE_USER_AGENT",
    "NOEMBED_URL",
    "MAX_SHORTS",
    "SHORT_TITLE_MAX_CHARS",
    "MIN_SHORT_SECONDS",
    "MAX_SHORT_SECONDS",
    "AI_TOOL_NAME",
    "YOUTUBE_SCOPES",
    "GOOGLE_AUTH_URL",
    "GOOGLE_TOKEN_URL",
    "OAUTH_STATE_TTL_SECONDS",
    "TOKEN_EXPIRY_LEEWAY_SECONDS",
    "YOUTUBE_PRIVACY",
    "YOUTUBE_CATEGORY_ID",
    "YOUTUBE_TITLE_LIMIT",
    "YOUTUBE_DESC_LIMIT",
    "DEFAULT_SHORT_TITLE",
    "DEFAULT_SHORT_DESCRIPTION",
    "CHUNKSIZE",
]
