"""Chat-completions client that asks the model for clip suggestions."""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, List

import requests
from pydantic import ValidationError
from requests import RequestException

from ..config import AI_API_TIMEOUT, MAX_SHORTS
from ..errors import (
    AICreditsExhaustedError,
    AIError,
    AIRateLimitError,
    ConfigurationError,
)
from ..models import ShortSuggestion
from ..settings import AiSettings
from .prompts import SAVE_SHORTS_TOOL, TOOL_CHOICE, AnalysisPrompt

logger = logging.getLogger(__name__)

_CODE_FENCE_RE = re.compile(r"```(?:json)?")
_JSON_OBJECT_RE = re.compile(r"\{(?:.|\n)*\}")


def build_payload(prompt: AnalysisPrompt, model: str) -> Dict[str, Any]:
    return {
        "model": model,
        "messages": prompt.messages(),
        "tools": [SAVE_SHORTS_TOOL],
        "tool_choice": TOOL_CHOICE,
    }


def _salvage_json_object(content: str) -> Dict[str, Any] | None:
    """Pull a JSON object out of free-form message content."""

    text = _CODE_FENCE_RE.sub("", content).strip()
    candidates = [text]
    match = _JSON_OBJECT_RE.search(text)
    if match:
        candidates.append(match.group(0))
    for candidate in candidates:
        try:
            parsed = json.loads(candidate)
        except ValueError:
            continue
        if isinstance(parsed, dict):
            return parsed
    return None


def extract_arguments(data: Dict[str, Any]) -> Dict[str, Any]:
    """Return the decoded ``save_shorts`` arguments from a completion response."""

    choices = data.get("choices") or [{}]
    message = (choices[0] or {}).get("message") or {}
    tool_calls = message.get("tool_calls") or []
    if tool_calls:
        raw = ((tool_calls[0] or {}).get("function") or {}).get("arguments")
        if isinstance(raw, dict):
            return raw
        if isinstance(raw, str):
            try:
                parsed = json.loads(raw)
            except ValueError as exc:
                raise AIError("AI returned malformed structured data") from exc
            if isinstance(parsed, dict):
                return parsed
        raise AIError("AI returned malformed structured data")

    content = message.get("content")
    if isinstance(content, str) and content.strip():
        salvaged = _salvage_json_object(content)
        if salvaged is not None and "shorts" in salvaged:
            logger.warning("Model answered without a tool call; using message content")
            return salvaged

    raise AIError("AI did not return structured data")


def parse_shorts(items: Any) -> List[ShortSuggestion]:
    """Validate raw ``shorts`` items and number them 1..N (N <= MAX_SHORTS).

    Invalid items are dropped; if nothing survives the response is rejected.
    """

    if not isinstance(items, list):
        raise AIError("AI did not return structured data")

    valid: List[ShortSuggestion] = []
    for index, item in enumerate(items):
        try:
            valid.append(ShortSuggestion.model_validate(item))
        except ValidationError as exc:
            logger.warning("Dropping invalid short #%d: %s", index + 1, exc.errors()[:1])
    if not valid:
        raise AIError("AI did not return structured data")

    valid.sort(key=lambda short: short.short_number)
    selected = valid[:MAX_SHORTS]
    return [
        short.model_copy(update={"short_number": number})
        for number, short in enumerate(selected, start=1)
    ]


def request_shorts(
    prompt: AnalysisPrompt,
    settings: AiSettings,
    *,
    timeout: int = AI_API_TIMEOUT,
) -> List[ShortSuggestion]:
    """Call the chat-completions endpoint and return validated suggestions."""

    if not settings.api_key:
        raise ConfigurationError("LOVABLE_API_KEY not configured")

    try:
        resp = requests.post(
            settings.api_url,
            headers={
                "Authorization": f"Bearer {settings.api_key}",
                "Content-Type": "application/json",
            },
            json=build_payload(prompt, settings.model),
            timeout=timeout,
        )
    except RequestException as exc:
        logger.error("AI request failed: %s", exc)
        raise AIError("AI analysis failed") from exc

    if resp.status_code == 429:
        raise AIRateLimitError()
    if resp.status_code == 402:
        raise AICreditsExhaustedError()
    if not resp.ok:
        logger.error("AI gateway returned %s: %s", resp.status_code, resp.text[:300])
        raise AIError("AI analysis failed")

    try:
        data = resp.json()
    except ValueError as exc:
        raise AIError("AI analysis failed") from exc
    if not isinstance(data, dict):
        raise AIError("AI did not return structured data")

    arguments = extract_arguments(data)
    return parse_shorts(arguments.get("shorts"))


__all__ = ["build_payload", "extract_arguments", "parse_shorts", "request_shorts"]
