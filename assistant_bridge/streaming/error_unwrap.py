"""
Extract a readable message from upstream errors.

Upstream error bodies arrive as JSON envelopes, sometimes with another
JSON envelope encoded inside ``error.message``:

    {"error": {"message": "{\\"error\\": {\\"message\\": \\"deep\\"}}"}}

The unwrapper follows ``error.message`` through such nesting, falling back to
``message`` or a string ``error`` field, and to the raw text when nothing
parses. Nesting is followed at most ``MAX_UNWRAP_DEPTH`` levels.
"""

from __future__ import annotations

import json
from typing import Any

DEFAULT_ERROR_MESSAGE = "An error occurred"
MAX_UNWRAP_DEPTH = 5


def _raw_message(error: Any) -> str:
    if isinstance(error, str):
        return error
    message = getattr(error, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(error) if error is not None else ""


def _try_json(value: Any) -> Any:
    if not isinstance(value, str):
        return value
    try:
        return json.loads(value)
    except ValueError:
        return None


def _nested_error_message(parsed: Any) -> Any:
    """Return ``parsed["error"]["message"]`` when present and non-empty."""
    if not isinstance(parsed, dict):
        return None
    inner = parsed.get("error")
    if isinstance(inner, dict) and inner.get("message"):
        return inner["message"]
    return None


def extract_error_message(error: Any) -> str:
    """
    Return the most specific human-readable message for ``error``.

    Args:
        error: an exception, a plain string, or any object with a ``message``

    Returns:
        The unwrapped message, the raw message if nothing could be unwrapped,
        or a generic message if the error carries no text at all.
    """
    raw = _raw_message(error)
    if not raw:
        return DEFAULT_ERROR_MESSAGE

    parsed = _try_json(raw)
    best = raw

    for _ in range(MAX_UNWRAP_DEPTH):
        if not isinstance(parsed, dict):
            break

        nested = _nested_error_message(parsed)
        if nested is not None:
            inner = _try_json(nested)
            if _nested_error_message(inner) is not None:
                # error.message is itself an envelope; go one level deeper
                best = str(nested)
                parsed = inner
                continue
            return nested if isinstance(nested, str) else json.dumps(nested)

        message = parsed.get("message")
        if message:
            return message if isinstance(message, str) else json.dumps(message)
        if isinstance(parsed.get("error"), str) and parsed["error"]:
            return parsed["error"]
        return raw

    return best
