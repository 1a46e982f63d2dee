"""Helpers for safe debug logging.

Tracking payloads carry device tokens, and the tracking-service
credentials travel through the same dictionaries. Everything logged from
a payload goes through :func:`redact_for_log` first.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

# Compared after lowercasing and dropping "_" / "-".
_SECRET_KEYS: frozenset[str] = frozenset(
    {"password", "clientsecret", "accesstoken", "refreshtoken", "authorization", "cookie"}
)
# Identifiers that are also bearer credentials; the tail is kept so log
# lines can still be matched to a label.
_TOKEN_KEYS: frozenset[str] = frozenset({"token", "tokenid"})

_KEEP_TAIL = 4


def _normalize_key(key: Any) -> str:
    return str(key).lower().replace("_", "").replace("-", "")


def mask_token(value: Any) -> str:
    """Mask all but the last few characters of a token."""
    text = str(value)
    if len(text) <= _KEEP_TAIL:
        return "<redacted>"
    return f"…{text[-_KEEP_TAIL:]}"


def redact_for_log(value: Any, *, max_string: int = 256, _depth: int = 0) -> Any:
    """Return a copy of *value* with secrets removed, suitable for debug logs."""
    if _depth > 10:
        return "<max-depth>"

    if value is None or isinstance(value, (bool, int, float)):
        return value

    if isinstance(value, str):
        if len(value) > max_string:
            return f"{value[:max_string]}…<truncated>"
        return value

    if isinstance(value, (bytes, bytearray)):
        return f"<bytes:{len(value)}b>"

    if isinstance(value, Mapping):
        redacted: dict[str, Any] = {}
        for k, v in value.items():
            key = _normalize_key(k)
            if key in _SECRET_KEYS:
                redacted[str(k)] = "<redacted>"
            elif key in _TOKEN_KEYS and v is not None:
                redacted[str(k)] = mask_token(v)
            else:
                redacted[str(k)] = redact_for_log(v, max_string=max_string, _depth=_depth + 1)
        return redacted

    if isinstance(value, Sequence):
        return [redact_for_log(v, max_string=max_string, _depth=_depth + 1) for v in value]

    return repr(value)
