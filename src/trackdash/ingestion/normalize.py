"""Normalization helpers.

Centralizes defensive parsing of tracking payloads.
"""

from __future__ import annotations

import math
from datetime import UTC, datetime
from typing import Any

# Epoch values at or above this are milliseconds.
_MS_THRESHOLD = 1e11


def safe_float(value: Any) -> float | None:
    if value is None or value == "" or value == "--" or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def safe_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text if text else None


def is_meaningful(value: Any) -> bool:
    """Return True if the value should be included in a metadata patch."""

    if value is None:
        return False
    if value == "":
        return False
    if value == "--":
        return False
    if value == {}:
        return False
    return bool(value != [])


def prune_patch(data: Any) -> Any:
    """Recursively drop non-meaningful values from a patch structure.

    - Dicts: remove keys with non-meaningful values; recurse into nested dicts/lists.
    - Lists: prune elements and drop non-meaningful items.
    - Scalars: returned as-is.
    """

    if isinstance(data, dict):
        pruned: dict[str, Any] = {}
        for key, value in data.items():
            cleaned = prune_patch(value)
            if is_meaningful(cleaned):
                pruned[key] = cleaned
        return pruned

    if isinstance(data, list):
        items: list[Any] = []
        for item in data:
            cleaned = prune_patch(item)
            if is_meaningful(cleaned):
                items.append(cleaned)
        return items

    return data


def parse_timestamp(value: Any) -> datetime | None:
    """Convert a payload timestamp to a timezone-aware UTC datetime.

    Accepts datetimes (naive ones are treated as UTC), epoch seconds or
    milliseconds (numbers or numeric strings) and ISO-8601 strings,
    including a trailing ``Z``. Returns ``None`` for anything else.
    """

    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    numeric = safe_float(value)
    if numeric is not None:
        if numeric <= 0:
            return None
        if numeric >= _MS_THRESHOLD:
            numeric /= 1000.0
        return datetime.fromtimestamp(numeric, tz=UTC)

    if isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=UTC)
        return parsed.astimezone(UTC)

    return None
