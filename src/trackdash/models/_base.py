"""Base model and shared field types for trackdash models.

Every model inherits from :class:`TrackBaseModel` which provides:

* ``alias_generator=to_camel`` so camelCase payload keys map
  automatically to snake_case fields.
* Frozen instances. Recorded points are never mutated; updates
  produce new objects.

:data:`Timestamp` coerces epoch seconds, epoch milliseconds and
ISO-8601 strings into timezone-aware UTC datetimes.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict
from pydantic.alias_generators import to_camel

from trackdash.ingestion.normalize import parse_timestamp


def _coerce_timestamp(value: Any) -> datetime:
    parsed = parse_timestamp(value)
    if parsed is None:
        raise ValueError(f"not a timestamp: {value!r}")
    return parsed


def _coerce_optional_timestamp(value: Any) -> datetime | None:
    if value is None:
        return None
    return _coerce_timestamp(value)


Timestamp = Annotated[datetime, BeforeValidator(_coerce_timestamp)]
"""Required absolute point in time, normalized to UTC."""

OptionalTimestamp = Annotated[datetime | None, BeforeValidator(_coerce_optional_timestamp)]


class TrackBaseModel(BaseModel):
    """Base for trackdash models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )
