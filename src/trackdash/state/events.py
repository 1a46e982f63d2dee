"""Normalized label update events.

Every live-update path (tracking-service pushes and the dashboard's
own position messages) converts its input into a :class:`LabelUpdateEvent`.
Only the store is allowed to apply them.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from trackdash.models.realtime import LabelMetadata
from trackdash.models.trace import TracePoint


class UpdateSource(StrEnum):
    PUSH = "push"
    MANUAL = "manual"


class LabelUpdateEvent(BaseModel):
    """A new position (plus optional details) for one real-time label."""

    model_config = ConfigDict(frozen=True)

    label_id: str = Field(..., description="Label identifier")
    position: TracePoint
    source: UpdateSource = UpdateSource.PUSH
    device_id: str | None = Field(default=None, description="Device (MAC) id, used when the label is new")
    display_name: str | None = None
    metadata: LabelMetadata | None = None
    is_active: bool | None = None
    observed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @field_validator("label_id")
    @classmethod
    def _normalize_label_id(cls, value: str) -> str:
        label_id = value.strip()
        if not label_id:
            raise ValueError("label_id must be non-empty")
        return label_id

    @field_validator("observed_at")
    @classmethod
    def _ensure_tz_aware(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value
