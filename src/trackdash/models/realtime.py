"""Real-time label models.

A real-time label follows a physical device through live position
reports. Unlike a demo asset it keeps only its latest position.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, Field, field_validator, model_validator

from trackdash.ingestion.normalize import prune_patch, safe_float, safe_str
from trackdash.models._base import OptionalTimestamp, TrackBaseModel
from trackdash.models.trace import TracePoint

_KNOWN_METADATA_KEYS = frozenset({"status", "battery", "batteryLevel", "battery_level", "temperature", "temp"})


class LabelMetadata(TrackBaseModel):
    """Device metadata attached to a real-time label.

    ``status``, ``battery`` and ``temperature`` are the fields the
    dashboard knows about. Anything else the tracking service sends is
    kept verbatim in ``extra``.
    """

    status: str | None = None
    battery: float | None = Field(default=None, validation_alias=AliasChoices("battery", "batteryLevel", "battery_level"))
    """Battery level in percent."""
    temperature: float | None = Field(default=None, validation_alias=AliasChoices("temperature", "temp"))
    """Temperature in °C."""
    extra: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _collect_extra(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        known: dict[str, Any] = {}
        extra: dict[str, Any] = dict(values.get("extra") or {})
        for key, value in values.items():
            if key == "extra":
                continue
            if key in _KNOWN_METADATA_KEYS:
                known[key] = value
            else:
                extra[key] = value
        known["extra"] = prune_patch(extra)
        return known

    @field_validator("status", mode="before")
    @classmethod
    def _coerce_status(cls, value: Any) -> str | None:
        return safe_str(value)

    @field_validator("battery", "temperature", mode="before")
    @classmethod
    def _coerce_floats(cls, value: Any) -> float | None:
        return safe_float(value)

    def merged(self, patch: LabelMetadata) -> LabelMetadata:
        """Return metadata with the fields set in *patch* overriding ours."""
        extra = dict(self.extra)
        extra.update(patch.extra)
        return LabelMetadata(
            status=patch.status if patch.status is not None else self.status,
            battery=patch.battery if patch.battery is not None else self.battery,
            temperature=patch.temperature if patch.temperature is not None else self.temperature,
            extra=extra,
        )


class RealTimeLabel(TrackBaseModel):
    """A device tracked through live position reports.

    Parameters
    ----------
    id : str
        Label identifier.
    device_id : str
        Hardware identifier (MAC id) of the reporting device.
    display_name : str
        Name shown on the dashboard.
    position : TracePoint
        Latest reported position. Replaced, never appended, on update.
    is_active : bool
        Whether the device is still being tracked.
    last_updated : datetime or None
        When the position was last replaced (arrival time).
    created_at : datetime or None
        When the label was first seen.
    metadata : LabelMetadata
        Status, battery, temperature and passthrough fields.
    """

    id: str = Field(min_length=1)
    device_id: str = Field(validation_alias=AliasChoices("deviceId", "device_id", "macId", "mac_id"))
    display_name: str = Field(default="", validation_alias=AliasChoices("displayName", "display_name", "name"))
    position: TracePoint
    is_active: bool = Field(default=True, validation_alias=AliasChoices("isActive", "is_active"))
    last_updated: OptionalTimestamp = Field(default=None, validation_alias=AliasChoices("lastUpdated", "last_updated"))
    created_at: OptionalTimestamp = Field(default=None, validation_alias=AliasChoices("createdAt", "created_at"))
    metadata: LabelMetadata = Field(default_factory=LabelMetadata, validation_alias=AliasChoices("metadata", "meta"))

    @model_validator(mode="after")
    def _default_display_name(self) -> RealTimeLabel:
        if not self.display_name:
            object.__setattr__(self, "display_name", f"Label-{self.device_id}")
        return self

    def moved_to(
        self,
        position: TracePoint,
        *,
        received_at: datetime,
        metadata: LabelMetadata | None = None,
        is_active: bool | None = None,
        display_name: str | None = None,
    ) -> RealTimeLabel:
        """Return a copy of this label with its position replaced."""
        return self.model_copy(
            update={
                "position": position,
                "last_updated": received_at,
                "metadata": self.metadata.merged(metadata) if metadata is not None else self.metadata,
                "is_active": self.is_active if is_active is None else is_active,
                "display_name": display_name or self.display_name,
            }
        )
