"""Tracking-service payload adapters.

Translates the package-tracking service's webhook and package records,
and the dashboard's own position messages, into label events and
labels. The HTTP client and its authentication live elsewhere; only the
payload shapes are handled here.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from trackdash._constants import DELIVERED_PACKAGE_STATUS
from trackdash._redact import redact_for_log
from trackdash.exceptions import TrackingPayloadError
from trackdash.ingestion.normalize import parse_timestamp, prune_patch, safe_str
from trackdash.models.realtime import LabelMetadata, RealTimeLabel
from trackdash.models.trace import TracePoint
from trackdash.state.events import LabelUpdateEvent, UpdateSource

_logger = logging.getLogger(__name__)

PACKAGE_LABEL_PREFIX = "shiprec-"
POSITION_MESSAGE_TYPE = "update-position"


def package_label_id(token_id: str) -> str:
    """Label id used for a tracked package."""
    return f"{PACKAGE_LABEL_PREFIX}{token_id}"


class _WebhookPayload(BaseModel):
    """Location push sent by the tracking service for one device."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    token: str = Field(min_length=1)
    mac_id: str = Field(min_length=1)
    lat: float
    long: float
    status: str | int | None = None
    timestamp: float
    is_latest: bool = True


class _PackageLocation(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    lat: float
    lng: float = Field(validation_alias=AliasChoices("lng", "long"))
    timestamp: Any = None


class _PackageRecord(BaseModel):
    """Package as listed by the tracking service."""

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    token_id: str = Field(min_length=1, validation_alias=AliasChoices("tokenId", "token_id"))
    package_id: str = Field(default="", validation_alias=AliasChoices("packageId", "package_id"))
    device_id: str = Field(default="", validation_alias=AliasChoices("deviceId", "device_id"))
    name: str = ""
    status: str = ""
    created: Any = None
    location: _PackageLocation | None = None
    current_location: _PackageLocation | None = Field(
        default=None, validation_alias=AliasChoices("currentLocation", "current_location")
    )
    meta: dict[str, Any] = Field(default_factory=dict)


def event_from_webhook(
    payload: Mapping[str, Any],
    *,
    observed_at: datetime | None = None,
) -> LabelUpdateEvent | None:
    """Build a label update from a tracking-service location push.

    Returns ``None`` for malformed payloads and for pushes flagged as not
    being the device's latest location.
    """
    try:
        hook = _WebhookPayload.model_validate(payload)
        position = TracePoint(lat=hook.lat, lng=hook.long, timestamp=hook.timestamp)
    except ValidationError:
        _logger.debug("Ignoring malformed webhook payload %s", redact_for_log(dict(payload)), exc_info=True)
        return None

    if not hook.is_latest:
        _logger.debug("Ignoring superseded webhook location for device %s", hook.mac_id)
        return None

    return LabelUpdateEvent(
        label_id=package_label_id(hook.token),
        device_id=hook.mac_id,
        position=position,
        source=UpdateSource.PUSH,
        metadata=LabelMetadata(status=hook.status),
        observed_at=observed_at or datetime.now(UTC),
    )


def label_from_package(package: Mapping[str, Any]) -> RealTimeLabel:
    """Turn a package record into a real-time label at its last location.

    Raises
    ------
    TrackingPayloadError
        If the record is malformed or carries no location.
    """
    try:
        record = _PackageRecord.model_validate(package)
    except ValidationError as exc:
        raise TrackingPayloadError(f"invalid package record: {exc}", payload_kind="package") from exc

    location = record.location or record.current_location
    if location is None:
        raise TrackingPayloadError(
            f"package {record.token_id} has no location information",
            payload_kind="package",
        )

    try:
        position = TracePoint(lat=location.lat, lng=location.lng, timestamp=location.timestamp)
    except ValidationError as exc:
        raise TrackingPayloadError(
            f"package {record.token_id} has an invalid location: {exc}",
            payload_kind="package",
        ) from exc

    metadata = LabelMetadata.model_validate(
        prune_patch(
            {
                **record.meta,
                "packageId": record.package_id,
                "tokenId": record.token_id,
                "status": record.status,
            }
        )
    )
    return RealTimeLabel(
        id=package_label_id(record.token_id),
        device_id=record.device_id or record.token_id,
        display_name=record.name or f"Package {record.token_id[-6:]}",
        position=position,
        is_active=record.status != DELIVERED_PACKAGE_STATUS,
        last_updated=position.timestamp,
        created_at=parse_timestamp(record.created),
        metadata=metadata,
    )


def event_from_position_message(
    message: Mapping[str, Any],
    *,
    observed_at: datetime | None = None,
) -> LabelUpdateEvent | None:
    """Build a label update from a dashboard ``update-position`` message.

    The position's timestamp defaults to the arrival time when absent.
    Returns ``None`` for other message types and malformed messages.
    """
    if message.get("type") != POSITION_MESSAGE_TYPE:
        return None

    label_id = safe_str(message.get("id"))
    raw_position = message.get("position")
    if label_id is None or not isinstance(raw_position, Mapping):
        _logger.debug("Ignoring incomplete position message %s", redact_for_log(dict(message)))
        return None

    received = observed_at or datetime.now(UTC)
    position_payload = dict(raw_position)
    if position_payload.get("timestamp") is None:
        position_payload["timestamp"] = received
    try:
        position = TracePoint.model_validate(position_payload)
    except ValidationError:
        _logger.debug("Ignoring position message with invalid position %s", redact_for_log(dict(message)), exc_info=True)
        return None

    return LabelUpdateEvent(
        label_id=label_id,
        position=position,
        source=UpdateSource.MANUAL,
        observed_at=received,
    )
