"""Custom exception hierarchy for trackdash.

The interpolation, geospatial and clock functions are total and never
raise for their documented inputs. These exceptions belong to the
boundary layers (configuration and payload ingestion).
"""

from __future__ import annotations


class TrackDashError(Exception):
    """Base exception for all trackdash errors."""


class DashboardConfigError(TrackDashError):
    """Invalid or missing configuration."""


class TraceOrderError(TrackDashError):
    """A trace was rejected because its timestamps go backwards.

    Only raised at ingestion when strict ordering is requested.
    """

    def __init__(self, message: str, *, index: int, asset_id: str = "") -> None:
        self.index = index
        self.asset_id = asset_id
        super().__init__(message)


class TrackingPayloadError(TrackDashError):
    """A tracking-service payload could not be turned into a label."""

    def __init__(self, message: str, *, payload_kind: str = "") -> None:
        self.payload_kind = payload_kind
        super().__init__(message)


class UnknownAssetError(TrackDashError, KeyError):
    """No demo asset or label is registered under the requested id."""

    def __init__(self, asset_id: str) -> None:
        self.asset_id = asset_id
        super().__init__(asset_id)

    def __str__(self) -> str:
        return f"unknown asset id {self.asset_id!r}"
