"""Demo fleet loading.

Demo assets are static: they are validated once when a session is
created and never change afterwards.
"""

from __future__ import annotations

import functools
import logging
import os
from collections.abc import Mapping, Sequence
from importlib.resources import files
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter

from trackdash.engine import check_trace_order, first_out_of_order
from trackdash.models.trace import TrackedAsset

_logger = logging.getLogger(__name__)

_ASSETS_ADAPTER = TypeAdapter(list[TrackedAsset])
_BUILTIN_FLEET = "data/demo_fleet.json"


def load_assets(
    source: str | os.PathLike[str] | Sequence[Mapping[str, Any]],
    *,
    strict_order: bool = False,
) -> list[TrackedAsset]:
    """Load demo assets from a JSON file or already-decoded records.

    Parameters
    ----------
    source
        Path to a JSON array of asset records, or the decoded records.
    strict_order
        Reject traces whose timestamps go backwards with
        :class:`~trackdash.exceptions.TraceOrderError`. When off such
        traces are kept and a warning is logged.

    Raises
    ------
    pydantic.ValidationError
        If a record or trace point is invalid.
    """
    if isinstance(source, (str, os.PathLike)):
        assets = _ASSETS_ADAPTER.validate_json(Path(source).read_bytes())
    else:
        assets = _ASSETS_ADAPTER.validate_python(list(source))

    for asset in assets:
        if strict_order:
            check_trace_order(asset.trace, asset_id=asset.id)
            continue
        index = first_out_of_order(asset.trace)
        if index is not None:
            _logger.warning("Trace for asset %s goes back in time at point %d", asset.id, index)
    return assets


@functools.cache
def _builtin_fleet() -> tuple[TrackedAsset, ...]:
    raw = files("trackdash").joinpath(_BUILTIN_FLEET).read_bytes()
    return tuple(_ASSETS_ADAPTER.validate_json(raw))


def default_demo_assets() -> list[TrackedAsset]:
    """The built-in Los Angeles demo fleet, starting at the simulation epoch."""
    return list(_builtin_fleet())
