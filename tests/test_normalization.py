from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

import pytest

from trackdash.ingestion.normalize import (
    is_meaningful,
    parse_timestamp,
    prune_patch,
    safe_float,
    safe_str,
)


class TestSafeConversions:
    @pytest.mark.parametrize("value", [None, "", "--", True, "abc", float("nan"), float("inf")])
    def test_safe_float_rejects_placeholders(self, value: object) -> None:
        assert safe_float(value) is None

    def test_safe_float_accepts_numeric_strings(self) -> None:
        assert safe_float("21.5") == 21.5
        assert safe_float(7) == 7.0

    def test_safe_str_strips(self) -> None:
        assert safe_str("  IN_TRANSIT ") == "IN_TRANSIT"
        assert safe_str("   ") is None
        assert safe_str(3) == "3"


def test_prune_patch_drops_empty_values_recursively() -> None:
    patch = {"a": 1, "b": None, "c": "--", "d": {"e": "", "f": 2}, "g": [None, {}, 3], "h": {}}
    assert prune_patch(patch) == {"a": 1, "d": {"f": 2}, "g": [3]}


def test_zero_and_false_are_meaningful() -> None:
    assert is_meaningful(0)
    assert is_meaningful(False)
    assert not is_meaningful([])


class TestParseTimestamp:
    def test_iso_with_z_suffix(self) -> None:
        assert parse_timestamp("2025-04-01T10:00:00Z") == datetime(2025, 4, 1, 10, 0, tzinfo=UTC)

    def test_iso_with_offset_converted_to_utc(self) -> None:
        parsed = parse_timestamp("2025-04-01T03:00:00-07:00")
        assert parsed == datetime(2025, 4, 1, 10, 0, tzinfo=UTC)
        assert parsed is not None and parsed.tzinfo == UTC

    def test_naive_iso_is_utc(self) -> None:
        assert parse_timestamp("2025-04-01T10:00:00") == datetime(2025, 4, 1, 10, 0, tzinfo=UTC)

    def test_epoch_seconds_and_milliseconds(self) -> None:
        expected = datetime.fromtimestamp(1_743_501_600, tz=UTC)
        assert parse_timestamp(1_743_501_600) == expected
        assert parse_timestamp(1_743_501_600_000) == expected
        assert parse_timestamp("1743501600") == expected

    def test_datetime_inputs(self) -> None:
        naive = datetime(2025, 4, 1, 10, 0)
        assert parse_timestamp(naive) == datetime(2025, 4, 1, 10, 0, tzinfo=UTC)
        plus_two = datetime(2025, 4, 1, 12, 0, tzinfo=timezone(timedelta(hours=2)))
        assert parse_timestamp(plus_two) == datetime(2025, 4, 1, 10, 0, tzinfo=UTC)

    @pytest.mark.parametrize("value", [None, "", "--", 0, -5, "not a date", object()])
    def test_unparseable_values(self, value: object) -> None:
        assert parse_timestamp(value) is None
