from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from bidboard.core import PropertyRecord, Status
from bidboard.timeleft import format_time_left, live_minutes_left, minutes_remaining


NOW = datetime(2025, 11, 23, 12, 0, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "minutes, label",
    [
        (None, ""),
        (-1, "Expired"),
        (-5000, "Expired"),
        (0, "Ending now"),
        (1, "1 min"),
        (59, "59 min"),
        (60, "1h 0m"),
        (125, "2h 5m"),
        (1439, "23h 59m"),
        (1440, "1d 0h"),
        (1500, "1d 1h"),
        (4380, "3d 1h"),
    ],
)
def test_format_time_left(minutes, label) -> None:
    assert format_time_left(minutes) == label


def test_minutes_remaining_with_offset() -> None:
    assert minutes_remaining("2025-11-23T14:05:19+02:00", NOW) == 5


def test_minutes_remaining_zulu_and_fraction() -> None:
    assert minutes_remaining("2025-11-23T12:30:00.000Z", NOW) == 30


def test_minutes_remaining_negative() -> None:
    assert minutes_remaining("2025-11-23T11:00:00Z", NOW) == -60


def test_minutes_remaining_rounds_half_up() -> None:
    assert minutes_remaining("2025-11-23T12:02:30Z", NOW) == 3
    assert minutes_remaining("2025-11-23T11:57:30Z", NOW) == -2
    assert minutes_remaining("2025-11-23T12:02:29Z", NOW) == 2


def test_naive_stamp_is_utc() -> None:
    assert minutes_remaining("2025-11-23T13:00:00", NOW) == 60


@pytest.mark.parametrize("bad", [None, "", "not a date", "2025-02-30T10:00:00Z"])
def test_minutes_remaining_fails_soft(bad) -> None:
    assert minutes_remaining(bad, NOW) is None


def _record(**overrides) -> PropertyRecord:
    data = dict(
        id="5811936",
        property_number="444-519-3-28",
        url="https://huutokaupat.com/kohde/5811936",
        current_price=0,
        has_bids=True,
        status=Status.ACTIVE,
    )
    data.update(overrides)
    return PropertyRecord(**data)


def test_live_minutes_recomputes_from_end() -> None:
    end = (NOW + timedelta(minutes=90)).isoformat()
    rec = _record(auction_end=end, minutes_left=200)
    assert live_minutes_left(rec, NOW) == 90
    assert format_time_left(live_minutes_left(rec, NOW)) == "1h 30m"


def test_live_minutes_ended_is_expired() -> None:
    end = (NOW + timedelta(minutes=90)).isoformat()
    rec = _record(status=Status.ENDED_VERIFYING, auction_end=end, minutes_left=90)
    assert format_time_left(live_minutes_left(rec, NOW)) == "Expired"


def test_live_minutes_falls_back_to_stored_value() -> None:
    assert live_minutes_left(_record(minutes_left=42), NOW) == 42
    assert live_minutes_left(_record(), NOW) is None
    assert live_minutes_left(_record(status=Status.ERROR), NOW) is None
