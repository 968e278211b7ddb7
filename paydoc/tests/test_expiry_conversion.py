from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from paydoc.app.checks.expiry import (
    default_expiry_local,
    format_iso_utc,
    local_to_utc,
)

from paydoc.tests.fixtures.crypto import utc


BERLIN = ZoneInfo("Europe/Berlin")


# ---------------------------------------------------------------------------
# local_to_utc
# ---------------------------------------------------------------------------

def test_naive_input_is_read_in_caller_zone():
    assert local_to_utc("2026-10-19T14:00", BERLIN) == utc(2026, 10, 19, 12, 0)


def test_winter_time_offset_applies_after_dst_ends():
    # CET (UTC+1) from 25 October 2026
    assert local_to_utc("2026-11-02T09:00", BERLIN) == utc(2026, 11, 2, 8, 0)


def test_explicit_offset_wins_over_caller_zone():
    assert local_to_utc("2026-10-19T14:00+05:00", BERLIN) == utc(2026, 10, 19, 9, 0)


def test_z_suffix_is_utc():
    assert local_to_utc("2026-10-19T14:00:00Z", BERLIN) == utc(2026, 10, 19, 14, 0)


def test_naive_input_without_zone_uses_platform_local_time():
    expected = datetime(2026, 10, 19, 14, 0).astimezone().astimezone(timezone.utc)

    assert local_to_utc("2026-10-19T14:00") == expected


@pytest.mark.parametrize("raw", ["", "   ", "tomorrow", "2026-02-30T10:00"])
def test_unparseable_input_returns_none(raw):
    assert local_to_utc(raw, BERLIN) is None


def test_result_is_truncated_to_milliseconds():
    result = local_to_utc("2026-10-19T12:00:00.123456", timezone.utc)

    assert result.microsecond == 123000


# ---------------------------------------------------------------------------
# format_iso_utc
# ---------------------------------------------------------------------------

def test_format_uses_millisecond_z_form():
    value = datetime(2026, 10, 19, 12, 0, 0, 123456, tzinfo=timezone.utc)

    assert format_iso_utc(value) == "2026-10-19T12:00:00.123Z"


def test_format_converts_other_offsets_to_utc():
    value = datetime(2026, 10, 19, 14, 0, tzinfo=timezone(timedelta(hours=2)))

    assert format_iso_utc(value) == "2026-10-19T12:00:00.000Z"


def test_format_rejects_naive_datetimes():
    with pytest.raises(ValueError):
        format_iso_utc(datetime(2026, 10, 19, 12, 0))


# ---------------------------------------------------------------------------
# default_expiry_local
# ---------------------------------------------------------------------------

def test_default_expiry_is_one_day_ahead_in_local_form():
    now = utc(2026, 10, 19, 12, 0)

    assert default_expiry_local(now, 24, BERLIN) == "2026-10-20T14:00"


def test_default_expiry_round_trips_through_conversion():
    now = utc(2026, 10, 19, 12, 0)
    local = default_expiry_local(now, 6, BERLIN)

    assert local_to_utc(local, BERLIN) == now + timedelta(hours=6)
