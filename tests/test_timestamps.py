from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from logweave.domain.timestamps import (
    INVALID, format_full_date, format_short_date, format_time_ago,
    normalize_timestamp, parse_timestamp,
)


@pytest.mark.parametrize("raw, expected", [
    ("2025-12-16 2:01:12.0 +00:00:00", "2025-12-16T02:01:12.0+00:00"),
    ("2025-12-12 16:33:18.0 +00:00:00", "2025-12-12T16:33:18.0+00:00"),
    ("2025-12-12 16:33:18 -05:30:00", "2025-12-12T16:33:18-05:30"),
    ("2025-12-12 16:33:18.123 +02:00", "2025-12-12T16:33:18.123+02:00"),
    ("2025-12-12T16:33:18Z", "2025-12-12T16:33:18+00:00"),
    ("2025-12-12T16:33:18.0+00:00", "2025-12-12T16:33:18.0+00:00"),
])
def test_normalize(raw, expected):
    assert normalize_timestamp(raw) == expected


def test_normalized_value_parses_with_fromisoformat():
    norm = normalize_timestamp("2025-12-16 2:01:12.0 +00:00:00")
    assert datetime.fromisoformat(norm) == datetime(2025, 12, 16, 2, 1, 12, tzinfo=timezone.utc)


@pytest.mark.parametrize("raw", [None, "", "   ", "yesterday", 1734318072, "2025-13-01 10:00:00 +00:00:00",
                                 "2025-12-16 25:01:12.0 +00:00:00", "2025-12-16 2:01:12.0"])
def test_unusable_values_give_sentinel(raw):
    assert normalize_timestamp(raw) == INVALID
    assert parse_timestamp(raw) is None


def test_parse_keeps_offset():
    dt = parse_timestamp("2025-12-12 16:33:18.0 -05:00:00")
    assert dt is not None
    assert dt.utcoffset() == timedelta(hours=-5)
    assert dt.astimezone(timezone.utc).hour == 21


NOW = datetime(2025, 12, 16, 12, 0, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize("delta, expected", [
    (timedelta(seconds=30), "Just now"),
    (timedelta(minutes=1), "1 minute ago"),
    (timedelta(minutes=45), "45 minutes ago"),
    (timedelta(hours=1), "1 hour ago"),
    (timedelta(hours=5), "5 hours ago"),
    (timedelta(days=1), "1 day ago"),
    (timedelta(days=6), "6 days ago"),
    (timedelta(days=10), "Dec 6"),
    (timedelta(days=400), "Nov 11, 2024"),
])
def test_format_time_ago(delta, expected):
    raw = (NOW - delta).isoformat()
    assert format_time_ago(raw, now=NOW) == expected


def test_format_time_ago_unknown():
    assert format_time_ago("garbage", now=NOW) == "Unknown time"


def test_format_dates():
    raw = "2025-12-12 16:33:18.0 +00:00:00"
    assert format_full_date(raw) == "December 12, 2025 at 4:33 PM"
    assert format_short_date(raw) == "Dec 12, 2025"
    assert format_full_date("2025-01-02 0:05:00 +00:00:00") == "January 2, 2025 at 12:05 AM"
    assert format_short_date(None) == "Unknown date"
