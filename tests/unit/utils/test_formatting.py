from __future__ import annotations

"""
Unit tests for presentation formatting helpers.
"""

from datetime import datetime, timedelta, timezone

import pytest

from skimap.utils.formatting import classify_extension, describe_age, format_size


@pytest.mark.parametrize("value, expected", [
    (0, "0 bytes"),
    (1, "1 byte"),
    (999, "999 bytes"),
    (1_500, "1.5 KB"),
    (2_300_000, "2.3 MB"),
    (999_999, "1.0 MB"),
    (4_000_000_000, "4.0 GB"),
])
def test_format_size(value: int, expected: str) -> None:
    assert format_size(value) == expected


def test_describe_age_buckets() -> None:
    now = datetime(2024, 1, 10, tzinfo=timezone.utc)
    assert describe_age(now - timedelta(seconds=30), now) == "just now"
    assert describe_age(now - timedelta(minutes=5), now) == "5 min ago"
    assert describe_age(now - timedelta(hours=2), now) == "2 hr ago"
    assert describe_age(now - timedelta(days=3), now) == "3 days ago"


def test_describe_age_accepts_naive_dates() -> None:
    now = datetime(2024, 1, 10, 12, 0)
    assert describe_age(datetime(2024, 1, 10, 11, 0), now) == "1 hr ago"


def test_describe_age_future_is_just_now() -> None:
    now = datetime(2024, 1, 10, tzinfo=timezone.utc)
    assert describe_age(now + timedelta(minutes=5), now) == "just now"


def test_classify_extension() -> None:
    assert classify_extension("mp4") == "video"
    assert classify_extension(".FLAC") == "audio"
    assert classify_extension("py") == "source"
    assert classify_extension("xyz") == "other"
    assert classify_extension("", is_directory=True) == "directory"
