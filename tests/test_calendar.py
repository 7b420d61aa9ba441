"""Tests for bucket-boundary arithmetic per resolution."""

import pandas as pd
import pytest

from viewstats import calendar


@pytest.mark.parametrize(
    "resolution, kind, value",
    [
        ("hourly", "fixed_duration", pd.Timedelta(hours=1)),
        ("daily", "fixed_duration", pd.Timedelta(days=1)),
        ("weekly", "fixed_duration", pd.Timedelta(days=7)),
        ("monthly", "calendar_unit", pd.DateOffset(months=1)),
        ("yearly", "calendar_unit", pd.DateOffset(years=1)),
    ],
)
def test_boundary_unit_kinds(resolution, kind, value):
    unit = calendar.boundary_unit(resolution)
    assert unit.kind == kind
    assert unit.value == value


def test_boundary_unit_rejects_unknown():
    with pytest.raises(ValueError):
        calendar.boundary_unit("quarterly")


@pytest.mark.parametrize(
    "start, resolution, expected",
    [
        ("2024-01-15T00:00:00Z", "monthly", "2024-02-01T00:00:00Z"),
        ("2024-02-01T00:00:00Z", "monthly", "2024-03-01T00:00:00Z"),
        ("2024-12-31T23:59:00Z", "monthly", "2025-01-01T00:00:00Z"),
        ("2024-06-30T12:00:00Z", "yearly", "2025-01-01T00:00:00Z"),
        ("2024-01-01T00:00:00Z", "yearly", "2025-01-01T00:00:00Z"),
    ],
)
def test_next_boundary_calendar_utc(start, resolution, expected):
    out = calendar.next_boundary(pd.Timestamp(start), resolution, "UTC")
    assert out == pd.Timestamp(expected)


def test_month_lengths_follow_calendar():
    """February 2024 has 29 days, not a fixed 30-day step."""
    feb = pd.Timestamp("2024-02-01T00:00:00Z")
    assert calendar.next_boundary(feb, "monthly") - feb == pd.Timedelta(days=29)
    jan = pd.Timestamp("2024-01-01T00:00:00Z")
    assert calendar.next_boundary(jan, "monthly") - jan == pd.Timedelta(days=31)


def test_leap_year_is_366_days():
    y = pd.Timestamp("2024-01-01T00:00:00Z")
    assert calendar.next_boundary(y, "yearly") - y == pd.Timedelta(days=366)


def test_next_boundary_monthly_local_midnight():
    """Month boundaries in Europe/Berlin fall at local midnight (CET / CEST)."""
    winter = calendar.next_boundary(
        pd.Timestamp("2024-01-15T00:00:00Z"), "monthly", "Europe/Berlin"
    )
    assert winter == pd.Timestamp("2024-01-31T23:00:00Z")

    summer = calendar.next_boundary(
        pd.Timestamp("2024-06-10T00:00:00Z"), "monthly", "Europe/Berlin"
    )
    assert summer == pd.Timestamp("2024-06-30T22:00:00Z")


def test_next_boundary_uses_local_month_of_instant():
    """23:30Z on Jan 31 is already February in Berlin, so next is March 1."""
    out = calendar.next_boundary(
        pd.Timestamp("2024-01-31T23:30:00Z"), "monthly", "Europe/Berlin"
    )
    assert out == pd.Timestamp("2024-02-29T23:00:00Z")


def test_next_boundary_yearly_new_york():
    out = calendar.next_boundary(
        pd.Timestamp("2024-06-01T00:00:00Z"), "yearly", "America/New_York"
    )
    assert out == pd.Timestamp("2025-01-01T05:00:00Z")


@pytest.mark.parametrize("tz", ["UTC", "Europe/Berlin", "Australia/Brisbane"])
def test_fixed_durations_ignore_timezone(tz):
    t = pd.Timestamp("2024-03-30T22:15:00Z")
    assert calendar.next_boundary(t, "hourly", tz) == t + pd.Timedelta(hours=1)
    assert calendar.next_boundary(t, "daily", tz) == t + pd.Timedelta(days=1)
    assert calendar.next_boundary(t, "weekly", tz) == t + pd.Timedelta(days=7)


def test_next_boundary_accepts_naive_as_utc():
    out = calendar.next_boundary(pd.Timestamp("2024-01-15"), "monthly")
    assert out == pd.Timestamp("2024-02-01T00:00:00Z")


@pytest.mark.parametrize(
    "resolution, width",
    [
        ("hourly", "1h"),
        ("daily", "1d"),
        ("weekly", "1w"),
        ("monthly", None),
        ("yearly", None),
    ],
)
def test_bucket_width(resolution, width):
    assert calendar.bucket_width(resolution) == width
