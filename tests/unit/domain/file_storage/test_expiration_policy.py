"""
Unit tests for the expiration policy.
"""

from datetime import datetime, timedelta, timezone

import pytest

from droplink.domain.file_storage.entities import FileRecord
from droplink.domain.file_storage.expiration import (
    MAX_EXPIRES_IN_HOURS,
    compute_expires_at,
    is_expired,
    is_valid_lifetime,
    ttl_seconds_until,
    utc_now,
)

NOW = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


def _record(expires_at=None) -> FileRecord:
    return FileRecord.create(
        key="1-abcd1234-a.txt",
        filename="a.txt",
        size=5,
        uploaded_at=NOW - timedelta(hours=1),
        expires_at=expires_at,
    )


class TestIsExpired:
    def test_no_expiration_never_expires(self):
        assert not is_expired(_record(), NOW + timedelta(days=3650))

    def test_future_expiration(self):
        assert not is_expired(_record(NOW + timedelta(seconds=1)), NOW)

    def test_past_expiration(self):
        assert is_expired(_record(NOW - timedelta(seconds=1)), NOW)

    def test_exact_expiration_instant_is_not_expired(self):
        assert not is_expired(_record(NOW), NOW)

    def test_defaults_to_current_time(self):
        assert is_expired(_record(utc_now() - timedelta(minutes=1)))


class TestComputeExpiresAt:
    def test_none_hours(self):
        assert compute_expires_at(None, NOW) is None

    def test_fractional_hours(self):
        assert compute_expires_at(1.5, NOW) == NOW + timedelta(minutes=90)


class TestIsValidLifetime:
    @pytest.mark.parametrize("hours", [0.01, 1, 24 * 365, MAX_EXPIRES_IN_HOURS])
    def test_accepted(self, hours):
        assert is_valid_lifetime(hours)

    @pytest.mark.parametrize(
        "hours",
        [0, -1, MAX_EXPIRES_IN_HOURS + 1, 1e8, float("inf"), float("-inf"), float("nan")],
    )
    def test_rejected(self, hours):
        assert not is_valid_lifetime(hours)

    def test_maximum_stays_in_datetime_range(self):
        assert compute_expires_at(MAX_EXPIRES_IN_HOURS, NOW) > NOW


class TestTtlSecondsUntil:
    def test_no_expiration(self):
        assert ttl_seconds_until(None, NOW) is None

    def test_whole_seconds_rounded_down(self):
        assert ttl_seconds_until(NOW + timedelta(seconds=10, milliseconds=900), NOW) == 10

    def test_minimum_of_one_second(self):
        assert ttl_seconds_until(NOW + timedelta(milliseconds=200), NOW) == 1
        assert ttl_seconds_until(NOW - timedelta(hours=1), NOW) == 1
