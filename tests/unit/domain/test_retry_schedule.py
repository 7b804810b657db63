from datetime import datetime, timedelta, timezone

import pytest

from customs_ops.domain.value_objects.retry_schedule import next_retry_at, retry_delay

NOW = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "retry_count, expected",
    [
        (0, timedelta(minutes=1)),
        (1, timedelta(minutes=5)),
        (2, timedelta(minutes=15)),
        (3, timedelta(minutes=15)),
        (10, timedelta(minutes=15)),
    ],
)
def test_retry_delay_follows_fixed_schedule(retry_count, expected):
    assert retry_delay(retry_count) == expected


def test_negative_count_uses_first_delay():
    assert retry_delay(-1) == timedelta(minutes=1)


def test_next_retry_at_adds_delay_to_now():
    assert next_retry_at(NOW, 1) == NOW + timedelta(seconds=300)
