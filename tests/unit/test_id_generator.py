"""Tests for ap_common.id_generator and ap_common.datetime_utils."""

from datetime import UTC, datetime, timedelta

import pytest

from src.ap_common.datetime_utils import hours_from, seconds_until, utc_now
from src.ap_common.id_generator import SnowflakeIdGenerator, generate_id


class TestSnowflakeIdGenerator:
    def test_unique_ids(self) -> None:
        gen = SnowflakeIdGenerator(machine_id=1)
        ids = {gen.next_int() for _ in range(1000)}
        assert len(ids) == 1000

    def test_monotonically_increasing(self) -> None:
        gen = SnowflakeIdGenerator(machine_id=1)
        prev = gen.next_int()
        for _ in range(100):
            current = gen.next_int()
            assert current > prev
            prev = current

    def test_machine_id_out_of_range(self) -> None:
        with pytest.raises(ValueError):
            SnowflakeIdGenerator(machine_id=1024)

    def test_generate_id_prefix(self) -> None:
        scenario_id = generate_id("SCN-")
        assert scenario_id.startswith("SCN-")
        assert scenario_id[4:].isdigit()


class TestDatetimeUtils:
    def test_utc_now_is_aware(self) -> None:
        now = utc_now()
        assert now.tzinfo is not None
        assert now.utcoffset() == timedelta(0)

    def test_hours_from(self) -> None:
        start = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)
        assert hours_from(start, 6) == datetime(2026, 3, 1, 18, 0, tzinfo=UTC)

    def test_seconds_until_rounds_up(self) -> None:
        now = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)
        assert seconds_until(now + timedelta(seconds=1.2), now) == 2

    def test_seconds_until_past_is_zero(self) -> None:
        now = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)
        assert seconds_until(now - timedelta(minutes=5), now) == 0
