"""Tests for pm_common.id_generator and pm_common.datetime_utils."""

from datetime import UTC, datetime, timedelta, timezone

from src.pm_common.datetime_utils import as_utc, is_valid_timezone, iso, utc_now
from src.pm_common.id_generator import SnowflakeIdGenerator, generate_id, is_object_id


class TestSnowflakeIdGenerator:
    def test_returns_16_hex_chars(self) -> None:
        gen = SnowflakeIdGenerator(machine_id=1)
        result = gen.next_id()
        assert isinstance(result, str)
        assert len(result) == 16
        assert is_object_id(result)

    def test_unique_ids(self) -> None:
        gen = SnowflakeIdGenerator(machine_id=1)
        ids = {gen.next_id() for _ in range(1000)}
        assert len(ids) == 1000

    def test_monotonically_increasing(self) -> None:
        gen = SnowflakeIdGenerator(machine_id=1)
        prev = gen.next_id()
        for _ in range(100):
            current = gen.next_id()
            assert int(current, 16) > int(prev, 16)
            assert current > prev  # string order follows numeric order
            prev = current

    def test_clock_moving_backwards_keeps_increasing(self) -> None:
        gen = SnowflakeIdGenerator(machine_id=1)
        first = gen.next_int()
        gen._now_ms = lambda: gen._last_ms - 5  # type: ignore[method-assign]
        assert gen.next_int() > first


class TestIsObjectId:
    def test_generated_id(self) -> None:
        assert is_object_id(generate_id())

    def test_codes_are_not_ids(self) -> None:
        assert not is_object_id("DEV-000001")
        assert not is_object_id("A")
        assert not is_object_id("0123456789ABCDEF")


class TestUtcNow:
    def test_returns_aware_datetime(self) -> None:
        now = utc_now()
        assert isinstance(now, datetime)
        assert now.tzinfo is not None

    def test_is_utc(self) -> None:
        now = utc_now()
        assert now.tzinfo == UTC


class TestDatetimeHelpers:
    def test_naive_is_taken_as_utc(self) -> None:
        assert as_utc(datetime(2030, 1, 1)).tzinfo == UTC

    def test_aware_is_converted(self) -> None:
        tokyo = timezone(timedelta(hours=9))
        converted = as_utc(datetime(2030, 1, 1, 9, tzinfo=tokyo))
        assert converted == datetime(2030, 1, 1, 0, tzinfo=UTC)

    def test_iso_none(self) -> None:
        assert iso(None) is None

    def test_valid_timezones(self) -> None:
        assert is_valid_timezone("UTC")
        assert is_valid_timezone("Asia/Tokyo")

    def test_invalid_timezones(self) -> None:
        assert not is_valid_timezone("Mars/Olympus_Mons")
        assert not is_valid_timezone("")
        assert not is_valid_timezone("../etc/passwd")
