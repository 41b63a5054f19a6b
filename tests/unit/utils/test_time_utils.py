"""时间工具的单元测试."""

from datetime import UTC, date, datetime, timedelta

import pytest

from adminkit.utils.time_utils import TimeUtils

NOW = datetime(2024, 6, 10, 12, 0, tzinfo=UTC)


@pytest.mark.unit
def test_parse_date_accepts_iso_and_local_formats() -> None:
    assert TimeUtils.parse_date("2024-06-01") == date(2024, 6, 1)
    assert TimeUtils.parse_date("2024/06/01") == date(2024, 6, 1)
    assert TimeUtils.parse_date("2024年06月01日") == date(2024, 6, 1)
    assert TimeUtils.parse_date("2024-06-01T08:30:00") == date(2024, 6, 1)
    assert TimeUtils.parse_date(datetime(2024, 6, 1, 8, 30)) == date(2024, 6, 1)
    assert TimeUtils.parse_date("not a date") is None
    assert TimeUtils.parse_date(20240601) is None


@pytest.mark.unit
def test_parse_datetime_attaches_or_converts_timezone() -> None:
    naive = TimeUtils.parse_datetime("2024-06-01 08:30")
    assert naive.hour == 8
    assert str(naive.tzinfo) == "Asia/Shanghai"

    converted = TimeUtils.parse_datetime("2024-06-01T00:00:00+00:00")
    assert converted.hour == 8

    assert TimeUtils.parse_datetime("2024/06/01 08:30", "UTC").tzinfo is not None
    assert TimeUtils.parse_datetime("garbage") is None


@pytest.mark.unit
def test_get_zone_falls_back_to_utc() -> None:
    assert str(TimeUtils.get_zone("Invalid/Zone")) == "UTC"
    assert str(TimeUtils.get_zone(None)) == "UTC"


@pytest.mark.unit
def test_get_relative_time_describes_distance() -> None:
    assert TimeUtils.get_relative_time(None) == "-"
    assert TimeUtils.get_relative_time(NOW - timedelta(seconds=30), now=NOW) == "刚刚"
    assert TimeUtils.get_relative_time(NOW - timedelta(minutes=5), now=NOW) == "5分钟前"
    assert TimeUtils.get_relative_time(NOW + timedelta(hours=2), now=NOW) == "2小时后"
    assert TimeUtils.get_relative_time(NOW - timedelta(days=3), now=NOW) == "3天前"
    assert TimeUtils.get_relative_time(date(2024, 6, 10), now=NOW) == "今天"
    assert TimeUtils.get_relative_time(date(2024, 6, 9), now=NOW) == "昨天"
    assert TimeUtils.get_relative_time(date(2024, 5, 27), now=NOW) == "2周前"
    assert TimeUtils.get_relative_time(date(2025, 6, 10), now=NOW) == "1年后"


@pytest.mark.unit
def test_parse_datetime_returns_none_when_conversion_overflows() -> None:
    assert TimeUtils.parse_datetime("9999-12-31T23:59:59-05:00", "Asia/Shanghai") is None
    assert TimeUtils.parse_datetime("0001-01-01T00:00:00+05:00", "UTC") is None
