"""日期与日期时间字段的单元测试."""

from datetime import date, datetime, timedelta

import pytest

from adminkit.fields.date import DateFieldType
from adminkit.fields.date_time import DateTimeFieldType


@pytest.mark.unit
def test_date_validate_rejects_invalid_date() -> None:
    assert DateFieldType().validate("2024-02-30", {"label": "日期"}) == ["日期不是有效的日期"]


@pytest.mark.unit
def test_date_validate_inclusive_bounds() -> None:
    field_type = DateFieldType()
    options = {"min_date": "2024-06-01", "max_date": "2024-06-30", "label": "开始日期"}

    assert field_type.validate("2024-05-31", options) == ["开始日期不能早于 2024-06-01"]
    assert field_type.validate("2024-07-01", options) == ["开始日期不能晚于 2024-06-30"]
    assert field_type.validate("2024-06-01", options) == []
    assert field_type.validate("2024-06-30", options) == []


@pytest.mark.unit
def test_date_validate_weekends_holidays_and_lists() -> None:
    field_type = DateFieldType()

    # 2024-06-01 是周六
    assert field_type.validate("2024-06-01", {"disable_weekends": True, "label": "日期"}) == ["日期不能是周末"]
    assert field_type.validate("2024-10-01", {"disable_holidays": True, "label": "日期"}) == ["日期不能是节假日"]
    assert field_type.validate("2024-06-03", {"disabled_dates": ["2024-06-03"], "label": "日期"}) == [
        "日期不可选择: 2024-06-03",
    ]
    assert field_type.validate("2024-06-04", {"allowed_dates": ["2024-06-03"], "label": "日期"}) == [
        "日期必须是允许的日期之一",
    ]


@pytest.mark.unit
def test_date_process_accepts_common_formats() -> None:
    field_type = DateFieldType()

    assert field_type.process_form_value("2024-06-03") == date(2024, 6, 3)
    assert field_type.process_form_value("2024/06/03") == date(2024, 6, 3)
    assert field_type.process_form_value("2024年06月03日") == date(2024, 6, 3)
    assert field_type.process_form_value("garbage") is None


@pytest.mark.unit
def test_date_display_and_input() -> None:
    field_type = DateFieldType()

    html = field_type.render_display("2024-06-03", {"show_relative": False})
    control = field_type.render_form_input("start", "2024-06-03", {"min_date": "2024-01-01", "disable_weekends": True})

    assert html == '<time datetime="2024-06-03">2024-06-03</time>'
    assert 'type="date"' in control
    assert 'min="2024-01-01"' in control
    assert 'data-behavior="date-constraints"' in control


@pytest.mark.unit
def test_datetime_process_returns_aware_value_in_configured_timezone() -> None:
    field_type = DateTimeFieldType()

    local = field_type.process_form_value("2024-06-03T10:30")
    converted = field_type.process_form_value("2024-06-03T00:00:00+00:00")

    assert local.replace(tzinfo=None) == datetime(2024, 6, 3, 10, 30)
    assert local.utcoffset() == timedelta(hours=8)
    assert converted.hour == 8


@pytest.mark.unit
def test_datetime_separate_fields_are_combined() -> None:
    field_type = DateTimeFieldType()

    combined = field_type.process_form_value({"date": "2024-06-03", "time": "08:15"}, {"separate_fields": True})

    assert combined.replace(tzinfo=None) == datetime(2024, 6, 3, 8, 15)
    assert field_type.process_form_value({"date": "", "time": "08:15"}) is None


@pytest.mark.unit
def test_datetime_validate_invalid_and_bounds() -> None:
    field_type = DateTimeFieldType()

    assert field_type.validate("not a date", {"label": "时间"}) == ["时间不是有效的日期时间"]
    assert field_type.validate("2024-01-01T00:00", {"min_date": "2024-06-01T00:00", "label": "时间"}) == [
        "时间不能早于 2024-06-01 00:00",
    ]


@pytest.mark.unit
def test_datetime_out_of_range_offset_is_reported_as_invalid() -> None:
    field_type = DateTimeFieldType()
    edge = "9999-12-31T23:59:59-05:00"

    assert field_type.validate(edge, {"label": "时间"}) == ["时间不是有效的日期时间"]
    assert field_type.process_form_value(edge) is None
