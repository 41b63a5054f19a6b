"""日期时间字段."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import TYPE_CHECKING, ClassVar

from markupsafe import Markup

from adminkit.constants import FieldMessages, FieldTypeName
from adminkit.fields.base import FieldType
from adminkit.types.converters import as_int, as_str, is_empty
from adminkit.utils.rendering import placeholder
from adminkit.utils.time_utils import DEFAULT_TIMEZONE, TimeFormats, time_utils

if TYPE_CHECKING:
    from adminkit.types import ErrorList, FieldOptions


class DateTimeFieldType(FieldType):
    """日期时间选择.

    ``separate_fields`` 开启时提交值为 ``{"date": ..., "time": ...}``;
    无时区的输入按 ``timezone`` 解释,取值结果为该时区下的 aware datetime.
    """

    type_name: ClassVar[str] = FieldTypeName.DATETIME.value
    template_name: ClassVar[str] = "adminkit/fields/date_time.html"
    DEFAULT_OPTIONS: ClassVar[FieldOptions] = {
        "display_format": TimeFormats.DATETIME_MINUTE_FORMAT,
        "min_date": None,
        "max_date": None,
        "timezone": DEFAULT_TIMEZONE,
        "show_timezone": False,
        "show_seconds": False,
        "step": 60,
        "separate_fields": False,
        "show_relative": True,
    }

    def is_empty_value(self, value: object) -> bool:
        if isinstance(value, Mapping):
            return is_empty(value.get("date"))
        return is_empty(value)

    def parse(self, value: object, options: Mapping[str, object]) -> datetime | None:
        tz_name = as_str(options.get("timezone"), default=DEFAULT_TIMEZONE)
        if isinstance(value, Mapping):
            day = as_str(value.get("date")).strip()
            clock = as_str(value.get("time")).strip() or "00:00"
            if not day:
                return None
            value = f"{day} {clock}"
        return time_utils.parse_datetime(value, tz_name)

    def _render_display(self, value: object, options: FieldOptions) -> Markup:
        parsed = self.parse(value, options)
        if parsed is None:
            return placeholder(as_str(options["display_empty"], default="-"))
        fmt = as_str(options["display_format"], default=TimeFormats.DATETIME_MINUTE_FORMAT)
        text = parsed.strftime(fmt)
        if options["show_timezone"]:
            text = f"{text} ({parsed.tzname()})"
        title = time_utils.get_relative_time(parsed) if options["show_relative"] else None
        if title:
            return Markup('<time datetime="{0}" title="{1}">{2}</time>').format(parsed.isoformat(), title, text)
        return Markup('<time datetime="{0}">{1}</time>').format(parsed.isoformat(), text)

    def _validate_value(self, value: object, options: FieldOptions) -> ErrorList:
        parsed = self.parse(value, options)
        if parsed is None:
            return [self.message(FieldMessages.INVALID_DATETIME, options)]
        errors: ErrorList = []
        lower = self.parse(options["min_date"], options) if options["min_date"] else None
        upper = self.parse(options["max_date"], options) if options["max_date"] else None
        fmt = TimeFormats.DATETIME_MINUTE_FORMAT
        if lower is not None and parsed < lower:
            errors.append(self.message(FieldMessages.DATE_BEFORE_MIN, options, min=lower.strftime(fmt)))
        if upper is not None and parsed > upper:
            errors.append(self.message(FieldMessages.DATE_AFTER_MAX, options, max=upper.strftime(fmt)))
        return errors

    def _process(self, value: object, options: FieldOptions) -> object:
        return self.parse(value, options)

    def _input_attrs(self, name: str, value: object, options: FieldOptions) -> dict[str, object]:
        if options["separate_fields"]:
            return {"name": None, "id": None, "placeholder": None}
        parsed = self.parse(value, options) if not self.is_empty_value(value) else None
        fmt = TimeFormats.HTML_DATETIME_LOCAL_FORMAT + (":%S" if options["show_seconds"] else "")
        lower = self.parse(options["min_date"], options) if options["min_date"] else None
        upper = self.parse(options["max_date"], options) if options["max_date"] else None
        return {
            "type": "datetime-local",
            "value": parsed.strftime(fmt) if parsed else None,
            "min": lower.strftime(fmt) if lower else None,
            "max": upper.strftime(fmt) if upper else None,
            "step": 1 if options["show_seconds"] else as_int(options["step"], default=60),
        }

    def _extra_context(self, name: str, value: object, options: FieldOptions) -> dict[str, object]:
        parsed = self.parse(value, options) if not self.is_empty_value(value) else None
        time_fmt = TimeFormats.TIME_FORMAT if options["show_seconds"] else TimeFormats.TIME_MINUTE_FORMAT
        return {
            "separate_fields": bool(options["separate_fields"]),
            "date_value": parsed.strftime(TimeFormats.DATE_FORMAT) if parsed else "",
            "time_value": parsed.strftime(time_fmt) if parsed else "",
            "css_class": options["css_class"],
            "disabled": bool(options["disabled"]),
            "readonly": bool(options["readonly"]),
            "timezone": as_str(options["timezone"]) if options["show_timezone"] else None,
        }
