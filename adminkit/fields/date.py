"""日期字段."""

from __future__ import annotations

import json
from datetime import date
from typing import TYPE_CHECKING, ClassVar

from markupsafe import Markup

from adminkit.constants import FieldMessages, FieldTypeName
from adminkit.fields.base import FieldType
from adminkit.types.converters import as_str
from adminkit.utils.rendering import placeholder
from adminkit.utils.time_utils import DEFAULT_TIMEZONE, TimeFormats, time_utils

if TYPE_CHECKING:
    from adminkit.types import ErrorList, FieldOptions

# 固定日期的法定节假日(MM-DD),农历节日需由调用方通过 disabled_dates 补充
DEFAULT_HOLIDAYS = ("01-01", "05-01", "05-02", "05-03", "10-01", "10-02", "10-03")
SATURDAY = 5


def _date_set(values: object) -> set[date]:
    if not isinstance(values, (list, tuple, set, frozenset)):
        return set()
    parsed = (time_utils.parse_date(item) for item in values)
    return {item for item in parsed if item is not None}


class DateFieldType(FieldType):
    """日期选择,上下限均为闭区间."""

    type_name: ClassVar[str] = FieldTypeName.DATE.value
    template_name: ClassVar[str] = "adminkit/fields/text.html"
    DEFAULT_OPTIONS: ClassVar[FieldOptions] = {
        "display_format": TimeFormats.DATE_FORMAT,
        "min_date": None,
        "max_date": None,
        "disable_weekends": False,
        "disabled_dates": [],
        "allowed_dates": [],
        "disable_holidays": False,
        "holidays": list(DEFAULT_HOLIDAYS),
        "show_relative": True,
    }

    def _render_display(self, value: object, options: FieldOptions) -> Markup:
        parsed = time_utils.parse_date(value)
        if parsed is None:
            return placeholder(as_str(options["display_empty"], default="-"))
        text = parsed.strftime(as_str(options["display_format"], default=TimeFormats.DATE_FORMAT))
        if options["show_relative"]:
            relative = time_utils.get_relative_time(parsed, time_utils.now(DEFAULT_TIMEZONE))
            return Markup('<time datetime="{0}" title="{1}">{2}</time>').format(parsed.isoformat(), relative, text)
        return Markup('<time datetime="{0}">{1}</time>').format(parsed.isoformat(), text)

    def _validate_value(self, value: object, options: FieldOptions) -> ErrorList:
        parsed = time_utils.parse_date(value)
        if parsed is None:
            return [self.message(FieldMessages.INVALID_DATE, options)]

        errors: ErrorList = []
        min_date = time_utils.parse_date(options["min_date"])
        max_date = time_utils.parse_date(options["max_date"])
        if min_date is not None and parsed < min_date:
            errors.append(self.message(FieldMessages.DATE_BEFORE_MIN, options, min=min_date.isoformat()))
        if max_date is not None and parsed > max_date:
            errors.append(self.message(FieldMessages.DATE_AFTER_MAX, options, max=max_date.isoformat()))
        if options["disable_weekends"] and parsed.weekday() >= SATURDAY:
            errors.append(self.message(FieldMessages.DATE_WEEKEND, options))
        if options["disable_holidays"] and parsed.strftime("%m-%d") in set(options["holidays"] or ()):
            errors.append(self.message(FieldMessages.DATE_HOLIDAY, options))
        if parsed in _date_set(options["disabled_dates"]):
            errors.append(self.message(FieldMessages.DATE_DISABLED, options, date=parsed.isoformat()))
        allowed = _date_set(options["allowed_dates"])
        if allowed and parsed not in allowed:
            errors.append(self.message(FieldMessages.DATE_NOT_ALLOWED, options))
        return errors

    def _process(self, value: object, options: FieldOptions) -> object:
        return time_utils.parse_date(value)

    def _input_attrs(self, name: str, value: object, options: FieldOptions) -> dict[str, object]:
        parsed = time_utils.parse_date(value)
        min_date = time_utils.parse_date(options["min_date"])
        max_date = time_utils.parse_date(options["max_date"])
        disabled = sorted(item.isoformat() for item in _date_set(options["disabled_dates"]))
        constrained = options["disable_weekends"] or disabled
        return {
            "type": "date",
            "value": parsed.isoformat() if parsed else as_str(value),
            "min": min_date.isoformat() if min_date else None,
            "max": max_date.isoformat() if max_date else None,
            "data-behavior": "date-constraints" if constrained else None,
            "data-disable-weekends": "true" if options["disable_weekends"] else None,
            "data-disabled-dates": json.dumps(disabled) if disabled else None,
        }
