"""数值字段."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, ClassVar

from markupsafe import Markup

from adminkit.constants import FieldMessages, FieldTypeName
from adminkit.fields.base import FieldType
from adminkit.types.converters import as_int, as_number, as_str

if TYPE_CHECKING:
    from adminkit.types import ErrorList, FieldOptions

STEP_TOLERANCE = 1e-4
NUMBER_FORMATS = ("integer", "decimal", "float")


def format_number(value: float, options: FieldOptions) -> str:
    """按千分位、小数位与前后缀配置格式化数值."""
    if options["format"] == "integer":
        body = f"{round(value):,}"
    else:
        places = as_int(options["decimal_places"], default=2) or 0
        body = f"{value:,.{places}f}"
    thousands = as_str(options["thousands_separator"])
    decimal = as_str(options["decimal_separator"], default=".")
    body = body.replace(",", "\0").replace(".", decimal).replace("\0", thousands)
    prefix = as_str(options["prefix"])
    suffix = as_str(options["suffix"])
    if prefix:
        body = f"{prefix} {body}"
    if suffix:
        body = f"{body} {suffix}"
    return body


def _as_float(number: int | float) -> float | None:
    """转换为有限浮点数,超出浮点范围时返回 None."""
    try:
        converted = float(number)
    except OverflowError:
        return None
    return converted if math.isfinite(converted) else None


def _is_representable(number: int | float, options: FieldOptions) -> bool:
    # 整数格式直接保存 Python int,其余格式需能转为有限浮点数
    if options["format"] == "integer" and isinstance(number, int):
        return True
    return _as_float(number) is not None


def step_remainder(number: int | float, base: int | float, step: int | float) -> float | None:
    """计算 ``number`` 相对 ``base`` 按 ``step`` 取余的偏差.

    三者均为整数时按整数精确计算; 否则走浮点运算,溢出时返回 None.
    """
    if isinstance(number, int) and isinstance(base, int) and isinstance(step, int):
        remainder = (number - base) % step
        return float(min(remainder, step - remainder))
    try:
        remainder = abs(math.fmod(number - base, step))
    except OverflowError:
        return None
    return min(remainder, step - remainder)


class NumberFieldType(FieldType):
    """整数或小数.

    校验顺序: 是否为数值(失败即停止),上下限,步长,整数约束.
    步长以 ``min`` (缺省为 0) 为基准计算余数,容差为 1e-4.
    """

    type_name: ClassVar[str] = FieldTypeName.NUMBER.value
    template_name: ClassVar[str] = "adminkit/fields/text.html"
    DEFAULT_OPTIONS: ClassVar[FieldOptions] = {
        "min": None,
        "max": None,
        "step": 1,
        "format": "integer",
        "prefix": None,
        "suffix": None,
        "decimal_places": 2,
        "thousands_separator": ",",
        "decimal_separator": ".",
    }

    def _render_display(self, value: object, options: FieldOptions) -> Markup:
        number = as_number(value)
        if number is None:
            raise ValueError(f"non-numeric value: {value!r}")
        return Markup('<span class="font-monospace text-end">{0}</span>').format(format_number(number, options))

    def _validate_value(self, value: object, options: FieldOptions) -> ErrorList:
        number = as_number(value)
        if number is None or not _is_representable(number, options):
            return [self.message(FieldMessages.NOT_A_NUMBER, options)]

        errors: ErrorList = []
        minimum = as_number(options["min"])
        maximum = as_number(options["max"])
        if minimum is not None and number < minimum:
            errors.append(self.message(FieldMessages.NUMBER_TOO_SMALL, options, min=minimum))
        if maximum is not None and number > maximum:
            errors.append(self.message(FieldMessages.NUMBER_TOO_LARGE, options, max=maximum))

        step = as_number(options["step"])
        if step is not None and step > 0:
            deviation = step_remainder(number, minimum or 0, step)
            if deviation is None or deviation > STEP_TOLERANCE:
                errors.append(self.message(FieldMessages.NUMBER_STEP, options, step=step))

        if options["format"] == "integer" and number != int(number):
            errors.append(self.message(FieldMessages.NUMBER_NOT_INTEGER, options))
        return errors

    def _process(self, value: object, options: FieldOptions) -> object:
        number = as_number(value)
        if number is None:
            return None
        if options["format"] == "integer" and isinstance(number, int):
            return number
        converted = _as_float(number)
        if converted is None:
            return None
        if options["format"] == "integer":
            # 非整数值保留为 float,避免静默截断
            return int(converted) if converted.is_integer() else converted
        return converted

    def _input_attrs(self, name: str, value: object, options: FieldOptions) -> dict[str, object]:
        return {
            "type": "number",
            "value": as_str(value),
            "min": options["min"],
            "max": options["max"],
            "step": options["step"] if options["format"] == "integer" else options["step"] or "any",
            "inputmode": "numeric" if options["format"] == "integer" else "decimal",
        }

    def _extra_context(self, name: str, value: object, options: FieldOptions) -> dict[str, object]:
        return {"prefix": options["prefix"], "suffix": options["suffix"]}
