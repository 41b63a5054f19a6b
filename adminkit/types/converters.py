"""表单数据类型转换工具.

提供稳定的转换函数,将提交的原始值(字符串或字符串列表)映射为具体的
str/bool/int/float 类型,供字段类型在 ``process_form_value`` 中复用.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from decimal import Decimal

_STRING_LIKE_TYPES = (str, bytes, bytearray)
_NUMERIC_PATTERN = re.compile(r"^\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?\s*$")


def _unwrap_sequence(value: object) -> object:
    if isinstance(value, Sequence) and not isinstance(value, _STRING_LIKE_TYPES):
        if not value:
            return None
        return value[-1]
    return value


def is_empty(value: object) -> bool:
    """判断提交值是否为空.

    None、空白字符串、空列表与空字典均视为空; ``0`` 与 ``False`` 不视为空.
    """
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (Sequence, Mapping)) and not isinstance(value, (bytes, bytearray)):
        return len(value) == 0
    return False


def as_str(value: object, *, default: str = "") -> str:
    base = _unwrap_sequence(value)
    if base is None:
        return default
    if isinstance(base, str):
        return base
    if isinstance(base, (bytes, bytearray)):
        return base.decode()
    return str(base)


def as_optional_str(value: object) -> str | None:
    cleaned = as_str(value, default="").strip()
    return cleaned or None


def as_int(value: object, *, default: int | None = None) -> int | None:
    base = _unwrap_sequence(value)
    if base is None:
        return default
    if isinstance(base, bool):
        return int(base)
    if isinstance(base, (int, float, Decimal)):
        return int(base)
    if isinstance(base, str):
        stripped = base.strip()
        if not stripped:
            return default
        try:
            return int(stripped, 10)
        except ValueError:
            return default
    return default


def as_number(value: object) -> int | float | None:
    """解析数值,无法解析时返回 None.

    布尔值不视为数值; 字符串需满足十进制或科学计数法格式.
    """
    base = _unwrap_sequence(value)
    if base is None or isinstance(base, bool):
        return None
    if isinstance(base, int):
        return base
    if isinstance(base, (float, Decimal)):
        return float(base)
    if isinstance(base, str) and _NUMERIC_PATTERN.match(base):
        stripped = base.strip()
        if re.fullmatch(r"[+-]?\d+", stripped):
            return int(stripped, 10)
        return float(stripped)
    return None


def as_bool(value: object, *, default: bool = False) -> bool:
    base = _unwrap_sequence(value)
    if base is None:
        return default
    if isinstance(base, bool):
        return base
    if isinstance(base, (int, float)):
        return bool(base)
    if isinstance(base, str):
        normalized = base.strip().lower()
        if normalized in {"true", "1", "yes", "on"}:
            return True
        if normalized in {"false", "0", "no", "off", ""}:
            return False
        return default
    return default


def as_list_of_str(value: object) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [segment.strip() for segment in value.split(",") if segment.strip()]
    if isinstance(value, Sequence) and not isinstance(value, (bytes, bytearray)):
        result: list[str] = []
        for item in value:
            normalized = as_optional_str(item)
            if normalized:
                result.append(normalized)
        return result
    normalized = as_optional_str(value)
    return [normalized] if normalized else []


def ensure_mapping(value: object) -> Mapping[str, object] | None:
    base = _unwrap_sequence(value)
    if isinstance(base, Mapping):
        return base
    return None
