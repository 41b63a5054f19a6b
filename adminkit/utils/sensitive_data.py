"""表单提交数据脱敏工具.

日志中记录被拒绝的提交时,需要把密码、令牌等字段替换为掩码.
表单键可能是 ``items[0][password]`` 这样的嵌套写法,按最后一段判断;
MultiDict 中同名多值会整体保留为列表后再脱敏.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence

DEFAULT_SENSITIVE_KEYS = frozenset(
    {
        "password",
        "password_confirmation",
        "csrf_token",
        "secret",
        "secret_key",
        "api_key",
        "token",
    },
)

# 以这些后缀结尾的键同样视为敏感,如 new_password、access_token
SENSITIVE_SUFFIXES = ("_password", "_token", "_secret")

_BRACKET_SEGMENT = re.compile(r"\[([^\[\]]*)\]")


def leaf_key(name: str) -> str:
    """取表单键的最后一个有效片段,``items[0][password]`` 返回 ``password``."""
    segments = [segment for segment in _BRACKET_SEGMENT.findall(name) if segment and not segment.isdigit()]
    if segments:
        return segments[-1].lower()
    return name.split("[", 1)[0].lower()


def is_sensitive_key(name: str, extra_keys: frozenset[str] = frozenset()) -> bool:
    key = leaf_key(name)
    if key in DEFAULT_SENSITIVE_KEYS or key in extra_keys:
        return True
    return key.endswith(SENSITIVE_SUFFIXES)


def _flatten_multidict(payload: Mapping[str, object]) -> dict[str, object]:
    lists = getattr(payload, "lists", None)
    if not callable(lists):
        return dict(payload)
    flattened: dict[str, object] = {}
    for key, values in lists():
        flattened[key] = values[0] if len(values) == 1 else list(values)
    return flattened


def scrub_sensitive_fields(
    payload: Mapping[str, object] | None,
    *,
    extra_keys: Sequence[str] | None = None,
    mask: str = "***",
) -> dict[str, object]:
    """脱敏敏感字段,返回新的字典副本.

    Args:
        payload: 原始数据,可以是 dict 或 MultiDict.
        extra_keys: 额外需要脱敏的字段名,例如表单中的密码字段及其确认字段.
        mask: 替换后的掩码字符串.

    Returns:
        已脱敏的字典,不会修改原始对象.

    """
    if not isinstance(payload, Mapping):
        return {}

    extra = frozenset(str(key).lower() for key in extra_keys or ())

    def _scrub(value: object, field_name: str | None) -> object:
        if field_name is not None and is_sensitive_key(field_name, extra):
            return mask
        if isinstance(value, Mapping):
            return {str(k): _scrub(v, str(k)) for k, v in value.items()}
        if isinstance(value, (list, tuple)):
            return [_scrub(item, None) for item in value]
        return value

    return {str(key): _scrub(value, str(key)) for key, value in _flatten_multidict(payload).items()}


__all__ = ["DEFAULT_SENSITIVE_KEYS", "is_sensitive_key", "leaf_key", "scrub_sensitive_fields"]
