"""请求负载解析工具.

将 ``request.form`` / ``request.files`` 这类扁平 MultiDict 中的
``items[0][title]``、``tags[]`` 形式的键还原为嵌套的字典与列表.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping

_KEY_PATTERN = re.compile(r"^([^\[\]]+)((?:\[[^\[\]]*\])*)$")
_SEGMENT_PATTERN = re.compile(r"\[([^\[\]]*)\]")


def split_key(key: str) -> list[str]:
    """拆分带方括号的键.

    Example:
        >>> split_key("items[0][title]")
        ['items', '0', 'title']

    """
    match = _KEY_PATTERN.match(key)
    if not match:
        return [key]
    return [match.group(1), *_SEGMENT_PATTERN.findall(match.group(2))]


def _iter_lists(source: Mapping[str, object]) -> list[tuple[str, list[object]]]:
    lists = getattr(source, "lists", None)
    if callable(lists):
        return [(key, list(values)) for key, values in lists()]
    return [
        (key, list(value) if isinstance(value, (list, tuple)) else [value])
        for key, value in source.items()
    ]


def _assign(container: dict[str, object], parts: list[str], values: list[object]) -> None:
    key, rest = parts[0], parts[1:]
    if not rest:
        container[key] = values[0] if len(values) == 1 else list(values)
        return
    if rest == [""]:
        existing = container.get(key)
        if not isinstance(existing, list):
            existing = []
            container[key] = existing
        existing.extend(values)
        return
    child = container.get(key)
    if not isinstance(child, dict):
        child = {}
        container[key] = child
    _assign(child, rest, values)


def parse_form_payload(
    form: Mapping[str, object],
    files: Mapping[str, object] | None = None,
    *,
    convert_file: Callable[[object], object | None] | None = None,
) -> dict[str, object]:
    """将扁平的表单与文件映射合并为嵌套字典.

    Args:
        form: 表单字段映射,支持 MultiDict.
        files: 上传文件映射,支持 MultiDict.
        convert_file: 文件转换函数,返回 None 表示忽略该文件(例如未选择文件).

    Returns:
        dict: 嵌套后的提交数据.

    """
    payload: dict[str, object] = {}
    for key, values in _iter_lists(form):
        if values:
            _assign(payload, split_key(key), values)

    if files:
        for key, values in _iter_lists(files):
            converted = [convert_file(item) if convert_file else item for item in values]
            kept = [item for item in converted if item is not None]
            if kept:
                _assign(payload, split_key(key), kept)
    return payload


__all__ = ["parse_form_payload", "split_key"]
