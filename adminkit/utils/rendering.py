"""标记渲染工具.

字段、表单、表格与菜单的 HTML 均由包内 Jinja2 模板生成,
模板环境独立于 Flask 应用,因此在请求上下文之外同样可用.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from functools import lru_cache

from jinja2 import Environment, PackageLoader, select_autoescape
from markupsafe import Markup, escape

PLACEHOLDER_CLASS = "text-muted"
_TAG_PATTERN = re.compile(r"<[^>]*>")
_ID_UNSAFE_PATTERN = re.compile(r"[^A-Za-z0-9_-]+")
_BYTE_UNITS = ("B", "KB", "MB", "GB", "TB")


@lru_cache(maxsize=1)
def get_environment() -> Environment:
    """返回共享的模板环境(开启自动转义)."""
    environment = Environment(
        loader=PackageLoader("adminkit", "templates"),
        autoescape=select_autoescape(default=True, default_for_string=True),
        trim_blocks=True,
        lstrip_blocks=True,
    )
    environment.filters["format_bytes"] = format_bytes
    return environment


def render_markup(template_name: str, **context: object) -> Markup:
    """渲染包内模板并返回已转义的 Markup.

    Args:
        template_name: 模板路径,例如 ``adminkit/fields/text.html``.
        **context: 模板上下文.

    Returns:
        Markup: 渲染结果.

    """
    template = get_environment().get_template(template_name)
    return Markup(template.render(**context))


def placeholder(text: str = "-") -> Markup:
    """空值占位标记."""
    return Markup('<span class="{0}">{1}</span>').format(PLACEHOLDER_CLASS, text)


def build_attrs(*sources: Mapping[str, object] | None) -> dict[str, str | None]:
    """合并多个属性字典,转换为适合 ``xmlattr`` 的形式.

    True 渲染为同名属性值,False/None 被忽略,其余值转为字符串.后出现的字典优先.
    """
    merged: dict[str, str | None] = {}
    for source in sources:
        if not source:
            continue
        for key, value in source.items():
            if value is None or value is False:
                merged.pop(key, None)
                continue
            merged[key] = key if value is True else str(value)
    return merged


def field_id(name: str) -> str:
    """根据输入名生成稳定的 DOM id."""
    return "field_" + _ID_UNSAFE_PATTERN.sub("_", name).strip("_")


def format_bytes(size: object, precision: int = 1) -> str:
    """将字节数格式化为可读文本."""
    try:
        value = float(size)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return "-"
    unit_index = 0
    while value >= 1024 and unit_index < len(_BYTE_UNITS) - 1:
        value /= 1024
        unit_index += 1
    if unit_index == 0:
        return f"{int(value)} {_BYTE_UNITS[0]}"
    return f"{value:.{precision}f} {_BYTE_UNITS[unit_index]}"


def truncate_text(text: str, length: int | None, suffix: str = "...") -> str:
    """超过 ``length`` 时截断并追加后缀."""
    if length is None or length <= 0 or len(text) <= length:
        return text
    return text[:length] + suffix


def strip_tags(text: str) -> str:
    """移除 HTML 标签,保留换行."""
    return _TAG_PATTERN.sub("", text)


def nl2br(text: str) -> Markup:
    """转义文本并将换行转换为 ``<br>``."""
    escaped = escape(text)
    return Markup("<br>\n").join(escaped.split("\n"))


__all__ = [
    "build_attrs",
    "field_id",
    "format_bytes",
    "get_environment",
    "nl2br",
    "placeholder",
    "render_markup",
    "strip_tags",
    "truncate_text",
]
