"""分页参数解析工具.

用于统一解析列表页的分页参数,兼容历史字段.
"""

from __future__ import annotations

import math
from collections.abc import Mapping

from adminkit.utils.structlog_config import log_debug

_LEGACY_PAGE_SIZE_KEYS: tuple[str, ...] = ("limit", "per_page")


def _safe_int(value: object, *, default: int) -> int:
    if value is None:
        return default
    try:
        return int(str(value))
    except (TypeError, ValueError):
        return default


def resolve_page(
    args: Mapping[str, object],
    *,
    default: int = 1,
    minimum: int = 1,
) -> int:
    """解析分页页码.

    Args:
        args: 请求参数映射.
        default: 缺省页码.
        minimum: 最小页码.

    Returns:
        解析后的页码(已做下限保护).

    """
    page = _safe_int(args.get("page"), default=default)
    return max(page, minimum)


def resolve_page_size(
    args: Mapping[str, object],
    *,
    default: int = 20,
    minimum: int = 1,
    maximum: int = 200,
) -> int:
    """解析分页每页数量,兼容历史字段.

    兼容顺序: page_size -> limit -> per_page.

    Args:
        args: 请求参数映射.
        default: 缺省每页数量.
        minimum: 最小值.
        maximum: 最大值.

    Returns:
        解析后的每页数量(已做范围裁剪).

    """
    raw = args.get("page_size")
    legacy_key: str | None = None

    if raw is None:
        for key in _LEGACY_PAGE_SIZE_KEYS:
            candidate = args.get(key)
            if candidate is None:
                continue
            raw = candidate
            legacy_key = key
            break

    page_size = _safe_int(raw, default=default)
    page_size = max(page_size, minimum)
    page_size = min(page_size, maximum)

    if legacy_key:
        log_debug("检测到旧分页参数字段", module="pagination", legacy_key=legacy_key, page_size=page_size)

    return page_size


def count_pages(total_items: int, per_page: int) -> int:
    """根据总数与每页数量计算总页数,空数据集视为 0 页."""
    if total_items <= 0 or per_page <= 0:
        return 0
    return math.ceil(total_items / per_page)


def page_window(current_page: int, total_pages: int, *, radius: int = 2) -> range:
    """返回当前页前后 ``radius`` 页组成的页码窗口."""
    start = max(1, current_page - radius)
    end = min(total_pages, current_page + radius)
    return range(start, end + 1)
