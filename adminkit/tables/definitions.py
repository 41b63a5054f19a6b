"""表格构建器使用的数据结构."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from adminkit.fields.base import FieldType
    from adminkit.types import FieldOptions

SORT_ASC = "asc"
SORT_DESC = "desc"


@dataclass(slots=True)
class ColumnDeclaration:
    """表格中的一列.

    Attributes:
        name: 列名,同时用于从数据行读取值.
        type_name: 字段类型名,只用于展示渲染.
        options: 列配置与字段类型配置合并后的结果.
        field_type: 解析后的字段类型实例.

    """

    name: str
    type_name: str
    options: FieldOptions
    field_type: FieldType = field(repr=False)

    @property
    def visible(self) -> bool:
        return not self.options.get("hidden")

    @property
    def label(self) -> str:
        return str(self.options.get("label") or self.name)


@dataclass(slots=True)
class RowAction:
    """行操作.

    ``url`` 中可以使用 ``{id}`` 与 ``{base_url}`` 占位符.
    ``method`` 为 GET 时渲染为链接,其余方法渲染为带 ``data-action`` 的按钮,由前端脚本提交.
    """

    name: str
    label: str
    url: str
    method: str = "GET"
    icon: str | None = None
    css_class: str = "btn btn-sm btn-outline-secondary"
    confirm: str | None = None

    def resolve_url(self, row_id: str, base_url: str) -> str:
        return self.url.format(id=row_id, base_url=base_url.rstrip("/"))


@dataclass(slots=True)
class SortState:
    """当前排序状态."""

    field: str | None = None
    direction: str = SORT_ASC

    @property
    def ascending(self) -> bool:
        return self.direction == SORT_ASC


@dataclass(slots=True)
class PaginationState:
    """当前分页状态,``total_pages`` 为 0 表示数据为空."""

    current_page: int = 1
    total_pages: int = 0
    total_items: int = 0
    per_page: int = 20

    @property
    def offset(self) -> int:
        return (self.current_page - 1) * self.per_page


def default_row_actions() -> list[RowAction]:
    """默认提供查看、编辑与删除三个行操作."""
    return [
        RowAction(name="view", label="查看", url="{base_url}/{id}", icon="fa-eye"),
        RowAction(
            name="edit",
            label="编辑",
            url="{base_url}/{id}/edit",
            icon="fa-edit",
            css_class="btn btn-sm btn-outline-primary",
        ),
        RowAction(
            name="delete",
            label="删除",
            url="{base_url}/{id}/delete",
            method="POST",
            icon="fa-trash",
            css_class="btn btn-sm btn-outline-danger",
            confirm="确定要删除这条记录吗?",
        ),
    ]


__all__ = [
    "SORT_ASC",
    "SORT_DESC",
    "ColumnDeclaration",
    "PaginationState",
    "RowAction",
    "SortState",
    "default_row_actions",
]
