"""表格构建器.

表格是只读的: 单元格一律通过字段类型的 ``render_display`` 渲染,从不调用校验与取值转换.
排序、筛选与分页只负责渲染控件与当前状态,实际查询由调用方根据请求参数完成后再 ``set_data``.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING
from urllib.parse import quote, urlencode

from markupsafe import Markup, escape

from adminkit.fields.base import humanize
from adminkit.fields.choice import flatten_choices
from adminkit.fields.registry import get_default_registry
from adminkit.tables.definitions import (
    SORT_ASC,
    SORT_DESC,
    ColumnDeclaration,
    PaginationState,
    RowAction,
    SortState,
    default_row_actions,
)
from adminkit.types.converters import as_str
from adminkit.utils.entity_access import read_row_id, read_value
from adminkit.utils.entity_config import iter_entity_fields
from adminkit.utils.pagination_utils import count_pages, page_window, resolve_page, resolve_page_size
from adminkit.utils.rendering import render_markup
from adminkit.utils.structlog_config import log_debug

if TYPE_CHECKING:
    from adminkit.fields.base import FieldType
    from adminkit.fields.registry import FieldTypeRegistry

SEARCH_PARAM = "search"
FILTER_PREFIX = "filter_"

DEFAULT_TABLE_CONFIG: dict[str, object] = {
    "css_class": "admin-table table",
    "sortable": True,
    "searchable": True,
    "show_actions": True,
    "show_selection": True,
    "striped": True,
    "bordered": True,
    "responsive": True,
    "actions_column_width": "120px",
    "empty_message": "暂无数据",
    "row_actions": None,
    "base_url": "",
    "row_id_key": "id",
    "row_click_action": None,
}

COLUMN_DEFAULTS: dict[str, object] = {
    "label": None,
    "sortable": True,
    "searchable": True,
    "width": None,
    "align": "left",
    "callback": None,
    "hidden": False,
    "filter_choices": None,
}


class TableBuilder:
    """表格构建器.

    Example:
        >>> table = TableBuilder({"base_url": "/admin/users"})
        >>> table.add_column("name").add_column("active", "boolean")
        >>> table.apply_request_args(request.args).paginate(total, table.page, table.per_page)
        >>> html = table.set_data(rows).render()

    """

    def __init__(
        self,
        config: Mapping[str, object] | None = None,
        *,
        registry: FieldTypeRegistry | None = None,
    ) -> None:
        self._config: dict[str, object] = {**DEFAULT_TABLE_CONFIG, **(config or {})}
        self._registry = registry or get_default_registry()
        self._columns: dict[str, ColumnDeclaration] = {}
        configured_actions = self._config.pop("row_actions")
        self._row_actions: list[RowAction] = (
            list(configured_actions) if isinstance(configured_actions, Sequence) else default_row_actions()
        )
        self._data: list[object] = []
        self._filters: dict[str, str] = {}
        self._sorting = SortState()
        self._pagination: PaginationState | None = None
        self._query: dict[str, str] = {}
        self._page = 1
        self._per_page = 20

    # ------------------------------------------------------------------ #
    # 列声明
    # ------------------------------------------------------------------ #
    def register_field_type(self, name: str, field_type: FieldType) -> TableBuilder:
        if self._registry is get_default_registry():
            self._registry = self._registry.copy()
        self._registry.register(name, field_type)
        return self

    def add_column(self, name: str, type_name: str = "text", options: Mapping[str, object] | None = None) -> TableBuilder:
        """添加列.

        Raises:
            FieldTypeNotFoundError: 字段类型未注册.

        """
        field_type = self._registry.get(type_name)
        options = dict(options or {})
        unknown = [key for key in field_type.unknown_options(options) if key not in COLUMN_DEFAULTS]
        if unknown:
            log_debug("列包含未声明的配置项", module="tables", column=name, field_type=type_name, options=unknown)
        merged = field_type.resolve_options({**COLUMN_DEFAULTS, **options})
        if not merged.get("label"):
            merged["label"] = humanize(name)
        self._columns[name] = ColumnDeclaration(name=name, type_name=type_name, options=merged, field_type=field_type)
        return self

    def remove_column(self, name: str) -> TableBuilder:
        self._columns.pop(name, None)
        return self

    def has_column(self, name: str) -> bool:
        return name in self._columns

    def get_column(self, name: str) -> ColumnDeclaration | None:
        return self._columns.get(name)

    @property
    def columns(self) -> dict[str, ColumnDeclaration]:
        return dict(self._columns)

    @property
    def config(self) -> dict[str, object]:
        return dict(self._config)

    def visible_columns(self) -> list[ColumnDeclaration]:
        return [column for column in self._columns.values() if column.visible]

    def add_action(
        self,
        name: str,
        label: str,
        url: str,
        *,
        method: str = "GET",
        icon: str | None = None,
        css_class: str = "btn btn-sm btn-outline-secondary",
        confirm: str | None = None,
    ) -> TableBuilder:
        """追加或替换同名行操作."""
        action = RowAction(
            name=name,
            label=label,
            url=url,
            method=method.upper(),
            icon=icon,
            css_class=css_class,
            confirm=confirm,
        )
        self._row_actions = [existing for existing in self._row_actions if existing.name != name]
        self._row_actions.append(action)
        return self

    def remove_action(self, name: str) -> TableBuilder:
        self._row_actions = [action for action in self._row_actions if action.name != name]
        return self

    @property
    def row_actions(self) -> list[RowAction]:
        return list(self._row_actions)

    def set_row_click_action(self, name: str | None) -> TableBuilder:
        """点击整行时跳转到指定 GET 行操作的地址."""
        self._config["row_click_action"] = name
        return self

    # ------------------------------------------------------------------ #
    # 状态
    # ------------------------------------------------------------------ #
    def set_data(self, data: Sequence[object]) -> TableBuilder:
        self._data = list(data)
        return self

    def set_filters(self, filters: Mapping[str, object]) -> TableBuilder:
        self._filters = {str(key): as_str(value) for key, value in filters.items()}
        return self

    @property
    def filters(self) -> dict[str, str]:
        return dict(self._filters)

    def set_sorting(self, field: str | None, direction: str = SORT_ASC) -> TableBuilder:
        normalized = as_str(direction).lower()
        self._sorting = SortState(field=field, direction=SORT_DESC if normalized == SORT_DESC else SORT_ASC)
        return self

    @property
    def sorting(self) -> SortState:
        return self._sorting

    def set_pagination(
        self,
        current_page: int,
        total_pages: int,
        total_items: int = 0,
        per_page: int = 20,
    ) -> TableBuilder:
        self._pagination = PaginationState(
            current_page=max(1, current_page),
            total_pages=max(0, total_pages),
            total_items=max(0, total_items),
            per_page=max(1, per_page),
        )
        return self

    def paginate(self, total_items: int, page: int | None = None, per_page: int | None = None) -> TableBuilder:
        """根据总数计算分页状态,页码超出范围时裁剪到最后一页."""
        per_page = per_page or self._per_page
        total_pages = count_pages(total_items, per_page)
        current = min(max(1, page or self._page), max(1, total_pages))
        return self.set_pagination(current, total_pages, total_items, per_page)

    @property
    def pagination(self) -> PaginationState | None:
        return self._pagination

    @property
    def page(self) -> int:
        return self._page

    @property
    def per_page(self) -> int:
        return self._per_page

    def apply_request_args(
        self,
        args: Mapping[str, object],
        *,
        default_page_size: int = 20,
        max_page_size: int = 200,
    ) -> TableBuilder:
        """从查询参数读取分页、排序与筛选状态.

        Args:
            args: 请求查询参数,例如 ``request.args``.
            default_page_size: 未指定时的每页数量.
            max_page_size: 每页数量上限.

        """
        self._query = {str(key): as_str(value) for key, value in args.items() if as_str(value) != ""}
        self._page = resolve_page(args)
        self._per_page = resolve_page_size(args, default=default_page_size, maximum=max_page_size)

        sort_field = as_str(args.get("sort"))
        column = self._columns.get(sort_field)
        if column is not None and column.options.get("sortable"):
            self.set_sorting(sort_field, as_str(args.get("direction"), default=SORT_ASC))

        filters = {SEARCH_PARAM: as_str(args.get(SEARCH_PARAM)).strip()}
        for name, column in self._columns.items():
            if column.options.get("searchable"):
                filters[f"{FILTER_PREFIX}{name}"] = as_str(args.get(f"{FILTER_PREFIX}{name}"))
        self._filters = filters
        return self

    def set_sortable(self, sortable: bool) -> TableBuilder:
        self._config["sortable"] = sortable
        return self

    def set_searchable(self, searchable: bool) -> TableBuilder:
        self._config["searchable"] = searchable
        return self

    def set_selectable(self, selectable: bool) -> TableBuilder:
        self._config["show_selection"] = selectable
        return self

    # ------------------------------------------------------------------ #
    # 渲染
    # ------------------------------------------------------------------ #
    def column_count(self) -> int:
        """表格实际列数,包含选择列与操作列."""
        count = len(self.visible_columns())
        if self._config["show_selection"]:
            count += 1
        if self._config["show_actions"]:
            count += 1
        return count

    def _url_with(self, **params: object) -> str:
        query = dict(self._query)
        for key, value in params.items():
            if value is None:
                query.pop(key, None)
            else:
                query[key] = str(value)
        return "?" + urlencode(query) if query else "?"

    def _header_cells(self) -> list[dict[str, object]]:
        cells = []
        for column in self.visible_columns():
            sortable = bool(self._config["sortable"] and column.options.get("sortable"))
            active = sortable and self._sorting.field == column.name
            indicator = None
            sort_url = None
            if sortable:
                indicator = ("▲" if self._sorting.ascending else "▼") if active else "↕"
                next_direction = SORT_DESC if active and self._sorting.ascending else SORT_ASC
                sort_url = self._url_with(sort=column.name, direction=next_direction, page=None)
            cells.append(
                {
                    "name": column.name,
                    "label": column.label,
                    "width": column.options.get("width"),
                    "sortable": sortable,
                    "active": active,
                    "indicator": indicator,
                    "sort_url": sort_url,
                },
            )
        return cells

    def render_cell(self, row: object, column: ColumnDeclaration) -> Markup:
        """渲染单元格,回调结果除 Markup 外一律转义."""
        value = read_value(row, column.name)
        callback = column.options.get("callback")
        if callable(callback):
            result = callback(value, row, column.name)
            if isinstance(result, Markup):
                return result
            return escape(as_str(result))
        return column.field_type.render_display(value, column.options)

    def _row_id(self, row: object, index: int) -> str:
        return read_row_id(row, key=as_str(self._config["row_id_key"], default="id")) or f"row-{index}"

    def _actions_for(self, row_id: str) -> list[dict[str, object]]:
        base_url = as_str(self._config["base_url"])
        return [
            {
                "name": action.name,
                "label": action.label,
                "url": action.resolve_url(quote(row_id, safe=""), base_url),
                "method": action.method,
                "icon": action.icon,
                "css_class": action.css_class,
                "confirm": action.confirm,
                "is_link": action.method == "GET",
            }
            for action in self._row_actions
        ]

    def _click_url(self, row_id: str, action_name: str) -> str | None:
        for action in self._row_actions:
            if action.name == action_name and action.method == "GET":
                return action.resolve_url(quote(row_id, safe=""), as_str(self._config["base_url"]))
        return None

    def _rows(self) -> list[dict[str, object]]:
        columns = self.visible_columns()
        click_action = as_str(self._config["row_click_action"])
        rows = []
        for index, row in enumerate(self._data):
            row_id = self._row_id(row, index)
            actions = self._actions_for(row_id) if self._config["show_actions"] else []
            href = self._click_url(row_id, click_action) if click_action else None
            rows.append(
                {
                    "index": index,
                    "id": row_id,
                    "href": href,
                    "cells": [
                        {"html": self.render_cell(row, column), "align": as_str(column.options.get("align"), default="left")}
                        for column in columns
                    ],
                    "actions": actions,
                },
            )
        return rows

    def _filter_controls(self) -> dict[str, object] | None:
        if not self._config["searchable"] or not self._filters:
            return None
        selects = []
        for column in self._columns.values():
            if not column.options.get("searchable"):
                continue
            choices = column.options.get("filter_choices") or column.options.get("choices")
            flat = flatten_choices(choices)
            if not flat:
                continue
            param = f"{FILTER_PREFIX}{column.name}"
            selects.append(
                {
                    "name": param,
                    "label": column.label,
                    "current": self._filters.get(param, ""),
                    "choices": [{"value": as_str(key), "label": label} for key, label in flat.items()],
                },
            )
        preserved = {
            key: value
            for key, value in self._query.items()
            if key in ("sort", "direction", "page_size")
        }
        return {"search": self._filters.get(SEARCH_PARAM, ""), "selects": selects, "preserved": preserved}

    def _pagination_block(self) -> dict[str, object] | None:
        state = self._pagination
        if state is None or state.total_pages <= 1:
            return None
        current = min(state.current_page, state.total_pages)
        return {
            "current": current,
            "total_pages": state.total_pages,
            "total_items": state.total_items,
            "prev_url": self._url_with(page=current - 1) if current > 1 else None,
            "next_url": self._url_with(page=current + 1) if current < state.total_pages else None,
            "pages": [
                {"number": number, "url": self._url_with(page=number), "active": number == current}
                for number in page_window(current, state.total_pages)
            ],
        }

    def table_classes(self) -> str:
        classes = [as_str(self._config["css_class"])]
        if self._config["striped"]:
            classes.append("table-striped")
        if self._config["bordered"]:
            classes.append("table-bordered")
        return " ".join(part for part in classes if part)

    def render(self) -> Markup:
        """渲染筛选区、表格与分页区."""
        return render_markup(
            "adminkit/table/table.html",
            config=self._config,
            table_class=self.table_classes(),
            headers=self._header_cells(),
            rows=self._rows(),
            column_count=self.column_count(),
            filters=self._filter_controls(),
            pagination=self._pagination_block(),
        )

    # ------------------------------------------------------------------ #
    # 工厂
    # ------------------------------------------------------------------ #
    @classmethod
    def from_entity_config(
        cls,
        entity_config: Mapping[str, object],
        table_config: Mapping[str, object] | None = None,
        *,
        registry: FieldTypeRegistry | None = None,
    ) -> TableBuilder:
        """根据实体配置创建表格,跳过标记为 ``list_hidden`` 的字段."""
        builder = cls(table_config, registry=registry)
        for name, type_name, options in iter_entity_fields(entity_config, hidden_flag="list_hidden"):
            builder.add_column(name, type_name, options)
        return builder


__all__ = ["COLUMN_DEFAULTS", "DEFAULT_TABLE_CONFIG", "TableBuilder"]
