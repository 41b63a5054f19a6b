"""资源视图的定义与数据访问协议."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Protocol

from adminkit.tables.definitions import SORT_ASC


@dataclass(slots=True)
class ListQuery:
    """列表页查询条件,由表格构建器从请求参数解析得到.

    Attributes:
        page: 当前页码,从 1 开始.
        per_page: 每页数量.
        sort_field: 排序字段,None 表示不排序.
        sort_direction: ``asc`` 或 ``desc``.
        filters: ``search`` 与 ``filter_<列名>`` 形式的筛选值,空值已剔除.

    """

    page: int = 1
    per_page: int = 20
    sort_field: str | None = None
    sort_direction: str = SORT_ASC
    filters: dict[str, str] = field(default_factory=dict)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page


class ResourceHandler(Protocol):
    """资源的数据访问接口,由宿主应用实现."""

    def load(self, resource_id: str) -> object | None:
        """按主键读取资源,不存在时返回 None."""
        ...

    def save(self, data: Mapping[str, object], resource: object | None) -> object:
        """保存表单数据,``resource`` 为 None 表示新建,返回保存后的资源."""
        ...

    def delete(self, resource: object) -> None:
        """删除资源."""
        ...

    def query(self, query: ListQuery) -> tuple[Sequence[object], int]:
        """返回当前页的数据行与总条数."""
        ...


@dataclass(slots=True)
class ResourceDefinition:
    """一个可管理资源的完整配置.

    Attributes:
        name: 资源名,同时作为路由片段与端点前缀.
        entity_config: 实体配置,包含 ``fields``、``label``、``actions`` 等键.
        handler_class: 无参构造的 ResourceHandler 实现.
        form_template: 新建/编辑页模板.
        list_template: 列表页模板.
        detail_template: 详情页模板.
        success_message: 保存成功提示.
        form_config: 覆盖表单默认配置.
        table_config: 覆盖表格默认配置.

    """

    name: str
    entity_config: Mapping[str, object]
    handler_class: type[ResourceHandler]
    form_template: str = "adminkit/pages/form.html"
    list_template: str = "adminkit/pages/list.html"
    detail_template: str = "adminkit/pages/detail.html"
    success_message: str = "保存成功"
    form_config: Mapping[str, object] = field(default_factory=dict)
    table_config: Mapping[str, object] = field(default_factory=dict)

    @property
    def label(self) -> str:
        return str(self.entity_config.get("label") or self.name)

    def endpoint(self, action: str) -> str:
        return f"{self.name}_{action}"


__all__ = ["ListQuery", "ResourceDefinition", "ResourceHandler"]
