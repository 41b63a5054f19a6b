"""导航菜单构建器.

菜单项按 ``order`` 排序,并根据当前用户的权限与角色过滤.
当前用户只需提供 ``has_permission(name)`` / ``has_role(name)`` 方法.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, fields
from typing import Protocol

from markupsafe import Markup

from adminkit.errors import FormConfigurationError
from adminkit.fields.base import humanize
from adminkit.types.converters import as_list_of_str, as_str
from adminkit.utils.rendering import render_markup

ITEM_LINK = "link"
ITEM_SEPARATOR = "separator"
ITEM_SECTION = "section"

# 简写图标名到 Font Awesome 类名的映射
ICON_ALIASES = {
    "home": "fa-home",
    "users": "fa-users",
    "settings": "fa-cog",
    "table": "fa-table",
    "list": "fa-list",
    "plus": "fa-plus",
    "edit": "fa-edit",
    "delete": "fa-trash",
    "view": "fa-eye",
    "chart": "fa-chart-line",
    "file": "fa-file",
    "folder": "fa-folder",
    "image": "fa-image",
    "mail": "fa-envelope",
    "calendar": "fa-calendar",
    "clock": "fa-clock",
    "lock": "fa-lock",
    "key": "fa-key",
    "search": "fa-search",
    "upload": "fa-upload",
    "download": "fa-download",
}

DEFAULT_MENU_CONFIG: dict[str, object] = {
    "css_class": "admin-menu",
    "active_class": "active",
    "submenu_class": "submenu",
    "icon_class": "menu-icon",
    "show_icons": True,
    "collapsible": True,
    "current_url": "",
}


class MenuUser(Protocol):
    """菜单权限过滤所需的用户能力."""

    def has_permission(self, name: str) -> bool: ...

    def has_role(self, name: str) -> bool: ...


@dataclass(slots=True)
class MenuItem:
    """菜单项."""

    name: str
    label: str = ""
    url: str = "#"
    icon: str | Markup | None = None
    permission: str | None = None
    roles: list[str] = field(default_factory=list)
    badge: str | None = None
    badge_color: str = "primary"
    target: str | None = None
    order: int = 100
    visible: bool = True
    active: bool = False
    kind: str = ITEM_LINK
    children: dict[str, MenuItem] = field(default_factory=dict)

    @classmethod
    def build(cls, name: str, options: Mapping[str, object] | None = None) -> MenuItem:
        """由配置映射创建菜单项,未知配置项被忽略."""
        known = {item.name for item in fields(cls)} - {"name", "children", "roles"}
        values = {key: value for key, value in (options or {}).items() if key in known}
        item = cls(name=name, **values)
        if options and "type" in options:
            item.kind = as_str(options["type"], default=ITEM_LINK)
        item.roles = as_list_of_str((options or {}).get("roles"))
        if not item.label and item.kind == ITEM_LINK:
            item.label = humanize(name)
        return item


class MenuBuilder:
    """菜单构建器.

    Example:
        >>> menu = MenuBuilder({"current_url": "/admin/users"})
        >>> menu.add_dashboard().add_entity("users", {"label": "用户", "actions": ["list", "new"]})
        >>> html = menu.set_current_user(current_user).render()

    """

    def __init__(self, config: Mapping[str, object] | None = None) -> None:
        self._config: dict[str, object] = {**DEFAULT_MENU_CONFIG, **(config or {})}
        self._items: dict[str, MenuItem] = {}
        self._user: MenuUser | None = None

    @property
    def config(self) -> dict[str, object]:
        return dict(self._config)

    @property
    def items(self) -> dict[str, MenuItem]:
        return dict(self._items)

    def set_current_user(self, user: MenuUser | None) -> MenuBuilder:
        self._user = user
        return self

    def set_current_url(self, url: str) -> MenuBuilder:
        self._config["current_url"] = url
        return self

    # ------------------------------------------------------------------ #
    # 声明
    # ------------------------------------------------------------------ #
    def add_item(self, name: str, options: Mapping[str, object] | None = None) -> MenuBuilder:
        children = (options or {}).get("children")
        item = MenuItem.build(name, options)
        if isinstance(children, Mapping):
            item.children = {
                str(child_name): MenuItem.build(str(child_name), child if isinstance(child, Mapping) else None)
                for child_name, child in children.items()
            }
        self._items[name] = item
        return self

    def add_sub_item(self, parent: str, name: str, options: Mapping[str, object] | None = None) -> MenuBuilder:
        """添加子菜单项.

        Raises:
            FormConfigurationError: 父菜单项不存在.

        """
        parent_item = self._items.get(parent)
        if parent_item is None:
            raise FormConfigurationError(f"父菜单项不存在: {parent}", extra={"parent": parent, "item": name})
        parent_item.children[name] = MenuItem.build(name, options)
        return self

    def remove_item(self, name: str) -> MenuBuilder:
        self._items.pop(name, None)
        return self

    def set_order(self, name: str, order: int) -> MenuBuilder:
        item = self._items.get(name)
        if item is not None:
            item.order = order
        return self

    def set_badge(self, name: str, badge: str, color: str = "primary") -> MenuBuilder:
        item = self._items.get(name)
        if item is not None:
            item.badge = badge
            item.badge_color = color
        return self

    def set_active(self, name: str) -> MenuBuilder:
        item = self._items.get(name)
        if item is not None:
            item.active = True
        return self

    def add_dashboard(self, url: str = "/admin") -> MenuBuilder:
        return self.add_item("dashboard", {"label": "仪表盘", "url": url, "icon": "home", "order": 1})

    def add_entity(self, name: str, entity_config: Mapping[str, object], *, route_prefix: str = "/admin") -> MenuBuilder:
        """添加实体管理菜单,按 ``actions`` 生成“列表”与“新建”子项."""
        base_url = f"{route_prefix.rstrip('/')}/{name}"
        self.add_item(
            name,
            {
                "label": entity_config.get("label") or humanize(name),
                "url": base_url,
                "icon": entity_config.get("icon") or "table",
                "permission": entity_config.get("permission"),
                "roles": entity_config.get("roles") or [],
                "order": entity_config.get("order", 50),
            },
        )
        actions = as_list_of_str(entity_config.get("actions"))
        if "list" in actions:
            self.add_sub_item(name, "list", {"label": "列表", "url": base_url, "icon": "list"})
        if "new" in actions:
            self.add_sub_item(name, "new", {"label": "新建", "url": f"{base_url}/new", "icon": "plus"})
        return self

    def add_separator(self, name: str | None = None) -> MenuBuilder:
        return self.add_item(name or f"separator_{uuid.uuid4().hex[:8]}", {"type": ITEM_SEPARATOR, "url": ""})

    def add_section(self, name: str, label: str, items: Mapping[str, Mapping[str, object]] | None = None) -> MenuBuilder:
        return self.add_item(name, {"type": ITEM_SECTION, "label": label, "url": "", "children": items or {}})

    # ------------------------------------------------------------------ #
    # 可见性与激活状态
    # ------------------------------------------------------------------ #
    def can_access(self, item: MenuItem) -> bool:
        """无权限与角色限制的菜单项总是可见,否则要求当前用户满足全部限制."""
        if not item.permission and not item.roles:
            return True
        if self._user is None:
            return False
        if item.permission:
            checker = getattr(self._user, "has_permission", None)
            if not callable(checker) or not checker(item.permission):
                return False
        if item.roles:
            checker = getattr(self._user, "has_role", None)
            if not callable(checker) or not any(checker(role) for role in item.roles):
                return False
        return True

    def is_active(self, item: MenuItem) -> bool:
        if item.active:
            return True
        current_url = as_str(self._config["current_url"])
        if not item.url or not current_url:
            return False
        if current_url == item.url:
            return True
        return item.url not in ("/", "#") and current_url.startswith(item.url)

    def _visible(self, items: Iterable[MenuItem]) -> list[MenuItem]:
        visible = [item for item in items if item.visible and self.can_access(item)]
        return sorted(visible, key=lambda item: item.order)

    # ------------------------------------------------------------------ #
    # 渲染
    # ------------------------------------------------------------------ #
    def render_icon(self, icon: str | Markup | None) -> Markup | None:
        if not icon or not self._config["show_icons"]:
            return None
        if isinstance(icon, Markup):
            return icon
        css = icon if icon.startswith("fa-") else ICON_ALIASES.get(icon, "fa-circle")
        return Markup('<i class="fas {0}"></i>').format(css)

    def _node(self, item: MenuItem) -> dict[str, object]:
        children = [self._node(child) for child in self._visible(item.children.values())]
        active = self.is_active(item) or any(child["active"] for child in children)
        return {
            "name": item.name,
            "kind": item.kind,
            "label": item.label,
            "url": item.url,
            "target": item.target,
            "icon": self.render_icon(item.icon),
            "badge": item.badge,
            "badge_color": item.badge_color,
            "active": active,
            "children": children,
        }

    def render(self) -> Markup:
        """渲染导航菜单."""
        nodes = [self._node(item) for item in self._visible(self._items.values())]
        # 分组下没有可见子项时不输出
        nodes = [node for node in nodes if node["kind"] != ITEM_SECTION or node["children"]]
        return render_markup("adminkit/menu/menu.html", config=self._config, nodes=nodes)

    def get_breadcrumbs(self) -> list[dict[str, str]]:
        """根据当前地址生成面包屑,路径与菜单项地址相同时使用菜单项标题."""
        labels: dict[str, str] = {}
        for item in self._items.values():
            for candidate in (item, *item.children.values()):
                if candidate.kind == ITEM_LINK and candidate.url:
                    labels.setdefault(candidate.url, candidate.label)

        breadcrumbs = [{"title": "首页", "url": "/"}]
        path = ""
        for part in as_str(self._config["current_url"]).split("?")[0].strip("/").split("/"):
            if not part:
                continue
            path = f"{path}/{part}"
            breadcrumbs.append({"title": labels.get(path, humanize(part.replace("-", " "))), "url": path})
        return breadcrumbs

    # ------------------------------------------------------------------ #
    # 工厂
    # ------------------------------------------------------------------ #
    @classmethod
    def from_config(
        cls,
        config: Mapping[str, object],
        entities: Mapping[str, Mapping[str, object]] | None = None,
    ) -> MenuBuilder:
        """根据管理后台配置生成默认菜单: 仪表盘、实体菜单与仅管理员可见的系统分组."""
        menu_config = config.get("menu")
        builder = cls(menu_config if isinstance(menu_config, Mapping) else None)
        route_prefix = as_str(config.get("route_prefix"), default="/admin").rstrip("/") or "/admin"
        builder.add_dashboard(route_prefix)
        builder.add_separator("separator_main")
        for name, entity_config in (entities or {}).items():
            builder.add_entity(name, entity_config, route_prefix=route_prefix)
        builder.add_section(
            "system",
            "系统",
            {
                "settings": {"label": "设置", "url": f"{route_prefix}/settings", "icon": "settings", "roles": ["admin"]},
                "users": {"label": "用户", "url": f"{route_prefix}/users", "icon": "users", "roles": ["admin"]},
            },
        )
        return builder


__all__ = ["DEFAULT_MENU_CONFIG", "MenuBuilder", "MenuItem", "MenuUser"]
