"""导航菜单构建."""

from .menu_builder import DEFAULT_MENU_CONFIG, MenuBuilder, MenuItem, MenuUser

__all__ = ["DEFAULT_MENU_CONFIG", "MenuBuilder", "MenuItem", "MenuUser"]
