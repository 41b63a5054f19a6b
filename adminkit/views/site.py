"""管理站点.

AdminSite 持有一个蓝图与已注册的资源定义,负责生成路由、菜单与页面公共上下文.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from flask import Blueprint, Flask, current_app, g, render_template, request, send_from_directory

from adminkit.errors import AppError, FormConfigurationError, map_exception_to_status
from adminkit.menus import MenuBuilder
from adminkit.utils.structlog_config import get_system_logger
from adminkit.views.resource_views import (
    ResourceDeleteView,
    ResourceDetailView,
    ResourceFormView,
    ResourceListView,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

    from flask.typing import ResponseReturnValue

    from adminkit.types import TemplateContext
    from adminkit.views.definitions import ResourceDefinition

PACKAGE_ROOT = Path(__file__).resolve().parent.parent

# 共享模板与静态资源的蓝图,不注册任何业务路由
assets_blueprint = Blueprint(
    "adminkit",
    __name__,
    template_folder=str(PACKAGE_ROOT / "templates"),
    static_folder=str(PACKAGE_ROOT / "static"),
    static_url_path="/adminkit-static",
)


class AdminSite:
    """管理站点.

    Attributes:
        name: 蓝图名称,也是端点前缀.
        url_prefix: 路由前缀.
        menu_config: 传给 MenuBuilder 的菜单配置.
        resources: 已注册的资源定义.

    Example:
        >>> site = AdminSite(url_prefix="/admin")
        >>> site.register(ResourceDefinition(name="users", entity_config=config, handler_class=UserHandler))
        >>> site.init_app(app)

    """

    def __init__(
        self,
        name: str = "admin",
        *,
        url_prefix: str = "/admin",
        title: str = "管理后台",
        menu_config: Mapping[str, object] | None = None,
    ) -> None:
        self.name = name
        self.url_prefix = "/" + url_prefix.strip("/")
        self.title = title
        self.menu_config = dict(menu_config or {})
        self.resources: dict[str, ResourceDefinition] = {}
        self.blueprint = Blueprint(name, __name__, url_prefix=self.url_prefix)
        self.blueprint.add_url_rule("/", endpoint="dashboard", view_func=self.dashboard)

    def register(self, definition: ResourceDefinition) -> AdminSite:
        """注册资源并生成路由,必须在 ``init_app`` 之前调用.

        生成的端点为 ``<资源名>_list/new/detail/edit/delete``.

        Raises:
            FormConfigurationError: 资源名重复.

        """
        if definition.name in self.resources:
            raise FormConfigurationError(f"资源已注册: {definition.name}", extra={"resource": definition.name})
        self.resources[definition.name] = definition

        prefix = f"/{definition.name}"
        view_kwargs = {"definition": definition, "site": self}
        form_view = ResourceFormView.as_view(definition.endpoint("form"), **view_kwargs)
        self.blueprint.add_url_rule(
            prefix,
            view_func=ResourceListView.as_view(definition.endpoint("list"), **view_kwargs),
        )
        self.blueprint.add_url_rule(f"{prefix}/new", endpoint=definition.endpoint("new"), view_func=form_view)
        self.blueprint.add_url_rule(
            f"{prefix}/<resource_id>",
            view_func=ResourceDetailView.as_view(definition.endpoint("detail"), **view_kwargs),
        )
        self.blueprint.add_url_rule(
            f"{prefix}/<resource_id>/edit",
            endpoint=definition.endpoint("edit"),
            view_func=form_view,
        )
        self.blueprint.add_url_rule(
            f"{prefix}/<resource_id>/delete",
            view_func=ResourceDeleteView.as_view(definition.endpoint("delete"), **view_kwargs),
        )
        return self

    def init_app(self, app: Flask) -> None:
        """注册蓝图、上传文件路由与错误处理器."""
        # CSRF 令牌由表单视图与删除视图自行校验
        from adminkit import csrf

        csrf.exempt(self.blueprint)
        if "adminkit" not in app.blueprints:
            app.register_blueprint(assets_blueprint)
            web_prefix = str(app.config.get("ADMINKIT_UPLOAD_WEB_PREFIX", "/uploads")).rstrip("/")
            app.add_url_rule(f"{web_prefix}/<path:filename>", endpoint="adminkit_upload", view_func=serve_upload)
        app.register_blueprint(self.blueprint)
        app.register_error_handler(AppError, handle_app_error)
        app.extensions.setdefault("adminkit_sites", {})[self.name] = self

    # ------------------------------------------------------------------ #
    # 页面上下文
    # ------------------------------------------------------------------ #
    def build_menu(self) -> MenuBuilder:
        """按已注册资源生成菜单,并绑定当前地址与当前用户."""
        entities = {
            name: {
                "actions": ["list", "new"],
                **definition.entity_config,
                "label": definition.label,
            }
            for name, definition in self.resources.items()
        }
        menu = MenuBuilder.from_config({"route_prefix": self.url_prefix, "menu": self.menu_config}, entities)
        menu.set_current_url(request.path)
        menu.set_current_user(g.get("current_user"))
        return menu

    def page_context(self) -> TemplateContext:
        menu = self.build_menu()
        return {
            "site": self,
            "menu_html": menu.render(),
            "breadcrumbs": menu.get_breadcrumbs(),
        }

    def dashboard(self) -> ResponseReturnValue:
        return render_template("adminkit/pages/dashboard.html", **self.page_context())


def serve_upload(filename: str) -> ResponseReturnValue:
    """从上传根目录读取文件,``send_from_directory`` 负责拒绝越界路径."""
    return send_from_directory(current_app.config["ADMINKIT_UPLOAD_ROOT"], filename)


def handle_app_error(error: AppError) -> ResponseReturnValue:
    status_code = map_exception_to_status(error)
    get_system_logger().warning(
        "请求处理失败",
        module="views",
        error_type=error.__class__.__name__,
        error_message=error.message,
        status_code=status_code,
        **error.extra,
    )
    return render_template("adminkit/pages/error.html", error=error, status_code=status_code), status_code


__all__ = ["AdminSite", "assets_blueprint", "handle_app_error", "serve_upload"]
