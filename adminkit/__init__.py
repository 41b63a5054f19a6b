"""AdminKit - Flask 管理后台组件库.

提供可组合的字段类型、表单构建器、表格构建器与菜单构建器,
以及基于它们的通用资源视图.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from flask import Flask
from flask_bcrypt import Bcrypt
from flask_wtf.csrf import CSRFProtect

from adminkit.settings import Settings
from adminkit.utils.structlog_config import configure_structlog, get_system_logger

if TYPE_CHECKING:
    from adminkit.views import AdminSite

# 初始化扩展
bcrypt = Bcrypt()
csrf = CSRFProtect()


def create_app(
    *,
    settings: Settings | None = None,
    sites: tuple[AdminSite, ...] = (),
) -> Flask:
    """创建Flask应用实例.

    Args:
        settings: 可选的配置对象,用于测试或多环境启动.
        sites: 需要挂载的管理站点.

    Returns:
        Flask: Flask应用实例

    """
    resolved_settings = settings or Settings.load()
    app = Flask(__name__)

    # 配置应用
    app.config.from_mapping(resolved_settings.to_flask_config())

    # 初始化扩展
    init_extensions(app)

    # 配置统一日志系统
    configure_structlog(app)
    log_level_name = str(app.config.get("LOG_LEVEL", "INFO"))
    logging.getLogger().setLevel(getattr(logging, log_level_name, logging.INFO))

    # 注册管理站点
    for site in sites:
        site.init_app(app)

    get_system_logger().info(
        "AdminKit 应用初始化完成",
        module="system",
        environment=resolved_settings.environment,
        sites=[site.name for site in sites],
    )
    return app


def init_extensions(app: Flask) -> None:
    """初始化 CSRF 与密码哈希扩展,宿主应用自行创建 Flask 实例时调用."""
    csrf.init_app(app)
    bcrypt.init_app(app)


__all__ = ["bcrypt", "create_app", "csrf", "init_extensions"]
