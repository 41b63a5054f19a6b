"""AdminKit 的结构化日志配置与辅助函数."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, cast

import structlog
from flask import Flask, current_app, has_request_context, request

from adminkit.settings import APP_VERSION, DEFAULT_APP_NAME
from adminkit.utils.sensitive_data import scrub_sensitive_fields

if TYPE_CHECKING:
    from structlog.typing import BindableLogger, Processor

    from adminkit.types import ContextDict, JsonValue, LoggerExtra, StructlogEventDict

    LogField = JsonValue | ContextDict | LoggerExtra


class StructlogConfig:
    """structlog 配置核心类.

    负责配置 structlog 的处理器链、上下文管理和日志工厂.

    Attributes:
        configured: 是否已配置标志.

    Example:
        >>> config = StructlogConfig()
        >>> config.configure()
        >>> logger = get_logger('forms')

    """

    def __init__(self) -> None:
        self.configured = False

    def configure(self, app: Flask | None = None) -> None:
        """初始化 structlog 处理器(幂等).

        Args:
            app: Flask 应用实例,可选.当前仅用于与调用方保持一致的签名.

        Returns:
            None.

        """
        _ = app
        if self.configured:
            return
        processors = [
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.stdlib.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            self._add_request_context,
            self._add_global_context,
            self._scrub_sensitive_values,
            self._get_renderer(),
        ]
        structlog.configure(
            processors=cast("list[Processor]", processors),
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )
        self.configured = True

    @staticmethod
    def _add_request_context(
        _logger: BindableLogger,
        _method_name: str,
        event_dict: StructlogEventDict,
    ) -> StructlogEventDict:
        """向事件字典写入请求路径与方法."""
        if has_request_context():
            event_dict["request_path"] = request.path
            event_dict["request_method"] = request.method
        return event_dict

    @staticmethod
    def _add_global_context(
        _logger: BindableLogger,
        _method_name: str,
        event_dict: StructlogEventDict,
    ) -> StructlogEventDict:
        """附加应用名称、版本等全局上下文."""
        try:
            event_dict["app_name"] = current_app.config.get("APP_NAME", DEFAULT_APP_NAME)
            event_dict["app_version"] = current_app.config.get("APP_VERSION", APP_VERSION)
        except RuntimeError:
            event_dict["app_name"] = DEFAULT_APP_NAME
            event_dict["app_version"] = APP_VERSION
        event_dict["logger_name"] = getattr(_logger, "name", "unknown")
        return event_dict

    @staticmethod
    def _scrub_sensitive_values(
        _logger: BindableLogger,
        _method_name: str,
        event_dict: StructlogEventDict,
    ) -> StructlogEventDict:
        """在渲染前替换密码、令牌等敏感字段."""
        return scrub_sensitive_fields(event_dict)

    @staticmethod
    def _get_renderer() -> Processor:
        """根据终端能力返回渲染器."""
        if sys.stdout.isatty():
            return structlog.dev.ConsoleRenderer(colors=True)
        return structlog.processors.JSONRenderer(ensure_ascii=False)


structlog_config = StructlogConfig()


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """获取结构化日志记录器.

    Args:
        name: 日志记录器名称,通常使用模块名.

    Returns:
        绑定的 structlog 日志记录器实例.

    """
    structlog_config.configure()
    return structlog.get_logger(name)


def configure_structlog(app: Flask) -> None:
    """配置 structlog 并注册 Flask 钩子.

    Args:
        app: Flask 应用实例.

    """
    structlog_config.configure(app)

    @app.teardown_appcontext
    def log_teardown_error(exception: BaseException | None) -> None:
        if exception:
            get_logger("adminkit").error("应用请求处理异常", module="system", exception=str(exception))


def should_log_debug() -> bool:
    """检查是否应该记录调试日志.

    Returns:
        如果启用调试日志返回 True,否则返回 False.

    """
    try:
        return bool(current_app.config.get("ENABLE_DEBUG_LOG", False))
    except RuntimeError:
        return False


def log_info(message: str, module: str = "adminkit", **kwargs: LogField) -> None:
    """记录信息级别日志.

    Example:
        >>> log_info('表单提交成功', module='forms', form='user')

    """
    get_logger("adminkit").info(message, module=module, **kwargs)


def log_warning(
    message: str,
    module: str = "adminkit",
    exception: Exception | None = None,
    **kwargs: LogField,
) -> None:
    """记录警告级别日志.

    Args:
        message: 日志消息.
        module: 模块名称.
        exception: 可选的异常对象.
        **kwargs: 额外的上下文信息.

    """
    logger = get_logger("adminkit")
    if exception:
        logger.warning(message, module=module, exception=str(exception), **kwargs)
    else:
        logger.warning(message, module=module, **kwargs)


def log_error(
    message: str,
    module: str = "adminkit",
    exception: Exception | None = None,
    **kwargs: LogField,
) -> None:
    """记录错误级别日志,带异常时附带堆栈.

    Args:
        message: 日志消息.
        module: 模块名称.
        exception: 可选的异常对象.
        **kwargs: 额外的上下文信息.

    """
    logger = get_logger("adminkit")
    if exception:
        logger.error(message, module=module, error=str(exception), exc_info=exception, **kwargs)
    else:
        logger.error(message, module=module, **kwargs)


def log_debug(message: str, module: str = "adminkit", **kwargs: LogField) -> None:
    """记录调试级别日志,仅在启用调试日志时生效."""
    if not should_log_debug():
        return
    get_logger("adminkit").debug(message, module=module, **kwargs)


def get_system_logger() -> structlog.stdlib.BoundLogger:
    """返回系统级 logger."""
    return get_logger("system")


def get_form_logger() -> structlog.stdlib.BoundLogger:
    """返回表单处理 logger."""
    return get_logger("forms")


def get_upload_logger() -> structlog.stdlib.BoundLogger:
    """返回文件上传 logger."""
    return get_logger("uploads")


__all__ = [
    "configure_structlog",
    "get_form_logger",
    "get_logger",
    "get_system_logger",
    "get_upload_logger",
    "log_debug",
    "log_error",
    "log_info",
    "log_warning",
    "should_log_debug",
]
