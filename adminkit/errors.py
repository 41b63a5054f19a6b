"""AdminKit - 统一异常定义.

集中维护异常类型与元数据定义,并提供异常到 HTTP 状态码的映射.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from adminkit.constants import HttpStatus
from adminkit.constants.system_constants import ErrorCategory, ErrorMessages, ErrorSeverity

if TYPE_CHECKING:
    from adminkit.types.structures import LoggerExtra


@dataclass(frozen=True, slots=True)
class ExceptionMetadata:
    """异常的元信息."""

    status_code: int
    category: ErrorCategory
    severity: ErrorSeverity
    default_message_key: str


class AppError(Exception):
    """统一的基础异常.

    Args:
        message: 自定义错误文案,若为空则根据 ``message_key`` 推导.
        message_key: 自定义消息键.
        extra: 结构化日志附加字段.
        severity: 错误严重度.
        category: 错误分类.
        status_code: HTTP 状态码.

    """

    metadata = ExceptionMetadata(
        status_code=HttpStatus.INTERNAL_SERVER_ERROR,
        category=ErrorCategory.SYSTEM,
        severity=ErrorSeverity.HIGH,
        default_message_key="INTERNAL_ERROR",
    )

    def __init__(
        self,
        message: str | None = None,
        *,
        message_key: str | None = None,
        extra: LoggerExtra | None = None,
        severity: ErrorSeverity | None = None,
        category: ErrorCategory | None = None,
        status_code: int | None = None,
    ) -> None:
        self.message_key = message_key or self.metadata.default_message_key
        self.message = message or getattr(ErrorMessages, self.message_key, ErrorMessages.INTERNAL_ERROR)
        self.extra = dict(extra or {})
        self.severity = severity or self.metadata.severity
        self.category = category or self.metadata.category
        self.status_code = status_code or self.metadata.status_code
        super().__init__(self.message)

    @property
    def recoverable(self) -> bool:
        """表示该异常是否可恢复.

        Returns:
            bool: 严重度为 LOW 或 MEDIUM 时为 True.

        """
        return self.severity in (ErrorSeverity.LOW, ErrorSeverity.MEDIUM)


class FormConfigurationError(AppError):
    """表示表单/表格的声明不合法.

    属于编程错误,在构建阶段立即抛出,不会展示给最终用户.
    """

    metadata = ExceptionMetadata(
        status_code=HttpStatus.INTERNAL_SERVER_ERROR,
        category=ErrorCategory.CONFIGURATION,
        severity=ErrorSeverity.HIGH,
        default_message_key="FORM_CONFIGURATION_ERROR",
    )


class FieldTypeNotFoundError(FormConfigurationError):
    """表示请求了未注册的字段类型."""

    metadata = ExceptionMetadata(
        status_code=HttpStatus.INTERNAL_SERVER_ERROR,
        category=ErrorCategory.CONFIGURATION,
        severity=ErrorSeverity.HIGH,
        default_message_key="FIELD_TYPE_NOT_FOUND",
    )


class ValidationError(AppError):
    """表示提交的数据未通过校验.

    字段本身只返回错误列表,该异常供视图层在需要中断流程时使用,默认返回 400.
    """

    metadata = ExceptionMetadata(
        status_code=HttpStatus.BAD_REQUEST,
        category=ErrorCategory.VALIDATION,
        severity=ErrorSeverity.LOW,
        default_message_key="VALIDATION_ERROR",
    )


class SecurityError(AppError):
    """表示请求未通过来源校验(如 CSRF 令牌不匹配),默认返回 400."""

    metadata = ExceptionMetadata(
        status_code=HttpStatus.BAD_REQUEST,
        category=ErrorCategory.SECURITY,
        severity=ErrorSeverity.MEDIUM,
        default_message_key="CSRF_INVALID",
    )


class NotFoundError(AppError):
    """表示请求的资源不存在,默认返回 404."""

    metadata = ExceptionMetadata(
        status_code=HttpStatus.NOT_FOUND,
        category=ErrorCategory.BUSINESS,
        severity=ErrorSeverity.LOW,
        default_message_key="RESOURCE_NOT_FOUND",
    )


class UploadError(AppError):
    """表示上传文件在移动、缩放或写盘阶段失败.

    属于基础设施故障而非用户输入问题,调用方应展示通用失败提示.
    """

    metadata = ExceptionMetadata(
        status_code=HttpStatus.INTERNAL_SERVER_ERROR,
        category=ErrorCategory.STORAGE,
        severity=ErrorSeverity.HIGH,
        default_message_key="FILE_UPLOAD_ERROR",
    )


class UploadRejectedError(UploadError):
    """表示上传文件被安全检查拒绝(大小、扩展名、可疑内容或扫描失败)."""

    metadata = ExceptionMetadata(
        status_code=HttpStatus.BAD_REQUEST,
        category=ErrorCategory.SECURITY,
        severity=ErrorSeverity.MEDIUM,
        default_message_key="INVALID_FILE_TYPE",
    )


class SystemError(AppError):
    """表示系统级未知错误或底层故障,默认返回 500."""


def map_exception_to_status(error: BaseException, *, default: int = HttpStatus.INTERNAL_SERVER_ERROR) -> int:
    """根据异常类型推导 HTTP 状态码.

    Args:
        error: 捕获到的异常.
        default: 非 AppError 时使用的状态码.

    Returns:
        int: HTTP 状态码.

    """
    if isinstance(error, AppError):
        return int(error.status_code)
    return int(default)


__all__ = [
    "AppError",
    "ExceptionMetadata",
    "FieldTypeNotFoundError",
    "FormConfigurationError",
    "NotFoundError",
    "SecurityError",
    "SystemError",
    "UploadError",
    "UploadRejectedError",
    "ValidationError",
    "map_exception_to_status",
]
