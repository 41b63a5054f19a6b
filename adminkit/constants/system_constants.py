"""AdminKit - 常量定义模块

统一管理错误分类、严重度以及错误/成功提示文案.
"""

from enum import Enum


class LogLevel(Enum):
    """日志级别枚举."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class ErrorCategory(Enum):
    """错误分类枚举."""

    VALIDATION = "validation"
    BUSINESS = "business"
    AUTHORIZATION = "authorization"
    SECURITY = "security"
    CONFIGURATION = "configuration"
    STORAGE = "storage"
    SYSTEM = "system"
    UNKNOWN = "unknown"


class ErrorSeverity(Enum):
    """错误严重程度枚举."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


# 错误消息常量
class ErrorMessages:
    """错误消息常量."""

    # 通用错误
    INTERNAL_ERROR = "服务器内部错误"
    VALIDATION_ERROR = "数据验证失败"
    PERMISSION_DENIED = "权限不足"
    RESOURCE_NOT_FOUND = "资源不存在"
    INVALID_REQUEST = "无效的请求"

    # 配置错误
    FORM_CONFIGURATION_ERROR = "表单配置错误"
    FIELD_TYPE_NOT_FOUND = "未注册的字段类型"
    CSRF_STORE_REQUIRED = "启用 CSRF 保护时必须提供令牌存储"

    # 安全错误
    CSRF_INVALID = "CSRF 令牌无效"
    CSRF_MISSING = "缺少 CSRF 令牌"

    # 文件错误
    FILE_TOO_LARGE = "文件过大"
    INVALID_FILE_TYPE = "无效的文件类型"
    FILE_UPLOAD_ERROR = "文件上传失败"
    FILE_NOT_FOUND = "文件不存在"
    DANGEROUS_FILE_TYPE = "禁止上传可执行文件"
    MALICIOUS_CONTENT = "文件包含可疑脚本内容"
    VIRUS_DETECTED = "文件未通过安全扫描"
    INVALID_IMAGE = "无效的图片文件"
    IMAGE_TOO_SMALL = "图片尺寸过小"


# 成功消息常量
class SuccessMessages:
    """成功消息常量."""

    OPERATION_SUCCESS = "操作成功"
    DATA_SAVED = "数据保存成功"
    DATA_UPDATED = "数据更新成功"
    DATA_DELETED = "数据删除成功"
    FILE_UPLOADED = "文件上传成功"


__all__ = [
    "ErrorCategory",
    "ErrorMessages",
    "ErrorSeverity",
    "LogLevel",
    "SuccessMessages",
]
