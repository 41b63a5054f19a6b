"""常量模块。

集中管理系统常量，包括错误分类、错误消息、字段类型名与字段校验文案等。
"""

from http import HTTPStatus as HttpStatus

from .field_messages import FieldMessages
from .field_types import FieldTypeName
from .flash_categories import FlashCategory
from .system_constants import (
    ErrorCategory,
    ErrorMessages,
    ErrorSeverity,
    LogLevel,
    SuccessMessages,
)
from .time_constants import TimeConstants

__all__ = [
    "ErrorCategory",
    "ErrorMessages",
    "ErrorSeverity",
    "FieldMessages",
    "FieldTypeName",
    "FlashCategory",
    "HttpStatus",
    "LogLevel",
    "SuccessMessages",
    "TimeConstants",
]
