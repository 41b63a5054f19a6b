"""CSRF 令牌存储.

FormBuilder 不直接访问会话,而是通过显式传入的 `CsrfTokenStore` 生成与校验令牌.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from flask_wtf.csrf import generate_csrf, validate_csrf
from wtforms.validators import ValidationError as CsrfValidationError

from adminkit.utils.structlog_config import get_system_logger


@runtime_checkable
class CsrfTokenStore(Protocol):
    """生成并校验防伪令牌的最小能力."""

    def generate_token(self) -> str:
        """生成(或复用)当前会话的令牌."""
        ...

    def validate_token(self, token: str | None) -> bool:
        """校验提交的令牌是否与会话匹配."""
        ...


class FlaskWtfCsrfTokenStore:
    """基于 flask_wtf 签名令牌的实现,需在 Flask 请求上下文中使用.

    Attributes:
        time_limit: 令牌有效期(秒),None 表示沿用应用配置.

    """

    def __init__(self, *, time_limit: int | None = None) -> None:
        self.time_limit = time_limit

    def generate_token(self) -> str:
        return generate_csrf()

    def validate_token(self, token: str | None) -> bool:
        system_logger = get_system_logger()
        if not token:
            system_logger.warning("CSRF 令牌缺失", module="csrf")
            return False
        try:
            validate_csrf(token, time_limit=self.time_limit)
        except CsrfValidationError as exc:
            system_logger.warning("CSRF 令牌校验失败", module="csrf", exception=str(exc))
            return False
        return True


__all__ = ["CsrfTokenStore", "FlaskWtfCsrfTokenStore"]
