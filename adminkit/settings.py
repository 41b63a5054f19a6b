"""AdminKit - 统一配置读取与校验.

目标:
- 将环境变量读取、默认值、校验集中到单一入口,避免散落在各模块中重复解析.
- `create_app(settings=...)` 只消费 Settings,不再直接读取环境变量.

说明:
- Settings 使用 `pydantic-settings` 的 `BaseSettings` 从环境变量与本地 `.env`(可选)读取配置.
- 生产环境缺失 SECRET_KEY 会直接抛出 ValueError.
"""

from __future__ import annotations

import logging
import secrets
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent
DOTENV_PATH = PROJECT_ROOT / ".env"

DEFAULT_ENVIRONMENT = "development"
APP_VERSION = "0.3.0"
DEFAULT_APP_NAME = "AdminKit"

DEFAULT_BCRYPT_LOG_ROUNDS = 12
BCRYPT_LOG_ROUNDS_MIN = 4
BCRYPT_LOG_ROUNDS_MAX = 31

DEFAULT_CSRF_TIME_LIMIT_SECONDS = 3600
DEFAULT_MAX_CONTENT_LENGTH_BYTES = 16 * 1024 * 1024
DEFAULT_UPLOAD_ROOT = "userdata/uploads"
DEFAULT_UPLOAD_WEB_PREFIX = "/uploads"

DEFAULT_PAGE_SIZE = 20
DEFAULT_MAX_PAGE_SIZE = 200

DEFAULT_LOG_LEVEL = "INFO"
_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class Settings(BaseSettings):
    """应用运行时设置集合."""

    model_config = SettingsConfigDict(
        env_ignore_empty=True,
        extra="ignore",
        frozen=True,
        str_strip_whitespace=True,
    )

    environment: str = Field(default=DEFAULT_ENVIRONMENT, validation_alias="FLASK_ENV")
    debug: bool = Field(default=False, validation_alias="FLASK_DEBUG")
    app_name: str = Field(default=DEFAULT_APP_NAME, validation_alias="APP_NAME")
    app_version: str = Field(default=APP_VERSION, validation_alias="APP_VERSION")

    secret_key: str = Field(default="", validation_alias="SECRET_KEY")
    bcrypt_log_rounds: int = Field(default=DEFAULT_BCRYPT_LOG_ROUNDS, validation_alias="BCRYPT_LOG_ROUNDS")
    csrf_enabled: bool = Field(default=True, validation_alias="WTF_CSRF_ENABLED")
    csrf_time_limit_seconds: int = Field(
        default=DEFAULT_CSRF_TIME_LIMIT_SECONDS,
        validation_alias="WTF_CSRF_TIME_LIMIT",
    )

    upload_root: Path = Field(default=Path(DEFAULT_UPLOAD_ROOT), validation_alias="UPLOAD_ROOT")
    upload_web_prefix: str = Field(default=DEFAULT_UPLOAD_WEB_PREFIX, validation_alias="UPLOAD_WEB_PREFIX")
    max_content_length_bytes: int = Field(
        default=DEFAULT_MAX_CONTENT_LENGTH_BYTES,
        validation_alias="MAX_CONTENT_LENGTH",
    )

    default_page_size: int = Field(default=DEFAULT_PAGE_SIZE, validation_alias="DEFAULT_PAGE_SIZE")
    max_page_size: int = Field(default=DEFAULT_MAX_PAGE_SIZE, validation_alias="MAX_PAGE_SIZE")

    log_level: str = Field(default=DEFAULT_LOG_LEVEL, validation_alias="LOG_LEVEL")
    enable_debug_log: bool = Field(default=False, validation_alias="ENABLE_DEBUG_LOG")

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        return value.strip().upper()

    @field_validator("upload_web_prefix")
    @classmethod
    def _normalize_web_prefix(cls, value: str) -> str:
        return "/" + value.strip().strip("/")

    @property
    def is_production(self) -> bool:
        """当前是否为生产环境."""
        return self.environment.strip().lower() == "production"

    @property
    def resolved_upload_root(self) -> Path:
        """上传根目录的绝对路径,相对路径基于项目根目录."""
        if self.upload_root.is_absolute():
            return self.upload_root
        return PROJECT_ROOT / self.upload_root

    def to_flask_config(self) -> dict[str, object]:
        """转换为 Flask app.config 可写入的配置字典."""
        return {
            "ENV": self.environment,
            "DEBUG": self.debug,
            "APP_NAME": self.app_name,
            "APP_VERSION": self.app_version,
            "SECRET_KEY": self.secret_key,
            "BCRYPT_LOG_ROUNDS": self.bcrypt_log_rounds,
            "WTF_CSRF_ENABLED": self.csrf_enabled,
            "WTF_CSRF_TIME_LIMIT": self.csrf_time_limit_seconds,
            "MAX_CONTENT_LENGTH": self.max_content_length_bytes,
            "ADMINKIT_UPLOAD_ROOT": str(self.resolved_upload_root),
            "ADMINKIT_UPLOAD_WEB_PREFIX": self.upload_web_prefix,
            "ADMINKIT_DEFAULT_PAGE_SIZE": self.default_page_size,
            "ADMINKIT_MAX_PAGE_SIZE": self.max_page_size,
            "LOG_LEVEL": self.log_level,
            "ENABLE_DEBUG_LOG": self.enable_debug_log,
        }

    @classmethod
    def load(cls) -> Settings:
        """从环境变量加载 Settings 并执行必要校验."""
        load_dotenv(dotenv_path=DOTENV_PATH if DOTENV_PATH.exists() else None, override=False)
        return cls()

    @model_validator(mode="after")
    def _apply_defaults_and_validate(self) -> Settings:
        environment_normalized = self.environment.strip().lower()
        debug = self._resolve_debug(environment_normalized)
        self._ensure_secret_key(debug)
        self._validate()
        return self

    def _resolve_debug(self, environment_normalized: str) -> bool:
        if "debug" in self.model_fields_set:
            return bool(self.debug)
        debug = environment_normalized != "production"
        object.__setattr__(self, "debug", debug)
        return debug

    def _ensure_secret_key(self, debug: bool) -> None:
        if self.secret_key:
            return
        if not debug:
            raise ValueError("SECRET_KEY environment variable must be set in production")
        object.__setattr__(self, "secret_key", secrets.token_urlsafe(32))
        logger.warning("⚠️  开发环境使用随机生成的SECRET_KEY,生产环境请设置环境变量")

    def _validate(self) -> None:
        """执行跨字段校验,统一抛出可读的 ValueError."""
        errors: list[str] = []
        checks: list[tuple[str, bool]] = [
            (
                f"BCRYPT_LOG_ROUNDS 必须在 {BCRYPT_LOG_ROUNDS_MIN}-{BCRYPT_LOG_ROUNDS_MAX} 之间",
                not BCRYPT_LOG_ROUNDS_MIN <= self.bcrypt_log_rounds <= BCRYPT_LOG_ROUNDS_MAX,
            ),
            ("WTF_CSRF_TIME_LIMIT 必须为正整数(秒)", self.csrf_time_limit_seconds <= 0),
            ("MAX_CONTENT_LENGTH 必须为正整数(字节)", self.max_content_length_bytes <= 0),
            ("DEFAULT_PAGE_SIZE 必须为正整数", self.default_page_size <= 0),
            ("MAX_PAGE_SIZE 不能小于 DEFAULT_PAGE_SIZE", self.max_page_size < self.default_page_size),
            ("LOG_LEVEL 仅支持 DEBUG/INFO/WARNING/ERROR/CRITICAL", self.log_level not in _LOG_LEVELS),
        ]
        for message, condition in checks:
            if condition:
                errors.append(message)

        if errors:
            joined = "; ".join(errors)
            raise ValueError(f"配置校验失败: {joined}")
