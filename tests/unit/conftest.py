# tests/unit/conftest.py
"""单元测试专用 fixtures.

提供 CSRF 令牌存储替身、测试应用与临时上传目录等通用 fixtures。
"""

from __future__ import annotations

from pathlib import Path

import pytest

from adminkit import create_app
from adminkit.fields.uploads import UploadedFile
from adminkit.settings import Settings


@pytest.fixture(autouse=True)
def _unit_test_env(monkeypatch):
    """为 unit tests 强制注入隔离环境变量.

    目标:
    - 避免开发者本机环境变量影响测试稳定性
    - 降低 bcrypt 成本因子,缩短哈希耗时
    """
    monkeypatch.setenv("FLASK_ENV", "testing")
    monkeypatch.setenv("BCRYPT_LOG_ROUNDS", "4")
    monkeypatch.delenv("UPLOAD_ROOT", raising=False)


class StaticCsrfTokenStore:
    """固定令牌的 CSRF 存储,记录生成与校验次数."""

    def __init__(self, token: str = "expected-token") -> None:
        self.token = token
        self.generated = 0
        self.validated: list[str | None] = []

    def generate_token(self) -> str:
        self.generated += 1
        return self.token

    def validate_token(self, token: str | None) -> bool:
        self.validated.append(token)
        return token == self.token


@pytest.fixture
def csrf_store() -> StaticCsrfTokenStore:
    return StaticCsrfTokenStore()


@pytest.fixture
def upload_root(tmp_path: Path) -> Path:
    root = tmp_path / "uploads"
    root.mkdir()
    return root


@pytest.fixture
def app(upload_root: Path):
    """创建关闭 CSRF 的测试应用,上传目录指向临时目录."""
    settings = Settings(
        FLASK_ENV="testing",
        SECRET_KEY="test-secret-key",
        WTF_CSRF_ENABLED=False,
        UPLOAD_ROOT=str(upload_root),
        BCRYPT_LOG_ROUNDS=4,
    )
    app = create_app(settings=settings)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def app_context(app):
    with app.app_context():
        yield app


@pytest.fixture
def make_upload(tmp_path: Path):
    """在临时目录写入文件并包装为 UploadedFile."""

    def _make(filename: str, content: bytes = b"hello world", *, error_code: int = 0) -> UploadedFile:
        temp_dir = tmp_path / "incoming"
        temp_dir.mkdir(exist_ok=True)
        temp_path = temp_dir / f"tmp_{len(list(temp_dir.iterdir()))}"
        temp_path.write_bytes(content)
        return UploadedFile(temp_path=temp_path, filename=filename, size=len(content), error_code=error_code)

    return _make
