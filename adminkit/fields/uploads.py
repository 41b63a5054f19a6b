"""上传文件的传输与存储模型.

`UploadedFile` 表示尚未落盘的临时文件,`StoredUpload` 表示已经移动到上传目录的结果.
两者都只是数据载体,存储流程由文件/图片字段的 ``process_upload`` 完成.
"""

from __future__ import annotations

import os
import re
import tempfile
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from flask import current_app, has_app_context

if TYPE_CHECKING:
    from werkzeug.datastructures import FileStorage

DEFAULT_UPLOAD_ROOT = Path("userdata/uploads")
DEFAULT_WEB_PREFIX = "/uploads"
UPLOAD_OK = 0

_UNSAFE_FILENAME_PATTERN = re.compile(r"[^\w.-]+")
_REPEATED_UNDERSCORE_PATTERN = re.compile(r"_+")


@dataclass(slots=True)
class UploadedFile:
    """待处理的上传文件.

    Attributes:
        temp_path: 临时文件路径,处理结束后无论成功与否都会被删除.
        filename: 客户端提交的原始文件名.
        size: 文件字节数.
        error_code: 传输错误码,0 表示成功.
        content_type: 客户端声明的 MIME 类型,仅供参考.

    """

    temp_path: Path
    filename: str
    size: int
    error_code: int = UPLOAD_OK
    content_type: str | None = None

    @property
    def extension(self) -> str:
        return Path(self.filename).suffix.lower().lstrip(".")

    @property
    def ok(self) -> bool:
        return self.error_code == UPLOAD_OK

    def read_head(self, length: int = 1024) -> bytes:
        """读取文件开头若干字节,用于内容嗅探."""
        with self.temp_path.open("rb") as handle:
            return handle.read(length)

    def discard(self) -> None:
        """删除临时文件,文件已被移动时不做任何事."""
        self.temp_path.unlink(missing_ok=True)

    @classmethod
    def from_file_storage(cls, storage: FileStorage | None, temp_dir: Path | None = None) -> UploadedFile | None:
        """将 Werkzeug 的 FileStorage 写入临时文件并包装.

        Args:
            storage: 请求中的文件对象.
            temp_dir: 临时目录,缺省为系统临时目录.

        Returns:
            UploadedFile | None: 未选择文件时返回 None.

        """
        if storage is None or not storage.filename:
            return None
        if temp_dir is not None:
            temp_dir.mkdir(parents=True, exist_ok=True)
        fd, raw_path = tempfile.mkstemp(prefix="adminkit_upload_", dir=temp_dir)
        temp_path = Path(raw_path)
        with os.fdopen(fd, "wb") as handle:
            storage.save(handle)
        return cls(
            temp_path=temp_path,
            filename=storage.filename,
            size=temp_path.stat().st_size,
            content_type=storage.mimetype or None,
        )


@dataclass(slots=True)
class StoredUpload:
    """已保存的上传文件.

    Attributes:
        path: 文件的绝对路径.
        relative_path: 相对上传目录的路径,这是应当持久化的值.
        url: 对外访问地址.
        original_name: 原始文件名.
        size: 文件字节数.
        content_type: MIME 类型.
        thumbnails: 缩略图名称到相对路径的映射,仅图片字段填充.
        derived_paths: 由原文件派生出的其他文件,例如缩略图,删除时一并清理.

    """

    path: Path
    relative_path: str
    url: str
    original_name: str
    size: int
    content_type: str | None = None
    thumbnails: dict[str, str] = field(default_factory=dict)
    derived_paths: list[Path] = field(default_factory=list)

    def remove(self) -> None:
        """删除已保存的文件及其派生文件."""
        for path in (self.path, *self.derived_paths):
            path.unlink(missing_ok=True)


def safe_filename(name: str) -> str:
    """清理文件名中的特殊字符,保留字母、数字、中文、点、横线与下划线."""
    cleaned = _UNSAFE_FILENAME_PATTERN.sub("_", Path(name).name)
    cleaned = _REPEATED_UNDERSCORE_PATTERN.sub("_", cleaned).strip("_.")
    return cleaned or "file"


def unique_filename(original: str) -> str:
    """生成 ``<安全基名>_<随机串>.<扩展名>`` 形式的唯一文件名."""
    source = Path(original)
    base = safe_filename(source.stem)
    extension = source.suffix.lower().lstrip(".")
    token = uuid.uuid4().hex[:13]
    return f"{base}_{token}.{extension}" if extension else f"{base}_{token}"


def resolve_upload_root() -> Path:
    """读取应用配置中的上传根目录,应用上下文之外使用默认值."""
    if has_app_context():
        return Path(current_app.config.get("ADMINKIT_UPLOAD_ROOT", DEFAULT_UPLOAD_ROOT))
    return DEFAULT_UPLOAD_ROOT


def resolve_web_prefix() -> str:
    """读取应用配置中的上传访问前缀."""
    if has_app_context():
        return str(current_app.config.get("ADMINKIT_UPLOAD_WEB_PREFIX", DEFAULT_WEB_PREFIX)).rstrip("/")
    return DEFAULT_WEB_PREFIX


def discard_pending(value: object) -> None:
    """删除值中残留的临时文件,支持单个对象或列表."""
    items = value if isinstance(value, (list, tuple)) else [value]
    for item in items:
        if isinstance(item, UploadedFile):
            item.discard()


__all__ = [
    "DEFAULT_UPLOAD_ROOT",
    "DEFAULT_WEB_PREFIX",
    "StoredUpload",
    "UploadedFile",
    "discard_pending",
    "resolve_upload_root",
    "resolve_web_prefix",
    "safe_filename",
    "unique_filename",
]
