"""文件上传字段.

字段校验只读取上传文件的元数据(传输错误码、大小、扩展名);
真正的落盘由 ``process_upload`` 完成,依次执行安全检查、移动文件与可选的扫描.
"""

from __future__ import annotations

import json
import shutil
from collections.abc import Callable, Mapping
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, ClassVar

from markupsafe import Markup

from adminkit.constants import FieldMessages, FieldTypeName
from adminkit.errors import UploadError, UploadRejectedError
from adminkit.fields.base import FieldType
from adminkit.fields.uploads import (
    StoredUpload,
    UploadedFile,
    resolve_upload_root,
    resolve_web_prefix,
    unique_filename,
)
from adminkit.types.converters import as_int, as_list_of_str, as_str
from adminkit.utils.rendering import format_bytes, placeholder
from adminkit.utils.structlog_config import get_upload_logger

if TYPE_CHECKING:
    from adminkit.types import ErrorList, FieldOptions

DANGEROUS_EXTENSIONS = frozenset({"php", "exe", "bat", "cmd", "scr", "com", "pif", "js", "jar"})
# 仅是启发式检查,不能替代真正的内容扫描
SCRIPT_SIGNATURES = (b"<?php", b"<?=", b"<script")
SNIFF_LENGTH = 1024
DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024

FILE_ICONS = {
    "pdf": "fa-file-pdf text-danger",
    "doc": "fa-file-word text-primary",
    "docx": "fa-file-word text-primary",
    "xls": "fa-file-excel text-success",
    "xlsx": "fa-file-excel text-success",
    "zip": "fa-file-archive text-warning",
    "rar": "fa-file-archive text-warning",
    "txt": "fa-file-alt text-secondary",
    "jpg": "fa-file-image text-info",
    "jpeg": "fa-file-image text-info",
    "png": "fa-file-image text-info",
    "gif": "fa-file-image text-info",
    "webp": "fa-file-image text-info",
}

Scanner = Callable[[Path], bool]


class FileFieldType(FieldType):
    """通用文件上传.

    取值时已保存的文件转换为相对路径,尚未保存的 `UploadedFile` 原样保留,
    交给 ``process_upload`` (或 FormBuilder.process_uploads) 处理.
    """

    type_name: ClassVar[str] = FieldTypeName.FILE.value
    template_name: ClassVar[str] = "adminkit/fields/file.html"
    upload_subdir: ClassVar[str] = "files"
    DEFAULT_OPTIONS: ClassVar[FieldOptions] = {
        "upload_dir": None,
        "web_path": None,
        "allowed_types": ["pdf", "doc", "docx", "xls", "xlsx", "txt", "zip", "rar"],
        "max_file_size": DEFAULT_MAX_FILE_SIZE,
        "multiple": False,
        "show_preview": True,
        "show_file_info": True,
        "download_link": True,
        "organize_by_date": True,
        "virus_scan": False,
        "scanner": None,
    }

    # ------------------------------------------------------------------ #
    # 路径
    # ------------------------------------------------------------------ #
    def upload_dir(self, options: Mapping[str, object]) -> Path:
        configured = options.get("upload_dir")
        if configured:
            return Path(str(configured))
        return resolve_upload_root() / self.upload_subdir

    def web_path(self, options: Mapping[str, object]) -> str:
        configured = options.get("web_path")
        if configured:
            return str(configured).rstrip("/")
        return f"{resolve_web_prefix()}/{self.upload_subdir}"

    def url_for(self, relative_path: str, options: Mapping[str, object]) -> str:
        return f"{self.web_path(options)}/{relative_path.lstrip('/')}"

    def _items(self, value: object) -> list[object]:
        if isinstance(value, (list, tuple)):
            return [item for item in value if item not in (None, "")]
        return [value]

    # ------------------------------------------------------------------ #
    # 展示
    # ------------------------------------------------------------------ #
    def _render_display(self, value: object, options: FieldOptions) -> Markup:
        parts = [self._render_item(item, options) for item in self._items(value)]
        parts = [part for part in parts if part]
        if not parts:
            return placeholder(as_str(options["display_empty"], default="-"))
        return Markup('<div class="file-list">{0}</div>').format(Markup("").join(parts))

    def _render_item(self, item: object, options: FieldOptions) -> Markup | None:
        if isinstance(item, StoredUpload):
            relative, size, name = item.relative_path, item.size, item.original_name
        elif isinstance(item, str) and item.strip():
            relative, size, name = item.strip(), None, Path(item.strip()).name
        else:
            return None
        extension = Path(relative).suffix.lower().lstrip(".")
        icon = FILE_ICONS.get(extension, "fa-file text-secondary")
        info = Markup("")
        if options["show_file_info"] and size:
            info = Markup(' <small class="text-muted">({0})</small>').format(format_bytes(size))
        if options["download_link"]:
            label = Markup('<a href="{0}" target="_blank" rel="noopener">{1}</a>').format(
                self.url_for(relative, options),
                name,
            )
        else:
            label = Markup("<span>{0}</span>").format(name)
        return Markup('<div class="file-item"><i class="fas {0} me-1"></i>{1}{2}</div>').format(icon, label, info)

    # ------------------------------------------------------------------ #
    # 校验与取值
    # ------------------------------------------------------------------ #
    def allowed_types(self, options: Mapping[str, object]) -> list[str]:
        return [item.lower().lstrip(".") for item in as_list_of_str(options.get("allowed_types"))]

    def _validate_value(self, value: object, options: FieldOptions) -> ErrorList:
        items = self._items(value)
        errors: ErrorList = []
        if not options["multiple"] and len(items) > 1:
            errors.append(self.message(FieldMessages.FILE_TOO_MANY, options))
        for item in items:
            if isinstance(item, UploadedFile):
                errors.extend(self._validate_upload(item, options))
        return errors

    def _validate_upload(self, upload: UploadedFile, options: FieldOptions) -> ErrorList:
        if not upload.ok:
            return [self.message(FieldMessages.FILE_TRANSFER_FAILED, options, code=upload.error_code)]
        errors: ErrorList = []
        max_size = as_int(options["max_file_size"])
        if max_size and upload.size > max_size:
            errors.append(self.message(FieldMessages.FILE_TOO_LARGE, options, max=format_bytes(max_size)))
        allowed = self.allowed_types(options)
        if allowed and upload.extension not in allowed:
            errors.append(self.message(FieldMessages.FILE_TYPE_NOT_ALLOWED, options, types=", ".join(allowed)))
        return errors

    def _process(self, value: object, options: FieldOptions) -> object:
        converted = [self._process_item(item) for item in self._items(value)]
        converted = [item for item in converted if item is not None]
        if options["multiple"]:
            return converted
        return converted[0] if converted else None

    def _process_item(self, item: object) -> object:
        if isinstance(item, StoredUpload):
            return item.relative_path
        if isinstance(item, UploadedFile):
            return item
        text = as_str(item).strip()
        return text or None

    # ------------------------------------------------------------------ #
    # 存储
    # ------------------------------------------------------------------ #
    def process_upload(self, upload: UploadedFile, options: Mapping[str, object] | None = None) -> StoredUpload:
        """校验并保存上传文件.

        Args:
            upload: 待保存的临时文件.
            options: 字段配置.

        Returns:
            StoredUpload: 保存结果.

        Raises:
            UploadRejectedError: 文件未通过大小、类型、内容或扫描检查.
            UploadError: 创建目录或移动文件失败.

        """
        opts = self.resolve_options(options)
        upload_logger = get_upload_logger()
        target: Path | None = None
        stored: StoredUpload | None = None
        try:
            self._check_upload(upload, opts)
            target_dir = self.upload_dir(opts)
            if opts["organize_by_date"]:
                target_dir = target_dir / datetime.now().strftime("%Y/%m")
            target = target_dir / unique_filename(upload.filename)
            try:
                target_dir.mkdir(parents=True, exist_ok=True)
                shutil.move(str(upload.temp_path), str(target))
            except OSError as exc:
                upload_logger.error(
                    "上传文件保存失败",
                    module="uploads",
                    filename=upload.filename,
                    target=str(target),
                    exception=str(exc),
                )
                target = None
                raise UploadError(extra={"filename": upload.filename}) from exc

            relative = target.relative_to(self.upload_dir(opts)).as_posix()
            stored = StoredUpload(
                path=target,
                relative_path=relative,
                url=self.url_for(relative, opts),
                original_name=upload.filename,
                size=target.stat().st_size,
                content_type=upload.content_type,
            )
            self._after_store(stored, opts)
        except Exception as exc:
            if isinstance(exc, UploadRejectedError):
                upload_logger.warning(
                    "上传文件被拒绝",
                    module="uploads",
                    filename=upload.filename,
                    reason=exc.message,
                )
            # 扫描器等抛出的任意异常都要清理已落盘的文件
            if stored is not None:
                stored.remove()
            elif target is not None:
                target.unlink(missing_ok=True)
            raise
        finally:
            upload.discard()

        upload_logger.info(
            "上传文件已保存",
            module="uploads",
            filename=upload.filename,
            relative_path=stored.relative_path,
            size=stored.size,
        )
        return stored

    def _check_upload(self, upload: UploadedFile, options: FieldOptions) -> None:
        if not upload.ok:
            raise UploadRejectedError(
                self.message(FieldMessages.FILE_TRANSFER_FAILED, options, code=upload.error_code),
                message_key="FILE_UPLOAD_ERROR",
            )
        max_size = as_int(options["max_file_size"])
        if max_size and upload.size > max_size:
            raise UploadRejectedError(message_key="FILE_TOO_LARGE", extra={"size": upload.size})
        extension = upload.extension
        allowed = self.allowed_types(options)
        if allowed and extension not in allowed:
            raise UploadRejectedError(message_key="INVALID_FILE_TYPE", extra={"extension": extension})
        if extension in DANGEROUS_EXTENSIONS:
            raise UploadRejectedError(message_key="DANGEROUS_FILE_TYPE", extra={"extension": extension})
        try:
            head = upload.read_head(SNIFF_LENGTH).lower()
        except OSError as exc:
            raise UploadError(extra={"filename": upload.filename}) from exc
        if any(signature in head for signature in SCRIPT_SIGNATURES):
            raise UploadRejectedError(message_key="MALICIOUS_CONTENT", extra={"filename": upload.filename})

    def _after_store(self, stored: StoredUpload, options: FieldOptions) -> None:
        """落盘后的处理,默认只执行可选的扫描."""
        if not options["virus_scan"]:
            return
        scanner = options["scanner"]
        if not callable(scanner):
            get_upload_logger().warning("已开启扫描但未配置扫描器", module="uploads", path=stored.relative_path)
            return
        if not scanner(stored.path):
            raise UploadRejectedError(message_key="VIRUS_DETECTED", extra={"filename": stored.original_name})

    # ------------------------------------------------------------------ #
    # 表单控件
    # ------------------------------------------------------------------ #
    def accept_string(self, options: Mapping[str, object]) -> str | None:
        allowed = self.allowed_types(options)
        return ",".join(f".{item}" for item in allowed) or None

    def _input_attrs(self, name: str, value: object, options: FieldOptions) -> dict[str, object]:
        return {
            "type": "file",
            "name": f"{name}[]" if options["multiple"] else name,
            "multiple": bool(options["multiple"]),
            "accept": self.accept_string(options),
            "placeholder": None,
            # 已有文件时允许不重新选择
            "required": bool(options["required"]) and not self._existing(value),
            "data-behavior": "file-dropzone",
            "data-max-size": options["max_file_size"],
            "data-allowed-types": json.dumps(self.allowed_types(options)),
        }

    def _existing(self, value: object) -> list[str]:
        paths = []
        for item in self._items(value):
            if isinstance(item, StoredUpload):
                paths.append(item.relative_path)
            elif isinstance(item, str) and item.strip():
                paths.append(item.strip())
        return paths

    def _extra_context(self, name: str, value: object, options: FieldOptions) -> dict[str, object]:
        existing = self._existing(value)
        return {
            "existing": existing,
            "existing_name": f"{name}[]" if options["multiple"] else name,
            "current_display": self._render_display(existing, options) if existing else None,
            "show_preview": bool(options["show_preview"]),
            "max_file_size": format_bytes(options["max_file_size"]),
            "allowed_types": ", ".join(self.allowed_types(options)),
        }


__all__ = ["DANGEROUS_EXTENSIONS", "FileFieldType", "Scanner"]
