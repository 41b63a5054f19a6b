"""图片上传字段.

在文件字段的基础上增加尺寸校验、超限缩放与缩略图生成,图像处理使用 Pillow.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import TYPE_CHECKING, ClassVar

from markupsafe import Markup
from PIL import Image, UnidentifiedImageError

from adminkit.constants import FieldMessages, FieldTypeName
from adminkit.errors import UploadError, UploadRejectedError
from adminkit.fields.file import FileFieldType
from adminkit.fields.uploads import StoredUpload
from adminkit.types.converters import as_int, as_str
from adminkit.utils.rendering import placeholder
from adminkit.utils.structlog_config import get_upload_logger

if TYPE_CHECKING:
    from adminkit.fields.uploads import UploadedFile
    from adminkit.types import ErrorList, FieldOptions

IMAGE_ERRORS: tuple[type[Exception], ...] = (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError)
QUALITY_FORMATS = frozenset({"JPEG", "WEBP"})


def read_dimensions(path: Path) -> tuple[int, int] | None:
    """读取图片宽高,无法识别时返回 None."""
    try:
        with Image.open(path) as image:
            return image.size
    except IMAGE_ERRORS:
        return None


def thumbnail_path(path: Path, size_name: str) -> Path:
    """缩略图与原图同目录,命名为 ``<基名>_<尺寸名>.<扩展名>``."""
    return path.with_name(f"{path.stem}_{size_name}{path.suffix}")


def _bounds(size: object) -> tuple[int, int] | None:
    if isinstance(size, int) and size > 0:
        return size, size
    if isinstance(size, Sequence) and not isinstance(size, str) and len(size) == 2:
        width, height = as_int(size[0]), as_int(size[1])
        if width and height:
            return width, height
    return None


def _save(image: Image.Image, path: Path, image_format: str | None, quality: int) -> None:
    params: dict[str, object] = {}
    if image_format in QUALITY_FORMATS:
        params = {"quality": quality, "optimize": True}
        if image.mode not in ("RGB", "L"):
            image = image.convert("RGB")
    image.save(path, format=image_format, **params)


class ImageFieldType(FileFieldType):
    """图片上传.

    ``resize_to_bounds`` 开启时超出最大宽高的图片会被等比缩小,否则视为校验错误.
    """

    type_name: ClassVar[str] = FieldTypeName.IMAGE.value
    template_name: ClassVar[str] = "adminkit/fields/image.html"
    upload_subdir: ClassVar[str] = "images"
    DEFAULT_OPTIONS: ClassVar[FieldOptions] = {
        **FileFieldType.DEFAULT_OPTIONS,
        "allowed_types": ["jpg", "jpeg", "png", "gif", "webp"],
        "max_file_size": 5 * 1024 * 1024,
        "max_width": 2048,
        "max_height": 2048,
        "min_width": None,
        "min_height": None,
        "generate_thumbnails": True,
        "thumbnail_sizes": {"small": 150, "medium": 300, "large": 600},
        "quality": 85,
        "resize_to_bounds": True,
        "preview_size": 150,
    }

    def _render_item(self, item: object, options: FieldOptions) -> Markup | None:
        if isinstance(item, StoredUpload):
            relative = item.thumbnails.get("small", item.relative_path)
            full_url, name = item.url, item.original_name
        elif isinstance(item, str) and item.strip():
            relative = item.strip()
            full_url, name = self.url_for(relative, options), Path(relative).name
        else:
            return None
        size = as_int(options["preview_size"], default=150)
        return Markup(
            '<a class="image-item me-1" href="{0}" target="_blank" rel="noopener">'
            '<img class="img-thumbnail" src="{1}" alt="{2}" style="max-width: {3}px; max-height: {3}px;" loading="lazy">'
            "</a>",
        ).format(full_url, self.url_for(relative, options), name, size)

    def _render_display(self, value: object, options: FieldOptions) -> Markup:
        parts = [self._render_item(item, options) for item in self._items(value)]
        parts = [part for part in parts if part]
        if not parts:
            return placeholder(as_str(options["display_empty"], default="-"))
        return Markup('<div class="image-list">{0}</div>').format(Markup("").join(parts))

    def _validate_upload(self, upload: UploadedFile, options: FieldOptions) -> ErrorList:
        errors = super()._validate_upload(upload, options)
        if errors:
            return errors
        dimensions = read_dimensions(upload.temp_path)
        if dimensions is None:
            return [self.message(FieldMessages.IMAGE_INVALID, options)]
        width, height = dimensions
        min_width = as_int(options["min_width"]) or 0
        min_height = as_int(options["min_height"]) or 0
        if width < min_width or height < min_height:
            errors.append(self.message(FieldMessages.IMAGE_TOO_SMALL, options, width=min_width, height=min_height))
        max_width = as_int(options["max_width"])
        max_height = as_int(options["max_height"])
        if not options["resize_to_bounds"] and max_width and max_height and (width > max_width or height > max_height):
            errors.append(self.message(FieldMessages.IMAGE_TOO_LARGE, options, width=max_width, height=max_height))
        return errors

    def _after_store(self, stored: StoredUpload, options: FieldOptions) -> None:
        super()._after_store(stored, options)
        try:
            with Image.open(stored.path) as source:
                source.verify()
        except IMAGE_ERRORS as exc:
            raise UploadRejectedError(message_key="INVALID_IMAGE", extra={"filename": stored.original_name}) from exc

        created: list[Path] = []
        try:
            self._resize_and_thumbnail(stored, options, created)
        except IMAGE_ERRORS as exc:
            for path in created:
                path.unlink(missing_ok=True)
            get_upload_logger().error(
                "图片处理失败",
                module="uploads",
                filename=stored.original_name,
                exception=str(exc),
            )
            raise UploadError(extra={"filename": stored.original_name}) from exc

    def _resize_and_thumbnail(self, stored: StoredUpload, options: FieldOptions, created: list[Path]) -> None:
        quality = as_int(options["quality"], default=85) or 85
        with Image.open(stored.path) as source:
            image_format = source.format
            image = source.copy()

        max_width = as_int(options["max_width"])
        max_height = as_int(options["max_height"])
        if options["resize_to_bounds"] and max_width and max_height:
            if image.width > max_width or image.height > max_height:
                image.thumbnail((max_width, max_height))
                _save(image, stored.path, image_format, quality)
                stored.size = stored.path.stat().st_size

        sizes = options["thumbnail_sizes"] if options["generate_thumbnails"] else {}
        if not isinstance(sizes, Mapping):
            return
        base_dir = self.upload_dir(options)
        for size_name, size in sizes.items():
            bounds = _bounds(size)
            if bounds is None:
                continue
            target = thumbnail_path(stored.path, str(size_name))
            thumbnail = image.copy()
            thumbnail.thumbnail(bounds)
            _save(thumbnail, target, image_format, quality)
            created.append(target)
            stored.derived_paths.append(target)
            stored.thumbnails[str(size_name)] = target.relative_to(base_dir).as_posix()

    def _input_attrs(self, name: str, value: object, options: FieldOptions) -> dict[str, object]:
        attrs = super()._input_attrs(name, value, options)
        attrs["data-behavior"] = "file-dropzone image-preview"
        return attrs
