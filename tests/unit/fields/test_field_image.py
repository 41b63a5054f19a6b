"""图片字段的单元测试."""

import pytest
from PIL import Image

from adminkit.errors import UploadRejectedError
from adminkit.fields.image import ImageFieldType, read_dimensions, thumbnail_path
from adminkit.fields.uploads import UploadedFile


@pytest.fixture
def make_image(tmp_path):
    """生成指定尺寸的 PNG 临时文件."""

    def _make(width: int, height: int, filename: str = "banner.png") -> UploadedFile:
        path = tmp_path / f"source_{width}x{height}"
        Image.new("RGB", (width, height), "red").save(path, format="PNG")
        return UploadedFile(temp_path=path, filename=filename, size=path.stat().st_size)

    return _make


@pytest.mark.unit
def test_image_validate_dimensions(make_image) -> None:
    field_type = ImageFieldType()
    options = {"label": "头像", "min_width": 100, "min_height": 100}

    assert field_type.validate(make_image(50, 50), options) == ["头像尺寸不能小于 100x100"]
    assert field_type.validate(make_image(200, 200), options) == []
    assert field_type.validate(
        make_image(300, 100),
        {"label": "头像", "resize_to_bounds": False, "max_width": 200, "max_height": 200},
    ) == ["头像尺寸不能大于 200x200"]


@pytest.mark.unit
def test_image_validate_rejects_unreadable_content(make_upload) -> None:
    errors = ImageFieldType().validate(make_upload("fake.png", b"not an image"), {"label": "头像"})

    assert errors == ["头像不是有效的图片"]


@pytest.mark.unit
def test_image_process_upload_resizes_and_creates_thumbnails(make_image, upload_root) -> None:
    stored = ImageFieldType().process_upload(
        make_image(4096, 1024),
        {"upload_dir": str(upload_root), "thumbnail_sizes": {"small": 150, "medium": (300, 300)}},
    )

    assert read_dimensions(stored.path) == (2048, 512)
    assert set(stored.thumbnails) == {"small", "medium"}
    small = upload_root / stored.thumbnails["small"]
    assert small.exists()
    assert small == thumbnail_path(stored.path, "small")
    assert max(read_dimensions(small)) == 150
    assert stored.url.startswith("/uploads/images/")


@pytest.mark.unit
def test_image_process_upload_rejects_non_image_and_removes_file(make_upload, upload_root) -> None:
    with pytest.raises(UploadRejectedError) as exc_info:
        ImageFieldType().process_upload(make_upload("fake.png", b"plain text"), {"upload_dir": str(upload_root)})

    assert exc_info.value.message == "无效的图片文件"
    assert [path for path in upload_root.rglob("*") if path.is_file()] == []


@pytest.mark.unit
def test_image_display_uses_thumbnail_markup() -> None:
    html = ImageFieldType().render_display("2024/06/banner.png", {"preview_size": 80})

    assert 'src="/uploads/images/2024/06/banner.png"' in html
    assert "max-width: 80px" in html


@pytest.mark.unit
def test_image_input_enables_preview_behavior() -> None:
    html = ImageFieldType().render_form_input("avatar", None)

    assert 'data-behavior="file-dropzone image-preview"' in html
    assert 'accept=".jpg,.jpeg,.png,.gif,.webp"' in html
