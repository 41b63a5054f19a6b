"""文本与多行文本字段的单元测试."""

import pytest

from adminkit.fields.text import TextFieldType
from adminkit.fields.textarea import TextareaFieldType


@pytest.mark.unit
def test_text_process_strips_truncates_and_empties_to_none() -> None:
    field_type = TextFieldType()

    assert field_type.process_form_value("  hello  ") == "hello"
    assert field_type.process_form_value("abcdef", {"maxlength": 3}) == "abc"
    assert field_type.process_form_value("   ") is None


@pytest.mark.unit
def test_text_validate_length_and_pattern() -> None:
    field_type = TextFieldType()

    assert field_type.validate("ab", {"minlength": 3, "label": "名称"}) == ["名称至少需要 3 个字符"]
    assert field_type.validate("abcdef", {"maxlength": 5, "label": "名称"}) == ["名称最多允许 5 个字符"]
    assert field_type.validate("abc", {"pattern": r"\d+", "label": "编号"}) == ["编号格式不正确"]
    assert field_type.validate("123", {"pattern": r"\d+"}) == []


@pytest.mark.unit
def test_text_display_truncates_long_value_and_keeps_full_title() -> None:
    value = "x" * 60

    html = TextFieldType().render_display(value)

    assert f'title="{value}"' in html
    assert "x" * 50 + "..." in html


@pytest.mark.unit
def test_text_display_escapes_markup() -> None:
    html = TextFieldType().render_display("<b>bold</b>")

    assert "<b>" not in html
    assert "&lt;b&gt;bold&lt;/b&gt;" in html


@pytest.mark.unit
def test_textarea_strip_tags_and_line_breaks() -> None:
    field_type = TextareaFieldType()

    assert field_type.process_form_value("<b>hi</b> there", {"strip_tags": True}) == "hi there"
    assert field_type.process_form_value("<b>hi</b>") == "<b>hi</b>"
    html = field_type.render_display("第一行\n<第二行>")
    assert "<br>" in html
    assert "&lt;第二行&gt;" in html


@pytest.mark.unit
def test_textarea_input_declares_client_behaviors() -> None:
    html = TextareaFieldType().render_form_input(
        "content",
        "正文",
        {"show_char_count": True, "auto_resize": True, "maxlength": 500},
    )

    assert 'data-behavior="char-counter auto-resize"' in html
    assert "正文" in html
