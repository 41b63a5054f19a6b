"""字段类型公共行为的单元测试."""

import pytest
from markupsafe import Markup

from adminkit.fields.base import BASE_DEFAULT_OPTIONS, humanize
from adminkit.fields.number import NumberFieldType
from adminkit.fields.text import TextFieldType


@pytest.mark.unit
def test_humanize_replaces_underscores_and_capitalizes() -> None:
    assert humanize("first_name") == "First name"
    assert humanize("email") == "Email"


@pytest.mark.unit
def test_default_options_returns_independent_copy() -> None:
    field_type = TextFieldType()

    first = field_type.default_options()
    first["attr"]["data-x"] = "1"
    second = field_type.default_options()

    assert second["attr"] == {}
    assert BASE_DEFAULT_OPTIONS["attr"] == {}


@pytest.mark.unit
def test_resolve_options_keeps_unknown_keys_and_reports_them() -> None:
    field_type = TextFieldType()

    resolved = field_type.resolve_options({"maxlength": 10, "tooltip": "提示"})

    assert resolved["maxlength"] == 10
    assert resolved["tooltip"] == "提示"
    assert resolved["css_class"] == "form-control"
    assert field_type.unknown_options({"maxlength": 10, "tooltip": "提示"}) == ["tooltip"]
    assert field_type.supports_option("display_max_length") is True


@pytest.mark.unit
def test_required_message_uses_label_or_default_label() -> None:
    field_type = TextFieldType()

    assert field_type.validate("  ", {"required": True, "label": "名称"}) == ["名称为必填项"]
    assert field_type.validate(None, {"required": True}) == ["该字段为必填项"]
    assert field_type.validate(None, {"required": False}) == []


@pytest.mark.unit
def test_render_display_uses_placeholder_for_empty_value() -> None:
    field_type = TextFieldType()

    html = field_type.render_display(None, {"display_empty": "未填写"})

    assert isinstance(html, Markup)
    assert html == '<span class="text-muted">未填写</span>'


@pytest.mark.unit
def test_render_display_falls_back_to_placeholder_when_value_cannot_be_shown() -> None:
    html = NumberFieldType().render_display("not-a-number")

    assert html == '<span class="text-muted">-</span>'


@pytest.mark.unit
def test_render_form_input_uses_default_value_and_escapes_attributes() -> None:
    field_type = TextFieldType()

    with_default = field_type.render_form_input("title", None, {"default_value": "默认标题"})
    escaped = field_type.render_form_input("title", '"><script>alert(1)</script>')

    assert 'value="默认标题"' in with_default
    assert "<script>" not in escaped
    assert "&lt;script&gt;" in escaped


@pytest.mark.unit
def test_render_form_input_includes_label_help_and_errors() -> None:
    html = TextFieldType().render_form_input(
        "first_name",
        "Alice",
        {"help": "请输入名字", "errors": ["名字太短"], "required": True},
    )

    assert 'id="field_first_name"' in html
    assert 'aria-describedby="field_first_name_help"' in html
    assert ">First name" in html
    assert "required-marker" in html
    assert "请输入名字" in html
    assert "名字太短" in html
