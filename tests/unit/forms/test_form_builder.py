"""表单构建器的单元测试."""

import re

import pytest

from adminkit.errors import FieldTypeNotFoundError, FormConfigurationError, UploadRejectedError
from adminkit.fields.base import FieldType
from adminkit.forms import FORM_ERROR_KEY, FormBuilder


class SpyFieldType(FieldType):
    """记录 validate/process 调用的字段类型."""

    type_name = "spy"

    def __init__(self) -> None:
        self.validated: list[object] = []
        self.processed: list[object] = []

    def validate(self, value, options=None):
        self.validated.append(value)
        return super().validate(value, options)

    def process_form_value(self, value, options=None):
        self.processed.append(value)
        return super().process_form_value(value, options)


class Account:
    def __init__(self) -> None:
        self.name = "old"
        self.renamed: list[str] = []

    def set_name(self, value: str) -> None:
        self.renamed.append(value)
        self.name = value


def _contact_form(csrf_store) -> FormBuilder:
    return (
        FormBuilder(csrf_store=csrf_store)
        .add("name", "text", {"required": True, "label": "姓名"})
        .add("email", "email", {"label": "邮箱"})
    )


@pytest.mark.unit
def test_form_requires_csrf_store_when_protection_enabled() -> None:
    with pytest.raises(FormConfigurationError) as exc_info:
        FormBuilder()

    assert exc_info.value.message == "启用 CSRF 保护时必须提供令牌存储"
    assert FormBuilder({"csrf_protection": False}).config["csrf_protection"] is False


@pytest.mark.unit
def test_handle_request_returns_processed_data_on_success(csrf_store) -> None:
    form = _contact_form(csrf_store)

    result = form.handle_request({"csrf_token": "expected-token", "name": " Alice ", "email": "Alice@Example.com"})

    assert result.valid is True
    assert result.data == {"name": "Alice", "email": "alice@example.com"}
    assert result.errors == {}
    assert form.errors == {}
    assert csrf_store.validated == ["expected-token"]


@pytest.mark.unit
def test_handle_request_collects_field_errors_and_retains_input(csrf_store) -> None:
    form = _contact_form(csrf_store)

    result = form.handle_request({"csrf_token": "expected-token", "name": "", "email": "bad"})

    assert result.valid is False
    assert result.data == {}
    assert result.errors == {"name": ["姓名为必填项"], "email": ["邮箱格式无效: bad"]}
    assert form.errors == result.errors
    html = str(form.render())
    assert 'value="bad"' in html
    assert "姓名为必填项" in html


@pytest.mark.unit
def test_handle_request_stops_before_field_validation_when_csrf_fails(csrf_store) -> None:
    spy = SpyFieldType()
    form = FormBuilder(csrf_store=csrf_store).register_field_type("spy", spy).add("probe", "spy")

    result = form.handle_request({"csrf_token": "forged", "probe": "value"})

    assert result.valid is False
    assert result.errors == {FORM_ERROR_KEY: ["CSRF 令牌无效"]}
    assert spy.validated == []
    assert spy.processed == []
    html = str(form.render())
    assert "form-errors" in html
    assert "CSRF 令牌无效" in html


@pytest.mark.unit
def test_register_field_type_does_not_leak_into_other_forms(csrf_store) -> None:
    FormBuilder(csrf_store=csrf_store).register_field_type("spy", SpyFieldType())

    with pytest.raises(FieldTypeNotFoundError):
        FormBuilder(csrf_store=csrf_store).add("probe", "spy")


@pytest.mark.unit
def test_reject_keeps_input_but_drops_passwords_and_pending_files(make_upload) -> None:
    upload = make_upload("report.pdf", b"%PDF-1.4")
    form = (
        FormBuilder({"csrf_protection": False})
        .add("name", "text", {"required": True})
        .add("password", "password", {"require_confirmation": False})
        .add("attachment", "file")
    )

    result = form.handle_request({"name": "", "password": "Secret1!", "attachment": upload, "extra": "x"})

    assert result.valid is False
    assert form.get_field_value("name") == ""
    assert form.get_field_value("password") is None
    assert form.get_field_value("attachment") is None
    assert not upload.temp_path.exists()


@pytest.mark.unit
def test_get_field_value_prefers_submission_then_entity_then_default() -> None:
    form = FormBuilder({"csrf_protection": False}).add("title", "text", {"default_value": "默认"})

    assert form.get_field_value("title") == "默认"
    form.set_entity({"title": "实体"})
    assert form.get_field_value("title") == "实体"
    form.set_data({"title": "提交"})
    assert form.get_field_value("title") == "提交"
    assert form.get_field_value("missing") is None


@pytest.mark.unit
def test_sections_render_at_position_of_first_member() -> None:
    form = (
        FormBuilder({"csrf_protection": False})
        .add("name", "text")
        .add("email", "email")
        .add("phone", "text")
        .add_section("联系方式", ["email", "phone"], "用于接收通知")
    )

    html = str(form.render())

    assert html.index('data-field="name"') < html.index("<legend") < html.index('data-field="email"')
    assert html.index('data-field="email"') < html.index('data-field="phone"') < html.index("</fieldset>")
    assert "用于接收通知" in html


@pytest.mark.unit
def test_add_section_with_mapping_declares_fields() -> None:
    form = FormBuilder({"csrf_protection": False}).add_section(
        "其他",
        {"remark": "textarea", "score": {"type": "number", "options": {"min": 0}}},
    )

    assert form.get_field("remark").type_name == "textarea"
    assert form.get_field("score").options["min"] == 0
    assert form.sections[0].fields == ["remark", "score"]


@pytest.mark.unit
def test_add_section_rejects_unknown_field_names() -> None:
    form = FormBuilder({"csrf_protection": False}).add("name", "text")

    with pytest.raises(FormConfigurationError) as exc_info:
        form.add_section("基础", ["name", "missing"])

    assert exc_info.value.message == "分组引用了未添加的字段: missing"


@pytest.mark.unit
def test_tabs_render_as_one_group_with_first_tab_active() -> None:
    form = (
        FormBuilder({"csrf_protection": False})
        .add("name", "text")
        .add("email", "email")
        .add("remark", "textarea")
        .add_tab("contact", "联系方式", ["email"], "用于接收通知")
        .add_tab("extra", "其他", ["remark"])
    )

    html = str(form.render())

    assert html.index('data-field="name"') < html.index('data-behavior="form-tabs"')
    assert html.index('id="form-tab-contact"') < html.index('data-field="email"')
    assert html.index('id="form-tab-extra"') < html.index('data-field="remark"')
    assert not re.search(r'd-none[^"]*" id="form-tab-contact"', html)
    assert re.search(r'class="tab-pane active d-none[^"]*" id="form-tab-extra"', html)
    assert 'data-tab-target="form-tab-extra"' in html
    assert "用于接收通知" in html
    assert [tab.tab_id for tab in form.tabs] == ["contact", "extra"]


@pytest.mark.unit
def test_tab_with_errors_becomes_active() -> None:
    form = (
        FormBuilder({"csrf_protection": False})
        .add_tab("contact", "联系方式", {"email": "email"})
        .add_tab("extra", "其他", {"remark": "textarea"})
        .set_errors({"remark": ["备注为必填项"]})
    )

    html = str(form.render())

    assert re.search(r'class="tab-pane active d-none[^"]*" id="form-tab-contact"', html)
    assert not re.search(r'd-none[^"]*" id="form-tab-extra"', html)
    assert 'class="nav-link active text-danger" data-tab-target="form-tab-extra"' in html


@pytest.mark.unit
def test_tab_fields_are_not_repeated_in_sections() -> None:
    form = (
        FormBuilder({"csrf_protection": False})
        .add("name", "text")
        .add("email", "email")
        .add_section("基础", ["name", "email"])
        .add_tab("contact", "联系方式", ["email"])
    )

    html = str(form.render())

    assert html.index("</fieldset>") < html.index('id="form-tab-contact"') < html.index('data-field="email"')


@pytest.mark.unit
def test_add_tab_rejects_invalid_duplicate_and_unknown_definitions() -> None:
    form = FormBuilder({"csrf_protection": False}).add("name", "text").add_tab("basic", "基础", ["name"])

    with pytest.raises(FormConfigurationError) as duplicate:
        form.add_tab("basic", "重复", ["name"])
    with pytest.raises(FormConfigurationError) as invalid:
        form.add_tab("1 bad", "非法", ["name"])
    with pytest.raises(FormConfigurationError) as unknown:
        form.add_tab("more", "更多", ["missing"])

    assert duplicate.value.message == "标签页已存在: basic"
    assert invalid.value.message == "标签页标识非法: 1 bad"
    assert unknown.value.message == "标签页引用了未添加的字段: missing"


@pytest.mark.unit
def test_field_modifiers_update_options() -> None:
    form = (
        FormBuilder({"csrf_protection": False})
        .add("name", "text")
        .set_required("name")
        .set_readonly("name")
        .add_css_class("name", "is-wide")
    )

    options = form.get_field("name").options
    assert options["required"] is True
    assert options["readonly"] is True
    assert options["css_class"].endswith("is-wide")
    form.remove("name")
    assert form.has_field("name") is False


@pytest.mark.unit
def test_process_uploads_replaces_pending_files_with_relative_paths(make_upload, upload_root) -> None:
    form = FormBuilder({"csrf_protection": False}).add("attachment", "file", {"upload_dir": str(upload_root)})
    upload = make_upload("report.pdf", b"%PDF-1.4")

    data = form.process_uploads({"attachment": upload})

    assert re.fullmatch(r"\d{4}/\d{2}/report_[0-9a-f]{13}\.pdf", data["attachment"])
    assert (upload_root / data["attachment"]).read_bytes() == b"%PDF-1.4"
    assert form.process_uploads({"attachment": "2024/01/kept.pdf"}) == {"attachment": "2024/01/kept.pdf"}


def _stored_files(root) -> list:
    return [path for path in root.rglob("*") if path.is_file()]


@pytest.mark.unit
def test_process_uploads_removes_earlier_files_when_later_field_is_rejected(make_upload, upload_root) -> None:
    form = (
        FormBuilder({"csrf_protection": False})
        .add("report", "file", {"upload_dir": str(upload_root)})
        .add("appendix", "file", {"upload_dir": str(upload_root), "allowed_types": ["pdf"]})
    )
    appendix = make_upload("appendix.gif", b"GIF89a")

    with pytest.raises(UploadRejectedError):
        form.process_uploads({"report": make_upload("report.pdf", b"%PDF-1.4"), "appendix": appendix})

    assert _stored_files(upload_root) == []
    assert not appendix.temp_path.exists()


@pytest.mark.unit
def test_process_uploads_cleans_up_when_scanner_raises(make_upload, upload_root) -> None:
    def _broken_scanner(path):
        raise RuntimeError("scanner offline")

    form = (
        FormBuilder({"csrf_protection": False})
        .add("report", "file", {"upload_dir": str(upload_root)})
        .add("appendix", "file", {"upload_dir": str(upload_root), "virus_scan": True, "scanner": _broken_scanner})
    )

    with pytest.raises(RuntimeError):
        form.process_uploads(
            {"report": make_upload("report.pdf", b"%PDF-1.4"), "appendix": make_upload("appendix.pdf", b"%PDF-1.4")},
        )

    assert _stored_files(upload_root) == []


@pytest.mark.unit
def test_discard_stored_uploads_rolls_back_saved_files(make_upload, upload_root) -> None:
    form = FormBuilder({"csrf_protection": False}).add("attachment", "file", {"upload_dir": str(upload_root)})
    data = form.process_uploads({"attachment": make_upload("report.pdf", b"%PDF-1.4")})
    assert (upload_root / data["attachment"]).exists()

    form.discard_stored_uploads()

    assert _stored_files(upload_root) == []


@pytest.mark.unit
def test_populate_entity_skips_disabled_fields_and_empty_passwords() -> None:
    form = (
        FormBuilder({"csrf_protection": False})
        .add("name", "text")
        .add("status", "text", {"disabled": True})
        .add("password", "password")
    )
    entity = {"name": "old", "status": "active", "password": "hash"}

    form.populate_entity(entity, {"name": "new", "status": "locked", "password": None})

    assert entity == {"name": "new", "status": "active", "password": "hash"}


@pytest.mark.unit
def test_populate_entity_uses_setter_methods_on_objects() -> None:
    form = FormBuilder({"csrf_protection": False}).add("name", "text")
    account = Account()

    form.populate_entity(account, {"name": "new"})

    assert account.renamed == ["new"]
    assert account.name == "new"


@pytest.mark.unit
def test_from_entity_config_skips_form_hidden_fields(csrf_store) -> None:
    entity_config = {
        "fields": {
            "name": {"type": "text", "label": "姓名", "list_hidden": True},
            "internal_code": {"type": "text", "form_hidden": True},
        },
    }

    form = FormBuilder.from_entity_config(entity_config, csrf_store=csrf_store)

    assert list(form.fields) == ["name"]
    assert form.get_field("name").options["label"] == "姓名"
    assert "list_hidden" not in form.get_field("name").options


@pytest.mark.unit
def test_render_includes_generated_csrf_token(csrf_store) -> None:
    html = str(_contact_form(csrf_store).render())

    assert 'name="csrf_token" value="expected-token"' in html
    assert csrf_store.generated == 1
    assert 'enctype="multipart/form-data"' in html


@pytest.mark.unit
def test_render_with_wrapper_places_actions_inside_form(csrf_store) -> None:
    html = str(_contact_form(csrf_store).render_with_wrapper(title="新建联系人", cancel_url="/admin/contacts"))

    assert "新建联系人" in html
    assert 'href="/admin/contacts"' in html
    assert html.index('type="submit"') < html.index("</form>")
