"""邮箱字段的单元测试."""

import pytest

from adminkit.fields.email import GRAVATAR_BASE_URL, EmailFieldType, gravatar_url, is_valid_email, mask_email


@pytest.mark.unit
def test_email_validate_accepts_valid_address() -> None:
    assert is_valid_email("user@example.com") is True
    assert EmailFieldType().validate("user@example.com") == []


@pytest.mark.unit
def test_email_validate_reports_invalid_address() -> None:
    errors = EmailFieldType().validate("not-an-email", {"label": "邮箱"})

    assert errors == ["邮箱格式无效: not-an-email"]


@pytest.mark.unit
def test_email_validate_enforces_allowed_domains() -> None:
    field_type = EmailFieldType()
    options = {"allowed_domains": ["Example.com"], "label": "邮箱"}

    assert field_type.validate("a@example.com", options) == []
    assert field_type.validate("a@other.org", options) == ["邮箱的域名不在允许范围内: other.org"]


@pytest.mark.unit
def test_email_process_lowercases_and_deduplicates_multiple_addresses() -> None:
    field_type = EmailFieldType()

    assert field_type.process_form_value(" User@Example.COM ") == "user@example.com"
    assert field_type.process_form_value(
        "a@example.com, B@example.com, a@example.com",
        {"multiple": True},
    ) == ["a@example.com", "b@example.com"]


@pytest.mark.unit
def test_email_display_renders_mailto_links() -> None:
    html = EmailFieldType().render_display("user@example.com")

    assert 'href="mailto:user@example.com"' in html


@pytest.mark.unit
def test_mask_email_and_gravatar_url() -> None:
    assert mask_email("alice@example.com") == "a***@example.com"
    assert mask_email("invalid") == "invalid"
    url = gravatar_url(" Alice@Example.com ", size=40)
    assert url.startswith(GRAVATAR_BASE_URL)
    assert url == gravatar_url("alice@example.com", size=40)
    assert "s=40" in url


@pytest.mark.unit
def test_email_display_name_form_keeps_only_the_address() -> None:
    field_type = EmailFieldType()
    options = {"allowed_domains": ["example.com"], "label": "邮箱"}

    assert field_type.validate("Ada <ada@example.com>", options) == []
    assert field_type.validate("Ada <ada@other.org>", options) == ["邮箱的域名不在允许范围内: other.org"]
    assert field_type.process_form_value("Ada <Ada@Example.com>") == "ada@example.com"
