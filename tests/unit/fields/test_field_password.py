"""密码字段的单元测试."""

import pytest

from adminkit.fields.password import PasswordFieldType, needs_rehash, verify_password

STRONG = "Str0ng!Pass"


@pytest.mark.unit
def test_password_extract_value_pairs_confirmation() -> None:
    field_type = PasswordFieldType()
    submitted = {"password": STRONG, "password_confirmation": "other", "pwd2": STRONG}

    assert field_type.extract_value("password", submitted) == {"first": STRONG, "second": "other"}
    assert field_type.extract_value("password", submitted, {"confirmation_field": "pwd2"}) == {
        "first": STRONG,
        "second": STRONG,
    }
    assert field_type.extract_value("password", submitted, {"require_confirmation": False}) == STRONG


@pytest.mark.unit
def test_password_validate_reports_each_failed_rule() -> None:
    errors = PasswordFieldType().validate("abc", {"require_confirmation": False, "label": "密码"})

    assert "密码至少需要 8 个字符" in errors
    assert "密码必须包含至少一个大写字母" in errors
    assert "密码必须包含至少一个数字" in errors
    assert "密码必须包含至少一个特殊字符" in errors
    assert "密码必须包含至少一个小写字母" not in errors


@pytest.mark.unit
def test_password_validate_confirmation_mismatch() -> None:
    field_type = PasswordFieldType()

    assert field_type.validate({"first": STRONG, "second": STRONG}) == []
    assert field_type.validate({"first": STRONG, "second": "different"}, {"label": "密码"}) == ["两次输入的密码不一致"]


@pytest.mark.unit
def test_password_rejects_input_beyond_bcrypt_byte_limit() -> None:
    field_type = PasswordFieldType()
    plain = "Aa1!" + "密" * 30
    options = {"require_confirmation": False, "label": "密码", "hash_rounds": 4}

    assert "密码超出加密算法允许的 72 字节上限" in field_type.validate(plain, options)
    assert field_type.process_form_value(plain, options) is None


@pytest.mark.unit
def test_password_process_returns_verifiable_bcrypt_hash() -> None:
    field_type = PasswordFieldType()

    hashed = field_type.process_form_value({"first": STRONG, "second": STRONG}, {"hash_rounds": 4})

    assert hashed.startswith("$2b$04$")
    assert STRONG not in hashed
    assert verify_password(STRONG, hashed) is True
    assert verify_password("wrong", hashed) is False
    assert verify_password(STRONG, "not-a-hash") is False
    assert needs_rehash(hashed, 4) is False
    assert needs_rehash(hashed, 12) is True
    assert needs_rehash("plain-text", 4) is True


@pytest.mark.unit
def test_password_empty_submission_processes_to_none() -> None:
    assert PasswordFieldType().process_form_value({"first": "", "second": ""}) is None


@pytest.mark.unit
def test_password_display_is_masked_and_input_never_prefilled() -> None:
    field_type = PasswordFieldType()

    assert "••••••••" in field_type.render_display("$2b$04$hash")
    assert "未设置" in field_type.render_display(None)
    html = field_type.render_form_input("password", "secret-value")
    assert "secret-value" not in html
    assert 'name="password_confirmation"' in html
    assert 'data-requirement="uppercase"' in html


@pytest.mark.unit
def test_password_hashes_of_same_plaintext_differ() -> None:
    field_type = PasswordFieldType()
    options = {"require_confirmation": False, "hash_rounds": 4}

    first = field_type.process_form_value("secret", options)
    second = field_type.process_form_value("secret", options)

    assert first != second
    assert verify_password("secret", first) is True
    assert verify_password("secret", second) is True
