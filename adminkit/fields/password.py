"""密码字段.

取值结果永远是 bcrypt 哈希,明文不会被返回、展示或写入日志.
bcrypt 只处理前 72 字节,超长输入在校验阶段直接拒绝.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import TYPE_CHECKING, ClassVar

from markupsafe import Markup

from adminkit import bcrypt
from adminkit.constants import FieldMessages, FieldTypeName
from adminkit.fields.base import FieldType
from adminkit.types.converters import as_int, as_str, is_empty
from adminkit.utils.rendering import field_id
from adminkit.utils.structlog_config import log_debug

if TYPE_CHECKING:
    from adminkit.types import ErrorList, FieldOptions, SubmittedData

BCRYPT_MAX_BYTES = 72
SYMBOL_PATTERN = re.compile(r"""[!@#$%^&*(),.?":{}|<>\[\]\-_=+;'/\\`~]""")
BCRYPT_PREFIXES = ("2a", "2b", "2y")


def verify_password(plain: str, hashed: str) -> bool:
    """校验明文与哈希是否匹配,哈希格式非法时返回 False."""
    if not plain or not hashed:
        return False
    try:
        return bcrypt.check_password_hash(hashed, plain)
    except ValueError:
        return False


def needs_rehash(hashed: str, rounds: int) -> bool:
    """判断哈希是否需要按新的成本因子重新计算."""
    parts = hashed.split("$")
    if len(parts) < 4 or parts[1] not in BCRYPT_PREFIXES:
        return True
    try:
        return int(parts[2]) != rounds
    except ValueError:
        return True


class PasswordFieldType(FieldType):
    """密码输入,支持确认输入框、强度提示、显隐切换与随机生成.

    开启 ``require_confirmation`` 时 ``extract_value`` 返回
    ``{"first": 密码, "second": 确认密码}``,校验阶段比较两者是否一致.
    """

    type_name: ClassVar[str] = FieldTypeName.PASSWORD.value
    template_name: ClassVar[str] = "adminkit/fields/password.html"
    DEFAULT_OPTIONS: ClassVar[FieldOptions] = {
        "minlength": 8,
        "maxlength": BCRYPT_MAX_BYTES,
        "require_uppercase": True,
        "require_lowercase": True,
        "require_numbers": True,
        "require_symbols": True,
        "require_confirmation": True,
        "confirmation_field": None,
        "confirmation_label": "确认密码",
        "show_strength_meter": True,
        "show_toggle": True,
        "generate_button": True,
        "hash_rounds": None,
        "unset_text": "未设置",
    }

    def confirmation_name(self, name: str, options: Mapping[str, object]) -> str:
        return as_str(options.get("confirmation_field")) or f"{name}_confirmation"

    def extract_value(
        self,
        name: str,
        submitted: SubmittedData,
        options: Mapping[str, object] | None = None,
    ) -> object:
        opts = self.resolve_options(options)
        if not opts["require_confirmation"]:
            return submitted.get(name)
        return {
            "first": submitted.get(name),
            "second": submitted.get(self.confirmation_name(name, opts)),
        }

    def _plain(self, value: object) -> str:
        if isinstance(value, Mapping):
            return as_str(value.get("first"))
        return as_str(value)

    def is_empty_value(self, value: object) -> bool:
        if isinstance(value, Mapping):
            return is_empty(value.get("first"))
        return is_empty(value)

    def render_display(self, value: object, options: Mapping[str, object] | None = None) -> Markup:
        opts = self.resolve_options(options)
        if self.is_empty_value(value):
            return Markup('<span class="text-muted">{0}</span>').format(opts["unset_text"])
        return Markup('<span class="password-mask">••••••••</span>')

    def _validate_value(self, value: object, options: FieldOptions) -> ErrorList:
        plain = self._plain(value)
        errors: ErrorList = []
        minlength = as_int(options["minlength"])
        maxlength = as_int(options["maxlength"])
        if minlength is not None and len(plain) < minlength:
            errors.append(self.message(FieldMessages.PASSWORD_TOO_SHORT, options, min=minlength))
        if maxlength is not None and len(plain) > maxlength:
            errors.append(self.message(FieldMessages.PASSWORD_TOO_LONG, options, max=maxlength))
        if len(plain.encode()) > BCRYPT_MAX_BYTES:
            errors.append(self.message(FieldMessages.PASSWORD_TOO_MANY_BYTES, options, max=BCRYPT_MAX_BYTES))
        if options["require_uppercase"] and not re.search(r"[A-Z]", plain):
            errors.append(self.message(FieldMessages.PASSWORD_UPPERCASE, options))
        if options["require_lowercase"] and not re.search(r"[a-z]", plain):
            errors.append(self.message(FieldMessages.PASSWORD_LOWERCASE, options))
        if options["require_numbers"] and not re.search(r"[0-9]", plain):
            errors.append(self.message(FieldMessages.PASSWORD_NUMBER, options))
        if options["require_symbols"] and not SYMBOL_PATTERN.search(plain):
            errors.append(self.message(FieldMessages.PASSWORD_SYMBOL, options))
        if options["require_confirmation"] and isinstance(value, Mapping):
            if as_str(value.get("second")) != plain:
                errors.append(self.message(FieldMessages.PASSWORD_MISMATCH, options))
        return errors

    def _process(self, value: object, options: FieldOptions) -> object:
        plain = self._plain(value)
        if len(plain.encode()) > BCRYPT_MAX_BYTES:
            log_debug("密码超出 bcrypt 字节上限,放弃哈希", module="fields", field_type=self.type_name)
            return None
        rounds = as_int(options["hash_rounds"])
        return bcrypt.generate_password_hash(plain, rounds).decode("utf-8")

    def _input_attrs(self, name: str, value: object, options: FieldOptions) -> dict[str, object]:
        return {
            "type": "password",
            "autocomplete": "new-password",
            "minlength": options["minlength"],
            "maxlength": options["maxlength"],
            "data-behavior": "password-strength" if options["show_strength_meter"] else None,
        }

    def render_form_input(
        self,
        name: str,
        value: object,
        options: Mapping[str, object] | None = None,
    ) -> Markup:
        # 密码控件从不回填已有值
        return super().render_form_input(name, None, options)

    def _extra_context(self, name: str, value: object, options: FieldOptions) -> dict[str, object]:
        confirmation = self.confirmation_name(name, options)
        return {
            "confirmation_name": confirmation if options["require_confirmation"] else None,
            "confirmation_id": field_id(confirmation),
            "confirmation_label": options["confirmation_label"],
            "css_class": options["css_class"],
            "show_toggle": bool(options["show_toggle"]),
            "generate_button": bool(options["generate_button"]),
            "show_strength_meter": bool(options["show_strength_meter"]),
            "requirements": [
                ("length", f"至少 {options['minlength']} 个字符", bool(options["minlength"])),
                ("uppercase", "包含大写字母", bool(options["require_uppercase"])),
                ("lowercase", "包含小写字母", bool(options["require_lowercase"])),
                ("number", "包含数字", bool(options["require_numbers"])),
                ("symbol", "包含特殊字符", bool(options["require_symbols"])),
            ],
        }
