"""邮箱字段.

格式校验复用 pydantic 的 ``EmailStr``(底层为 email-validator),不做 MX 记录查询.
"""

from __future__ import annotations

import hashlib
from typing import TYPE_CHECKING, ClassVar
from urllib.parse import urlencode

from markupsafe import Markup
from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from adminkit.constants import FieldMessages, FieldTypeName
from adminkit.fields.base import FieldType
from adminkit.types.converters import as_list_of_str, as_str
from adminkit.utils.rendering import placeholder

if TYPE_CHECKING:
    from adminkit.types import ErrorList, FieldOptions

_EMAIL_ADAPTER: TypeAdapter[str] = TypeAdapter(EmailStr)
GRAVATAR_BASE_URL = "https://www.gravatar.com/avatar/"


def normalize_email(value: str) -> str | None:
    """校验并返回规范化后的小写地址,无效时返回 None.

    ``Ada <ada@example.com>`` 形式的输入只保留尖括号内的地址.
    """
    try:
        address = _EMAIL_ADAPTER.validate_python(value)
    except PydanticValidationError:
        return None
    return address.lower()


def is_valid_email(value: str) -> bool:
    """判断邮箱地址是否符合 RFC 形态."""
    return normalize_email(value) is not None


def gravatar_url(email: str, size: int = 40) -> str:
    """生成邮箱对应的 Gravatar 头像地址."""
    digest = hashlib.md5(email.strip().lower().encode(), usedforsecurity=False).hexdigest()
    return f"{GRAVATAR_BASE_URL}{digest}?{urlencode({'s': size, 'd': 'identicon'})}"


def mask_email(email: str) -> str:
    """遮蔽邮箱本地部分,例如 ``a***@example.org``."""
    local, sep, domain = email.partition("@")
    if not sep:
        return email
    if len(local) <= 1:
        return f"{local}***@{domain}"
    return f"{local[0]}***@{domain}"


class EmailFieldType(FieldType):
    """邮箱地址,``multiple`` 模式下以逗号分隔多个地址."""

    type_name: ClassVar[str] = FieldTypeName.EMAIL.value
    template_name: ClassVar[str] = "adminkit/fields/text.html"
    DEFAULT_OPTIONS: ClassVar[FieldOptions] = {
        "multiple": False,
        "allowed_domains": [],
        "show_gravatar": False,
        "gravatar_size": 24,
        "maxlength": 254,
    }

    def _addresses(self, value: object, options: FieldOptions) -> list[str]:
        if options["multiple"]:
            return as_list_of_str(value)
        text = as_str(value).strip()
        return [text] if text else []

    def _render_display(self, value: object, options: FieldOptions) -> Markup:
        parts = []
        for address in self._addresses(value, options):
            link = Markup('<a href="mailto:{0}">{0}</a>').format(address)
            if options["show_gravatar"]:
                size = options["gravatar_size"]
                link = Markup(
                    '<img class="avatar rounded-circle me-1" src="{0}" width="{1}" height="{1}" alt="">{2}',
                ).format(gravatar_url(address, int(size)), size, link)
            parts.append(link)
        if not parts:
            return placeholder(as_str(options["display_empty"], default="-"))
        return Markup('<span class="email-list">{0}</span>').format(Markup(", ").join(parts))

    def _validate_value(self, value: object, options: FieldOptions) -> ErrorList:
        errors: ErrorList = []
        allowed = {domain.lower() for domain in as_list_of_str(options["allowed_domains"])}
        for address in self._addresses(value, options):
            normalized = normalize_email(address)
            if normalized is None:
                errors.append(self.message(FieldMessages.INVALID_EMAIL, options, value=address))
                continue
            domain = normalized.rpartition("@")[2]
            if allowed and domain not in allowed:
                errors.append(self.message(FieldMessages.EMAIL_DOMAIN_NOT_ALLOWED, options, domain=domain))
        return errors

    def _process(self, value: object, options: FieldOptions) -> object:
        addresses = [normalize_email(address) or address.lower() for address in self._addresses(value, options)]
        if options["multiple"]:
            return list(dict.fromkeys(addresses))
        return addresses[0] if addresses else None

    def _input_attrs(self, name: str, value: object, options: FieldOptions) -> dict[str, object]:
        if isinstance(value, (list, tuple)):
            shown = ", ".join(as_str(item) for item in value)
        else:
            shown = as_str(value)
        return {
            "type": "email",
            "value": shown,
            "multiple": bool(options["multiple"]),
            "maxlength": None if options["multiple"] else options["maxlength"],
            "autocomplete": "email",
        }
