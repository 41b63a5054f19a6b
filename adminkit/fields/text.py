"""单行文本字段."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, ClassVar

from markupsafe import Markup

from adminkit.constants import FieldMessages, FieldTypeName
from adminkit.fields.base import FieldType
from adminkit.types.converters import as_int, as_str
from adminkit.utils.rendering import truncate_text

if TYPE_CHECKING:
    from adminkit.types import ErrorList, FieldOptions


class TextFieldType(FieldType):
    """单行文本.

    展示时按 ``display_max_length`` 截断并在 title 中保留全文,
    取值时去除首尾空白并按 ``maxlength`` 截断.
    """

    type_name: ClassVar[str] = FieldTypeName.TEXT.value
    template_name: ClassVar[str] = "adminkit/fields/text.html"
    DEFAULT_OPTIONS: ClassVar[FieldOptions] = {
        "maxlength": 255,
        "minlength": None,
        "pattern": None,
        "display_max_length": 50,
    }

    def _render_display(self, value: object, options: FieldOptions) -> Markup:
        text = as_str(value)
        shown = truncate_text(text, as_int(options["display_max_length"]))
        if shown != text:
            return Markup('<span title="{0}">{1}</span>').format(text, shown)
        return Markup("<span>{0}</span>").format(text)

    def _validate_value(self, value: object, options: FieldOptions) -> ErrorList:
        return self.check_length(as_str(value).strip(), options)

    def _process(self, value: object, options: FieldOptions) -> object:
        text = as_str(value).strip()
        maxlength = as_int(options["maxlength"])
        if maxlength is not None and maxlength > 0:
            text = text[:maxlength]
        return text or None

    def _input_attrs(self, name: str, value: object, options: FieldOptions) -> dict[str, object]:
        return {
            "type": "text",
            "value": as_str(value),
            "maxlength": options["maxlength"],
            "minlength": options["minlength"],
            "pattern": options["pattern"],
        }

    def check_length(self, text: str, options: FieldOptions) -> ErrorList:
        """校验长度与正则约束,供文本类字段复用."""
        errors: ErrorList = []
        minlength = as_int(options.get("minlength"))
        maxlength = as_int(options.get("maxlength"))
        if minlength is not None and len(text) < minlength:
            errors.append(self.message(FieldMessages.MIN_LENGTH, options, min=minlength))
        if maxlength is not None and len(text) > maxlength:
            errors.append(self.message(FieldMessages.MAX_LENGTH, options, max=maxlength))
        pattern = options.get("pattern")
        if pattern and not re.fullmatch(as_str(pattern), text):
            errors.append(self.message(FieldMessages.PATTERN_MISMATCH, options))
        return errors
