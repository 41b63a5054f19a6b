"""多行文本字段."""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

from markupsafe import Markup

from adminkit.constants import FieldTypeName
from adminkit.fields.text import TextFieldType
from adminkit.types.converters import as_int, as_str
from adminkit.utils.rendering import nl2br, strip_tags, truncate_text

if TYPE_CHECKING:
    from adminkit.types import FieldOptions


class TextareaFieldType(TextFieldType):
    """多行文本,支持字数统计、自动增高与去除 HTML 标签."""

    type_name: ClassVar[str] = FieldTypeName.TEXTAREA.value
    template_name: ClassVar[str] = "adminkit/fields/textarea.html"
    DEFAULT_OPTIONS: ClassVar[FieldOptions] = {
        "rows": 4,
        "cols": None,
        "maxlength": None,
        "minlength": None,
        "pattern": None,
        "show_char_count": False,
        "show_word_count": False,
        "auto_resize": False,
        "strip_tags": False,
        "nl2br_on_display": True,
        "display_max_length": 200,
    }

    def _render_display(self, value: object, options: FieldOptions) -> Markup:
        text = as_str(value)
        shown = truncate_text(text, as_int(options["display_max_length"]))
        body = nl2br(shown) if options["nl2br_on_display"] else Markup("{0}").format(shown)
        if shown != text:
            return Markup('<div class="text-prewrap" title="{0}">{1}</div>').format(text, body)
        return Markup('<div class="text-prewrap">{0}</div>').format(body)

    def _process(self, value: object, options: FieldOptions) -> object:
        text = as_str(value)
        if options["strip_tags"]:
            text = strip_tags(text)
        return super()._process(text, options)

    def _input_attrs(self, name: str, value: object, options: FieldOptions) -> dict[str, object]:
        behaviors = []
        if options["show_char_count"] or options["show_word_count"]:
            behaviors.append("char-counter")
        if options["auto_resize"]:
            behaviors.append("auto-resize")
        return {
            "rows": options["rows"],
            "cols": options["cols"],
            "maxlength": options["maxlength"],
            "minlength": options["minlength"],
            "data-behavior": " ".join(behaviors) or None,
        }

    def _extra_context(self, name: str, value: object, options: FieldOptions) -> dict[str, object]:
        text = as_str(value)
        return {
            "text": text,
            "maxlength": options["maxlength"],
            "show_char_count": bool(options["show_char_count"]),
            "show_word_count": bool(options["show_word_count"]),
            "word_count": len(text.split()),
        }
