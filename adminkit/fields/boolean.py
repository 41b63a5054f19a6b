"""布尔字段."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, ClassVar

from markupsafe import Markup

from adminkit.constants import FieldMessages, FieldTypeName
from adminkit.fields.base import FieldType
from adminkit.types.converters import as_bool

if TYPE_CHECKING:
    from adminkit.types import ErrorList, FieldOptions


class BooleanFieldType(FieldType):
    """开关或复选框.

    未勾选的复选框不会出现在提交数据中,因此缺省值按 False 处理;
    ``required`` 表示必须勾选.
    """

    type_name: ClassVar[str] = FieldTypeName.BOOLEAN.value
    template_name: ClassVar[str] = "adminkit/fields/boolean.html"
    DEFAULT_OPTIONS: ClassVar[FieldOptions] = {
        "true_label": "是",
        "false_label": "否",
        "render_as_switch": True,
        "css_class": "form-check-input",
    }

    def validate(self, value: object, options: Mapping[str, object] | None = None) -> ErrorList:
        opts = self.resolve_options(options)
        if opts["required"] and not self._truthy(value):
            return [self.message(FieldMessages.REQUIRED, opts)]
        return []

    def _truthy(self, value: object) -> bool:
        if self.is_empty_value(value):
            return False
        return as_bool(value, default=True)

    def _empty_value(self, options: FieldOptions) -> object:
        return False

    def _process(self, value: object, options: FieldOptions) -> object:
        return self._truthy(value)

    def _render_display(self, value: object, options: FieldOptions) -> Markup:
        if self._truthy(value):
            return Markup('<span class="badge bg-success">{0}</span>').format(options["true_label"])
        return Markup('<span class="badge bg-secondary">{0}</span>').format(options["false_label"])

    def _input_attrs(self, name: str, value: object, options: FieldOptions) -> dict[str, object]:
        return {
            "type": "checkbox",
            "value": "1",
            "checked": self._truthy(value),
            "role": "switch" if options["render_as_switch"] else None,
            "placeholder": None,
        }

    def _extra_context(self, name: str, value: object, options: FieldOptions) -> dict[str, object]:
        return {"render_as_switch": bool(options["render_as_switch"])}
