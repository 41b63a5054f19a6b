"""字段类型基础定义.

`FieldType` 描述一种数据形态的四项行为: 只读展示、表单控件渲染、取值校验与取值转换.
实例不保存任何单次调用的数据(值与配置均通过参数传入),因此同一实例可以在多个字段、
多行数据以及并发请求之间安全复用.
"""

from __future__ import annotations

import copy
from abc import ABC
from collections.abc import Mapping
from typing import TYPE_CHECKING, ClassVar

from markupsafe import Markup

from adminkit.constants import FieldMessages
from adminkit.types.converters import as_str, is_empty
from adminkit.utils.rendering import build_attrs, field_id, placeholder, render_markup
from adminkit.utils.structlog_config import log_debug

if TYPE_CHECKING:
    from adminkit.types import ErrorList, FieldOptions, SubmittedData

BASE_DEFAULT_OPTIONS: FieldOptions = {
    "label": None,
    "help": None,
    "required": False,
    "readonly": False,
    "disabled": False,
    "placeholder": None,
    "default_value": None,
    "css_class": "form-control",
    "attr": {},
    "errors": [],
    "display_empty": "-",
}

# 展示渲染遇到这些异常时降级为占位符
DISPLAY_FALLBACK_EXCEPTIONS: tuple[type[Exception], ...] = (TypeError, ValueError, ArithmeticError, LookupError)


def humanize(name: str) -> str:
    """将字段名转换为默认标签文本."""
    return name.replace("_", " ").strip().capitalize()


class FieldType(ABC):
    """字段类型策略基类.

    子类通过 ``DEFAULT_OPTIONS`` 声明自身支持的全部配置项及其默认值,
    并按需覆盖 ``_validate_value``、``_process`` 与 ``_render_display`` 等钩子.

    Attributes:
        type_name: 注册表中的查找名.
        template_name: 表单控件模板路径.
        DEFAULT_OPTIONS: 子类专有配置项及默认值.

    """

    type_name: ClassVar[str] = ""
    template_name: ClassVar[str] = "adminkit/fields/text.html"
    DEFAULT_OPTIONS: ClassVar[FieldOptions] = {}

    # ------------------------------------------------------------------ #
    # 配置
    # ------------------------------------------------------------------ #
    def default_options(self) -> FieldOptions:
        """返回该类型识别的全部配置项与默认值(每次调用返回独立副本)."""
        return copy.deepcopy({**BASE_DEFAULT_OPTIONS, **self.DEFAULT_OPTIONS})

    def supported_options(self) -> frozenset[str]:
        """返回该类型声明支持的配置项名称集合."""
        return frozenset(BASE_DEFAULT_OPTIONS) | frozenset(self.DEFAULT_OPTIONS)

    def supports_option(self, name: str) -> bool:
        """判断配置项是否在声明范围内,仅用于提示拼写错误."""
        return name in self.supported_options()

    def resolve_options(self, options: Mapping[str, object] | None = None) -> FieldOptions:
        """将调用方配置合并到默认值之上,调用方优先,未知配置项原样保留."""
        merged = self.default_options()
        if options:
            merged.update(options)
        return merged

    def unknown_options(self, options: Mapping[str, object] | None) -> list[str]:
        """列出不在声明范围内的配置项."""
        if not options:
            return []
        return sorted(key for key in options if not self.supports_option(key))

    # ------------------------------------------------------------------ #
    # 公共操作
    # ------------------------------------------------------------------ #
    def render_display(self, value: object, options: Mapping[str, object] | None = None) -> Markup:
        """渲染列表/详情页使用的只读标记,空值或无法展示的值降级为占位符."""
        opts = self.resolve_options(options)
        if self.is_empty_value(value):
            return placeholder(as_str(opts["display_empty"], default="-"))
        try:
            return self._render_display(value, opts)
        except DISPLAY_FALLBACK_EXCEPTIONS as exc:
            log_debug("字段展示降级为占位符", module="fields", field_type=self.type_name, error=str(exc))
            return placeholder(as_str(opts["display_empty"], default="-"))

    def render_form_input(
        self,
        name: str,
        value: object,
        options: Mapping[str, object] | None = None,
    ) -> Markup:
        """渲染绑定到 ``name`` 的表单控件,包含标签、帮助文本与错误占位区."""
        opts = self.resolve_options(options)
        if self.is_empty_value(value):
            value = opts["default_value"]
        context = self.build_context(name, value, opts)
        return render_markup(self.template_name, field=context)

    def validate(self, value: object, options: Mapping[str, object] | None = None) -> ErrorList:
        """校验提交值,返回错误文案列表,空列表表示通过."""
        opts = self.resolve_options(options)
        if self.is_empty_value(value):
            if opts["required"]:
                return [self.message(FieldMessages.REQUIRED, opts)]
            return []
        return self._validate_value(value, opts)

    def process_form_value(self, value: object, options: Mapping[str, object] | None = None) -> object:
        """将原始提交值转换为持久化所需的类型,空值或无法解析时返回空值."""
        opts = self.resolve_options(options)
        if self.is_empty_value(value):
            return self._empty_value(opts)
        return self._process(value, opts)

    def extract_value(
        self,
        name: str,
        submitted: SubmittedData,
        options: Mapping[str, object] | None = None,
    ) -> object:
        """从提交数据中取出本字段的原始值."""
        _ = options
        return submitted.get(name)

    # ------------------------------------------------------------------ #
    # 子类钩子
    # ------------------------------------------------------------------ #
    def is_empty_value(self, value: object) -> bool:
        return is_empty(value)

    def _empty_value(self, options: FieldOptions) -> object:
        return None

    def _validate_value(self, value: object, options: FieldOptions) -> ErrorList:
        return []

    def _process(self, value: object, options: FieldOptions) -> object:
        return value

    def _render_display(self, value: object, options: FieldOptions) -> Markup:
        return Markup("<span>{0}</span>").format(as_str(value))

    def _input_attrs(self, name: str, value: object, options: FieldOptions) -> dict[str, object]:
        """子类追加到主控件上的属性."""
        return {}

    def _extra_context(self, name: str, value: object, options: FieldOptions) -> dict[str, object]:
        """子类追加到模板上下文的数据."""
        return {}

    # ------------------------------------------------------------------ #
    # 辅助方法
    # ------------------------------------------------------------------ #
    def label_for(self, options: Mapping[str, object]) -> str:
        return as_str(options.get("label")) or FieldMessages.DEFAULT_LABEL

    def message(self, template: str, options: Mapping[str, object], **kwargs: object) -> str:
        return template.format(label=self.label_for(options), **kwargs)

    def build_context(self, name: str, value: object, options: FieldOptions) -> dict[str, object]:
        """组装模板上下文."""
        dom_id = field_id(name)
        base_attrs: dict[str, object] = {
            "name": name,
            "id": dom_id,
            "class": options["css_class"],
            "placeholder": options["placeholder"],
            "required": bool(options["required"]),
            "readonly": bool(options["readonly"]),
            "disabled": bool(options["disabled"]),
        }
        if options["help"]:
            base_attrs["aria-describedby"] = f"{dom_id}_help"
        attr_overrides = options["attr"] if isinstance(options["attr"], Mapping) else {}
        errors = options["errors"]
        context: dict[str, object] = {
            "type": self.type_name,
            "name": name,
            "id": dom_id,
            "label": as_str(options["label"]) or humanize(name),
            "required": bool(options["required"]),
            "help": options["help"],
            "errors": [as_str(error) for error in errors] if isinstance(errors, (list, tuple)) else [],
            "value": value,
            "options": options,
            "attrs": build_attrs(base_attrs, self._input_attrs(name, value, options), attr_overrides),
        }
        context.update(self._extra_context(name, value, options))
        return context


__all__ = ["BASE_DEFAULT_OPTIONS", "FieldType", "humanize"]
