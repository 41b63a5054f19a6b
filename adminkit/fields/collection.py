"""集合字段.

一个集合值由若干条目组成,每个条目是 ``{子字段名: 值}`` 的字典,
子字段的校验、取值与展示全部委托给注册表中对应的字段类型.

提交数据可以是列表、以序号为键的字典(按整数序号排序后重新编号)或 JSON 字符串.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import TYPE_CHECKING, ClassVar

from markupsafe import Markup

from adminkit.constants import FieldMessages, FieldTypeName
from adminkit.fields.base import FieldType, humanize
from adminkit.types.converters import as_int, as_str
from adminkit.utils.rendering import placeholder, render_markup

if TYPE_CHECKING:
    from adminkit.fields.registry import FieldTypeRegistry
    from adminkit.types import ErrorList, FieldOptions

INDEX_PLACEHOLDER = "__INDEX__"


def normalize_entries(value: object) -> list[Mapping[str, object]] | None:
    """将提交值规范为按位置排列的条目列表,结构非法时返回 None."""
    if value is None:
        return []
    if isinstance(value, str):
        if not value.strip():
            return []
        try:
            value = json.loads(value)
        except ValueError:
            return None
    if isinstance(value, Mapping):
        keyed: list[tuple[int, object]] = []
        for key, entry in value.items():
            index = as_int(key)
            if index is None:
                return None
            keyed.append((index, entry))
        value = [entry for _, entry in sorted(keyed, key=lambda pair: pair[0])]
    if not isinstance(value, (list, tuple)):
        return None
    if not all(isinstance(entry, Mapping) for entry in value):
        return None
    return list(value)


class CollectionFieldType(FieldType):
    """可增删、可排序的子表单集合.

    Attributes:
        registry: 用于解析子字段类型的注册表,缺省使用内置默认注册表.

    """

    type_name: ClassVar[str] = FieldTypeName.COLLECTION.value
    template_name: ClassVar[str] = "adminkit/fields/collection.html"
    entry_template_name: ClassVar[str] = "adminkit/fields/collection_entry.html"
    DEFAULT_OPTIONS: ClassVar[FieldOptions] = {
        "entry_fields": {},
        "allow_add": True,
        "allow_delete": True,
        "allow_reorder": True,
        "min_entries": 0,
        "max_entries": 10,
        "add_label": "添加一项",
        "entry_label": "第 {number} 项",
    }

    def __init__(self, registry: FieldTypeRegistry | None = None) -> None:
        self._registry = registry

    @property
    def registry(self) -> FieldTypeRegistry:
        if self._registry is None:
            from adminkit.fields.registry import get_default_registry

            return get_default_registry()
        return self._registry

    def bind_registry(self, registry: FieldTypeRegistry) -> None:
        self._registry = registry

    def _sub_fields(self, options: Mapping[str, object]) -> list[tuple[str, FieldType, dict[str, object]]]:
        """解析子字段声明,返回 ``(名称, 字段类型, 配置)``."""
        declared = options.get("entry_fields")
        if not isinstance(declared, Mapping):
            return []
        resolved = []
        for sub_name, config in declared.items():
            config = dict(config) if isinstance(config, Mapping) else {}
            type_name = as_str(config.pop("type", None), default=FieldTypeName.TEXT.value)
            resolved.append((str(sub_name), self.registry.get(type_name), config))
        return resolved

    # ------------------------------------------------------------------ #
    # 校验与取值
    # ------------------------------------------------------------------ #
    def validate(self, value: object, options: Mapping[str, object] | None = None) -> ErrorList:
        opts = self.resolve_options(options)
        entries = normalize_entries(value)
        if entries is None:
            return [self.message(FieldMessages.COLLECTION_INVALID, opts)]
        if not entries and opts["required"]:
            return [self.message(FieldMessages.REQUIRED, opts)]

        errors: ErrorList = []
        min_entries = as_int(opts["min_entries"]) or 0
        max_entries = as_int(opts["max_entries"])
        if len(entries) < min_entries:
            errors.append(self.message(FieldMessages.COLLECTION_TOO_FEW, opts, min=min_entries))
        if max_entries is not None and len(entries) > max_entries:
            errors.append(self.message(FieldMessages.COLLECTION_TOO_MANY, opts, max=max_entries))

        sub_fields = self._sub_fields(opts)
        for position, entry in enumerate(entries, start=1):
            for sub_name, field_type, sub_options in sub_fields:
                raw = field_type.extract_value(sub_name, entry, sub_options)
                errors.extend(
                    FieldMessages.COLLECTION_ENTRY.format(index=position, message=message)
                    for message in field_type.validate(raw, sub_options)
                )
        return errors

    def is_empty_value(self, value: object) -> bool:
        entries = normalize_entries(value)
        return entries is not None and not entries

    def _empty_value(self, options: FieldOptions) -> object:
        return []

    def _process(self, value: object, options: FieldOptions) -> object:
        entries = normalize_entries(value)
        if entries is None:
            return None
        sub_fields = self._sub_fields(options)
        return [
            {
                sub_name: field_type.process_form_value(
                    field_type.extract_value(sub_name, entry, sub_options),
                    sub_options,
                )
                for sub_name, field_type, sub_options in sub_fields
            }
            for entry in entries
        ]

    # ------------------------------------------------------------------ #
    # 展示
    # ------------------------------------------------------------------ #
    def _render_display(self, value: object, options: FieldOptions) -> Markup:
        entries = normalize_entries(value)
        if not entries:
            return placeholder(as_str(options["display_empty"], default="-"))
        sub_fields = self._sub_fields(options)
        items = []
        for entry in entries:
            pairs = [
                Markup('<span class="collection-pair"><strong>{0}:</strong> {1}</span>').format(
                    as_str(sub_options.get("label")) or humanize(sub_name),
                    field_type.render_display(entry.get(sub_name), sub_options),
                )
                for sub_name, field_type, sub_options in sub_fields
            ]
            items.append(Markup("<li>{0}</li>").format(Markup(" ").join(pairs)))
        return Markup('<ol class="collection-display mb-0">{0}</ol>').format(Markup("").join(items))

    # ------------------------------------------------------------------ #
    # 表单控件
    # ------------------------------------------------------------------ #
    def render_entry(self, name: str, index: int | str, entry: Mapping[str, object], options: FieldOptions) -> Markup:
        """渲染单个条目,``index`` 为 ``__INDEX__`` 时即为新增条目的原型."""
        inputs = [
            field_type.render_form_input(f"{name}[{index}][{sub_name}]", entry.get(sub_name), sub_options)
            for sub_name, field_type, sub_options in self._sub_fields(options)
        ]
        number = index + 1 if isinstance(index, int) else index
        return render_markup(
            self.entry_template_name,
            index=index,
            title=as_str(options["entry_label"]).format(number=number),
            inputs=inputs,
            allow_delete=bool(options["allow_delete"]),
            allow_reorder=bool(options["allow_reorder"]),
        )

    def _input_attrs(self, name: str, value: object, options: FieldOptions) -> dict[str, object]:
        return {"name": None, "placeholder": None, "required": None, "class": "collection-field"}

    def _extra_context(self, name: str, value: object, options: FieldOptions) -> dict[str, object]:
        entries = normalize_entries(value) or []
        return {
            "entries": [self.render_entry(name, index, entry, options) for index, entry in enumerate(entries)],
            "prototype": self.render_entry(name, INDEX_PLACEHOLDER, {}, options),
            "allow_add": bool(options["allow_add"]),
            "add_label": options["add_label"],
            "min_entries": options["min_entries"],
            "max_entries": options["max_entries"],
        }
