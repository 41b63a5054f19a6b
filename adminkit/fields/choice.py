"""选项字段."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from enum import Enum
from typing import TYPE_CHECKING, ClassVar

from markupsafe import Markup

from adminkit.constants import FieldMessages, FieldTypeName
from adminkit.fields.base import FieldType
from adminkit.types.converters import as_str, is_empty
from adminkit.utils.entity_access import read_value
from adminkit.utils.rendering import placeholder

if TYPE_CHECKING:
    from adminkit.types import ErrorList, FieldOptions


def flatten_choices(choices: object) -> dict[object, str]:
    """展开分组选项,返回 ``{value: label}``."""
    if not isinstance(choices, Mapping):
        return {}
    flat: dict[object, str] = {}
    for key, label in choices.items():
        if isinstance(label, Mapping):
            flat.update({value: as_str(text) for value, text in label.items()})
        else:
            flat[key] = as_str(label)
    return flat


def from_entities(
    entities: Iterable[object],
    label_property: str = "name",
    value_property: str = "id",
) -> dict[object, str]:
    """从实体列表构造选项."""
    return {
        read_value(entity, value_property): as_str(read_value(entity, label_property))
        for entity in entities
    }


def from_enum(enum_cls: type[Enum]) -> dict[object, str]:
    """从枚举构造选项,成员提供 ``label`` 属性时优先使用."""
    return {member.value: as_str(getattr(member, "label", None) or member.name) for member in enum_cls}


def grouped(groups: Mapping[str, Mapping[object, str]]) -> dict[str, dict[object, str]]:
    """构造分组选项,结构为 ``{分组名: {value: label}}``."""
    return {as_str(name): dict(items) for name, items in groups.items()}


class ChoiceFieldType(FieldType):
    """下拉框、单选组或复选组.

    ``choices`` 支持平铺映射与分组映射,提交值按字符串与选项键比较,
    取值时还原为选项键本身的类型.
    """

    type_name: ClassVar[str] = FieldTypeName.CHOICE.value
    template_name: ClassVar[str] = "adminkit/fields/choice.html"
    DEFAULT_OPTIONS: ClassVar[FieldOptions] = {
        "choices": {},
        "multiple": False,
        "expanded": False,
        "choice_label": None,
        "placeholder_text": "请选择...",
        "allow_custom": False,
        "searchable": False,
        "css_class": "form-select",
    }

    def _lookup(self, options: FieldOptions) -> dict[str, object]:
        return {as_str(key): key for key in flatten_choices(options["choices"])}

    def _values(self, value: object, options: FieldOptions) -> list[object] | None:
        """统一为列表,多选模式下无法解释为列表时返回 None."""
        if isinstance(value, (list, tuple, set, frozenset)):
            items = list(value)
            if not options["multiple"]:
                return items[-1:]
            return items
        if options["multiple"] and not isinstance(value, (str, int, float)):
            return None
        return [value]

    def _label_for(self, value: object, options: FieldOptions) -> str:
        flat = flatten_choices(options["choices"])
        lookup = self._lookup(options)
        key = lookup.get(as_str(value), value)
        label = flat.get(key, as_str(value))
        formatter = options["choice_label"]
        if callable(formatter):
            return as_str(formatter(key, label))
        return label

    def _render_display(self, value: object, options: FieldOptions) -> Markup:
        values = self._values(value, options) or []
        labels = [self._label_for(item, options) for item in values if not is_empty(item)]
        if not labels:
            return placeholder(as_str(options["display_empty"], default="-"))
        if options["multiple"]:
            badges = [Markup('<span class="badge bg-light text-dark me-1">{0}</span>').format(text) for text in labels]
            return Markup("").join(badges)
        return Markup("<span>{0}</span>").format(labels[0])

    def _validate_value(self, value: object, options: FieldOptions) -> ErrorList:
        values = self._values(value, options)
        if values is None:
            return [self.message(FieldMessages.CHOICE_NOT_LIST, options)]
        if options["allow_custom"]:
            return []
        lookup = self._lookup(options)
        return [
            self.message(FieldMessages.INVALID_CHOICE, options, value=as_str(item))
            for item in values
            if not is_empty(item) and as_str(item) not in lookup
        ]

    def _empty_value(self, options: FieldOptions) -> object:
        return [] if options["multiple"] else None

    def _process(self, value: object, options: FieldOptions) -> object:
        lookup = self._lookup(options)
        resolved = []
        for item in self._values(value, options) or []:
            if is_empty(item):
                continue
            key = as_str(item)
            if key in lookup:
                resolved.append(lookup[key])
            elif options["allow_custom"]:
                resolved.append(key)
        if options["multiple"]:
            return list(dict.fromkeys(resolved))
        return resolved[0] if resolved else None

    def _input_attrs(self, name: str, value: object, options: FieldOptions) -> dict[str, object]:
        if options["expanded"]:
            return {"name": None, "id": None, "placeholder": None, "required": None}
        return {
            "name": f"{name}[]" if options["multiple"] else name,
            "multiple": bool(options["multiple"]),
            "placeholder": None,
            "data-behavior": "searchable-select" if options["searchable"] else None,
        }

    def _extra_context(self, name: str, value: object, options: FieldOptions) -> dict[str, object]:
        selected = {as_str(item) for item in (self._values(value, options) or []) if not is_empty(item)}
        formatter = options["choice_label"]

        def build(items: Mapping[object, object]) -> list[dict[str, object]]:
            entries = []
            for key, label in items.items():
                text = as_str(formatter(key, label)) if callable(formatter) else as_str(label)
                entries.append({"value": as_str(key), "label": text, "selected": as_str(key) in selected})
            return entries

        groups: list[dict[str, object]] = []
        ungrouped: dict[object, object] = {}
        choices = options["choices"] if isinstance(options["choices"], Mapping) else {}
        for key, label in choices.items():
            if isinstance(label, Mapping):
                groups.append({"label": as_str(key), "choices": build(label)})
            else:
                ungrouped[key] = label
        input_name = f"{name}[]" if options["multiple"] else name
        return {
            "choices": build(ungrouped),
            "groups": groups,
            "input_name": input_name,
            "multiple": bool(options["multiple"]),
            "expanded": bool(options["expanded"]),
            "placeholder_text": options["placeholder_text"],
            "disabled": bool(options["disabled"]),
        }
