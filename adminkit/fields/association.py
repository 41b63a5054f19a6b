"""关联记录字段.

候选记录由调用方通过 ``choices`` 传入(不在字段内部查询数据库),
标签通过 ``choice_label`` 回调或 ``property`` 属性读取,值通过 ``choice_value`` 读取.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, ClassVar

from markupsafe import Markup

from adminkit.constants import FieldMessages, FieldTypeName
from adminkit.fields.base import FieldType
from adminkit.types.converters import as_list_of_str, as_str, is_empty
from adminkit.utils.entity_access import read_value
from adminkit.utils.rendering import placeholder

if TYPE_CHECKING:
    from adminkit.types import ErrorList, FieldOptions

_SCALAR_TYPES = (str, int, float)


class AssociationFieldType(FieldType):
    """关联一条或多条记录,支持下拉、展开与自动补全三种控件."""

    type_name: ClassVar[str] = FieldTypeName.ASSOCIATION.value
    template_name: ClassVar[str] = "adminkit/fields/association.html"
    DEFAULT_OPTIONS: ClassVar[FieldOptions] = {
        "target_entity": None,
        "choices": [],
        "property": "name",
        "choice_label": None,
        "choice_value": "id",
        "multiple": False,
        "expanded": False,
        "autocomplete": False,
        "autocomplete_url": None,
        "min_length": 2,
        "placeholder": "请选择...",
        "css_class": "form-select",
    }

    # ------------------------------------------------------------------ #
    # 记录读取
    # ------------------------------------------------------------------ #
    def entity_label(self, entity: object, options: Mapping[str, object]) -> str:
        formatter = options.get("choice_label")
        if callable(formatter):
            return as_str(formatter(entity))
        return as_str(read_value(entity, as_str(options.get("property"), default="name")))

    def entity_value(self, entity: object, options: Mapping[str, object]) -> object:
        if isinstance(entity, _SCALAR_TYPES):
            return entity
        return read_value(entity, as_str(options.get("choice_value"), default="id"))

    def _entities(self, options: Mapping[str, object]) -> list[object]:
        choices = options.get("choices")
        if isinstance(choices, Iterable) and not isinstance(choices, (str, Mapping)):
            return list(choices)
        return []

    def _index(self, options: Mapping[str, object]) -> dict[str, object]:
        return {as_str(self.entity_value(entity, options)): entity for entity in self._entities(options)}

    def _items(self, value: object, options: Mapping[str, object]) -> list[object] | None:
        """将值统一为列表,多选模式下无法解释为列表时返回 None."""
        if isinstance(value, (list, tuple, set, frozenset)):
            items = [item for item in value if not is_empty(item)]
        elif options.get("multiple"):
            if isinstance(value, str):
                items = as_list_of_str(value)
            else:
                return None
        else:
            items = [] if is_empty(value) else [value]
        if not options.get("multiple"):
            return items[-1:]
        return items

    # ------------------------------------------------------------------ #
    # 展示
    # ------------------------------------------------------------------ #
    def _label_for(self, item: object, options: FieldOptions) -> str:
        if not isinstance(item, _SCALAR_TYPES):
            return self.entity_label(item, options)
        entity = self._index(options).get(as_str(item))
        if entity is not None:
            return self.entity_label(entity, options)
        return as_str(item)

    def _render_display(self, value: object, options: FieldOptions) -> Markup:
        labels = [self._label_for(item, options) for item in (self._items(value, options) or [])]
        labels = [label for label in labels if label]
        if not labels:
            return placeholder(as_str(options["display_empty"], default="-"))
        if options["multiple"]:
            badges = [Markup('<span class="badge bg-info text-dark me-1">{0}</span>').format(text) for text in labels]
            return Markup("").join(badges)
        return Markup("<span>{0}</span>").format(labels[0])

    # ------------------------------------------------------------------ #
    # 校验与取值
    # ------------------------------------------------------------------ #
    def _validate_value(self, value: object, options: FieldOptions) -> ErrorList:
        items = self._items(value, options)
        if items is None:
            return [self.message(FieldMessages.ASSOCIATION_NOT_LIST, options)]
        index = self._index(options)
        if not index:
            return []
        return [
            self.message(FieldMessages.ASSOCIATION_INVALID, options, value=as_str(self.entity_value(item, options)))
            for item in items
            if as_str(self.entity_value(item, options)) not in index
        ]

    def _empty_value(self, options: FieldOptions) -> object:
        return [] if options["multiple"] else None

    def _process(self, value: object, options: FieldOptions) -> object:
        index = self._index(options)
        ids = []
        for item in self._items(value, options) or []:
            raw = self.entity_value(item, options)
            if is_empty(raw):
                continue
            entity = index.get(as_str(raw))
            ids.append(self.entity_value(entity, options) if entity is not None else raw)
        if options["multiple"]:
            return list(dict.fromkeys(ids))
        return ids[0] if ids else None

    # ------------------------------------------------------------------ #
    # 表单控件
    # ------------------------------------------------------------------ #
    def _input_attrs(self, name: str, value: object, options: FieldOptions) -> dict[str, object]:
        if options["expanded"] or options["autocomplete"]:
            return {"name": None, "id": None, "placeholder": None, "required": None}
        return {
            "name": f"{name}[]" if options["multiple"] else name,
            "multiple": bool(options["multiple"]),
            "placeholder": None,
        }

    def _extra_context(self, name: str, value: object, options: FieldOptions) -> dict[str, object]:
        selected_items = self._items(value, options) or []
        selected_values = list(dict.fromkeys(as_str(self.entity_value(item, options)) for item in selected_items))
        selected = set(selected_values)
        choices = [
            {
                "value": as_str(self.entity_value(entity, options)),
                "label": self.entity_label(entity, options),
                "selected": as_str(self.entity_value(entity, options)) in selected,
            }
            for entity in self._entities(options)
        ]
        return {
            "choices": choices,
            "groups": [],
            "input_name": f"{name}[]" if options["multiple"] else name,
            "multiple": bool(options["multiple"]),
            "expanded": bool(options["expanded"]),
            "autocomplete": bool(options["autocomplete"]),
            "autocomplete_url": options["autocomplete_url"],
            "min_length": options["min_length"],
            "placeholder_text": options["placeholder"],
            "disabled": bool(options["disabled"]),
            "selected_values": selected_values,
            "selected_labels": [self._label_for(item, options) for item in selected_items],
        }
