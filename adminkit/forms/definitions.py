"""表单构建器使用的数据结构."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from adminkit.fields.base import FieldType
    from adminkit.types import FieldOptions, FormErrors


@dataclass(slots=True)
class FieldDeclaration:
    """表单中的一个字段.

    Attributes:
        name: 字段名,同时是提交数据中的键.
        type_name: 注册表中的字段类型名.
        options: 默认值与调用方配置合并后的完整配置.
        field_type: 解析后的字段类型实例.

    """

    name: str
    type_name: str
    options: FieldOptions
    field_type: FieldType = field(repr=False)


@dataclass(slots=True)
class FormSection:
    """字段分组,渲染为带标题的 ``<fieldset>``."""

    title: str
    fields: list[str]
    description: str | None = None
    css_class: str = ""


@dataclass(slots=True)
class FormTab:
    """标签页,同一表单的全部标签页合并渲染为一组 ``nav-tabs``."""

    tab_id: str
    title: str
    fields: list[str]
    description: str | None = None
    css_class: str = ""

    @property
    def pane_id(self) -> str:
        return f"form-tab-{self.tab_id}"


@dataclass(slots=True)
class FormSubmissionResult:
    """一次提交处理的结果.

    Attributes:
        valid: 是否通过校验.
        data: 转换后的字段值,未通过时为空.
        errors: 字段名到错误列表的映射,可能包含 ``_form`` 键.

    """

    valid: bool
    data: dict[str, object] = field(default_factory=dict)
    errors: FormErrors = field(default_factory=dict)

    @classmethod
    def ok(cls, data: dict[str, object]) -> FormSubmissionResult:
        return cls(valid=True, data=data, errors={})

    @classmethod
    def fail(cls, errors: FormErrors) -> FormSubmissionResult:
        return cls(valid=False, data={}, errors=errors)

    def to_dict(self) -> dict[str, object]:
        return {"valid": self.valid, "data": self.data, "errors": self.errors}


__all__ = ["FieldDeclaration", "FormSection", "FormSubmissionResult", "FormTab"]
