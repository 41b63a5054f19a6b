"""通用结构化数据类型别名.

统一 JSON/Mapping 风格的类型,方便在字段、构建器、视图等模块中共享定义,避免重复声明.
"""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping, Sequence
from typing import TYPE_CHECKING, TypeAlias, TypedDict

if TYPE_CHECKING:
    from adminkit.errors import AppError

ScalarValue: TypeAlias = str | int | float | bool | None
PayloadValue: TypeAlias = ScalarValue | Sequence[ScalarValue] | Mapping[str, ScalarValue]
PayloadMapping: TypeAlias = Mapping[str, PayloadValue]
MutablePayloadDict: TypeAlias = dict[str, PayloadValue]

# 字段配置是开放字典: 未声明的键会原样透传
FieldOptions: TypeAlias = dict[str, object]
ErrorList: TypeAlias = list[str]
FormErrors: TypeAlias = dict[str, list[str]]
SubmittedData: TypeAlias = Mapping[str, object]

JsonValue: TypeAlias = ScalarValue | Sequence["JsonValue"] | Mapping[str, "JsonValue"]
JsonDict: TypeAlias = dict[str, JsonValue]
ContextDict: TypeAlias = dict[str, object]
TemplateContext: TypeAlias = dict[str, object]
StructlogEventDict: TypeAlias = MutableMapping[str, JsonValue]
LoggerExtra: TypeAlias = Mapping[str, JsonValue]


class RouteSafetyOptions(TypedDict, total=False):
    """safe_route_call 的扩展配置."""

    context: ContextDict | None
    extra: LoggerExtra | None
    expected_exceptions: tuple[type[BaseException], ...]
    fallback_exception: type["AppError"]
    log_event: str | None
    include_actor: bool


__all__ = [
    "ContextDict",
    "ErrorList",
    "FieldOptions",
    "FormErrors",
    "JsonDict",
    "JsonValue",
    "LoggerExtra",
    "MutablePayloadDict",
    "PayloadMapping",
    "PayloadValue",
    "RouteSafetyOptions",
    "ScalarValue",
    "StructlogEventDict",
    "SubmittedData",
    "TemplateContext",
]
