"""共享类型别名与转换工具."""

from .structures import (
    ContextDict,
    ErrorList,
    FieldOptions,
    FormErrors,
    JsonDict,
    JsonValue,
    LoggerExtra,
    MutablePayloadDict,
    PayloadMapping,
    PayloadValue,
    RouteSafetyOptions,
    ScalarValue,
    StructlogEventDict,
    SubmittedData,
    TemplateContext,
)

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
