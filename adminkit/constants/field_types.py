"""内置字段类型名称."""

from __future__ import annotations

from enum import Enum


class FieldTypeName(str, Enum):
    """内置字段类型,值即注册表中的查找名."""

    TEXT = "text"
    TEXTAREA = "textarea"
    EMAIL = "email"
    PASSWORD = "password"
    NUMBER = "number"
    BOOLEAN = "boolean"
    CHOICE = "choice"
    DATE = "date"
    DATETIME = "datetime"
    FILE = "file"
    IMAGE = "image"
    ASSOCIATION = "association"
    COLLECTION = "collection"


__all__ = ["FieldTypeName"]
