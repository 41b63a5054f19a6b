"""字段类型注册表.

按名称维护字段类型实例.字段类型无状态,因此一个实例可以被所有表单与表格共享.
"""

from __future__ import annotations

from functools import lru_cache

from adminkit.errors import FieldTypeNotFoundError
from adminkit.fields.association import AssociationFieldType
from adminkit.fields.base import FieldType
from adminkit.fields.boolean import BooleanFieldType
from adminkit.fields.choice import ChoiceFieldType
from adminkit.fields.collection import CollectionFieldType
from adminkit.fields.date import DateFieldType
from adminkit.fields.date_time import DateTimeFieldType
from adminkit.fields.email import EmailFieldType
from adminkit.fields.file import FileFieldType
from adminkit.fields.image import ImageFieldType
from adminkit.fields.number import NumberFieldType
from adminkit.fields.password import PasswordFieldType
from adminkit.fields.text import TextFieldType
from adminkit.fields.textarea import TextareaFieldType


class FieldTypeRegistry:
    """字段类型注册表.

    Attributes:
        _registry: 类型名称到字段类型实例的映射.

    Example:
        >>> registry = create_default_registry()
        >>> registry.get("email").type_name
        'email'

    """

    def __init__(self) -> None:
        self._registry: dict[str, FieldType] = {}

    def register(self, name: str, field_type: FieldType) -> None:
        """注册字段类型,同名类型会被覆盖.

        Args:
            name: 查找名.
            field_type: 字段类型实例.

        """
        if isinstance(field_type, CollectionFieldType):
            field_type.bind_registry(self)
        self._registry[name] = field_type

    def get(self, name: str) -> FieldType:
        """获取字段类型.

        Raises:
            FieldTypeNotFoundError: 名称未注册时抛出.

        """
        field_type = self._registry.get(name)
        if field_type is None:
            raise FieldTypeNotFoundError(
                f"未注册的字段类型: {name}",
                extra={"field_type": name, "available": ", ".join(self.names())},
            )
        return field_type

    def has(self, name: str) -> bool:
        return name in self._registry

    def names(self) -> list[str]:
        return sorted(self._registry)

    def copy(self) -> FieldTypeRegistry:
        """返回独立的注册表副本,用于在单个构建器上追加自定义类型."""
        clone = FieldTypeRegistry()
        for name, field_type in self._registry.items():
            if isinstance(field_type, CollectionFieldType):
                field_type = CollectionFieldType()
            clone.register(name, field_type)
        return clone


def create_default_registry() -> FieldTypeRegistry:
    """创建包含全部内置字段类型的注册表."""
    registry = FieldTypeRegistry()
    for field_type in (
        TextFieldType(),
        TextareaFieldType(),
        EmailFieldType(),
        PasswordFieldType(),
        NumberFieldType(),
        BooleanFieldType(),
        ChoiceFieldType(),
        DateFieldType(),
        DateTimeFieldType(),
        FileFieldType(),
        ImageFieldType(),
        AssociationFieldType(),
        CollectionFieldType(),
    ):
        registry.register(field_type.type_name, field_type)
    return registry


@lru_cache(maxsize=1)
def get_default_registry() -> FieldTypeRegistry:
    """返回进程内共享的默认注册表."""
    return create_default_registry()


__all__ = ["FieldTypeRegistry", "create_default_registry", "get_default_registry"]
