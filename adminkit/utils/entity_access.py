"""实体读写适配器.

构建器不依赖任何具体的领域实体,统一通过 `EntityAccessor` 协议读写字段值.
字典与普通对象由内置适配器包装,领域对象也可以直接实现该协议.
"""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping
from typing import Protocol, runtime_checkable


@runtime_checkable
class EntityAccessor(Protocol):
    """按字段名读写实体值的最小能力."""

    def get(self, name: str) -> object:
        """读取字段值,不存在时返回 None."""
        ...

    def set(self, name: str, value: object) -> None:
        """写入字段值."""
        ...


class MappingAccessor:
    """包装字典/映射类型的数据行."""

    __slots__ = ("_source",)

    def __init__(self, source: Mapping[str, object]) -> None:
        self._source = source

    def get(self, name: str) -> object:
        return self._source.get(name)

    def set(self, name: str, value: object) -> None:
        if not isinstance(self._source, MutableMapping):
            msg = f"{type(self._source).__name__} 不支持写入"
            raise TypeError(msg)
        self._source[name] = value


class AttributeAccessor:
    """包装普通对象: 先查找 ``get_<name>()`` / ``set_<name>()`` 方法,再回退到属性."""

    __slots__ = ("_source",)

    def __init__(self, source: object) -> None:
        self._source = source

    def get(self, name: str) -> object:
        getter = getattr(self._source, f"get_{name}", None)
        if callable(getter):
            return getter()
        value = getattr(self._source, name, None)
        if callable(value):
            return None
        return value

    def set(self, name: str, value: object) -> None:
        setter = getattr(self._source, f"set_{name}", None)
        if callable(setter):
            setter(value)
            return
        setattr(self._source, name, value)


def as_accessor(source: object) -> EntityAccessor:
    """为任意数据源返回对应的访问器.

    Args:
        source: 实现了 EntityAccessor 的对象、映射或普通对象.

    Returns:
        EntityAccessor: 可直接读写的访问器.

    """
    if isinstance(source, Mapping):
        return MappingAccessor(source)
    if isinstance(source, EntityAccessor):
        return source
    return AttributeAccessor(source)


def read_value(source: object, name: str) -> object:
    """读取单个字段值,数据源为空时返回 None."""
    if source is None:
        return None
    return as_accessor(source).get(name)


def read_row_id(source: object, *, key: str = "id") -> str | None:
    """读取数据行主键并转换为字符串."""
    value = read_value(source, key)
    if value is None:
        return None
    return str(value)


__all__ = [
    "AttributeAccessor",
    "EntityAccessor",
    "MappingAccessor",
    "as_accessor",
    "read_row_id",
    "read_value",
]
