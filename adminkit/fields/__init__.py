"""AdminKit 字段类型.

导出字段类型基类、全部内置类型以及注册表工厂.
"""

from .association import AssociationFieldType
from .base import FieldType
from .boolean import BooleanFieldType
from .choice import ChoiceFieldType
from .collection import CollectionFieldType
from .date import DateFieldType
from .date_time import DateTimeFieldType
from .email import EmailFieldType
from .file import FileFieldType
from .image import ImageFieldType
from .number import NumberFieldType
from .password import PasswordFieldType
from .registry import FieldTypeRegistry, create_default_registry, get_default_registry
from .text import TextFieldType
from .textarea import TextareaFieldType
from .uploads import StoredUpload, UploadedFile

__all__ = [
    "AssociationFieldType",
    "BooleanFieldType",
    "ChoiceFieldType",
    "CollectionFieldType",
    "DateFieldType",
    "DateTimeFieldType",
    "EmailFieldType",
    "FieldType",
    "FieldTypeRegistry",
    "FileFieldType",
    "ImageFieldType",
    "NumberFieldType",
    "PasswordFieldType",
    "StoredUpload",
    "TextFieldType",
    "TextareaFieldType",
    "UploadedFile",
    "create_default_registry",
    "get_default_registry",
]
