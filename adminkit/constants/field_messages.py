"""字段校验提示文案.

所有模板统一使用 ``str.format`` 占位符,``label`` 缺省时回退为 ``DEFAULT_LABEL``.
"""

from __future__ import annotations


class FieldMessages:
    """字段级校验提示文案常量."""

    DEFAULT_LABEL = "该字段"

    REQUIRED = "{label}为必填项"
    MIN_LENGTH = "{label}至少需要 {min} 个字符"
    MAX_LENGTH = "{label}最多允许 {max} 个字符"
    PATTERN_MISMATCH = "{label}格式不正确"

    INVALID_EMAIL = "{label}格式无效: {value}"
    EMAIL_DOMAIN_NOT_ALLOWED = "{label}的域名不在允许范围内: {domain}"

    PASSWORD_TOO_SHORT = "{label}至少需要 {min} 个字符"
    PASSWORD_TOO_LONG = "{label}最多允许 {max} 个字符"
    PASSWORD_TOO_MANY_BYTES = "{label}超出加密算法允许的 {max} 字节上限"
    PASSWORD_UPPERCASE = "{label}必须包含至少一个大写字母"
    PASSWORD_LOWERCASE = "{label}必须包含至少一个小写字母"
    PASSWORD_NUMBER = "{label}必须包含至少一个数字"
    PASSWORD_SYMBOL = "{label}必须包含至少一个特殊字符"
    PASSWORD_MISMATCH = "两次输入的{label}不一致"

    NOT_A_NUMBER = "{label}必须是数字"
    NUMBER_TOO_SMALL = "{label}不能小于 {min}"
    NUMBER_TOO_LARGE = "{label}不能大于 {max}"
    NUMBER_STEP = "{label}必须以 {step} 为步长"
    NUMBER_NOT_INTEGER = "{label}必须是整数"

    INVALID_CHOICE = "{label}包含无效的选项: {value}"
    CHOICE_NOT_LIST = "{label}必须是选项列表"

    INVALID_DATE = "{label}不是有效的日期"
    INVALID_DATETIME = "{label}不是有效的日期时间"
    DATE_BEFORE_MIN = "{label}不能早于 {min}"
    DATE_AFTER_MAX = "{label}不能晚于 {max}"
    DATE_WEEKEND = "{label}不能是周末"
    DATE_HOLIDAY = "{label}不能是节假日"
    DATE_DISABLED = "{label}不可选择: {date}"
    DATE_NOT_ALLOWED = "{label}必须是允许的日期之一"

    FILE_TRANSFER_FAILED = "{label}上传失败(错误码 {code})"
    FILE_TOO_LARGE = "{label}大小不能超过 {max}"
    FILE_TYPE_NOT_ALLOWED = "{label}类型不允许,仅支持: {types}"
    FILE_TOO_MANY = "{label}不支持多个文件"
    IMAGE_INVALID = "{label}不是有效的图片"
    IMAGE_TOO_SMALL = "{label}尺寸不能小于 {width}x{height}"
    IMAGE_TOO_LARGE = "{label}尺寸不能大于 {width}x{height}"

    ASSOCIATION_NOT_LIST = "{label}必须是记录列表"
    ASSOCIATION_INVALID = "{label}不是有效的记录: {value}"

    COLLECTION_INVALID = "{label}格式无效"
    COLLECTION_TOO_FEW = "{label}至少需要 {min} 项"
    COLLECTION_TOO_MANY = "{label}最多允许 {max} 项"
    COLLECTION_ENTRY = "第{index}项: {message}"


__all__ = ["FieldMessages"]
