"""实体配置解析工具.

实体配置形如 ``{"fields": {名称: {"type": 类型名, ...字段配置}}}``,
表单与表格都从中读取字段声明,并分别按 ``form_hidden`` / ``list_hidden`` 过滤.
"""

from __future__ import annotations

from collections.abc import Mapping

from adminkit.errors import FormConfigurationError
from adminkit.types.converters import as_str

# 可见性标记不属于字段配置
VISIBILITY_KEYS = ("form_hidden", "list_hidden")


def iter_entity_fields(
    entity_config: Mapping[str, object],
    *,
    hidden_flag: str,
) -> list[tuple[str, str, dict[str, object]]]:
    """返回未被 ``hidden_flag`` 隐藏的 ``(名称, 类型名, 配置)`` 列表.

    Raises:
        FormConfigurationError: 配置缺少 ``fields`` 映射.

    """
    fields = entity_config.get("fields")
    if not isinstance(fields, Mapping):
        raise FormConfigurationError(
            "实体配置缺少 fields 映射",
            extra={"keys": ", ".join(str(key) for key in entity_config)},
        )
    declared = []
    for name, config in fields.items():
        config = config if isinstance(config, Mapping) else {}
        if config.get(hidden_flag):
            continue
        options = {key: value for key, value in config.items() if key not in VISIBILITY_KEYS and key != "type"}
        declared.append((str(name), as_str(config.get("type"), default="text"), options))
    return declared


__all__ = ["VISIBILITY_KEYS", "iter_entity_fields"]
