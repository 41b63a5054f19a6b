"""实体配置解析的单元测试."""

import pytest

from adminkit.errors import FormConfigurationError
from adminkit.utils.entity_config import iter_entity_fields


@pytest.mark.unit
def test_iter_entity_fields_filters_hidden_and_strips_flags() -> None:
    config = {
        "fields": {
            "name": {"label": "姓名", "list_hidden": True},
            "secret": {"type": "password", "form_hidden": True},
            "bio": None,
        },
    }

    assert iter_entity_fields(config, hidden_flag="form_hidden") == [
        ("name", "text", {"label": "姓名"}),
        ("bio", "text", {}),
    ]
    assert [name for name, _, _ in iter_entity_fields(config, hidden_flag="list_hidden")] == ["secret", "bio"]


@pytest.mark.unit
def test_iter_entity_fields_requires_fields_mapping() -> None:
    with pytest.raises(FormConfigurationError) as exc_info:
        iter_entity_fields({"label": "用户"}, hidden_flag="form_hidden")

    assert exc_info.value.message == "实体配置缺少 fields 映射"
