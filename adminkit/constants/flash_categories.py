"""Flask Flash消息类别常量.

定义Flash消息的标准类别,避免魔法字符串.
"""

from __future__ import annotations

from typing import ClassVar


class FlashCategory:
    """Flask Flash消息类别常量."""

    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"

    ALL: ClassVar[tuple[str, ...]] = (SUCCESS, ERROR, WARNING, INFO)

    BOOTSTRAP_CLASSES: ClassVar[dict[str, str]] = {
        SUCCESS: "alert-success",
        ERROR: "alert-danger",
        WARNING: "alert-warning",
        INFO: "alert-info",
    }

    @classmethod
    def get_bootstrap_class(cls, category: str) -> str:
        """获取Bootstrap CSS类名.

        Args:
            category: 消息类别字符串

        Returns:
            str: Bootstrap CSS类名

        """
        return cls.BOOTSTRAP_CLASSES.get(category, "alert-info")
