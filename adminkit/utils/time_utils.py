"""统一时间处理工具模块.

基于 zoneinfo 模块,提供日期/时间解析、时区转换与相对时间描述.
"""

from __future__ import annotations

from datetime import UTC, date, datetime, time
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from adminkit.constants import TimeConstants

DEFAULT_TIMEZONE = "Asia/Shanghai"
UTC_TZ = ZoneInfo("UTC")


class TimeFormats:
    """时间格式常量."""

    DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"
    DATETIME_MINUTE_FORMAT = "%Y-%m-%d %H:%M"
    DATE_FORMAT = "%Y-%m-%d"
    TIME_FORMAT = "%H:%M:%S"
    TIME_MINUTE_FORMAT = "%H:%M"
    HTML_DATETIME_LOCAL_FORMAT = "%Y-%m-%dT%H:%M"


# fromisoformat 之外额外接受的输入格式
_DATE_INPUT_FORMATS = ("%Y/%m/%d", "%d.%m.%Y", "%Y年%m月%d日")
_DATETIME_INPUT_FORMATS = (
    "%Y/%m/%d %H:%M:%S",
    "%Y/%m/%d %H:%M",
    "%d.%m.%Y %H:%M:%S",
    "%d.%m.%Y %H:%M",
)


class TimeUtils:
    """统一时间处理工具类.

    所有解析函数在输入无法识别时返回 None 而不是抛出异常,
    由调用方决定如何提示用户.
    """

    @staticmethod
    def get_zone(name: str | None) -> ZoneInfo:
        """按名称获取时区,名称无效时回退为 UTC."""
        if not name:
            return UTC_TZ
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            return UTC_TZ

    @staticmethod
    def now(tz_name: str | None = None) -> datetime:
        """获取当前时间,缺省为 UTC."""
        if tz_name is None:
            return datetime.now(UTC)
        return datetime.now(TimeUtils.get_zone(tz_name))

    @staticmethod
    def parse_date(value: object) -> date | None:
        """将输入解析为 date.

        Args:
            value: date/datetime 对象或日期字符串.

        Returns:
            解析出的日期,失败时返回 None.

        """
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if not isinstance(value, str):
            return None
        text = value.strip()
        if not text:
            return None
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(text).date()
        except ValueError:
            pass
        for fmt in _DATE_INPUT_FORMATS:
            try:
                return datetime.strptime(text, fmt).date()
            except ValueError:
                continue
        return None

    @staticmethod
    def parse_datetime(value: object, tz_name: str | None = DEFAULT_TIMEZONE) -> datetime | None:
        """将输入解析为带时区的 datetime.

        无时区信息的输入视为 ``tz_name`` 所在时区的本地时间; 带时区的输入会被转换到该时区.

        Args:
            value: datetime/date 对象或日期时间字符串.
            tz_name: 目标时区名称.

        Returns:
            带时区的 datetime,失败时返回 None.

        """
        zone = TimeUtils.get_zone(tz_name)
        parsed: datetime | None = None
        if isinstance(value, datetime):
            parsed = value
        elif isinstance(value, date):
            parsed = datetime.combine(value, time.min)
        elif isinstance(value, str) and value.strip():
            text = value.strip()
            try:
                parsed = datetime.fromisoformat(text)
            except ValueError:
                for fmt in _DATETIME_INPUT_FORMATS:
                    try:
                        parsed = datetime.strptime(text, fmt)
                        break
                    except ValueError:
                        continue
        if parsed is None:
            return None
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=zone)
        try:
            return parsed.astimezone(zone)
        except (OverflowError, ValueError):
            # 转换后超出 datetime 可表示范围
            return None

    @staticmethod
    def get_relative_time(value: date | datetime | None, now: datetime | None = None) -> str:
        """获取相对时间描述.

        date 按天粒度描述("今天"、"3天前"),datetime 精确到分钟("刚刚"、"5分钟后").

        Args:
            value: 待描述的日期或时间.
            now: 参照时间,缺省为当前时间.

        Returns:
            相对时间描述字符串,无法计算时返回 '-'.

        """
        if value is None:
            return "-"
        reference = now or TimeUtils.now()
        if not isinstance(value, datetime):
            today = reference.date()
            delta_days = (value - today).days
            return _describe_days(abs(delta_days), is_past=delta_days < 0)

        target = value if value.tzinfo else value.replace(tzinfo=reference.tzinfo or UTC)
        if reference.tzinfo is None:
            reference = reference.replace(tzinfo=UTC)
        seconds = (target - reference).total_seconds()
        is_past = seconds < 0
        distance = abs(seconds)
        suffix = "前" if is_past else "后"
        if distance < TimeConstants.ONE_MINUTE:
            return "刚刚"
        if distance < TimeConstants.ONE_HOUR:
            return f"{int(distance // TimeConstants.ONE_MINUTE)}分钟{suffix}"
        if distance < TimeConstants.ONE_DAY:
            return f"{int(distance // TimeConstants.ONE_HOUR)}小时{suffix}"
        return _describe_days(int(distance // TimeConstants.ONE_DAY), is_past=is_past)


def _describe_days(days: int, *, is_past: bool) -> str:
    suffix = "前" if is_past else "后"
    if days == 0:
        return "今天"
    if days == 1:
        return "昨天" if is_past else "明天"
    if days < TimeConstants.DAYS_PER_WEEK:
        return f"{days}天{suffix}"
    if days < TimeConstants.DAYS_PER_MONTH:
        return f"{days // TimeConstants.DAYS_PER_WEEK}周{suffix}"
    if days < TimeConstants.DAYS_PER_YEAR:
        return f"{days // TimeConstants.DAYS_PER_MONTH}个月{suffix}"
    return f"{days // TimeConstants.DAYS_PER_YEAR}年{suffix}"


time_utils = TimeUtils()

__all__ = ["DEFAULT_TIMEZONE", "TimeFormats", "TimeUtils", "time_utils"]
