"""时间常量.

提供常用时间单位的秒数表示,提高代码可读性.
"""


class TimeConstants:
    """时间常量(秒数)."""

    ONE_MINUTE = 60
    ONE_HOUR = 3600
    ONE_DAY = 86400
    ONE_WEEK = 604800

    DAYS_PER_WEEK = 7
    DAYS_PER_MONTH = 30
    DAYS_PER_YEAR = 365
