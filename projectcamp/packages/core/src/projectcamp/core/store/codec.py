"""行编解码辅助

时间统一以 UTC、微秒精度的 ISO 字符串存储，字典序即时间序，
SQL 中的范围比较与排序因此可以直接作用在 TEXT 列上。
"""

from datetime import UTC, datetime


def to_db_ts(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat(timespec="microseconds")


def to_db_ts_opt(value: datetime | None) -> str | None:
    return to_db_ts(value) if value is not None else None


def from_db_ts(value: str) -> datetime:
    return datetime.fromisoformat(value)


def from_db_ts_opt(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None
