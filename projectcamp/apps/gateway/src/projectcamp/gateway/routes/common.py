"""路由共用的查询参数解析"""

from datetime import UTC, date, datetime, time, timedelta

from projectcamp.core.errors import ValidationFailedError
from projectcamp.core.models import ActivityQuery, Pagination, SortOrder


def pagination_params(page: int | None, limit: int | None) -> Pagination:
    """越界的 page / limit 钳制到合法范围"""
    return Pagination.clamped(page, limit)


def parse_sort(sort: str | None, default: SortOrder) -> SortOrder:
    if sort is None:
        return default
    value = sort.lower()
    # 兼容 "dsc" 写法
    if value == "dsc":
        return SortOrder.DESC
    try:
        return SortOrder(value)
    except ValueError:
        raise ValidationFailedError(
            f"Invalid sort order: {sort!r}", code="INVALID_SORT"
        ) from None


def _parse_day(value: str, field: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationFailedError(
            f"{field} must be a date in YYYY-MM-DD format", code="INVALID_DATE"
        ) from None


def activity_query_params(
    type_: str | None,
    from_: str | None,
    to: str | None,
    sort: str | None,
    page: int | None,
    limit: int | None,
) -> ActivityQuery:
    """解析活动日志查询参数

    type 为逗号分隔的类型列表；from / to 为 UTC 日期，结束日期整天包含在内。
    """
    types = [t.strip() for t in type_.split(",") if t.strip()] if type_ else []
    created_from = None
    created_to = None
    if from_:
        created_from = datetime.combine(_parse_day(from_, "from"), time.min, tzinfo=UTC)
    if to:
        next_day = _parse_day(to, "to") + timedelta(days=1)
        created_to = datetime.combine(next_day, time.min, tzinfo=UTC) - timedelta(
            microseconds=1
        )
    if created_from and created_to and created_from > created_to:
        raise ValidationFailedError(
            "'from' must not be after 'to'", code="INVALID_DATE_RANGE"
        )
    return ActivityQuery(
        types=types,
        created_from=created_from,
        created_to=created_to,
        sort=parse_sort(sort, SortOrder.DESC),
        pagination=pagination_params(page, limit),
    )
