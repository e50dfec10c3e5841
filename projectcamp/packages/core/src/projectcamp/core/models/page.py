"""分页模型

page 从 1 开始；limit 超出范围时在服务端钳制，而不是报错。
"""

import math
from typing import Generic, TypeVar

from pydantic import BaseModel, Field, computed_field

from ..config import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT

T = TypeVar("T")


class Pagination(BaseModel):
    """分页参数"""

    page: int = Field(default=1, ge=1)
    limit: int = Field(default=DEFAULT_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT)

    @classmethod
    def clamped(
        cls, page: int | None = None, limit: int | None = None
    ) -> "Pagination":
        """将任意输入钳制到合法范围"""
        # 0 属于越界值，钳制到 1；只有缺省才取默认值
        safe_page = max(page if page is not None else 1, 1)
        if limit is None:
            limit = DEFAULT_PAGE_LIMIT
        safe_limit = min(max(limit, 1), MAX_PAGE_LIMIT)
        return cls(page=safe_page, limit=safe_limit)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class Page(BaseModel, Generic[T]):
    """分页结果"""

    items: list[T]
    total: int
    page: int
    limit: int

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    @classmethod
    def build(cls, items: list[T], total: int, pagination: Pagination) -> "Page[T]":
        return cls(items=items, total=total, page=pagination.page, limit=pagination.limit)
