"""活动日志条目构建与内存过滤测试"""

from datetime import timedelta

import pytest
from projectcamp.core.domain.ledger import filter_activities, project_entry, task_entry
from projectcamp.core.models import (
    ActivityLogEntry,
    ActivityOwnerKind,
    ActivityQuery,
    Pagination,
    ProjectActivityType,
    SortOrder,
    TaskActivityType,
)
from pydantic import ValidationError


@pytest.fixture
def entries(owner, now):
    kinds = [
        ProjectActivityType.PROJECT_CREATED,
        ProjectActivityType.MEMBER_ADDED,
        ProjectActivityType.MEMBER_ADDED,
        ProjectActivityType.STATUS_UPDATED,
    ]
    result = []
    for i, kind in enumerate(kinds):
        entry = project_entry("P1", kind, owner, now + timedelta(days=i))
        result.append(entry.model_copy(update={"seq": i + 1}))
    return result


class TestEntryConstruction:
    def test_project_entry_fields(self, owner, now):
        entry = project_entry("P1", ProjectActivityType.PROJECT_CREATED, owner, now)
        assert entry.owner_kind == ActivityOwnerKind.PROJECT
        assert entry.owner_id == "P1"
        assert entry.project_id == "P1"
        assert entry.performed_by_snapshot == owner
        assert entry.seq == 0

    def test_extra_metadata_merged(self, owner, now):
        entry = task_entry(
            "T1",
            "P1",
            TaskActivityType.TASK_CREATED,
            owner,
            now,
            extra={"client": "web"},
        )
        assert entry.metadata == {"client": "web"}

    def test_type_must_match_owner_kind(self, owner, now):
        with pytest.raises(ValidationError):
            ActivityLogEntry(
                activity_id="A1",
                owner_kind=ActivityOwnerKind.TASK,
                owner_id="T1",
                project_id="P1",
                type=ProjectActivityType.MEMBER_ADDED.value,
                performed_by=owner.user_id,
                performed_by_snapshot=owner,
                created_at=now,
            )

    def test_entries_are_immutable(self, owner, now):
        entry = project_entry("P1", ProjectActivityType.PROJECT_CREATED, owner, now)
        with pytest.raises(ValidationError):
            entry.type = ProjectActivityType.MEMBER_ADDED.value


class TestFilterActivities:
    def test_default_newest_first(self, entries):
        page = filter_activities(entries, ActivityQuery())
        assert [e.seq for e in page.items] == [4, 3, 2, 1]
        assert page.total == 4

    def test_type_filter(self, entries):
        page = filter_activities(
            entries, ActivityQuery(types=[ProjectActivityType.MEMBER_ADDED.value])
        )
        assert page.total == 2
        assert all(e.type == "MEMBER_ADDED" for e in page.items)

    def test_inclusive_range(self, entries, now):
        query = ActivityQuery(
            created_from=now + timedelta(days=1),
            created_to=now + timedelta(days=2),
            sort=SortOrder.ASC,
        )
        page = filter_activities(entries, query)
        assert [e.seq for e in page.items] == [2, 3]

    def test_pagination(self, entries):
        query = ActivityQuery(sort=SortOrder.ASC, pagination=Pagination(page=2, limit=3))
        page = filter_activities(entries, query)
        assert [e.seq for e in page.items] == [4]
        assert page.total_pages == 2
