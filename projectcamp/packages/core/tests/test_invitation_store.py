"""InvitationStore 测试

测试内容：
1. 条件写入只作用于 pending 行
2. 批量过期只标记截止时间已过的邀请
3. 用户邀请列表按状态过滤、最新在前
"""

from datetime import timedelta

import pytest_asyncio
from projectcamp.core.domain import invitation, membership
from projectcamp.core.models import InvitationStatus, Pagination
from projectcamp.core.store import (
    create_invitation_with_activity,
    create_project_with_activity,
    write_transaction,
)


@pytest_asyncio.fixture
async def two_projects(seeded_stores, owner, now):
    result = []
    for name in ("Apollo", "Gemini"):
        project, entry = membership.new_project(name, "", owner, now)
        await create_project_with_activity(seeded_stores, project, entry)
        result.append(project)
    return result


class TestMarkStatus:
    async def test_guarded_flip(self, seeded_stores, two_projects, owner, bob, now):
        inv, entry = invitation.new_invitation(two_projects[0], bob.user_id, owner, now)
        await create_invitation_with_activity(seeded_stores, inv, entry)
        store = seeded_stores.invitation_store

        async with write_transaction(seeded_stores):
            first = await store.mark_status(inv.invitation_id, InvitationStatus.REJECTED, now)
        async with write_transaction(seeded_stores):
            second = await store.mark_status(
                inv.invitation_id, InvitationStatus.ACCEPTED, now
            )

        assert first is True
        assert second is False
        reloaded = await store.get_invitation(inv.invitation_id)
        assert reloaded.invitation_status == InvitationStatus.REJECTED

    async def test_new_pending_allowed_after_terminal(
        self, seeded_stores, two_projects, owner, bob, now
    ):
        """旧邀请进入终态后可以重新邀请"""
        project = two_projects[0]
        inv, entry = invitation.new_invitation(project, bob.user_id, owner, now)
        await create_invitation_with_activity(seeded_stores, inv, entry)
        async with write_transaction(seeded_stores):
            await seeded_stores.invitation_store.mark_status(
                inv.invitation_id, InvitationStatus.REJECTED, now
            )

        again, entry = invitation.new_invitation(project, bob.user_id, owner, now)
        await create_invitation_with_activity(seeded_stores, again, entry)
        pending = await seeded_stores.invitation_store.find_pending(
            project.project_id, bob.user_id
        )
        assert pending.invitation_id == again.invitation_id


class TestExpirePending:
    async def test_only_past_deadline_marked(
        self, seeded_stores, two_projects, owner, bob, now
    ):
        old, e1 = invitation.new_invitation(two_projects[0], bob.user_id, owner, now)
        fresh, e2 = invitation.new_invitation(
            two_projects[1], bob.user_id, owner, now + timedelta(days=3)
        )
        await create_invitation_with_activity(seeded_stores, old, e1)
        await create_invitation_with_activity(seeded_stores, fresh, e2)

        store = seeded_stores.invitation_store
        async with write_transaction(seeded_stores):
            count = await store.expire_pending_before(now + timedelta(days=8))
        assert count == 1

        assert (await store.get_invitation(old.invitation_id)).invitation_status == (
            InvitationStatus.EXPIRED
        )
        assert (await store.get_invitation(fresh.invitation_id)).is_pending()

        # 幂等：再次清扫不会重复标记
        async with write_transaction(seeded_stores):
            assert await store.expire_pending_before(now + timedelta(days=8)) == 0


class TestListForUser:
    async def test_newest_first_with_status_filter(
        self, seeded_stores, two_projects, owner, bob, now
    ):
        first, e1 = invitation.new_invitation(two_projects[0], bob.user_id, owner, now)
        second, e2 = invitation.new_invitation(
            two_projects[1], bob.user_id, owner, now + timedelta(hours=1)
        )
        await create_invitation_with_activity(seeded_stores, first, e1)
        await create_invitation_with_activity(seeded_stores, second, e2)
        store = seeded_stores.invitation_store

        items, total = await store.list_for_user(
            bob.user_id, [InvitationStatus.PENDING], Pagination()
        )
        assert total == 2
        assert [i.invitation_id for i in items] == [
            second.invitation_id,
            first.invitation_id,
        ]

        async with write_transaction(seeded_stores):
            await store.mark_status(first.invitation_id, InvitationStatus.REJECTED, now)
        items, total = await store.list_for_user(
            bob.user_id,
            [InvitationStatus.PENDING, InvitationStatus.EXPIRED],
            Pagination(),
        )
        assert total == 1
        assert items[0].invitation_id == second.invitation_id
