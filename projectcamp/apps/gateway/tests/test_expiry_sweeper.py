"""InvitationExpirySweeper 测试

测试内容：
1. 每次清扫重新读取时钟
2. 单次失败不终止循环
3. start / stop 生命周期
"""

import asyncio
from datetime import UTC, datetime

import pytest_asyncio
from projectcamp.core.clock import FrozenClock
from projectcamp.core.domain import invitation, membership
from projectcamp.core.models import ActorSnapshot, InvitationStatus, User
from projectcamp.core.store import (
    create_invitation_with_activity,
    create_project_with_activity,
)
from projectcamp.gateway.services.expiry_sweeper import InvitationExpirySweeper
from ulid import ULID

_START = datetime(2026, 3, 2, 9, 30, tzinfo=UTC)


def _user(name: str) -> User:
    return User(
        user_id=str(ULID()),
        username=name,
        email=f"{name}@example.com",
        created_at=_START,
        updated_at=_START,
    )


@pytest_asyncio.fixture
async def pending_invitation(store_group):
    owner, bob = _user("olivia"), _user("bob")
    for user in (owner, bob):
        await store_group.user_store.create_user(user)
    await store_group.conn.commit()

    actor = ActorSnapshot.from_user(owner)
    project, entry = membership.new_project("Apollo", "", actor, _START)
    await create_project_with_activity(store_group, project, entry)
    inv, entry = invitation.new_invitation(project, bob.user_id, actor, _START)
    await create_invitation_with_activity(store_group, inv, entry)
    return inv


class TestRunOnce:
    async def test_reads_clock_each_tick(self, store_group, pending_invitation):
        clock = FrozenClock(_START)
        sweeper = InvitationExpirySweeper(store_group, clock=clock, interval_s=60)

        assert await sweeper.run_once() == 0
        clock.advance(days=7, seconds=1)
        assert await sweeper.run_once() == 1
        assert await sweeper.run_once() == 0

        stored = await store_group.invitation_store.get_invitation(
            pending_invitation.invitation_id
        )
        assert stored.invitation_status == InvitationStatus.EXPIRED


class TestLoop:
    async def test_failure_does_not_stop_loop(self, store_group, monkeypatch):
        calls = 0

        async def flaky(self):
            nonlocal calls
            calls += 1
            if calls == 1:
                raise RuntimeError("database is locked")
            return 0

        monkeypatch.setattr(InvitationExpirySweeper, "run_once", flaky)
        sweeper = InvitationExpirySweeper(store_group, interval_s=0.01)
        sweeper.start()
        for _ in range(100):
            if calls >= 2:
                break
            await asyncio.sleep(0.01)
        assert sweeper.running
        await sweeper.stop()
        assert calls >= 2
        assert not sweeper.running

    async def test_start_is_idempotent(self, store_group):
        sweeper = InvitationExpirySweeper(
            store_group, clock=FrozenClock(_START), interval_s=3600
        )
        sweeper.start()
        first = sweeper._task
        sweeper.start()
        assert sweeper._task is first
        await sweeper.stop()

    async def test_stop_wakes_sleeping_loop(self, store_group):
        sweeper = InvitationExpirySweeper(
            store_group, clock=FrozenClock(_START), interval_s=3600
        )
        sweeper.start()
        await asyncio.sleep(0)
        await asyncio.wait_for(sweeper.stop(), timeout=1)

    async def test_sweep_interval_from_env(self, store_group, monkeypatch):
        monkeypatch.setenv("PROJECTCAMP_SWEEP_INTERVAL_S", "42")
        sweeper = InvitationExpirySweeper(store_group)
        assert sweeper._interval_s == 42
