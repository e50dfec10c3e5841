"""packages/core 测试配置 -- 领域对象与持久化 fixture"""

from datetime import UTC, datetime

import pytest
import pytest_asyncio
from projectcamp.core.domain import membership
from projectcamp.core.models import ActorSnapshot, Project, User
from projectcamp.core.store import StoreGroup
from ulid import ULID

NOW = datetime(2026, 3, 2, 9, 30, tzinfo=UTC)


def _user(name: str) -> User:
    return User(
        user_id=str(ULID()),
        username=name,
        email=f"{name}@example.com",
        created_at=NOW,
        updated_at=NOW,
    )


@pytest.fixture
def now() -> datetime:
    """固定的当前时间"""
    return NOW


@pytest.fixture
def owner_user() -> User:
    return _user("olivia")


@pytest.fixture
def alice_user() -> User:
    return _user("alice")


@pytest.fixture
def bob_user() -> User:
    return _user("bob")


@pytest.fixture
def owner(owner_user: User) -> ActorSnapshot:
    return ActorSnapshot.from_user(owner_user)


@pytest.fixture
def alice(alice_user: User) -> ActorSnapshot:
    return ActorSnapshot.from_user(alice_user)


@pytest.fixture
def bob(bob_user: User) -> ActorSnapshot:
    return ActorSnapshot.from_user(bob_user)


@pytest.fixture
def project(owner: ActorSnapshot, alice: ActorSnapshot, now: datetime) -> Project:
    """owner + alice 两名成员的 active 项目（bob 不是成员）"""
    created, _ = membership.new_project("Apollo", "Moon landing", owner, now)
    with_alice, _ = membership.add_member(created, alice.user_id, owner, now)
    return with_alice


@pytest_asyncio.fixture
async def seeded_stores(
    store_group: StoreGroup,
    owner_user: User,
    alice_user: User,
    bob_user: User,
) -> StoreGroup:
    """已写入三个用户的 StoreGroup"""
    for user in (owner_user, alice_user, bob_user):
        await store_group.user_store.create_user(user)
    await store_group.conn.commit()
    return store_group
