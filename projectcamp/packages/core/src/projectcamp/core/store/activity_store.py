"""ActivityStore SQLite 实现

activities 表 append-only：只允许插入，不允许更新或删除。
seq 同一 owner 内严格单调递增，由 (owner_kind, owner_id, seq) 唯一索引兜底。
"""

import json

import aiosqlite

from ..models.activity import ActivityLogEntry, ActivityQuery
from ..models.enums import ActivityOwnerKind, SortOrder
from ..models.page import Page
from ..models.user import ActorSnapshot
from .codec import from_db_ts, to_db_ts


class SqliteActivityStore:
    """ActivityStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def get_next_seq(self, owner_kind: ActivityOwnerKind, owner_id: str) -> int:
        """获取指定 owner 的下一个 seq（MAX+1）

        在事务内调用以确保原子性。
        """
        cursor = await self._conn.execute(
            """
            SELECT COALESCE(MAX(seq), 0) FROM activities
            WHERE owner_kind = ? AND owner_id = ?
            """,
            (owner_kind.value, owner_id),
        )
        row = await cursor.fetchone()
        return (row[0] if row else 0) + 1

    async def append_activity(self, entry: ActivityLogEntry) -> ActivityLogEntry:
        """追加活动条目（append-only），返回分配了 seq 的条目

        注意：此方法不自动提交事务，需由调用方管理事务。
        """
        seq = await self.get_next_seq(entry.owner_kind, entry.owner_id)
        stored = entry.model_copy(update={"seq": seq})
        await self._conn.execute(
            """
            INSERT INTO activities (activity_id, owner_kind, owner_id, project_id,
                                    seq, type, performed_by, performed_by_snapshot,
                                    metadata, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                stored.activity_id,
                stored.owner_kind.value,
                stored.owner_id,
                stored.project_id,
                stored.seq,
                stored.type,
                stored.performed_by,
                stored.performed_by_snapshot.model_dump_json(),
                json.dumps(stored.metadata, ensure_ascii=False),
                to_db_ts(stored.created_at),
            ),
        )
        return stored

    async def get_activities(
        self, owner_kind: ActivityOwnerKind, owner_id: str
    ) -> list[ActivityLogEntry]:
        """查询 owner 的全部条目，按 seq 正序"""
        cursor = await self._conn.execute(
            """
            SELECT * FROM activities
            WHERE owner_kind = ? AND owner_id = ?
            ORDER BY seq ASC
            """,
            (owner_kind.value, owner_id),
        )
        rows = await cursor.fetchall()
        return [self._row_to_entry(row) for row in rows]

    async def query_activities(
        self,
        owner_kind: ActivityOwnerKind,
        owner_id: str,
        query: ActivityQuery,
    ) -> Page[ActivityLogEntry]:
        """按类型集合、created_at 闭区间过滤，排序并分页"""
        clauses = ["owner_kind = ?", "owner_id = ?"]
        params: list = [owner_kind.value, owner_id]
        if query.types:
            clauses.append(f"type IN ({', '.join('?' for _ in query.types)})")
            params.extend(query.types)
        if query.created_from is not None:
            clauses.append("created_at >= ?")
            params.append(to_db_ts(query.created_from))
        if query.created_to is not None:
            clauses.append("created_at <= ?")
            params.append(to_db_ts(query.created_to))
        where = " AND ".join(clauses)

        cursor = await self._conn.execute(
            f"SELECT COUNT(*) FROM activities WHERE {where}", tuple(params)
        )
        row = await cursor.fetchone()
        total = row[0] if row else 0

        direction = "ASC" if query.sort == SortOrder.ASC else "DESC"
        cursor = await self._conn.execute(
            f"""
            SELECT * FROM activities WHERE {where}
            ORDER BY created_at {direction}, seq {direction}
            LIMIT ? OFFSET ?
            """,
            (*params, query.pagination.limit, query.pagination.offset),
        )
        rows = await cursor.fetchall()
        return Page[ActivityLogEntry].build(
            [self._row_to_entry(r) for r in rows], total, query.pagination
        )

    @staticmethod
    def _row_to_entry(row: aiosqlite.Row) -> ActivityLogEntry:
        """将数据库行转换为 ActivityLogEntry 模型"""
        return ActivityLogEntry(
            activity_id=row["activity_id"],
            owner_kind=ActivityOwnerKind(row["owner_kind"]),
            owner_id=row["owner_id"],
            project_id=row["project_id"],
            seq=row["seq"],
            type=row["type"],
            performed_by=row["performed_by"],
            performed_by_snapshot=ActorSnapshot.model_validate_json(
                row["performed_by_snapshot"]
            ),
            metadata=json.loads(row["metadata"]) if row["metadata"] else {},
            created_at=from_db_ts(row["created_at"]),
        )
