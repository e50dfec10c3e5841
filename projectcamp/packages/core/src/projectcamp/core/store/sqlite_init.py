"""SQLite 数据库初始化

PRAGMA 配置 + 六张表 DDL + 索引创建。
使用 aiosqlite 异步操作。
"""

import aiosqlite

# users 表 DDL
_USERS_DDL = """
CREATE TABLE IF NOT EXISTS users (
    user_id                    TEXT PRIMARY KEY,
    username                   TEXT NOT NULL,
    email                      TEXT NOT NULL,
    password_hash              TEXT NOT NULL DEFAULT '',
    role                       TEXT NOT NULL DEFAULT 'user',
    is_blocked                 INTEGER NOT NULL DEFAULT 0,
    is_email_verified          INTEGER NOT NULL DEFAULT 0,
    email_verification_token   TEXT,
    email_verification_expiry  TEXT,
    forgot_password_token      TEXT,
    forgot_password_expiry     TEXT,
    refresh_token              TEXT,
    created_at                 TEXT NOT NULL,
    updated_at                 TEXT NOT NULL
);
"""

_USERS_INDEXES = [
    "CREATE UNIQUE INDEX IF NOT EXISTS idx_users_email ON users(email);",
]

# projects 表 DDL（members 为 JSON 数组）
_PROJECTS_DDL = """
CREATE TABLE IF NOT EXISTS projects (
    project_id   TEXT PRIMARY KEY,
    name         TEXT NOT NULL,
    description  TEXT NOT NULL DEFAULT '',
    status       TEXT NOT NULL DEFAULT 'active',
    members      TEXT NOT NULL DEFAULT '[]',
    version      INTEGER NOT NULL DEFAULT 1,
    created_at   TEXT NOT NULL,
    updated_at   TEXT NOT NULL
);
"""

_PROJECTS_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_projects_updated_at ON projects(updated_at DESC);",
]

# project_invitations 表 DDL
_INVITATIONS_DDL = """
CREATE TABLE IF NOT EXISTS project_invitations (
    invitation_id      TEXT PRIMARY KEY,
    project_id         TEXT NOT NULL,
    invited_user       TEXT NOT NULL,
    invited_by         TEXT NOT NULL,
    role               TEXT NOT NULL DEFAULT 'member',
    invitation_status  TEXT NOT NULL DEFAULT 'pending',
    expires_at         TEXT NOT NULL,
    created_at         TEXT NOT NULL,
    updated_at         TEXT NOT NULL,

    FOREIGN KEY (project_id) REFERENCES projects(project_id),
    FOREIGN KEY (invited_user) REFERENCES users(user_id)
);
"""

_INVITATIONS_INDEXES = [
    # 同一 (project, user) 至多一条 pending 邀请
    (
        "CREATE UNIQUE INDEX IF NOT EXISTS idx_invitations_pending_pair "
        "ON project_invitations(project_id, invited_user) "
        "WHERE invitation_status = 'pending';"
    ),
    (
        "CREATE INDEX IF NOT EXISTS idx_invitations_user_status "
        "ON project_invitations(invited_user, invitation_status);"
    ),
    (
        "CREATE INDEX IF NOT EXISTS idx_invitations_status_expires "
        "ON project_invitations(invitation_status, expires_at);"
    ),
]

# tasks 表 DDL（assigned_to 为 JSON 数组）
_TASKS_DDL = """
CREATE TABLE IF NOT EXISTS tasks (
    task_id              TEXT PRIMARY KEY,
    title                TEXT NOT NULL,
    description          TEXT NOT NULL DEFAULT '',
    project_id           TEXT NOT NULL,
    created_by           TEXT NOT NULL,
    assigned_to          TEXT NOT NULL DEFAULT '[]',
    completion_deadline  TEXT NOT NULL,
    task_status          TEXT NOT NULL DEFAULT 'todo',
    version              INTEGER NOT NULL DEFAULT 1,
    created_at           TEXT NOT NULL,
    updated_at           TEXT NOT NULL,

    FOREIGN KEY (project_id) REFERENCES projects(project_id)
);
"""

_TASKS_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_tasks_project ON tasks(project_id, created_at DESC);",
]

# task_comments 表 DDL
_COMMENTS_DDL = """
CREATE TABLE IF NOT EXISTS task_comments (
    comment_id    TEXT PRIMARY KEY,
    task_id       TEXT NOT NULL,
    project_id    TEXT NOT NULL,
    commented_by  TEXT NOT NULL,
    mentions      TEXT NOT NULL DEFAULT '[]',
    content       TEXT NOT NULL,
    created_at    TEXT NOT NULL,
    updated_at    TEXT NOT NULL,

    FOREIGN KEY (task_id) REFERENCES tasks(task_id)
);
"""

_COMMENTS_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_comments_task ON task_comments(task_id, created_at);",
]

# activities 表 DDL（项目与任务日志共用，按 owner 区分）
_ACTIVITIES_DDL = """
CREATE TABLE IF NOT EXISTS activities (
    activity_id            TEXT PRIMARY KEY,
    owner_kind             TEXT NOT NULL,
    owner_id               TEXT NOT NULL,
    project_id             TEXT NOT NULL,
    seq                    INTEGER NOT NULL,
    type                   TEXT NOT NULL,
    performed_by           TEXT NOT NULL,
    performed_by_snapshot  TEXT NOT NULL DEFAULT '{}',
    metadata               TEXT NOT NULL DEFAULT '{}',
    created_at             TEXT NOT NULL
);
"""

_ACTIVITIES_INDEXES = [
    # owner 内序号唯一（确保 seq 严格单调递增）
    (
        "CREATE UNIQUE INDEX IF NOT EXISTS idx_activities_owner_seq "
        "ON activities(owner_kind, owner_id, seq);"
    ),
    (
        "CREATE INDEX IF NOT EXISTS idx_activities_owner_ts "
        "ON activities(owner_kind, owner_id, created_at);"
    ),
]


async def init_db(conn: aiosqlite.Connection) -> None:
    """初始化数据库：设置 PRAGMA + 创建表 + 创建索引

    Args:
        conn: aiosqlite 数据库连接
    """
    await conn.execute("PRAGMA journal_mode = WAL;")
    await conn.execute("PRAGMA foreign_keys = ON;")
    await conn.execute("PRAGMA busy_timeout = 5000;")

    for ddl in (
        _USERS_DDL,
        _PROJECTS_DDL,
        _INVITATIONS_DDL,
        _TASKS_DDL,
        _COMMENTS_DDL,
        _ACTIVITIES_DDL,
    ):
        await conn.execute(ddl)

    for idx_sql in (
        _USERS_INDEXES
        + _PROJECTS_INDEXES
        + _INVITATIONS_INDEXES
        + _TASKS_INDEXES
        + _COMMENTS_INDEXES
        + _ACTIVITIES_INDEXES
    ):
        await conn.execute(idx_sql)

    await conn.commit()


async def verify_wal_mode(conn: aiosqlite.Connection) -> bool:
    """验证 WAL 模式是否生效

    Returns:
        True 如果 WAL 模式已启用
    """
    cursor = await conn.execute("PRAGMA journal_mode;")
    row = await cursor.fetchone()
    return row is not None and row[0].lower() == "wal"
