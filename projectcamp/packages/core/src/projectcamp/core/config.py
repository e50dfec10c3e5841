"""配置常量模块 -- 可通过环境变量覆盖

包含数据库路径、邀请有效期、任务默认截止时间、过期清扫间隔、分页上限等可配置常量。
"""

import os
from pathlib import Path


def _get_base_dir() -> Path:
    """获取项目 data 基础目录"""
    return Path(os.environ.get("PROJECTCAMP_DATA_DIR", "data"))


def get_db_path() -> str:
    """获取 SQLite 数据库路径"""
    return os.environ.get(
        "PROJECTCAMP_DB_PATH",
        str(_get_base_dir() / "sqlite" / "projectcamp.db"),
    )


def get_sweep_interval_s() -> int:
    """邀请过期清扫间隔（秒）"""
    return int(os.environ.get("PROJECTCAMP_SWEEP_INTERVAL_S", "600"))


def is_sweep_enabled() -> bool:
    """是否在网关进程内启动后台清扫"""
    return os.environ.get("PROJECTCAMP_SWEEP_ENABLED", "true").lower() == "true"


# 邀请有效期（天）
INVITATION_EXPIRY_DAYS: int = int(
    os.environ.get("PROJECTCAMP_INVITATION_EXPIRY_DAYS", "7")
)

# 任务默认截止时间（创建后多少天）
TASK_DEADLINE_DAYS: int = int(os.environ.get("PROJECTCAMP_TASK_DEADLINE_DAYS", "7"))

# 分页默认条数与上限
DEFAULT_PAGE_LIMIT: int = int(os.environ.get("PROJECTCAMP_DEFAULT_PAGE_LIMIT", "10"))
MAX_PAGE_LIMIT: int = int(os.environ.get("PROJECTCAMP_MAX_PAGE_LIMIT", "100"))

# 版本冲突最大重试次数
MAX_STALE_WRITE_RETRIES: int = 3
