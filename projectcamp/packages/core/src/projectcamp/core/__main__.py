"""CLI 入口模块 -- python -m projectcamp.core <command>

支持的命令：
  expire-invitations  执行一次邀请过期清扫
  check-invariants    校验成员与邀请的一致性约束
"""

import asyncio
import sys

from .config import get_db_path

_USAGE = """用法: python -m projectcamp.core <command>
命令:
  expire-invitations  执行一次邀请过期清扫
  check-invariants    校验成员与邀请的一致性约束"""


def main() -> None:
    """CLI 主入口"""
    if len(sys.argv) < 2:
        print(_USAGE)
        sys.exit(1)

    command = sys.argv[1]

    if command == "expire-invitations":
        asyncio.run(expire_invitations())
    elif command == "check-invariants":
        ok = asyncio.run(check_invariants())
        if not ok:
            sys.exit(2)
    else:
        print(f"未知命令: {command}")
        print("可用命令: expire-invitations, check-invariants")
        sys.exit(1)


async def expire_invitations() -> int:
    """执行一次过期清扫"""
    from .clock import utc_now
    from .store import create_store_group, expire_pending_invitations

    db_path = get_db_path()
    print(f"数据库路径: {db_path}")

    store_group = await create_store_group(db_path)
    try:
        count = await expire_pending_invitations(store_group, utc_now())
        print(f"清扫完成，标记 {count} 条邀请为 expired")
        return count
    finally:
        await store_group.close()


async def check_invariants() -> bool:
    """执行一致性校验，返回是否全部通过"""
    from .invariants import check_invariants as run_check
    from .store import create_store_group

    db_path = get_db_path()
    print(f"数据库路径: {db_path}")

    store_group = await create_store_group(db_path)
    try:
        violations = await run_check(store_group)
    finally:
        await store_group.close()

    if not violations:
        print("校验通过，未发现违规记录")
        return True
    print(f"发现 {len(violations)} 条违规记录:")
    for v in violations:
        print(f"  [{v.kind}] {v.subject_id}: {v.detail}")
    return False


if __name__ == "__main__":
    main()
