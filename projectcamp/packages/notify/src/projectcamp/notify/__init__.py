"""ProjectCamp Notify -- 邮件通知抽象层

packages/notify 的公开接口导出。
"""

# 核心组件
from .client import HttpMailClient

# 配置
from .config import MailConfig, load_mail_config
from .dispatcher import NotificationDispatcher, build_dispatcher

# 异常
from .exceptions import MailServiceUnreachableError, NotificationError
from .log_adapter import LogMailAdapter

# 数据模型
from .models import DeliveryResult, EmailMessage
from .templates import invitation_email, task_assigned_email

__all__ = [
    "EmailMessage",
    "DeliveryResult",
    "HttpMailClient",
    "LogMailAdapter",
    "NotificationDispatcher",
    "build_dispatcher",
    "MailConfig",
    "load_mail_config",
    "NotificationError",
    "MailServiceUnreachableError",
    "invitation_email",
    "task_assigned_email",
]
