"""邮件模板

正文为纯文本，链接由调用方传入（前端地址不属于本服务的配置）。
"""

from .models import EmailMessage


def invitation_email(
    to: str,
    invitee_name: str,
    inviter_name: str,
    project_name: str,
    invitation_id: str,
    expires_days: int,
) -> EmailMessage:
    """项目邀请邮件"""
    body = (
        f"Hi {invitee_name},\n\n"
        f"{inviter_name} invited you to join the project \"{project_name}\".\n"
        f"Accept or reject invitation {invitation_id} from your invitations page.\n"
        f"This invitation expires in {expires_days} days.\n"
    )
    return EmailMessage(
        to=to,
        subject=f"You're invited to {project_name}",
        body=body,
    )


def task_assigned_email(
    to: str,
    assignee_name: str,
    task_title: str,
    project_name: str,
) -> EmailMessage:
    """任务分配通知邮件"""
    body = (
        f"Hi {assignee_name},\n\n"
        f"You have been assigned to the task \"{task_title}\" "
        f"in the project \"{project_name}\".\n"
    )
    return EmailMessage(
        to=to,
        subject=f"New task assigned: {task_title}",
        body=body,
    )
