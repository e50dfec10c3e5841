"""Notify 异常体系

发送失败只影响通知本身，不会回传给触发通知的业务操作。
"""


class NotificationError(Exception):
    """Notify 包基础异常"""

    def __init__(self, message: str, recoverable: bool = True) -> None:
        """
        Args:
            message: 错误描述
            recoverable: 是否可通过降级通道恢复
        """
        super().__init__(message)
        self.recoverable = recoverable


class MailServiceUnreachableError(NotificationError):
    """邮件 API 不可达（连接失败、超时、DNS 解析失败等）

    此异常触发 NotificationDispatcher 的降级逻辑。
    """

    def __init__(self, api_url: str, original_error: Exception) -> None:
        """
        Args:
            api_url: 尝试连接的邮件 API 地址
            original_error: 原始异常
        """
        super().__init__(
            f"邮件服务不可达: {api_url} -- {original_error}",
            recoverable=True,
        )
        self.api_url = api_url
        self.original_error = original_error
