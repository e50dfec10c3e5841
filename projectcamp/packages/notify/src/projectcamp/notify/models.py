"""Notify 数据模型"""

from pydantic import BaseModel, Field


class EmailMessage(BaseModel):
    """待发送邮件"""

    to: str = Field(description="收件人地址")
    subject: str = Field(description="邮件主题")
    body: str = Field(description="纯文本正文")
    html: str | None = Field(default=None, description="可选 HTML 正文")


class DeliveryResult(BaseModel):
    """发送结果"""

    channel: str = Field(description="实际使用的通道（http / log）")
    message_id: str = Field(default="", description="通道返回的消息 ID")
    duration_ms: int = Field(default=0, description="耗时（毫秒）")
    is_fallback: bool = Field(default=False, description="是否由降级通道发送")
    fallback_reason: str = Field(default="", description="降级原因")
