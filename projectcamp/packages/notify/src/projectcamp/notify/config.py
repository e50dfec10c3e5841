"""MailConfig -- 邮件通道配置加载

从环境变量加载配置；非法值记录 warning 后回退默认值，不阻塞启动。
"""

import os
from typing import Literal

import structlog
from pydantic import BaseModel, Field, SecretStr

log = structlog.get_logger()


class MailConfig(BaseModel):
    """Notify 包配置 -- 从环境变量加载

    环境变量:
        PROJECTCAMP_MAIL_MODE: 发送模式（http/log）
        PROJECTCAMP_MAIL_API_URL: 邮件 API 地址
        PROJECTCAMP_MAIL_API_KEY: 邮件 API 密钥
        PROJECTCAMP_MAIL_FROM: 发件人地址
        PROJECTCAMP_MAIL_TIMEOUT_S: 请求超时（秒，默认 10）
    """

    mail_mode: Literal["http", "log"] = Field(
        default="log",
        description="发送模式：http 调用邮件 API / log 仅写日志",
    )
    api_url: str = Field(
        default="http://localhost:8025/api/send",
        description="邮件 API 地址",
    )
    api_key: SecretStr = Field(
        default=SecretStr(""),
        description="邮件 API 密钥",
    )
    sender: str = Field(
        default="no-reply@projectcamp.local",
        description="发件人地址",
    )
    timeout_s: int = Field(
        default=10,
        ge=1,
        description="请求超时（秒）",
    )


def load_mail_config() -> MailConfig:
    """从环境变量加载邮件配置

    Returns:
        MailConfig 实例
    """
    kwargs: dict = {}

    if val := os.environ.get("PROJECTCAMP_MAIL_MODE"):
        if val in ("http", "log"):
            kwargs["mail_mode"] = val
        else:
            log.warning(
                "invalid_mail_mode_config",
                env_var="PROJECTCAMP_MAIL_MODE",
                value=val,
                fallback="log",
            )

    if val := os.environ.get("PROJECTCAMP_MAIL_API_URL"):
        kwargs["api_url"] = val

    if val := os.environ.get("PROJECTCAMP_MAIL_API_KEY"):
        kwargs["api_key"] = SecretStr(val)

    if val := os.environ.get("PROJECTCAMP_MAIL_FROM"):
        kwargs["sender"] = val

    if val := os.environ.get("PROJECTCAMP_MAIL_TIMEOUT_S"):
        try:
            kwargs["timeout_s"] = int(val)
        except ValueError:
            log.warning(
                "invalid_timeout_config",
                env_var="PROJECTCAMP_MAIL_TIMEOUT_S",
                value=val,
                fallback=10,
            )

    return MailConfig(**kwargs)
