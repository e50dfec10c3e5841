"""Notify 包测试 fixtures"""

import pytest
from projectcamp.notify.models import EmailMessage


@pytest.fixture
def sample_message() -> EmailMessage:
    """标准邮件测试数据"""
    return EmailMessage(
        to="bob@example.com",
        subject="You're invited to Apollo",
        body="Hi Bob",
    )
