"""状态机流转测试

测试内容：
1. 项目状态流转（completed 为终态）
2. 邀请状态流转（只有 pending 可以离开）
3. 任务状态流转（不可回退）
"""

import pytest
from projectcamp.core.models import (
    PROJECT_TRANSITIONS,
    TERMINAL_INVITATION_STATES,
    InvitationStatus,
    ProjectStatus,
    TaskStatus,
    validate_invitation_transition,
    validate_project_transition,
    validate_task_transition,
)


class TestProjectTransitions:
    """项目状态机"""

    @pytest.mark.parametrize(
        "from_status,to_status",
        [
            (ProjectStatus.ACTIVE, ProjectStatus.INACTIVE),
            (ProjectStatus.ACTIVE, ProjectStatus.COMPLETED),
            (ProjectStatus.INACTIVE, ProjectStatus.ACTIVE),
            (ProjectStatus.INACTIVE, ProjectStatus.COMPLETED),
        ],
    )
    def test_valid_transitions(self, from_status, to_status):
        assert validate_project_transition(from_status, to_status) is True

    @pytest.mark.parametrize("to_status", list(ProjectStatus))
    def test_completed_is_terminal(self, to_status):
        """completed 不能流转到任何状态"""
        assert validate_project_transition(ProjectStatus.COMPLETED, to_status) is False

    @pytest.mark.parametrize("status", list(ProjectStatus))
    def test_same_status_rejected(self, status):
        assert validate_project_transition(status, status) is False

    def test_every_status_has_entry(self):
        assert set(PROJECT_TRANSITIONS) == set(ProjectStatus)


class TestInvitationTransitions:
    """邀请状态机"""

    @pytest.mark.parametrize("to_status", sorted(TERMINAL_INVITATION_STATES))
    def test_pending_to_terminal(self, to_status):
        assert validate_invitation_transition(InvitationStatus.PENDING, to_status)

    @pytest.mark.parametrize("from_status", sorted(TERMINAL_INVITATION_STATES))
    def test_terminal_states_frozen(self, from_status):
        for to_status in InvitationStatus:
            assert validate_invitation_transition(from_status, to_status) is False

    def test_pending_is_not_terminal(self):
        assert InvitationStatus.PENDING not in TERMINAL_INVITATION_STATES


class TestTaskTransitions:
    """任务状态机"""

    def test_todo_can_skip_to_completed(self):
        assert validate_task_transition(TaskStatus.TODO, TaskStatus.COMPLETED)

    def test_forward_only(self):
        assert validate_task_transition(TaskStatus.TODO, TaskStatus.IN_PROGRESS)
        assert validate_task_transition(TaskStatus.IN_PROGRESS, TaskStatus.COMPLETED)
        assert not validate_task_transition(TaskStatus.IN_PROGRESS, TaskStatus.TODO)

    @pytest.mark.parametrize("to_status", list(TaskStatus))
    def test_completed_is_terminal(self, to_status):
        assert validate_task_transition(TaskStatus.COMPLETED, to_status) is False
