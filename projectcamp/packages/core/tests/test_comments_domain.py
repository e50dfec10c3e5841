"""任务评论测试"""

import pytest
from projectcamp.core.domain import comments, task_engine
from projectcamp.core.errors import ConflictError, ForbiddenError, ValidationFailedError
from projectcamp.core.models import TaskActivityType, TaskStatus


@pytest.fixture
def task(project, owner, alice, now):
    created, _ = task_engine.new_task(project, "Write docs", "", owner, now)
    assigned, _ = task_engine.assign_member(created, project, alice.user_id, owner, now)
    return assigned


class TestNewComment:
    def test_assignee_comments(self, task, project, alice, owner, now):
        comment, entry = comments.new_comment(
            task, project, alice, "  Looks good  ", now, mentions=[owner.user_id]
        )
        assert comment.content == "Looks good"
        assert comment.commented_by == alice.user_id
        assert comment.mentions == [owner.user_id]
        assert entry.type == TaskActivityType.COMMENT_ADDED
        assert entry.metadata["comment_id"] == comment.comment_id
        assert entry.metadata["content_preview"] == "Looks good"

    def test_owner_without_assignment_cannot_comment(self, task, project, owner, now):
        with pytest.raises(ForbiddenError) as exc_info:
            comments.new_comment(task, project, owner, "hi", now)
        assert exc_info.value.code == "CANNOT_COMMENT"

    def test_completed_task_rejects_comment(self, task, project, alice, now):
        done = task.model_copy(update={"task_status": TaskStatus.COMPLETED})
        with pytest.raises(ForbiddenError):
            comments.new_comment(done, project, alice, "late", now)

    def test_empty_content(self, task, project, alice, now):
        with pytest.raises(ValidationFailedError) as exc_info:
            comments.new_comment(task, project, alice, "   ", now)
        assert exc_info.value.code == "CONTENT_REQUIRED"

    def test_mentions_deduplicated(self, task, project, alice, owner, now):
        comment, _ = comments.new_comment(
            task, project, alice, "ping", now, mentions=[owner.user_id, owner.user_id]
        )
        assert comment.mentions == [owner.user_id]

    def test_mention_outsider_rejected(self, task, project, alice, bob, now):
        with pytest.raises(ValidationFailedError) as exc_info:
            comments.new_comment(task, project, alice, "ping", now, mentions=[bob.user_id])
        assert exc_info.value.code == "MENTION_NOT_MEMBER"

    def test_long_content_preview_truncated(self, task, project, alice, now):
        text = "x" * 500
        comment, entry = comments.new_comment(task, project, alice, text, now)
        assert comment.content == text
        preview = entry.metadata["content_preview"]
        assert len(preview) == comments.PREVIEW_LENGTH
        assert preview.endswith("...")


class TestDeleteComment:
    def test_author_deletes_even_on_completed_task(self, task, project, alice, now):
        comment, _ = comments.new_comment(task, project, alice, "hi", now)
        done = task.model_copy(update={"task_status": TaskStatus.COMPLETED})
        entry = comments.delete_comment(comment, done, alice, now)
        assert entry.type == TaskActivityType.COMMENT_DELETED
        assert entry.metadata["comment_id"] == comment.comment_id

    def test_non_author_forbidden(self, task, project, alice, owner, now):
        comment, _ = comments.new_comment(task, project, alice, "hi", now)
        with pytest.raises(ForbiddenError) as exc_info:
            comments.delete_comment(comment, task, owner, now)
        assert exc_info.value.code == "NOT_COMMENT_AUTHOR"

    def test_task_mismatch(self, task, project, owner, alice, now):
        comment, _ = comments.new_comment(task, project, alice, "hi", now)
        other, _ = task_engine.new_task(project, "Other", "", owner, now)
        with pytest.raises(ConflictError):
            comments.delete_comment(comment, other, alice, now)
