"""领域异常体系

所有核心操作失败时抛出具体的错误类别，由网关统一映射为 HTTP 响应。
每个抛出点可以携带更具体的 code（如 ALREADY_MEMBER）。
"""


class ProjectCampError(Exception):
    """ProjectCamp 基础异常"""

    status_code: int = 500
    default_code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, code: str | None = None) -> None:
        """
        Args:
            message: 面向调用方的错误描述
            code: 机器可读错误码，缺省使用类别默认值
        """
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code


class ValidationFailedError(ProjectCampError):
    """输入缺失或格式错误"""

    status_code = 400
    default_code = "VALIDATION_FAILED"


class UnauthorizedError(ProjectCampError):
    """请求未携带有效身份"""

    status_code = 401
    default_code = "UNAUTHORIZED"


class ForbiddenError(ProjectCampError):
    """角色 / 所有权 / 分配关系校验失败"""

    status_code = 403
    default_code = "FORBIDDEN"


class NotFoundError(ProjectCampError):
    """引用的用户 / 项目 / 任务 / 邀请 / 评论不存在"""

    status_code = 404
    default_code = "NOT_FOUND"


class ConflictError(ProjectCampError):
    """重复成员、重复待处理邀请、非法状态覆盖等冲突"""

    status_code = 409
    default_code = "CONFLICT"


class StaleWriteError(ConflictError):
    """版本校验写入失败：文档在读取之后已被其他请求修改

    服务层捕获后重新读取、重新校验并重试。
    """

    default_code = "STALE_WRITE"

    def __init__(self, kind: str, doc_id: str, expected_version: int) -> None:
        super().__init__(
            f"{kind} {doc_id} was modified concurrently "
            f"(expected version {expected_version})",
        )
        self.kind = kind
        self.doc_id = doc_id
        self.expected_version = expected_version


class GoneError(ProjectCampError):
    """资源已失效（如过期的邀请）"""

    status_code = 410
    default_code = "GONE"
