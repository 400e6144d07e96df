"""控制台异常体系

所有核心操作在修改任何状态之前完成校验与鉴权；
抛出下列异常时，内存中的聚合保持原样。
"""


class ConsoleError(Exception):
    """控制台基础异常"""

    code: str = "CONSOLE_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class AuthenticationError(ConsoleError):
    """登录凭据不匹配

    对外只暴露统一的提示，不区分"邮箱不存在"与"密码错误"。
    """

    code = "INVALID_CREDENTIALS"

    def __init__(self, message: str = "بيانات الدخول غير صحيحة") -> None:
        super().__init__(message)


class AuthorizationError(ConsoleError):
    """操作者角色不允许执行该操作或状态流转"""

    code = "NOT_AUTHORIZED"

    def __init__(self, message: str, role: str | None = None) -> None:
        """
        Args:
            message: 错误描述
            role: 被拒绝的操作者角色
        """
        super().__init__(message)
        self.role = role


class NotFoundError(ConsoleError):
    """引用的项目/任务/请求/用户不存在"""

    code = "NOT_FOUND"

    def __init__(self, kind: str, key: str) -> None:
        """
        Args:
            kind: 实体类型（project / task / request / user）
            key: 查找使用的标识
        """
        super().__init__(f"{kind} {key!r} does not exist")
        self.kind = kind
        self.key = key


class ValidationError(ConsoleError):
    """必填字段缺失或取值非法，在任何修改之前拒绝"""

    code = "VALIDATION_FAILED"

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class PersistenceError(ConsoleError):
    """存储适配器读写失败

    加载失败时回退到默认数据集；保存失败时内存状态仍为准，
    仅记录告警，不向调用方抛出。
    """

    code = "PERSISTENCE_FAILED"

    def __init__(self, key: str, original_error: Exception) -> None:
        """
        Args:
            key: 读写的快照键（users / projects / requests）
            original_error: 原始异常
        """
        super().__init__(f"snapshot {key!r} I/O failed: {original_error}")
        self.key = key
        self.original_error = original_error
