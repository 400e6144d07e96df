"""Dar Console Core Domain Models -- 公共类型导出

所有公共模型类型从此入口导入。
"""

from .drafts import (
    CommentDraft,
    ProjectDetailsPatch,
    RequestDraft,
    TaskDraft,
    TaskPatch,
    UserDraft,
    UserPatch,
)
from .enums import (
    CREATION_ACTION,
    TERMINAL_STATES,
    TRANSITION_ACTIONS,
    VALID_TRANSITIONS,
    RequestStatus,
    RequestType,
    TaskStatus,
    UserRole,
    validate_transition,
)
from .project import (
    Comment,
    ContactInfo,
    Project,
    ProjectContacts,
    ProjectMetrics,
    Task,
)
from .request import HistoryEntry, ServiceRequest
from .user import User

__all__ = [
    # 枚举
    "UserRole",
    "RequestType",
    "RequestStatus",
    "TaskStatus",
    # 状态机
    "VALID_TRANSITIONS",
    "TERMINAL_STATES",
    "CREATION_ACTION",
    "TRANSITION_ACTIONS",
    "validate_transition",
    # User
    "User",
    # Project / Task
    "Project",
    "ProjectMetrics",
    "ProjectContacts",
    "ContactInfo",
    "Task",
    "Comment",
    # ServiceRequest
    "ServiceRequest",
    "HistoryEntry",
    # Drafts
    "TaskDraft",
    "TaskPatch",
    "CommentDraft",
    "ProjectDetailsPatch",
    "RequestDraft",
    "UserDraft",
    "UserPatch",
]
