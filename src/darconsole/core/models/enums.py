"""枚举定义

包含 UserRole、RequestType、RequestStatus 请求状态机、TaskStatus 任务状态，
以及 VALID_TRANSITIONS 合法流转映射和 TERMINAL_STATES 终态集合。
谁可以触发某条流转由 registry 的角色能力表决定，这里只描述状态图本身。
"""

from enum import StrEnum


class UserRole(StrEnum):
    """用户角色 -- 唯一的授权维度"""

    ADMIN = "ADMIN"
    PR_MANAGER = "PR_MANAGER"
    PR_OFFICER = "PR_OFFICER"
    FINANCE = "FINANCE"
    TECHNICAL = "TECHNICAL"
    CONVEYANCE = "CONVEYANCE"


class RequestType(StrEnum):
    """服务请求类型"""

    TECHNICAL = "technical"
    CONVEYANCE = "conveyance"


class RequestStatus(StrEnum):
    """服务请求状态机"""

    NEW = "new"
    PENDING_FINANCE = "pending_finance"
    PENDING_PR = "pending_pr"
    REVISION = "revision"

    # 终态
    COMPLETED = "completed"
    REJECTED = "rejected"


class TaskStatus(StrEnum):
    """项目任务状态（取值沿用业务数据中的阿拉伯语标签）"""

    IN_PROGRESS = "متابعة"
    DONE = "منجز"


# 合法状态流转
VALID_TRANSITIONS: dict[RequestStatus, set[RequestStatus]] = {
    # 财务审核：批准后进入公关审核，或直接拒绝
    RequestStatus.PENDING_FINANCE: {RequestStatus.NEW, RequestStatus.REJECTED},
    # 公关审核
    RequestStatus.NEW: {
        RequestStatus.COMPLETED,
        RequestStatus.REJECTED,
        RequestStatus.REVISION,
    },
    RequestStatus.PENDING_PR: {
        RequestStatus.COMPLETED,
        RequestStatus.REJECTED,
        RequestStatus.REVISION,
    },
    # revision 不是终态，可再次进入审核
    RequestStatus.REVISION: {
        RequestStatus.COMPLETED,
        RequestStatus.REJECTED,
        RequestStatus.REVISION,
    },
    # 终态不可再流转
    RequestStatus.COMPLETED: set(),
    RequestStatus.REJECTED: set(),
}

TERMINAL_STATES: set[RequestStatus] = {
    RequestStatus.COMPLETED,
    RequestStatus.REJECTED,
}

# 历史记录中的动作标签
CREATION_ACTION = "إنشاء الطلب"

TRANSITION_ACTIONS: dict[RequestStatus, str] = {
    RequestStatus.NEW: "موافقة مالية",
    RequestStatus.PENDING_PR: "تحويل للعلاقات العامة",
    RequestStatus.REVISION: "إعادة للتعديل",
    RequestStatus.COMPLETED: "اعتماد كمنجز",
    RequestStatus.REJECTED: "رفض الطلب",
}


def validate_transition(from_status: RequestStatus, to_status: RequestStatus) -> bool:
    """验证状态流转在状态图中是否合法（不考虑角色）

    Args:
        from_status: 当前状态
        to_status: 目标状态

    Returns:
        True 如果流转合法，否则 False
    """
    allowed = VALID_TRANSITIONS.get(from_status, set())
    return to_status in allowed
