"""Request Workflow Engine -- 服务请求审批状态机

负责：
1. 创建请求时确定初始状态并写入创建历史
2. 按 (当前状态 x 角色能力) 校验流转，拒绝时不修改任何状态
3. 每次流转追加一条历史记录
4. 流转到 completed 时在关联项目上物化一条已完成任务（恰好一次）

状态图见 models.enums.VALID_TRANSITIONS；哪个角色可以在某个状态上
行动由 REVIEW_STAGES 指向 registry 的能力表决定。
"""

from dataclasses import dataclass
from datetime import UTC, datetime

import structlog
from ulid import ULID

from . import aggregate
from .config import (
    CONVEYANCE_NAME_PREFIX,
    CONVEYANCE_REVIEWER,
    OTHER_SERVICE_TYPE,
    TECHNICAL_REVIEWER_FALLBACK,
)
from .exceptions import AuthorizationError, ValidationError
from .models.drafts import CommentDraft, RequestDraft
from .models.enums import (
    CREATION_ACTION,
    TERMINAL_STATES,
    TRANSITION_ACTIONS,
    VALID_TRANSITIONS,
    RequestStatus,
    RequestType,
    TaskStatus,
)
from .models.project import Project, Task
from .models.request import HistoryEntry, ServiceRequest
from .models.user import User
from .registry import role_capabilities

log = structlog.get_logger()


@dataclass(frozen=True)
class ReviewStage:
    """审核阶段：在该状态上行动所需的能力，以及适用的请求类型"""

    capability: str
    request_types: frozenset[RequestType]


_ALL_TYPES = frozenset(RequestType)

# 非终态 -> 审核阶段
REVIEW_STAGES: dict[RequestStatus, ReviewStage] = {
    # 技术类请求从不经过财务
    RequestStatus.PENDING_FINANCE: ReviewStage(
        "can_review_finance", frozenset({RequestType.CONVEYANCE})
    ),
    RequestStatus.NEW: ReviewStage("can_review_pr", _ALL_TYPES),
    RequestStatus.PENDING_PR: ReviewStage("can_review_pr", _ALL_TYPES),
    RequestStatus.REVISION: ReviewStage("can_review_pr", _ALL_TYPES),
}


@dataclass(frozen=True)
class TransitionResult:
    """流转结果

    project / task 仅在 completed 流转且关联项目存在时非空。
    """

    request: ServiceRequest
    project: Project | None = None
    task: Task | None = None


def resolve_request_type(draft: RequestDraft, submitter: User) -> RequestType:
    """草稿未指定类型时，按提交人能力推断（只能提交 إفراغ 的角色即为 إفراغ）"""
    if draft.type is not None:
        return draft.type
    caps = role_capabilities(submitter.role)
    if caps.can_submit_conveyance and not caps.can_submit_technical:
        return RequestType.CONVEYANCE
    return RequestType.TECHNICAL


def initial_status(request_type: RequestType, submitter: User) -> RequestStatus:
    """初始状态

    非公关、非管理角色提交的 إفراغ 请求进入财务审核，其余进入 new。
    """
    caps = role_capabilities(submitter.role)
    if request_type == RequestType.CONVEYANCE and not caps.bypasses_finance_review:
        return RequestStatus.PENDING_FINANCE
    return RequestStatus.NEW


def display_name(request_type: RequestType, draft: RequestDraft) -> str:
    if request_type == RequestType.CONVEYANCE:
        return f"{CONVEYANCE_NAME_PREFIX}{draft.client_name}"
    if draft.service_sub_type == OTHER_SERVICE_TYPE and draft.other_service_details:
        return draft.other_service_details
    return draft.service_sub_type or ""


def _validate_draft(request_type: RequestType, draft: RequestDraft) -> None:
    if not draft.project_name.strip():
        raise ValidationError("a project must be selected", field="projectName")
    if request_type == RequestType.CONVEYANCE:
        if not (draft.client_name or "").strip():
            raise ValidationError("client name is required", field="clientName")
    elif not (draft.service_sub_type or "").strip():
        raise ValidationError("service sub-type is required", field="serviceSubType")


def _history(action: str, actor: User, notes: str | None = None) -> HistoryEntry:
    return HistoryEntry(
        action=action,
        by=actor.name,
        role=actor.role.value,
        timestamp=datetime.now(UTC),
        notes=notes,
    )


def create_request(draft: RequestDraft, submitter: User) -> ServiceRequest:
    """由草稿创建服务请求

    Raises:
        AuthorizationError: 提交人角色不能提交该类型请求
        ValidationError: 未选择项目，或缺少类型必填字段
    """
    request_type = resolve_request_type(draft, submitter)
    if not role_capabilities(submitter.role).can_submit(request_type):
        raise AuthorizationError(
            f"role {submitter.role} cannot submit {request_type} requests",
            role=submitter.role.value,
        )
    _validate_draft(request_type, draft)

    fields = draft.model_dump(exclude={"type", "project_name"})
    return ServiceRequest(
        **fields,
        id=str(ULID()),
        name=display_name(request_type, draft),
        type=request_type,
        project_name=draft.project_name.strip(),
        submitted_by=submitter.name,
        role=submitter.role,
        status=initial_status(request_type, submitter),
        date=aggregate.today_iso(),
        history=[_history(CREATION_ACTION, submitter)],
    )


def allowed_targets(request: ServiceRequest, actor: User) -> set[RequestStatus]:
    """操作者在请求当前状态上可流转到的目标状态集合（终态或无权时为空）"""
    if request.status in TERMINAL_STATES:
        return set()
    stage = REVIEW_STAGES.get(request.status)
    if stage is None or request.type not in stage.request_types:
        return set()
    if not getattr(role_capabilities(actor.role), stage.capability):
        return set()
    return set(VALID_TRANSITIONS.get(request.status, set()))


def materialize_task(request: ServiceRequest, project: Project) -> Task:
    """把已完成的请求转换为项目上的已完成任务

    任务 id 由请求 id 派生，同一请求不会物化出两条任务。
    """
    if request.type == RequestType.TECHNICAL:
        reviewer = request.authority or TECHNICAL_REVIEWER_FALLBACK
    else:
        reviewer = CONVEYANCE_REVIEWER
    return Task(
        id=f"req-{request.id}",
        project=project.name,
        description=request.name,
        reviewer=reviewer,
        requester=request.submitted_by,
        notes=request.details,
        location=project.location,
        status=TaskStatus.DONE,
        date=aggregate.today_iso(),
    )


def transition_request(
    request: ServiceRequest,
    target: RequestStatus,
    actor: User,
    projects: dict[str, Project],
    note: str | None = None,
) -> TransitionResult:
    """执行状态流转

    Args:
        request: 当前请求
        target: 目标状态
        actor: 操作者
        projects: 项目名 -> Project，用于 completed 时物化任务
        note: 可选备注（拒绝原因、审批意见）

    Raises:
        AuthorizationError: 终态请求，或操作者角色无权在当前状态上行动
        ValidationError: 有权行动但目标状态不在状态图中
    """
    allowed = allowed_targets(request, actor)
    if not allowed:
        if request.status in TERMINAL_STATES:
            message = f"request {request.id} is already in terminal state {request.status}"
        else:
            message = f"role {actor.role} cannot act on {request.status} {request.type} requests"
        raise AuthorizationError(message, role=actor.role.value)
    if target not in allowed:
        raise ValidationError(
            f"cannot transition from {request.status} to {target}", field="status"
        )

    updated = request.model_copy(
        update={
            "status": target,
            "history": [
                *request.history,
                _history(TRANSITION_ACTIONS.get(target, str(target)), actor, note),
            ],
        }
    )

    if target != RequestStatus.COMPLETED:
        return TransitionResult(request=updated)

    project = projects.get(request.project_name)
    if project is None:
        log.info(
            "completion_task_skipped",
            request_id=request.id,
            project_name=request.project_name,
        )
        return TransitionResult(request=updated)

    task = materialize_task(request, project)
    if any(t.id == task.id for t in project.tasks):
        return TransitionResult(request=updated, project=project)
    return TransitionResult(
        request=updated,
        project=aggregate.insert_task(project, task),
        task=task,
    )


def add_request_comment(
    request: ServiceRequest, draft: CommentDraft, actor: User
) -> ServiceRequest:
    """追加评论；任何状态都允许，不触发流转，也不写历史"""
    comment = aggregate.build_comment(draft, actor)
    return request.model_copy(update={"comments": [*request.comments, comment]})
