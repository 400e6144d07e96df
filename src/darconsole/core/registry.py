"""Identity/Role Registry

用户凭据校验 + 六角色能力表。
ROLE_CAPABILITIES 是唯一的授权规则来源：工作流引擎、ConsoleStore
以及 gateway 的路由都通过 role_capabilities() 查询，不做内联角色判断。
"""

import structlog
from pydantic import BaseModel
from ulid import ULID

from .exceptions import AuthenticationError, NotFoundError, ValidationError
from .models.drafts import UserDraft, UserPatch
from .models.enums import RequestStatus, RequestType, UserRole
from .models.request import ServiceRequest
from .models.user import User

log = structlog.get_logger()


class RoleCapabilities(BaseModel):
    """单个角色的能力集合"""

    can_view_dashboard: bool = False
    can_manage_projects: bool = False
    can_delete: bool = False
    can_submit_technical: bool = False
    can_submit_conveyance: bool = False
    can_review_finance: bool = False
    can_review_pr: bool = False
    can_manage_users: bool = False
    can_view_all_requests: bool = False
    bypasses_finance_review: bool = False

    def can_submit(self, request_type: RequestType) -> bool:
        if request_type == RequestType.CONVEYANCE:
            return self.can_submit_conveyance
        return self.can_submit_technical


_PR_CAPABLE = dict(
    can_view_dashboard=True,
    can_manage_projects=True,
    can_submit_technical=True,
    can_submit_conveyance=True,
    can_review_pr=True,
    bypasses_finance_review=True,
)

# 管理级：可删除、可查看全部请求
_MANAGER = dict(
    _PR_CAPABLE,
    can_delete=True,
    can_view_all_requests=True,
)

ROLE_CAPABILITIES: dict[UserRole, RoleCapabilities] = {
    UserRole.ADMIN: RoleCapabilities(**_MANAGER, can_manage_users=True),
    UserRole.PR_MANAGER: RoleCapabilities(**_MANAGER),
    # 可新增、修改，不可删除，不可管理用户
    UserRole.PR_OFFICER: RoleCapabilities(**_PR_CAPABLE),
    UserRole.FINANCE: RoleCapabilities(can_review_finance=True),
    UserRole.TECHNICAL: RoleCapabilities(can_submit_technical=True),
    UserRole.CONVEYANCE: RoleCapabilities(can_submit_conveyance=True),
}


def role_capabilities(role: UserRole | str) -> RoleCapabilities:
    """查询角色能力表，未知角色返回全 False 的能力集合"""
    try:
        return ROLE_CAPABILITIES[UserRole(role)]
    except ValueError:
        return RoleCapabilities()


def can_view_request(user: User, request: ServiceRequest) -> bool:
    """请求收件箱可见性

    - 财务：待财务审核的 إفراغ 请求
    - ADMIN / PR_MANAGER：全部
    - PR_OFFICER：待公关处理（new / pending_pr / revision）
    - 技术部 / 过户专员：自己提交的请求
    """
    caps = role_capabilities(user.role)
    if caps.can_review_finance:
        return (
            request.status == RequestStatus.PENDING_FINANCE
            and request.type == RequestType.CONVEYANCE
        )
    if caps.can_view_all_requests:
        return True
    if caps.can_review_pr:
        return request.status in (
            RequestStatus.NEW,
            RequestStatus.PENDING_PR,
            RequestStatus.REVISION,
        )
    return request.submitted_by == user.name


class IdentityRegistry:
    """已知用户集合 + 凭据校验"""

    def __init__(self, users: list[User] | None = None) -> None:
        self._users: list[User] = list(users or [])

    @property
    def users(self) -> list[User]:
        return list(self._users)

    def authenticate(self, email: str, password: str) -> User:
        """校验 (email, password)

        明文直接比较，仅作示意；生产环境必须改为加盐哈希比较。

        Raises:
            AuthenticationError: 邮箱不存在或密码错误（不区分两者）
        """
        user = self.find_by_email(email)
        if user is None or user.password != password:
            log.info("login_failed")
            raise AuthenticationError()
        log.info("login_succeeded", user_id=user.id, role=user.role.value)
        return user

    def find_by_email(self, email: str) -> User | None:
        key = email.strip().lower()
        for user in self._users:
            if user.email.lower() == key:
                return user
        return None

    def get_user(self, user_id: str) -> User:
        for user in self._users:
            if user.id == user_id:
                return user
        raise NotFoundError("user", user_id)

    def create_user(self, draft: UserDraft) -> User:
        """新增用户

        Raises:
            ValidationError: 名称/邮箱为空或邮箱已被占用
        """
        name = draft.name.strip()
        email = draft.email.strip()
        if not name:
            raise ValidationError("user name is required", field="name")
        if not email:
            raise ValidationError("user email is required", field="email")
        if self.find_by_email(email) is not None:
            raise ValidationError(f"email {email!r} is already registered", field="email")

        user = User(
            id=str(ULID()),
            name=name,
            email=email,
            role=draft.role,
            password=draft.password,
        )
        self._users.append(user)
        return user

    def update_user(self, user_id: str, patch: UserPatch) -> User:
        """管理员覆盖写用户字段（包括角色）"""
        current = self.get_user(user_id)
        changes = patch.model_dump(exclude_unset=True, exclude_none=True)
        if "email" in changes:
            owner = self.find_by_email(changes["email"])
            if owner is not None and owner.id != user_id:
                raise ValidationError(
                    f"email {changes['email']!r} is already registered", field="email"
                )
        updated = current.model_copy(update=changes)
        self._users = [updated if u.id == user_id else u for u in self._users]
        return updated

    def delete_user(self, user_id: str) -> None:
        self.get_user(user_id)
        self._users = [u for u in self._users if u.id != user_id]
