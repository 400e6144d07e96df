"""输入草稿模型

调用方提交的结构化输入：创建/修改任务、评论、服务请求、用户、项目详情。
草稿只描述调用方意图，身份、时间戳与派生字段由核心补全。
"""

from pydantic import Field

from .enums import RequestType, TaskStatus, UserRole
from .project import CamelModel, ProjectContacts, ProjectMetrics


class TaskDraft(CamelModel):
    """新建任务草稿，未设置的字段由 aggregate.add_task 补默认值"""

    description: str = ""
    reviewer: str = ""
    requester: str | None = None
    notes: str = ""
    status: TaskStatus | None = None
    date: str | None = None


class TaskPatch(CamelModel):
    """任务修改补丁，仅合并显式设置的字段（补丁优先）"""

    description: str | None = None
    reviewer: str | None = None
    requester: str | None = None
    notes: str | None = None
    status: TaskStatus | None = None
    date: str | None = None


class CommentDraft(CamelModel):
    text: str = Field(min_length=1, description="评论内容")


class ProjectDetailsPatch(CamelModel):
    """项目详情补丁（图片/指标/联系人），不触及任务列表与派生计数"""

    location: str | None = None
    image_url: str | None = None
    metrics: ProjectMetrics | None = None
    contacts: ProjectContacts | None = None


class RequestDraft(CamelModel):
    """服务请求草稿

    type 缺省时按提交人角色推断：CONVEYANCE 提交 إفراغ，其余为技术类。
    """

    type: RequestType | None = None
    project_name: str = ""
    details: str = ""

    client_name: str | None = None
    id_number: str | None = None
    plot_number: str | None = None
    deed_number: str | None = None
    mobile_number: str | None = None
    bank: str | None = None
    property_value: str | None = None

    service_sub_type: str | None = None
    other_service_details: str | None = None
    authority: str | None = None


class UserDraft(CamelModel):
    name: str
    email: str
    role: UserRole = UserRole.PR_OFFICER
    password: str = "123"


class UserPatch(CamelModel):
    name: str | None = None
    email: str | None = None
    role: UserRole | None = None
    password: str | None = None
