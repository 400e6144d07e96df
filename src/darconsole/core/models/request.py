"""ServiceRequest Domain Model

history 是 append-only 审计日志：只追加，不修改、不重排，
第一条永远是创建事件。请求从不物理删除，只会流转到终态
（completed / rejected）或 revision。
project_name 是对 Project 的弱引用，项目被删除后允许悬空。
"""

from datetime import datetime

from pydantic import Field

from .enums import RequestStatus, RequestType, UserRole
from .project import CamelModel, Comment


class HistoryEntry(CamelModel):
    """请求历史条目"""

    action: str = Field(description="动作标签（创建、批准、拒绝 ...）")
    by: str = Field(description="操作者名称")
    role: str = Field(description="操作者角色")
    timestamp: datetime = Field(description="操作时间")
    notes: str | None = Field(default=None, description="备注（拒绝原因、审批意见）")


class ServiceRequest(CamelModel):
    """服务请求 -- 技术类（政府/公共事业联络）或 إفراغ 产权过户类"""

    id: str = Field(description="唯一标识，ULID 格式")
    name: str = Field(description="派生的显示名称")
    type: RequestType = Field(description="请求类型")
    project_name: str = Field(description="关联项目名称（弱引用）")
    details: str = Field(default="", description="请求详情")
    submitted_by: str = Field(description="提交人名称")
    role: UserRole = Field(description="提交时的提交人角色")
    status: RequestStatus = Field(description="当前状态")
    date: str = Field(description="提交日期，YYYY-MM-DD")
    history: list[HistoryEntry] = Field(default_factory=list, description="审计日志")
    comments: list[Comment] = Field(default_factory=list, description="评论列表")

    # إفراغ 专有字段
    client_name: str | None = None
    id_number: str | None = None
    plot_number: str | None = None
    deed_number: str | None = None
    mobile_number: str | None = None
    bank: str | None = None
    property_value: str | None = None

    # 技术类专有字段
    service_sub_type: str | None = None
    other_service_details: str | None = None
    authority: str | None = None
