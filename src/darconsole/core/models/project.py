"""Project / Task Domain Model

Project 独占其 Task 列表（组合关系，删除项目即删除其任务）。
totalTasks / completedTasks / progress 是任务列表的派生字段，
只能由 aggregate.recompute_counters 写入。
JSON 字段名沿用 camelCase（totalTasks、isPinned ...），快照往返不丢字段。
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .enums import TaskStatus


class CamelModel(BaseModel):
    """以 camelCase 别名序列化、同时接受 snake_case 字段名的基类

    实例不可变，修改一律通过 model_copy(update=...) 产生新副本。
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class Comment(CamelModel):
    """评论 -- 追加式日志条目"""

    id: str = Field(description="唯一标识，ULID 格式")
    text: str = Field(description="评论内容")
    author: str = Field(description="作者名称")
    author_role: str = Field(description="作者角色")
    timestamp: datetime = Field(description="评论时间")


class Task(CamelModel):
    """项目任务"""

    id: str = Field(description="唯一标识")
    project: str = Field(description="所属项目名称")
    description: str = Field(default="", description="بيان الأعمال")
    reviewer: str = Field(default="", description="جهة المراجعة")
    requester: str = Field(default="", description="الجهة طالبة الخدمة")
    notes: str = Field(default="", description="الوصف والملاحظات")
    location: str = Field(default="", description="所属城市")
    status: TaskStatus = Field(default=TaskStatus.IN_PROGRESS, description="任务状态")
    date: str = Field(default="", description="跟进日期，YYYY-MM-DD")
    comments: list[Comment] = Field(default_factory=list, description="评论列表")


class ProjectMetrics(CamelModel):
    """项目指标"""

    units_count: int = Field(default=0, description="عدد وحدات المشروع")
    building_permits_count: int = Field(default=0, description="عدد رخص البناء")
    survey_decisions_count: int = Field(default=0, description="القرارات المساحية")
    occupancy_certificates_count: int = Field(default=0, description="شهادات الاشغال")
    water_meters_count: int = Field(default=0, description="تركيب عدادات المياه")
    electricity_meters_count: int = Field(default=0, description="تركيب عدادات الكهرباء")


class ContactInfo(CamelModel):
    company_name: str = ""
    contact_number: str = ""
    employee_name: str = ""


class ProjectContacts(CamelModel):
    consultant: ContactInfo = Field(default_factory=ContactInfo)
    electricity_contractor: ContactInfo = Field(default_factory=ContactInfo)
    water_contractor: ContactInfo = Field(default_factory=ContactInfo)


class Project(CamelModel):
    """建设项目 -- 以 name 为唯一键

    任务按最近优先排列（新任务插入表头）。
    """

    name: str = Field(description="项目名称，唯一键")
    location: str = Field(default="", description="所属城市")
    tasks: list[Task] = Field(default_factory=list, description="任务列表")
    total_tasks: int = Field(default=0, description="派生：任务总数")
    completed_tasks: int = Field(default=0, description="派生：已完成任务数")
    progress: int = Field(default=0, description="派生：完成百分比 0-100")
    is_pinned: bool = Field(default=False, description="是否置顶")
    image_url: str | None = Field(default=None, description="封面图片地址")
    metrics: ProjectMetrics | None = Field(default=None, description="项目指标")
    contacts: ProjectContacts | None = Field(default=None, description="联系人")
