"""HTTP 请求/响应体

领域草稿（TaskDraft、RequestDraft ...）直接作为请求体使用，
这里只定义 HTTP 层特有的结构。
"""

from typing import Any

from darconsole.core.models import RequestStatus, User, UserRole
from darconsole.core.registry import RoleCapabilities, role_capabilities
from pydantic import BaseModel, Field


def dump(model: BaseModel) -> dict[str, Any]:
    """以 camelCase 字段名输出 JSON 兼容 dict"""
    return model.model_dump(mode="json", by_alias=True)


class UserView(BaseModel):
    """对外展示的用户信息（不含口令）"""

    id: str
    name: str
    email: str
    role: UserRole

    @classmethod
    def of(cls, user: User) -> "UserView":
        return cls(id=user.id, name=user.name, email=user.email, role=user.role)


class LoginRequest(BaseModel):
    email: str
    password: str


class LoginResponse(BaseModel):
    user: UserView
    capabilities: RoleCapabilities

    @classmethod
    def of(cls, user: User) -> "LoginResponse":
        return cls(user=UserView.of(user), capabilities=role_capabilities(user.role))


class ProjectCreateRequest(BaseModel):
    name: str = Field(description="项目名称")
    location: str | None = Field(default=None, description="所属城市")
    image_url: str | None = Field(default=None, alias="imageUrl")

    model_config = {"populate_by_name": True}


class TransitionRequest(BaseModel):
    status: RequestStatus = Field(description="目标状态")
    note: str | None = Field(default=None, description="备注（拒绝原因、审批意见）")


class ImportRequest(BaseModel):
    rows: list[dict[str, Any]] = Field(description="已解析的表格行，表头 -> 单元格值")


class ImportResponse(BaseModel):
    created: int
    skipped: int
    requests: list[dict[str, Any]]
