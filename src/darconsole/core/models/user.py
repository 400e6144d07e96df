"""User Domain Model

email 是登录查找键；角色在创建时确定，修改角色属于管理员覆盖写，
不是生命周期事件。
"""

from pydantic import BaseModel, ConfigDict, Field

from .enums import UserRole


class User(BaseModel):
    """控制台用户"""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="唯一标识")
    name: str = Field(description="显示名称")
    email: str = Field(description="登录邮箱")
    role: UserRole = Field(description="角色")
    password: str = Field(default="", description="明文口令（仅示意，非真实认证）")
