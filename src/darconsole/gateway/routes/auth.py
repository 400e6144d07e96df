"""登录与角色能力路由

POST /api/login: 校验邮箱与口令，返回用户与能力集合。
GET /api/roles/{role}/capabilities: 查询角色能力表。
GET /api/lookups: 请求表单的可选项（城市、技术服务类型、政府机构）。
"""

from darconsole.core.config import GOVERNMENT_AUTHORITIES, LOCATIONS_ORDER, TECHNICAL_SERVICE_TYPES
from darconsole.core.console import ConsoleStore
from darconsole.core.models import UserRole
from darconsole.core.registry import RoleCapabilities, role_capabilities
from fastapi import APIRouter, Depends

from ..deps import get_console
from ..schemas import LoginRequest, LoginResponse

router = APIRouter()


@router.post("/api/login", response_model=LoginResponse)
async def login(body: LoginRequest, console: ConsoleStore = Depends(get_console)):
    """登录；凭据错误统一返回 401 INVALID_CREDENTIALS"""
    user = console.login(body.email, body.password)
    return LoginResponse.of(user)


@router.get("/api/roles/{role}/capabilities", response_model=RoleCapabilities)
async def capabilities(role: UserRole):
    return role_capabilities(role)


@router.get("/api/lookups")
async def lookups():
    return {
        "locations": LOCATIONS_ORDER,
        "technicalServiceTypes": TECHNICAL_SERVICE_TYPES,
        "governmentAuthorities": GOVERNMENT_AUTHORITIES,
    }
