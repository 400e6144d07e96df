"""用户管理路由（仅 ADMIN）

GET    /api/users
POST   /api/users
PATCH  /api/users/{user_id}
DELETE /api/users/{user_id}
"""

from darconsole.core.console import ConsoleStore
from darconsole.core.models import User, UserDraft, UserPatch
from fastapi import APIRouter, Depends
from starlette.responses import JSONResponse, Response

from ..deps import get_actor, get_console
from ..schemas import UserView

router = APIRouter()


@router.get("/api/users", response_model=list[UserView])
async def list_users(
    console: ConsoleStore = Depends(get_console),
    actor: User = Depends(get_actor),
):
    return [UserView.of(u) for u in console.list_users(actor)]


@router.post("/api/users")
async def create_user(
    body: UserDraft,
    console: ConsoleStore = Depends(get_console),
    actor: User = Depends(get_actor),
):
    user = await console.create_user(body, actor)
    return JSONResponse(status_code=201, content=UserView.of(user).model_dump(mode="json"))


@router.patch("/api/users/{user_id}", response_model=UserView)
async def update_user(
    user_id: str,
    body: UserPatch,
    console: ConsoleStore = Depends(get_console),
    actor: User = Depends(get_actor),
):
    return UserView.of(await console.update_user(user_id, body, actor))


@router.delete("/api/users/{user_id}", status_code=204)
async def delete_user(
    user_id: str,
    console: ConsoleStore = Depends(get_console),
    actor: User = Depends(get_actor),
):
    await console.delete_user(user_id, actor)
    return Response(status_code=204)
