"""服务请求路由

GET  /api/requests                       当前操作者收件箱中的请求
POST /api/requests                       提交请求
POST /api/requests/import                批量导入 إفراغ 请求
GET  /api/requests/{request_id}          请求详情（含历史与评论，受收件箱规则约束）
POST /api/requests/{request_id}/transition  状态流转
POST /api/requests/{request_id}/comments    请求评论
"""

from darconsole.core.console import ConsoleStore
from darconsole.core.models import CommentDraft, RequestDraft, User
from fastapi import APIRouter, Depends
from starlette.responses import JSONResponse

from ..deps import get_actor, get_console
from ..schemas import ImportRequest, ImportResponse, TransitionRequest, dump

router = APIRouter()


@router.get("/api/requests")
async def list_requests(
    console: ConsoleStore = Depends(get_console),
    actor: User = Depends(get_actor),
):
    return {"requests": [dump(r) for r in console.list_requests(actor)]}


@router.post("/api/requests")
async def create_request(
    body: RequestDraft,
    console: ConsoleStore = Depends(get_console),
    actor: User = Depends(get_actor),
):
    request = await console.create_request(body, actor)
    return JSONResponse(status_code=201, content=dump(request))


@router.post("/api/requests/import", response_model=ImportResponse)
async def import_requests(
    body: ImportRequest,
    console: ConsoleStore = Depends(get_console),
    actor: User = Depends(get_actor),
):
    """批量导入；无效行被跳过，不影响其余行"""
    created = await console.bulk_import_requests(body.rows, actor)
    return ImportResponse(
        created=len(created),
        skipped=len(body.rows) - len(created),
        requests=[dump(r) for r in created],
    )


@router.get("/api/requests/{request_id}")
async def get_request(
    request_id: str,
    console: ConsoleStore = Depends(get_console),
    actor: User = Depends(get_actor),
):
    return dump(console.view_request(request_id, actor))


@router.post("/api/requests/{request_id}/transition")
async def transition_request(
    request_id: str,
    body: TransitionRequest,
    console: ConsoleStore = Depends(get_console),
    actor: User = Depends(get_actor),
):
    """状态流转

    - 200: 流转成功，返回更新后的请求
    - 403: 角色无权在当前状态上行动，或请求已在终态
    - 404: 请求不存在
    - 422: 目标状态不在状态图中
    """
    request = await console.transition_request(request_id, body.status, actor, body.note)
    return dump(request)


@router.post("/api/requests/{request_id}/comments")
async def add_request_comment(
    request_id: str,
    body: CommentDraft,
    console: ConsoleStore = Depends(get_console),
    actor: User = Depends(get_actor),
):
    request = await console.add_request_comment(request_id, body, actor)
    return JSONResponse(status_code=201, content=dump(request))
