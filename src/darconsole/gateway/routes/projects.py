"""项目与任务路由

GET    /api/projects                               项目列表（location / q 筛选，置顶优先；
                                                   grouped=true 时按城市分组）
POST   /api/projects                               新建项目
GET    /api/projects/{name}                        项目详情
PATCH  /api/projects/{name}                        修改城市/封面/指标/联系人
DELETE /api/projects/{name}                        删除项目（级联删除任务）
POST   /api/projects/{name}/pin                    切换置顶
POST   /api/projects/{name}/tasks                  新增任务
PATCH  /api/projects/{name}/tasks/{task_id}        修改任务
DELETE /api/projects/{name}/tasks/{task_id}        删除任务
POST   /api/projects/{name}/tasks/{task_id}/comments  任务评论
"""

from darconsole.core.console import ConsoleStore
from darconsole.core.models import (
    CommentDraft,
    ProjectDetailsPatch,
    TaskDraft,
    TaskPatch,
    TaskStatus,
    User,
)
from fastapi import APIRouter, Depends, Query
from starlette.responses import JSONResponse, Response

from ..deps import get_actor, get_console
from ..schemas import ProjectCreateRequest, dump

router = APIRouter()


@router.get("/api/projects")
async def list_projects(
    location: str | None = Query(default=None, description="按城市筛选"),
    q: str | None = Query(default=None, description="项目名称关键字"),
    grouped: bool = Query(default=False, description="按城市分组返回"),
    console: ConsoleStore = Depends(get_console),
    actor: User = Depends(get_actor),
):
    if grouped:
        groups = console.grouped_projects()
        return {"groups": {loc: [dump(p) for p in items] for loc, items in groups.items()}}
    projects = console.list_projects(location=location, search_text=q)
    return {"projects": [dump(p) for p in projects]}


@router.post("/api/projects")
async def create_project(
    body: ProjectCreateRequest,
    console: ConsoleStore = Depends(get_console),
    actor: User = Depends(get_actor),
):
    project = await console.create_project(body.name, body.location, actor, body.image_url)
    return JSONResponse(status_code=201, content=dump(project))


@router.get("/api/projects/{name}")
async def get_project(
    name: str,
    status: TaskStatus | None = Query(default=None, description="按任务状态筛选"),
    console: ConsoleStore = Depends(get_console),
    actor: User = Depends(get_actor),
):
    """项目详情；status 仅筛选返回的任务，派生计数始终基于完整列表"""
    data = dump(console.get_project(name))
    if status is not None:
        data["tasks"] = [t for t in data["tasks"] if t["status"] == status.value]
    return data


@router.patch("/api/projects/{name}")
async def update_project(
    name: str,
    body: ProjectDetailsPatch,
    console: ConsoleStore = Depends(get_console),
    actor: User = Depends(get_actor),
):
    return dump(await console.update_project_details(name, body, actor))


@router.delete("/api/projects/{name}", status_code=204)
async def delete_project(
    name: str,
    console: ConsoleStore = Depends(get_console),
    actor: User = Depends(get_actor),
):
    await console.delete_project(name, actor)
    return Response(status_code=204)


@router.post("/api/projects/{name}/pin")
async def toggle_pin(
    name: str,
    console: ConsoleStore = Depends(get_console),
    actor: User = Depends(get_actor),
):
    return dump(await console.toggle_pin(name, actor))


@router.post("/api/projects/{name}/tasks")
async def add_task(
    name: str,
    body: TaskDraft,
    console: ConsoleStore = Depends(get_console),
    actor: User = Depends(get_actor),
):
    task = await console.add_task(name, body, actor)
    return JSONResponse(
        status_code=201,
        content={"task": dump(task), "project": dump(console.get_project(name))},
    )


@router.patch("/api/projects/{name}/tasks/{task_id}")
async def update_task(
    name: str,
    task_id: str,
    body: TaskPatch,
    console: ConsoleStore = Depends(get_console),
    actor: User = Depends(get_actor),
):
    task = await console.update_task(name, task_id, body, actor)
    return {"task": dump(task), "project": dump(console.get_project(name))}


@router.delete("/api/projects/{name}/tasks/{task_id}")
async def delete_task(
    name: str,
    task_id: str,
    console: ConsoleStore = Depends(get_console),
    actor: User = Depends(get_actor),
):
    await console.delete_task(name, task_id, actor)
    return {"project": dump(console.get_project(name))}


@router.post("/api/projects/{name}/tasks/{task_id}/comments")
async def add_task_comment(
    name: str,
    task_id: str,
    body: CommentDraft,
    console: ConsoleStore = Depends(get_console),
    actor: User = Depends(get_actor),
):
    task = await console.add_task_comment(name, task_id, body, actor)
    return JSONResponse(status_code=201, content=dump(task))
