"""ConsoleStore -- 控制台聚合存储

持有 users / projects / requests 三个聚合的当前快照，是唯一的修改入口：
1. 校验与鉴权（在任何修改之前）
2. 调用 aggregate / workflow 的纯函数得到新副本
3. 整体替换内存快照
4. 通知快照存储持久化

持久化失败不影响内存状态，也不向调用方抛出：
记录告警并保存在 last_persistence_error 中供上层展示。
"""

from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import structlog
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from . import aggregate, importer, workflow
from .config import (
    DEFAULT_LOCATION,
    DEFAULT_USERS,
    LOCATIONS_ORDER,
    PROJECTS_KEY,
    REQUESTS_KEY,
    USERS_KEY,
    ConsoleConfig,
)
from .exceptions import AuthorizationError, NotFoundError, PersistenceError, ValidationError
from .models.drafts import (
    CommentDraft,
    ProjectDetailsPatch,
    RequestDraft,
    TaskDraft,
    TaskPatch,
    UserDraft,
    UserPatch,
)
from .models.enums import RequestStatus, RequestType
from .models.project import Project, Task
from .models.request import ServiceRequest
from .models.user import User
from .registry import IdentityRegistry, can_view_request, role_capabilities
from .store.protocols import SnapshotStore

log = structlog.get_logger()

_USERS = TypeAdapter(list[User])
_PROJECTS = TypeAdapter(list[Project])
_REQUESTS = TypeAdapter(list[ServiceRequest])


def _require(actor: User, capability: str, action: str) -> None:
    if not getattr(role_capabilities(actor.role), capability):
        raise AuthorizationError(
            f"role {actor.role} is not allowed to {action}",
            role=actor.role.value,
        )


class ConsoleStore:
    """控制台聚合存储"""

    def __init__(
        self,
        snapshot_store: SnapshotStore,
        config: ConsoleConfig | None = None,
    ) -> None:
        self._snapshots = snapshot_store
        self._config = config or ConsoleConfig()
        self.registry = IdentityRegistry()
        self._projects: list[Project] = []
        self._requests: list[ServiceRequest] = []
        self.last_persistence_error: PersistenceError | None = None

    @classmethod
    async def open(
        cls,
        snapshot_store: SnapshotStore,
        config: ConsoleConfig | None = None,
    ) -> "ConsoleStore":
        """创建并加载快照"""
        store = cls(snapshot_store, config)
        await store.load()
        return store

    # ------------------------------------------------------------------
    # 加载 / 持久化
    # ------------------------------------------------------------------

    async def _load_key(self, key: str, adapter: TypeAdapter) -> list | None:
        """读取并解析单个快照；读取或解析失败返回 None（回退默认值）"""
        try:
            raw = await self._snapshots.load(key)
        except PersistenceError as e:
            log.warning("snapshot_load_failed", key=key, error=str(e.original_error))
            self.last_persistence_error = e
            return None
        if raw is None:
            return None
        try:
            return adapter.validate_python(raw)
        except PydanticValidationError as e:
            log.warning("snapshot_invalid", key=key, error_count=e.error_count())
            return None

    async def load(self) -> None:
        """加载三个快照，缺失或损坏时回退到默认数据集"""
        users = await self._load_key(USERS_KEY, _USERS)
        if users is None:
            users = []
            if self._config.seed_default_users:
                users = _USERS.validate_python(DEFAULT_USERS)
        self.registry = IdentityRegistry(users)

        projects = await self._load_key(PROJECTS_KEY, _PROJECTS)
        if projects is None:
            projects = self._seed_projects()
        drifted = [p.name for p in projects if not aggregate.counters_consistent(p)]
        if drifted:
            log.warning("project_counters_drifted", projects=drifted)
        self._projects = [aggregate.recompute_counters(p) for p in projects]

        requests = await self._load_key(REQUESTS_KEY, _REQUESTS)
        self._requests = requests or []

        log.info(
            "console_loaded",
            user_count=len(self.registry.users),
            project_count=len(self._projects),
            request_count=len(self._requests),
        )

    def _seed_projects(self) -> list[Project]:
        path = self._config.seed_csv_path
        if not path:
            return []
        try:
            text = Path(path).read_text(encoding="utf-8")
        except OSError as e:
            log.warning("seed_csv_unreadable", path=path, error=str(e))
            return []
        return importer.projects_from_csv(text)

    def _dump(self, key: str) -> list[dict[str, Any]]:
        if key == USERS_KEY:
            items: Iterable = self.registry.users
        elif key == PROJECTS_KEY:
            items = self._projects
        else:
            items = self._requests
        return [item.model_dump(mode="json", by_alias=True) for item in items]

    async def persist(self, *keys: str) -> None:
        """保存快照；失败只记录告警，内存状态仍为准"""
        for key in keys:
            try:
                await self._snapshots.save(key, self._dump(key))
            except PersistenceError as e:
                log.warning("snapshot_save_failed", key=key, error=str(e.original_error))
                self.last_persistence_error = e

    async def save_all(self) -> None:
        """写回全部快照（应用关闭时调用）"""
        await self.persist(USERS_KEY, PROJECTS_KEY, REQUESTS_KEY)

    def pop_persistence_error(self) -> PersistenceError | None:
        """取出并清除最近一次持久化错误"""
        error, self.last_persistence_error = self.last_persistence_error, None
        return error

    # ------------------------------------------------------------------
    # 身份
    # ------------------------------------------------------------------

    def login(self, email: str, password: str) -> User:
        return self.registry.authenticate(email, password)

    def get_user(self, user_id: str) -> User:
        return self.registry.get_user(user_id)

    def list_users(self, actor: User) -> list[User]:
        _require(actor, "can_manage_users", "manage users")
        return self.registry.users

    async def create_user(self, draft: UserDraft, actor: User) -> User:
        _require(actor, "can_manage_users", "manage users")
        user = self.registry.create_user(draft)
        log.info("user_created", user_id=user.id, role=user.role.value)
        await self.persist(USERS_KEY)
        return user

    async def update_user(self, user_id: str, patch: UserPatch, actor: User) -> User:
        _require(actor, "can_manage_users", "manage users")
        user = self.registry.update_user(user_id, patch)
        log.info("user_updated", user_id=user.id, role=user.role.value)
        await self.persist(USERS_KEY)
        return user

    async def delete_user(self, user_id: str, actor: User) -> None:
        _require(actor, "can_manage_users", "manage users")
        self.registry.delete_user(user_id)
        log.info("user_deleted", user_id=user_id)
        await self.persist(USERS_KEY)

    # ------------------------------------------------------------------
    # 项目 / 任务
    # ------------------------------------------------------------------

    @property
    def projects(self) -> list[Project]:
        return list(self._projects)

    def get_project(self, name: str) -> Project:
        for project in self._projects:
            if project.name == name:
                return project
        raise NotFoundError("project", name)

    def _replace_project(self, project: Project) -> None:
        self._projects = [project if p.name == project.name else p for p in self._projects]

    def list_projects(
        self,
        location: str | None = None,
        search_text: str | None = None,
    ) -> list[Project]:
        """按城市与名称关键字筛选项目，置顶项目排在前面"""
        needle = (search_text or "").strip().lower()
        matched = [
            p
            for p in self._projects
            if (not location or p.location == location) and needle in p.name.lower()
        ]
        return [p for p in matched if p.is_pinned] + [p for p in matched if not p.is_pinned]

    def grouped_projects(self) -> dict[str, list[Project]]:
        """按城市分组，城市顺序遵循 LOCATIONS_ORDER，其他城市排在后面"""
        grouped: dict[str, list[Project]] = {loc: [] for loc in LOCATIONS_ORDER}
        for project in self.list_projects():
            grouped.setdefault(project.location, []).append(project)
        return {loc: items for loc, items in grouped.items() if items}

    async def create_project(
        self,
        name: str,
        location: str | None,
        actor: User,
        image_url: str | None = None,
    ) -> Project:
        _require(actor, "can_manage_projects", "manage projects")
        name = (name or "").strip()
        if not name:
            raise ValidationError("project name is required", field="name")
        if any(p.name == name for p in self._projects):
            raise ValidationError(f"project {name!r} already exists", field="name")

        project = Project(name=name, location=location or DEFAULT_LOCATION, image_url=image_url)
        self._projects = [project, *self._projects]
        log.info("project_created", project=name, location=project.location)
        await self.persist(PROJECTS_KEY)
        return project

    async def delete_project(self, name: str, actor: User) -> None:
        """删除项目及其全部任务；引用该项目的请求保持不变"""
        _require(actor, "can_delete", "delete projects")
        project = self.get_project(name)
        self._projects = [p for p in self._projects if p.name != name]
        log.info("project_deleted", project=name, task_count=project.total_tasks)
        await self.persist(PROJECTS_KEY)

    async def toggle_pin(self, name: str, actor: User) -> Project:
        _require(actor, "can_view_dashboard", "pin projects")
        project = self.get_project(name)
        updated = project.model_copy(update={"is_pinned": not project.is_pinned})
        self._replace_project(updated)
        await self.persist(PROJECTS_KEY)
        return updated

    async def update_project_details(
        self, name: str, patch: ProjectDetailsPatch, actor: User
    ) -> Project:
        """修改城市、封面、指标、联系人；任务所在城市随项目同步"""
        _require(actor, "can_manage_projects", "manage projects")
        project = self.get_project(name)
        changes = patch.model_dump(exclude_unset=True, exclude_none=True)
        for key in ("metrics", "contacts"):
            if key in changes:
                changes[key] = getattr(patch, key)
        if "location" in changes:
            changes["tasks"] = [
                t.model_copy(update={"location": changes["location"]}) for t in project.tasks
            ]
        updated = project.model_copy(update=changes)
        self._replace_project(updated)
        await self.persist(PROJECTS_KEY)
        return updated

    async def add_task(self, project_name: str, draft: TaskDraft, actor: User) -> Task:
        _require(actor, "can_manage_projects", "manage tasks")
        project, task = aggregate.add_task(self.get_project(project_name), draft, actor)
        self._replace_project(project)
        log.info("task_added", project=project_name, task_id=task.id, progress=project.progress)
        await self.persist(PROJECTS_KEY)
        return task

    async def update_task(
        self, project_name: str, task_id: str, patch: TaskPatch, actor: User
    ) -> Task:
        _require(actor, "can_manage_projects", "manage tasks")
        project, task = aggregate.update_task(self.get_project(project_name), task_id, patch)
        self._replace_project(project)
        log.info("task_updated", project=project_name, task_id=task_id, progress=project.progress)
        await self.persist(PROJECTS_KEY)
        return task

    async def delete_task(self, project_name: str, task_id: str, actor: User) -> None:
        _require(actor, "can_delete", "delete tasks")
        project = aggregate.delete_task(self.get_project(project_name), task_id)
        self._replace_project(project)
        log.info("task_deleted", project=project_name, task_id=task_id, progress=project.progress)
        await self.persist(PROJECTS_KEY)

    async def add_task_comment(
        self, project_name: str, task_id: str, draft: CommentDraft, actor: User
    ) -> Task:
        project, task = aggregate.add_task_comment(
            self.get_project(project_name), task_id, draft, actor
        )
        self._replace_project(project)
        await self.persist(PROJECTS_KEY)
        return task

    # ------------------------------------------------------------------
    # 服务请求
    # ------------------------------------------------------------------

    @property
    def requests(self) -> list[ServiceRequest]:
        return list(self._requests)

    def get_request(self, request_id: str) -> ServiceRequest:
        for request in self._requests:
            if request.id == request_id:
                return request
        raise NotFoundError("request", request_id)

    def view_request(self, request_id: str, actor: User) -> ServiceRequest:
        """按收件箱规则读取单个请求；不可见时与不存在同样处理"""
        request = self.get_request(request_id)
        if not can_view_request(actor, request):
            raise NotFoundError("request", request_id)
        return request

    def list_requests(self, actor: User) -> list[ServiceRequest]:
        """操作者收件箱中可见的请求，最近优先"""
        return [r for r in self._requests if can_view_request(actor, r)]

    async def create_request(self, draft: RequestDraft, submitter: User) -> ServiceRequest:
        request = workflow.create_request(draft, submitter)
        self._requests = [request, *self._requests]
        log.info(
            "request_created",
            request_id=request.id,
            type=request.type.value,
            status=request.status.value,
            project=request.project_name,
        )
        await self.persist(REQUESTS_KEY)
        return request

    async def transition_request(
        self,
        request_id: str,
        target: RequestStatus,
        actor: User,
        note: str | None = None,
    ) -> ServiceRequest:
        """流转请求状态；completed 时同时更新关联项目"""
        current = self.get_request(request_id)
        projects = {p.name: p for p in self._projects}
        try:
            result = workflow.transition_request(current, target, actor, projects, note)
        except AuthorizationError:
            log.info(
                "request_transition_denied",
                request_id=request_id,
                status=current.status.value,
                target=str(target),
                role=actor.role.value,
            )
            raise

        self._requests = [result.request if r.id == request_id else r for r in self._requests]
        keys = [REQUESTS_KEY]
        if result.task is not None and result.project is not None:
            self._replace_project(result.project)
            keys.append(PROJECTS_KEY)
            log.info(
                "request_materialized_as_task",
                request_id=request_id,
                project=result.project.name,
                task_id=result.task.id,
            )
        log.info(
            "request_transitioned",
            request_id=request_id,
            from_status=current.status.value,
            to_status=result.request.status.value,
            role=actor.role.value,
        )
        await self.persist(*keys)
        return result.request

    async def add_request_comment(
        self, request_id: str, draft: CommentDraft, actor: User
    ) -> ServiceRequest:
        updated = workflow.add_request_comment(self.get_request(request_id), draft, actor)
        self._requests = [updated if r.id == request_id else r for r in self._requests]
        await self.persist(REQUESTS_KEY)
        return updated

    async def bulk_import_requests(
        self, rows: Iterable[Mapping[str, Any]], submitter: User
    ) -> list[ServiceRequest]:
        """批量导入 إفراغ 请求

        每行都走 workflow.create_request，初始状态规则与单条创建一致。
        空行、缺字段行、校验失败的行被跳过，不中断导入。
        """
        if not role_capabilities(submitter.role).can_submit(RequestType.CONVEYANCE):
            raise AuthorizationError(
                f"role {submitter.role} cannot submit conveyance requests",
                role=submitter.role.value,
            )

        created: list[ServiceRequest] = []
        skipped = 0
        for row in rows:
            draft = importer.draft_from_row(row)
            if draft is None:
                skipped += 1
                continue
            try:
                created.append(workflow.create_request(draft, submitter))
            except ValidationError as e:
                log.info("import_row_skipped", reason=e.message)
                skipped += 1

        if created:
            self._requests = [*reversed(created), *self._requests]
            await self.persist(REQUESTS_KEY)
        log.info("requests_imported", created=len(created), skipped=skipped)
        return created
