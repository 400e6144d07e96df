"""Project/Task 聚合维护

任务列表的每一次插入、修改、删除之后重新计算项目的派生计数。
所有函数都是纯函数：返回新的 Project / Task 副本，不就地修改入参，
调用方在操作成功后整体替换，保证失败时不留下部分修改。

派生计数只在 recompute_counters 中写入，且始终是任务列表的纯函数，
从不增量加减。
"""

from datetime import UTC, datetime

from ulid import ULID

from .exceptions import NotFoundError
from .models.drafts import CommentDraft, TaskDraft, TaskPatch
from .models.enums import TaskStatus
from .models.project import Comment, Project, Task
from .models.user import User


def today_iso() -> str:
    """当前日期（UTC），YYYY-MM-DD"""
    return datetime.now(UTC).date().isoformat()


def compute_progress(completed: int, total: int) -> int:
    """完成百分比，四舍五入（0.5 进位）；无任务时为 0"""
    if total <= 0:
        return 0
    return (completed * 200 + total) // (2 * total)


def recompute_counters(project: Project) -> Project:
    """根据任务列表重算 totalTasks / completedTasks / progress"""
    total = len(project.tasks)
    completed = sum(1 for t in project.tasks if t.status == TaskStatus.DONE)
    return project.model_copy(
        update={
            "total_tasks": total,
            "completed_tasks": completed,
            "progress": compute_progress(completed, total),
        }
    )


def counters_consistent(project: Project) -> bool:
    """派生计数是否与任务列表一致"""
    expected = recompute_counters(project)
    return (
        project.total_tasks == expected.total_tasks
        and project.completed_tasks == expected.completed_tasks
        and project.progress == expected.progress
    )


def find_task(project: Project, task_id: str) -> Task:
    for task in project.tasks:
        if task.id == task_id:
            return task
    raise NotFoundError("task", task_id)


def insert_task(project: Project, task: Task) -> Project:
    """将任务插入表头（最近优先）并重算计数"""
    return recompute_counters(project.model_copy(update={"tasks": [task, *project.tasks]}))


def add_task(project: Project, draft: TaskDraft, actor: User) -> tuple[Project, Task]:
    """新增任务

    未设置的字段取默认值：status=متابعة，date=今天，requester=操作者名称。

    Returns:
        (更新后的 Project, 新建的 Task)
    """
    task = Task(
        id=str(ULID()),
        project=project.name,
        description=draft.description,
        reviewer=draft.reviewer,
        requester=draft.requester or actor.name,
        notes=draft.notes,
        location=project.location,
        status=draft.status or TaskStatus.IN_PROGRESS,
        date=draft.date or today_iso(),
    )
    return insert_task(project, task), task


def update_task(project: Project, task_id: str, patch: TaskPatch) -> tuple[Project, Task]:
    """合并补丁字段到已有任务（补丁优先）并重算计数

    Raises:
        NotFoundError: task_id 不属于该项目
    """
    current = find_task(project, task_id)
    changes = patch.model_dump(exclude_unset=True, exclude_none=True)
    updated = current.model_copy(update=changes)
    tasks = [updated if t.id == task_id else t for t in project.tasks]
    return recompute_counters(project.model_copy(update={"tasks": tasks})), updated


def delete_task(project: Project, task_id: str) -> Project:
    """删除任务并重算计数

    Raises:
        NotFoundError: task_id 不属于该项目
    """
    find_task(project, task_id)
    tasks = [t for t in project.tasks if t.id != task_id]
    return recompute_counters(project.model_copy(update={"tasks": tasks}))


def build_comment(draft: CommentDraft, author: User) -> Comment:
    return Comment(
        id=str(ULID()),
        text=draft.text,
        author=author.name,
        author_role=author.role.value,
        timestamp=datetime.now(UTC),
    )


def add_comment(task: Task, draft: CommentDraft, author: User) -> Task:
    """向任务追加评论（评论不影响进度，不重算计数）"""
    return task.model_copy(update={"comments": [*task.comments, build_comment(draft, author)]})


def add_task_comment(
    project: Project, task_id: str, draft: CommentDraft, author: User
) -> tuple[Project, Task]:
    """在项目内定位任务并追加评论

    Raises:
        NotFoundError: task_id 不属于该项目
    """
    updated = add_comment(find_task(project, task_id), draft, author)
    tasks = [updated if t.id == task_id else t for t in project.tasks]
    return project.model_copy(update={"tasks": tasks}), updated
