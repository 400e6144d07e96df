"""Domain Model 单元测试

测试内容：
1. 默认值
2. camelCase 别名序列化 / snake_case 字段名构造
3. 实例不可变
4. 快照 JSON 解析
"""

import pydantic
import pytest
from darconsole.core.models import (
    Project,
    ProjectMetrics,
    RequestDraft,
    Task,
    TaskStatus,
    User,
    UserRole,
)


class TestTaskModel:
    def test_defaults(self):
        task = Task(id="t-1", project="سرايا")
        assert task.status == TaskStatus.IN_PROGRESS
        assert task.comments == []
        assert task.description == ""

    def test_status_values_are_arabic_labels(self):
        assert TaskStatus.DONE.value == "منجز"
        assert TaskStatus.IN_PROGRESS.value == "متابعة"

    def test_frozen(self):
        task = Task(id="t-1", project="سرايا")
        with pytest.raises(pydantic.ValidationError):
            task.status = TaskStatus.DONE


class TestProjectModel:
    def test_dump_uses_camel_case(self):
        project = Project(name="سرايا", location="جدة", is_pinned=True)
        data = project.model_dump(mode="json", by_alias=True)
        assert data["isPinned"] is True
        assert data["totalTasks"] == 0
        assert data["completedTasks"] == 0
        assert data["imageUrl"] is None
        assert "is_pinned" not in data

    def test_parse_snapshot_json(self):
        """从 camelCase 快照解析项目"""
        raw = {
            "name": "سرايا",
            "location": "الرياض",
            "tasks": [
                {"id": "t-0", "project": "سرايا", "status": "منجز", "date": "2024-05-01"},
            ],
            "totalTasks": 1,
            "completedTasks": 1,
            "progress": 100,
            "isPinned": False,
            "metrics": {"unitsCount": 120, "waterMetersCount": 4},
        }
        project = Project.model_validate(raw)
        assert project.tasks[0].status == TaskStatus.DONE
        assert project.metrics == ProjectMetrics(units_count=120, water_meters_count=4)

    def test_model_copy_leaves_original_untouched(self):
        project = Project(name="سرايا")
        pinned = project.model_copy(update={"is_pinned": True})
        assert pinned.is_pinned is True
        assert project.is_pinned is False


class TestDrafts:
    def test_request_draft_accepts_aliases(self):
        draft = RequestDraft.model_validate(
            {"projectName": "سرايا", "clientName": "محمد", "propertyValue": "950000"}
        )
        assert draft.project_name == "سرايا"
        assert draft.client_name == "محمد"
        assert draft.type is None


class TestUserModel:
    def test_role_parsed_from_string(self):
        user = User(id="1", name="a", email="a@dar.sa", role="FINANCE")
        assert user.role == UserRole.FINANCE

    def test_unknown_role_rejected(self):
        with pytest.raises(pydantic.ValidationError):
            User(id="1", name="a", email="a@dar.sa", role="JANITOR")
