"""表格行导入

1. 批量导入：电子表格的一行 -> 一份 إفراغ 请求草稿（表头支持阿拉伯语和英语）
2. 初始数据：任务清单 CSV -> 按项目分组的 Project 列表

文件格式本身（xlsx / csv 编码）由调用方负责，这里只处理已解析的行。
"""

import csv
import io
from collections.abc import Mapping
from typing import Any

import structlog

from . import aggregate
from .config import DEFAULT_LOCATION
from .models.drafts import RequestDraft
from .models.enums import RequestType, TaskStatus
from .models.project import Project, Task

log = structlog.get_logger()

# 表头 -> RequestDraft 字段
REQUEST_COLUMNS: dict[str, str] = {
    "اسم العميل": "client_name",
    "رقم الهوية": "id_number",
    "رقم القطعة": "plot_number",
    "المشروع": "project_name",
    "اسم المشروع": "project_name",
    "رقم الصك": "deed_number",
    "رقم الجوال": "mobile_number",
    "البنك": "bank",
    "قيمة العقار": "property_value",
    "التفاصيل": "details",
    "ملاحظات": "details",
}

# 任务清单 CSV 列顺序
TASK_CSV_COLUMNS: tuple[str, ...] = (
    "project",
    "description",
    "reviewer",
    "requester",
    "notes",
    "location",
    "status",
    "date",
)


def _cell(value: Any) -> str:
    """单元格值转字符串；电子表格中的整数常以 1234.0 形式出现"""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def _field_for(header: str) -> str | None:
    header = header.strip()
    if header in REQUEST_COLUMNS:
        return REQUEST_COLUMNS[header]
    if header in RequestDraft.model_fields:
        return header
    for name, info in RequestDraft.model_fields.items():
        if info.alias == header:
            return name
    return None


def draft_from_row(row: Mapping[str, Any]) -> RequestDraft | None:
    """把一行转换为 إفراغ 请求草稿

    Returns:
        RequestDraft，空行或缺少客户名/项目名的行返回 None
    """
    values: dict[str, str] = {}
    for header, raw in row.items():
        if not isinstance(header, str):
            continue
        field = _field_for(header)
        if field is None or field == "type":
            continue
        text = _cell(raw)
        if text and field not in values:
            values[field] = text

    if not values.get("client_name") or not values.get("project_name"):
        return None
    return RequestDraft(type=RequestType.CONVEYANCE, **values)


def projects_from_csv(text: str) -> list[Project]:
    """解析任务清单 CSV（首行为表头），按项目名分组为 Project

    列顺序：المشروع, بيان الأعمال, جهة المراجعة, الجهة طالبة الخدمة,
    الوصف والملاحظات, الموقع, الحالة, تاريخ المتابعة。
    少于 7 列的行被跳过。
    """
    reader = csv.reader(io.StringIO(text.strip()))
    next(reader, None)

    grouped: dict[str, list[Task]] = {}
    for index, parts in enumerate(reader):
        if len(parts) < 7:
            continue
        record = dict(zip(TASK_CSV_COLUMNS, (p.strip() for p in parts), strict=False))
        status = (
            TaskStatus.DONE if record["status"] == TaskStatus.DONE else TaskStatus.IN_PROGRESS
        )
        task = Task(
            id=f"t-{index}",
            project=record["project"],
            description=record["description"],
            reviewer=record["reviewer"],
            requester=record["requester"],
            notes=record["notes"],
            location=record["location"],
            status=status,
            date=record.get("date", ""),
        )
        grouped.setdefault(task.project, []).append(task)

    projects = [
        aggregate.recompute_counters(
            Project(name=name, location=tasks[0].location or DEFAULT_LOCATION, tasks=tasks)
        )
        for name, tasks in grouped.items()
    ]
    log.info("csv_seed_parsed", project_count=len(projects))
    return projects
