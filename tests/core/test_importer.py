"""表格行导入测试

测试内容：
1. 阿拉伯语 / 英语表头映射为 إفراغ 请求草稿
2. 缺少客户名或项目名的行返回 None
3. 任务清单 CSV 按项目分组并计算计数
"""

from darconsole.core.importer import draft_from_row, projects_from_csv
from darconsole.core.models import RequestType, TaskStatus


class TestDraftFromRow:
    def test_arabic_headers(self):
        draft = draft_from_row(
            {
                "اسم العميل": "فهد",
                "رقم الهوية": 1098765432.0,
                "المشروع": "سرايا",
                "رقم القطعة": 12,
                "البنك": "الراجحي",
            }
        )
        assert draft is not None
        assert draft.type == RequestType.CONVEYANCE
        assert draft.client_name == "فهد"
        assert draft.id_number == "1098765432"
        assert draft.plot_number == "12"
        assert draft.project_name == "سرايا"
        assert draft.bank == "الراجحي"

    def test_english_headers(self):
        draft = draft_from_row({"clientName": "Fahad", "projectName": "Saraya", "deed_number": "9"})
        assert draft is not None
        assert draft.client_name == "Fahad"
        assert draft.deed_number == "9"

    def test_missing_client_returns_none(self):
        assert draft_from_row({"المشروع": "سرايا"}) is None

    def test_missing_project_returns_none(self):
        assert draft_from_row({"اسم العميل": "فهد"}) is None

    def test_blank_row_returns_none(self):
        assert draft_from_row({"اسم العميل": None, "المشروع": "  "}) is None

    def test_unknown_headers_ignored(self):
        draft = draft_from_row({"اسم العميل": "فهد", "المشروع": "سرايا", "عمود": "x", 3: "y"})
        assert draft is not None


CSV_HEADER = (
    "المشروع,بيان الأعمال,جهة المراجعة,الجهة طالبة الخدمة,"
    "الوصف والملاحظات,الموقع,الحالة,تاريخ المتابعة\n"
)

CSV_TEXT = CSV_HEADER + """سرايا,رخصة بناء,أمانة منطقة الرياض,المطور,-,الرياض,منجز,2024-05-01
سرايا,عدادات المياه,شركة المياة الوطنية,المطور,-,الرياض,متابعة,2024-05-02
واحة,قرار مساحي,بلدي,المطور,-,جدة,منجز,2024-05-03
قصير,سطر,ناقص
"""


class TestProjectsFromCsv:
    def test_groups_by_project(self):
        projects = {p.name: p for p in projects_from_csv(CSV_TEXT)}
        assert set(projects) == {"سرايا", "واحة"}

        saraya = projects["سرايا"]
        assert saraya.location == "الرياض"
        assert (saraya.total_tasks, saraya.completed_tasks, saraya.progress) == (2, 1, 50)
        assert saraya.tasks[0].status == TaskStatus.DONE
        assert saraya.tasks[1].status == TaskStatus.IN_PROGRESS
        assert saraya.tasks[0].date == "2024-05-01"

        waha = projects["واحة"]
        assert waha.location == "جدة"
        assert waha.progress == 100

    def test_task_ids_unique(self):
        ids = [t.id for p in projects_from_csv(CSV_TEXT) for t in p.tasks]
        assert len(ids) == len(set(ids))

    def test_empty_input(self):
        assert projects_from_csv("") == []
