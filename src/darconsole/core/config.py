"""配置常量模块 -- 可通过环境变量覆盖

包含数据库路径、快照键、业务字典（城市、服务类型、政府机构）
以及默认用户集等可配置常量。
"""

import os
from pathlib import Path

import structlog
from pydantic import BaseModel, Field

log = structlog.get_logger()


def _get_base_dir() -> Path:
    """获取项目 data 基础目录"""
    return Path(os.environ.get("DARCONSOLE_DATA_DIR", "data"))


def get_db_path() -> str:
    """获取 SQLite 数据库路径"""
    return os.environ.get(
        "DARCONSOLE_DB_PATH",
        str(_get_base_dir() / "sqlite" / "darconsole.db"),
    )


# 快照存储的三个逻辑键
USERS_KEY = "users"
PROJECTS_KEY = "projects"
REQUESTS_KEY = "requests"
SNAPSHOT_KEYS: tuple[str, ...] = (USERS_KEY, PROJECTS_KEY, REQUESTS_KEY)

# 城市展示顺序（项目按城市分组时使用）
LOCATIONS_ORDER: list[str] = [
    "الرياض",
    "جدة",
    "المدينة المنورة",
    "المنطقة الشرقية",
    "القطيف",
]

DEFAULT_LOCATION = LOCATIONS_ORDER[0]

TECHNICAL_SERVICE_TYPES: list[str] = [
    "فرز صكوك",
    "شبكة الري",
    "الترخيص البيئي",
    "بلاغ سرقة",
    "شبكة المياة",
    "نقل ملكية عدادات الكهرباء",
    "شهادات الاشغال",
    "نزل الملكية",
    "طلب فتح خدمة الكهرباء",
    "طلب استثناء شهادات الاشغال",
    "إصدار رخص بناء",
    "تعديل بيانات المالك برخصة البناء",
    "رخص البناء",
    "التقديم على خدمات المياة",
    "قرارات مساحية",
    "تعاقدات",
    "أخرى",
]

GOVERNMENT_AUTHORITIES: list[str] = [
    "وزارة الإسكان",
    "شركة الوطنية للإسكان",
    "أمانة منطقة الرياض",
    "الشركة السعودية للكهرباء",
    "المركز الوطني للرقابة على الالتزام البيئي",
    "شرطة العارض",
    "الهيئة الملكية للتطوير الرياض",
    "وزارة الشؤون الإسلامية",
    "بلدية شمال الرياض",
    "امانه محافظة جدة",
    "بلدية العقيق",
    "شركة الكهرباء",
    "بلدي",
    "شركة المياة الوطنية",
    "السجل العقاري",
    "امانه المنطقة الشرقية",
    "بلدية صفوى",
    "أخرى",
]

# "أخرى" 子类型的显示名称取自 other_service_details
OTHER_SERVICE_TYPE = "أخرى"

# 请求完成后物化任务的 reviewer 字段
CONVEYANCE_REVIEWER = "كتابة العدل"
TECHNICAL_REVIEWER_FALLBACK = "القسم الفني"

# إفراغ 请求显示名称前缀
CONVEYANCE_NAME_PREFIX = "إفراغ: "


def _user(user_id: str, name: str, email: str, role: str) -> dict[str, str]:
    return {"id": user_id, "name": name, "email": email, "role": role, "password": "123"}


# 首次启动（无快照）时写入的默认用户
DEFAULT_USERS: list[dict[str, str]] = [
    _user("1", "مدير النظام", "admin@dar.sa", "ADMIN"),
    _user("2", "مدير علاقات عامة", "manager@dar.sa", "PR_MANAGER"),
    _user("3", "مسؤول علاقات عامة", "officer@dar.sa", "PR_OFFICER"),
    _user("4", "القسم الفني", "tech@dar.sa", "TECHNICAL"),
    _user("5", "موظف الإفراغات", "conveyance@dar.sa", "CONVEYANCE"),
    _user("6", "المالية", "finance@dar.sa", "FINANCE"),
]


class ConsoleConfig(BaseModel):
    """控制台运行配置 -- 从环境变量加载

    环境变量:
        DARCONSOLE_SEED_DEFAULT_USERS: 无用户快照时是否写入默认用户（默认 true）
        DARCONSOLE_SEED_CSV: 无项目快照时用于初始化项目的 CSV 文件路径
    """

    seed_default_users: bool = Field(
        default=True,
        description="无用户快照时写入默认用户集",
    )
    seed_csv_path: str | None = Field(
        default=None,
        description="无项目快照时导入的 CSV 任务清单",
    )


def load_console_config() -> ConsoleConfig:
    """从环境变量加载控制台配置

    Returns:
        ConsoleConfig 实例
    """
    kwargs: dict = {}

    if val := os.environ.get("DARCONSOLE_SEED_DEFAULT_USERS"):
        if val.lower() in ("true", "1", "yes"):
            kwargs["seed_default_users"] = True
        elif val.lower() in ("false", "0", "no"):
            kwargs["seed_default_users"] = False
        else:
            log.warning(
                "invalid_seed_users_config",
                env_var="DARCONSOLE_SEED_DEFAULT_USERS",
                value=val,
                fallback=True,
            )

    if val := os.environ.get("DARCONSOLE_SEED_CSV"):
        kwargs["seed_csv_path"] = val

    return ConsoleConfig(**kwargs)
