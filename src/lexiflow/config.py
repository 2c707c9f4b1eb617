import os
from pathlib import Path
from typing import List, Optional

from .models import Milestone


def _timeout_from_env(default: Optional[float]) -> Optional[float]:
    raw = os.environ.get("LEXIFLOW_API_TIMEOUT")
    if raw is None:
        return default
    # "none" or "0" leaves external calls unbounded
    if raw.strip().lower() in ("", "none", "0"):
        return None
    return float(raw)


class Settings:
    PROJECT_NAME: str = "lexiflow"
    DEBUG: bool = os.environ.get("LEXIFLOW_DEBUG", "") == "1"
    LOG_DIR: str = os.environ.get("LEXIFLOW_LOG_DIR", "log")
    LOG_FILE: str = "lexiflow.log"
    LOG_TO_DB: bool = os.environ.get("LEXIFLOW_LOG_TO_DB", "") == "1"
    DB_DIR: str = "db"
    DB_FILE: str = "lexiflow.db"
    API_BASE_URL: str = os.environ.get(
        "LEXIFLOW_API_BASE_URL", "http://localhost:3001/api"
    )
    API_TIMEOUT: Optional[float] = _timeout_from_env(None)
    TEMPLATE_DIR: str = str(Path(__file__).resolve().parent / "templates")
    SESSION_COOKIE_NAME: str = "lexiflow_session"
    SESSION_TIMEOUT_MINUTES: int = 120
    ROOT_PATH: str = os.environ.get("ROOT_PATH", "")


settings = Settings()

# Streak milestones shown on the dashboard, ascending by days.
MILESTONES: List[Milestone] = [
    Milestone(days=1, name="新手打卡", icon="🏅"),
    Milestone(days=7, name="坚持一周", icon="🎖️"),
    Milestone(days=14, name="双周达人", icon="⭐"),
    Milestone(days=30, name="月度之星", icon="🌟"),
    Milestone(days=60, name="学习达人", icon="💪"),
    Milestone(days=90, name="季度冠军", icon="🏆"),
    Milestone(days=180, name="半年坚持", icon="👑"),
    Milestone(days=365, name="年度王者", icon="🎯"),
]
