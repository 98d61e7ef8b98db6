from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from taskboard.config_utils import env_choice, env_int, env_optional_str, env_str

BACKENDS = ("sql", "supabase")
LOCALES = ("en", "ar")


@dataclass(frozen=True)
class AppConfig:
    """Runtime configuration, read from the environment.

    Backend selection:
    - TASKBOARD_BACKEND: sql|supabase. Defaults to supabase when SUPABASE_URL
      and SUPABASE_KEY are both set, otherwise sql.
    - SUPABASE_URL / SUPABASE_KEY: hosted project URL and anon key.
    - TASKBOARD_DATABASE_URL: SQLAlchemy URL for the sql backend. Defaults to
      local SQLite at data/taskboard.db.

    UI:
    - TASKBOARD_LOCALE: en|ar (default: en)
    - TASKBOARD_URGENT_WINDOW_DAYS: tasks due sooner than this are urgent (default: 30)

    Logging:
    - TASKBOARD_LOG_LEVEL (default: INFO)
    - TASKBOARD_LOG_DIR: also write taskboard.log there when set

    Local seed account (sql backend only):
    - TASKBOARD_DEV_EMAIL / TASKBOARD_DEV_PASSWORD / TASKBOARD_DEV_NAME / TASKBOARD_DEV_ROLE
    """

    backend: str
    supabase_url: Optional[str]
    supabase_key: Optional[str]
    database_url: str

    locale: str
    urgent_window_days: int

    log_level: str
    log_dir: Optional[str]

    dev_email: Optional[str] = None
    dev_password: Optional[str] = None
    dev_name: str = "Local Manager"
    dev_role: str = "manager"

    @property
    def log_level_no(self) -> int:
        level = logging.getLevelName(self.log_level.upper())
        return level if isinstance(level, int) else logging.INFO

    @classmethod
    def from_env(cls) -> "AppConfig":
        supabase_url = env_optional_str("SUPABASE_URL")
        supabase_key = env_optional_str("SUPABASE_KEY")
        default_backend = "supabase" if supabase_url and supabase_key else "sql"

        db_url = env_optional_str("TASKBOARD_DATABASE_URL")
        if not db_url:
            repo_root = Path(__file__).resolve().parents[1]
            data_dir = repo_root / "data"
            data_dir.mkdir(parents=True, exist_ok=True)
            db_url = f"sqlite:///{(data_dir / 'taskboard.db').as_posix()}"

        return cls(
            backend=env_choice("TASKBOARD_BACKEND", BACKENDS, default_backend),
            supabase_url=supabase_url,
            supabase_key=supabase_key,
            database_url=db_url,
            locale=env_choice("TASKBOARD_LOCALE", LOCALES, "en"),
            urgent_window_days=env_int("TASKBOARD_URGENT_WINDOW_DAYS", 30, minimum=1),
            log_level=env_str("TASKBOARD_LOG_LEVEL", "INFO").upper(),
            log_dir=env_optional_str("TASKBOARD_LOG_DIR"),
            dev_email=env_optional_str("TASKBOARD_DEV_EMAIL"),
            dev_password=env_optional_str("TASKBOARD_DEV_PASSWORD"),
            dev_name=env_str("TASKBOARD_DEV_NAME", "Local Manager"),
            dev_role=env_choice("TASKBOARD_DEV_ROLE", ("manager", "employee", "viewer"), "manager"),
        )
