import logging

import pytest

from taskboard.config import AppConfig
from taskboard.config_utils import env_choice, env_int

ENV_VARS = [
    "SUPABASE_URL",
    "SUPABASE_KEY",
    "TASKBOARD_BACKEND",
    "TASKBOARD_DATABASE_URL",
    "TASKBOARD_LOCALE",
    "TASKBOARD_URGENT_WINDOW_DAYS",
    "TASKBOARD_LOG_LEVEL",
    "TASKBOARD_LOG_DIR",
    "TASKBOARD_DEV_EMAIL",
    "TASKBOARD_DEV_PASSWORD",
    "TASKBOARD_DEV_NAME",
    "TASKBOARD_DEV_ROLE",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("TASKBOARD_DATABASE_URL", "sqlite://")
    return monkeypatch


def test_defaults(clean_env):
    cfg = AppConfig.from_env()
    assert cfg.backend == "sql"
    assert cfg.database_url == "sqlite://"
    assert cfg.locale == "en"
    assert cfg.urgent_window_days == 30
    assert cfg.log_level_no == logging.INFO
    assert cfg.dev_email is None
    assert cfg.dev_role == "manager"


def test_supabase_is_chosen_when_credentials_are_present(clean_env):
    clean_env.setenv("SUPABASE_URL", "https://demo.supabase.co")
    clean_env.setenv("SUPABASE_KEY", "anon-key")
    assert AppConfig.from_env().backend == "supabase"

    clean_env.setenv("TASKBOARD_BACKEND", "SQL")
    assert AppConfig.from_env().backend == "sql"


def test_invalid_values_fall_back(clean_env):
    clean_env.setenv("TASKBOARD_LOCALE", "fr")
    clean_env.setenv("TASKBOARD_URGENT_WINDOW_DAYS", "soon")
    clean_env.setenv("TASKBOARD_LOG_LEVEL", "chatty")
    cfg = AppConfig.from_env()
    assert cfg.locale == "en"
    assert cfg.urgent_window_days == 30
    assert cfg.log_level_no == logging.INFO


def test_env_int_minimum(clean_env):
    clean_env.setenv("TASKBOARD_URGENT_WINDOW_DAYS", "0")
    assert env_int("TASKBOARD_URGENT_WINDOW_DAYS", 30, minimum=1) == 1
    assert AppConfig.from_env().urgent_window_days == 1


def test_env_choice_is_case_insensitive(clean_env):
    clean_env.setenv("TASKBOARD_LOCALE", " AR ")
    assert env_choice("TASKBOARD_LOCALE", ("en", "ar"), "en") == "ar"
