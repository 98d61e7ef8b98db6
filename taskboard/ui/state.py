from __future__ import annotations

import logging
from typing import List, Optional

import streamlit as st

from taskboard.config import AppConfig
from taskboard.context import AppContext
from taskboard.logging_setup import setup_logging
from taskboard.notices import ActionResult, Notice

logger = logging.getLogger(__name__)

CTX_KEY = "taskboard_ctx"
NOTICES_KEY = "taskboard_notices"


@st.cache_resource
def get_config() -> AppConfig:
    config = AppConfig.from_env()
    setup_logging(log_dir=config.log_dir, console_level=config.log_level_no)
    logger.info("Taskboard starting backend=%s locale=%s", config.backend, config.locale)
    return config


def get_context() -> AppContext:
    """The session's context, built (and its identity session restored) on first use."""
    ctx: Optional[AppContext] = st.session_state.get(CTX_KEY)
    if ctx is None:
        ctx = AppContext.build(get_config())
        st.session_state[CTX_KEY] = ctx
        handle(ctx.run(ctx.session.restore), rerun=False)
    return ctx


def ensure_loaded(ctx: AppContext) -> None:
    if ctx.session.is_authenticated and not ctx.loaded:
        with st.spinner(ctx.localizer.t("auth.loading")):
            handle(ctx.run(ctx.load), rerun=False)


def push_notice(notice: Optional[Notice]) -> None:
    if notice is not None:
        st.session_state.setdefault(NOTICES_KEY, []).append(notice)


def pop_notices() -> List[Notice]:
    return st.session_state.pop(NOTICES_KEY, [])


def handle(result: ActionResult, *, rerun: bool = True) -> bool:
    """Queue the result's notice and rerun so the page shows fresh store data."""
    push_notice(result.notice)
    if rerun and (result.ok or result.signed_out):
        st.rerun()
    return result.ok
