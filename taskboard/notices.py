"""Transient user notices and the wrapper that turns errors into them."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

from taskboard.errors import (
    InvalidTransition,
    NotFoundError,
    PermissionDenied,
    StoreBusyError,
    TaskboardError,
    UpstreamError,
    ValidationError,
)
from taskboard.i18n import Localizer

logger = logging.getLogger(__name__)

T = TypeVar("T")

SUCCESS = "success"
WARNING = "warning"
ERROR = "error"


@dataclass(frozen=True)
class Notice:
    level: str
    message: str
    detail: str = ""


@dataclass(frozen=True)
class ActionResult(Generic[T]):
    ok: bool
    value: Optional[T] = None
    notice: Optional[Notice] = None
    signed_out: bool = False


def notice_for_error(exc: TaskboardError, localizer: Localizer) -> Notice:
    t = localizer.t
    if isinstance(exc, ValidationError):
        return Notice(ERROR, t("notice.validation"), ", ".join(exc.fields) or str(exc))
    if isinstance(exc, UpstreamError):
        if exc.invalidates_session:
            return Notice(WARNING, t("notice.session_expired"))
        return Notice(ERROR, t("notice.upstream"), str(exc))
    if isinstance(exc, InvalidTransition):
        return Notice(WARNING, t("notice.transition"), exc.reason)
    if isinstance(exc, NotFoundError):
        return Notice(WARNING, t("notice.not_found"))
    if isinstance(exc, StoreBusyError):
        return Notice(WARNING, t("notice.busy"))
    if isinstance(exc, PermissionDenied):
        return Notice(WARNING, t("notice.permission"))
    return Notice(ERROR, t("notice.upstream"), str(exc))


def run_action(
    action: Callable[[], T],
    localizer: Localizer,
    *,
    success_key: Optional[str] = None,
    on_session_invalid: Optional[Callable[[], Any]] = None,
) -> ActionResult[T]:
    """Run one user action; expected failures come back as a notice, never as an exception."""
    try:
        value = action()
    except TaskboardError as exc:
        logger.info("Action failed: %s: %s", type(exc).__name__, exc)
        signed_out = False
        if isinstance(exc, UpstreamError) and exc.invalidates_session and on_session_invalid is not None:
            on_session_invalid()
            signed_out = True
        return ActionResult(ok=False, notice=notice_for_error(exc, localizer), signed_out=signed_out)

    notice = Notice(SUCCESS, localizer.t(success_key)) if success_key else None
    return ActionResult(ok=True, value=value, notice=notice)
