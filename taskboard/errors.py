"""Error taxonomy shared by stores, policy, backends and controllers.

Every error raised from a user action is a :class:`TaskboardError`; the page
controllers catch them and turn them into transient notices.
"""

from __future__ import annotations

from typing import Iterable, List, Optional


class TaskboardError(Exception):
    """Base class for all expected application errors."""


class ValidationError(TaskboardError):
    """A required field is missing/blank or a uniqueness rule was violated."""

    def __init__(self, message: str, *, fields: Optional[Iterable[str]] = None) -> None:
        self.fields: List[str] = list(fields or [])
        if self.fields:
            message = f"{message}: {', '.join(self.fields)}"
        super().__init__(message)


class InvalidTransition(TaskboardError):
    """The requested status change is not allowed for this principal."""

    def __init__(self, task_id: str, current: str, target: str, reason: str = "") -> None:
        self.task_id = task_id
        self.current = current
        self.target = target
        self.reason = reason
        msg = f"Task {task_id}: {current} -> {target} is not allowed"
        if reason:
            msg = f"{msg} ({reason})"
        super().__init__(msg)


class NotFoundError(TaskboardError):
    def __init__(self, kind: str, record_id: str) -> None:
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} {record_id} not found")


class UpstreamError(TaskboardError):
    """The identity or storage service call failed.

    ``invalidates_session`` marks failures (expired/revoked credentials) after
    which the user has to sign in again.
    """

    def __init__(self, message: str, *, invalidates_session: bool = False) -> None:
        self.invalidates_session = invalidates_session
        super().__init__(message)


class PermissionDenied(TaskboardError):
    def __init__(self, permission: str, role: str) -> None:
        self.permission = permission
        self.role = role
        super().__init__(f"Role '{role}' may not {permission.replace('_', ' ')}")


class StoreBusyError(TaskboardError):
    """Another mutation on the same store has not finished yet."""

    def __init__(self, store: str) -> None:
        self.store = store
        super().__init__(f"A change to {store} is already in progress")
