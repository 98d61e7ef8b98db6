"""Status, urgency and permission rules.

Every status badge, task card action row and controller permission check goes
through this module, so all pages agree on what a task looks like and who may
touch it.
"""

from __future__ import annotations

import dataclasses
import math
from datetime import date, datetime
from typing import Dict, FrozenSet, List, Optional, Union

from taskboard.errors import InvalidTransition, PermissionDenied
from taskboard.models import FileAttachment, Principal, Role, Task, TaskStatus, Urgency

URGENT_WINDOW_DAYS = 30

DateLike = Union[date, datetime]

_STATUS_URGENCY = {
    TaskStatus.COMPLETED: Urgency.COMPLETED,
    TaskStatus.APPROVED: Urgency.COMPLETED,
    TaskStatus.DECLINED: Urgency.DECLINED,
    TaskStatus.PROGRESS: Urgency.PROGRESS,
}


def days_remaining(deadline: DateLike, *, today: Optional[DateLike] = None) -> int:
    """Whole days until ``deadline``, rounded up. Negative once it has passed."""
    if isinstance(deadline, datetime):
        if isinstance(today, datetime):
            now = today
        elif today is not None:
            now = datetime.combine(today, datetime.min.time(), tzinfo=deadline.tzinfo)
        else:
            now = datetime.now(deadline.tzinfo)
        return math.ceil((deadline - now).total_seconds() / 86400)

    if isinstance(today, datetime):
        today = today.date()
    return (deadline - (today or date.today())).days


def derive_urgency(
    deadline: Optional[DateLike],
    status: TaskStatus,
    *,
    today: Optional[DateLike] = None,
    window_days: int = URGENT_WINDOW_DAYS,
) -> Urgency:
    urgency = _STATUS_URGENCY.get(status)
    if urgency is not None:
        return urgency
    if deadline is None:
        return Urgency.PENDING
    if days_remaining(deadline, today=today) < window_days:
        return Urgency.URGENT
    return Urgency.PENDING


def task_urgency(task: Task, *, today: Optional[DateLike] = None, window_days: int = URGENT_WINDOW_DAYS) -> Urgency:
    return derive_urgency(task.deadline, task.status, today=today, window_days=window_days)


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------

_EMPLOYEE_TRANSITIONS: Dict[TaskStatus, FrozenSet[TaskStatus]] = {
    TaskStatus.PENDING: frozenset({TaskStatus.PROGRESS}),
    TaskStatus.PROGRESS: frozenset({TaskStatus.COMPLETED, TaskStatus.DECLINED}),
}

_MANAGER_TRANSITIONS: Dict[TaskStatus, FrozenSet[TaskStatus]] = {
    TaskStatus.COMPLETED: frozenset({TaskStatus.APPROVED}),
}


def is_assignee(task: Task, principal: Principal) -> bool:
    # Display-name matching is kept for rows that predate assigned_to_id;
    # two employees sharing a name will collide there.
    if task.assigned_to_id and principal.id:
        return task.assigned_to_id == principal.id
    return bool(principal.name) and task.assigned_to == principal.name


def allowed_transitions(task: Task, principal: Optional[Principal]) -> FrozenSet[TaskStatus]:
    if principal is None:
        return frozenset()
    if principal.role is Role.MANAGER:
        return _MANAGER_TRANSITIONS.get(task.status, frozenset())
    if principal.role is Role.EMPLOYEE and is_assignee(task, principal):
        return _EMPLOYEE_TRANSITIONS.get(task.status, frozenset())
    return frozenset()


def transition(task: Task, target: TaskStatus, principal: Optional[Principal]) -> Task:
    """Return ``task`` moved to ``target`` or raise :class:`InvalidTransition`."""
    target = TaskStatus(target)
    if target in allowed_transitions(task, principal):
        return dataclasses.replace(task, status=target)

    if principal is None:
        reason = "not signed in"
    elif principal.role is Role.EMPLOYEE and not is_assignee(task, principal):
        reason = "task is assigned to someone else"
    else:
        reason = f"role {principal.role.value} cannot do this from {task.status.value}"
    raise InvalidTransition(task.id, task.status.value, target.value, reason)


# UI actions, in display order. Status-changing actions map to their target.
ACTION_TARGETS: Dict[str, TaskStatus] = {
    "start": TaskStatus.PROGRESS,
    "complete": TaskStatus.COMPLETED,
    "decline": TaskStatus.DECLINED,
    "approve": TaskStatus.APPROVED,
}


def available_actions(task: Task, principal: Optional[Principal]) -> List[str]:
    if principal is None or principal.role is Role.VIEWER:
        return []

    targets = allowed_transitions(task, principal)
    actions: List[str] = []
    if principal.role is Role.MANAGER:
        actions += ["view", "edit"]
        if TaskStatus.APPROVED in targets:
            actions.append("approve")
        return actions

    if not is_assignee(task, principal):
        return []
    actions.append("view")
    if TaskStatus.PROGRESS in targets:
        actions.append("start")
    if TaskStatus.COMPLETED in targets:
        actions += ["complete", "add_note", "upload_file"]
    if TaskStatus.DECLINED in targets:
        actions.append("decline")
    return actions


# ---------------------------------------------------------------------------
# Role permissions
# ---------------------------------------------------------------------------

PERMISSIONS: Dict[str, FrozenSet[Role]] = {
    "view_dashboard": frozenset({Role.MANAGER, Role.EMPLOYEE, Role.VIEWER}),
    "view_employees": frozenset({Role.MANAGER}),
    "manage_employees": frozenset({Role.MANAGER}),
    "manage_departments": frozenset({Role.MANAGER}),
    "view_tasks": frozenset({Role.MANAGER, Role.EMPLOYEE}),
    "manage_tasks": frozenset({Role.MANAGER}),
    "view_files": frozenset({Role.MANAGER, Role.EMPLOYEE}),
    "upload_files": frozenset({Role.MANAGER, Role.EMPLOYEE}),
}


def can(principal: Optional[Principal], permission: str) -> bool:
    if principal is None:
        return False
    return principal.role in PERMISSIONS.get(permission, frozenset())


def require(principal: Optional[Principal], permission: str) -> None:
    if not can(principal, permission):
        role = principal.role.value if principal else "anonymous"
        raise PermissionDenied(permission, role)


def can_delete_file(file: FileAttachment, principal: Optional[Principal]) -> bool:
    if principal is None:
        return False
    if principal.role is Role.MANAGER:
        return True
    if file.uploaded_by_id and principal.id:
        return file.uploaded_by_id == principal.id
    return bool(principal.name) and file.uploaded_by == principal.name
