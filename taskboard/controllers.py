"""Page controllers.

Pages read through these classes and send every user action through
:meth:`AppContext.run`, so a failed action becomes an
:class:`~taskboard.notices.ActionResult` carrying a notice.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, List, Mapping, Optional

import pandas as pd

from taskboard import dashboard, policy
from taskboard.context import AppContext
from taskboard.errors import PermissionDenied, ValidationError
from taskboard.filtering import FilterSpec, distinct_values, filter_records
from taskboard.models import Employee, FileAttachment, Principal, Task, Urgency
from taskboard.notices import ActionResult


class _Controller:
    def __init__(self, ctx: AppContext) -> None:
        self.ctx = ctx

    @property
    def principal(self) -> Optional[Principal]:
        return self.ctx.session.principal

    def visible_tasks(self) -> List[Task]:
        return filter_records(self.ctx.tasks.list(), principal=self.principal)

    def _guarded(self, permission: str, action, *, success_key: Optional[str] = None) -> ActionResult:
        def run():
            policy.require(self.principal, permission)
            return action()

        return self.ctx.run(run, success_key=success_key)


@dataclass(frozen=True)
class DashboardView:
    stats: dashboard.DashboardStats
    recent: List[Task]
    overdue: List[Task]
    monthly: pd.DataFrame
    employees: List[Employee]


class DashboardController(_Controller):
    def view(self, today: Optional[date] = None) -> DashboardView:
        policy.require(self.principal, "view_dashboard")
        tasks = self.visible_tasks()
        employees = dashboard.with_task_counts(self.ctx.employees.list(), self.ctx.tasks.list())
        return DashboardView(
            stats=dashboard.compute_stats(
                tasks, employees, today=today, window_days=self.ctx.config.urgent_window_days
            ),
            recent=dashboard.recent_tasks(tasks),
            overdue=dashboard.overdue_tasks(tasks, today),
            monthly=dashboard.monthly_breakdown(tasks),
            employees=employees,
        )

    def refresh(self) -> ActionResult:
        return self.ctx.run(self.ctx.load)


class EmployeesController(_Controller):
    def list(self, spec: Optional[FilterSpec] = None) -> List[Employee]:
        policy.require(self.principal, "view_employees")
        employees = dashboard.with_task_counts(self.ctx.employees.list(), self.ctx.tasks.list())
        return filter_records(employees, spec)

    def department_options(self) -> List[str]:
        names = self.ctx.departments.names()
        return names or distinct_values(self.ctx.employees.list(), "department")

    def add(self, draft: Mapping[str, Any]) -> ActionResult:
        return self._guarded(
            "manage_employees", lambda: self.ctx.employees.create(draft), success_key="notice.created"
        )

    def update(self, employee_id: str, patch: Mapping[str, Any]) -> ActionResult:
        return self._guarded(
            "manage_employees",
            lambda: self.ctx.employees.update(employee_id, patch),
            success_key="notice.updated",
        )

    def delete(self, employee_id: str) -> ActionResult:
        return self._guarded(
            "manage_employees", lambda: self.ctx.employees.delete(employee_id), success_key="notice.deleted"
        )

    def add_department(self, name: str) -> ActionResult:
        return self._guarded(
            "manage_departments",
            lambda: self.ctx.departments.create({"name": name}),
            success_key="notice.created",
        )

    def delete_department(self, name: str) -> ActionResult:
        return self._guarded(
            "manage_departments",
            lambda: self.ctx.departments.delete_by_name(name),
            success_key="notice.deleted",
        )


@dataclass(frozen=True)
class TaskCard:
    task: Task
    urgency: Urgency
    days_left: Optional[int]
    actions: List[str]


class TasksController(_Controller):
    def list(self, spec: Optional[FilterSpec] = None) -> List[Task]:
        policy.require(self.principal, "view_tasks")
        return filter_records(self.ctx.tasks.list(), spec, principal=self.principal)

    def card(self, task: Task, today: Optional[date] = None) -> TaskCard:
        return TaskCard(
            task=task,
            urgency=policy.task_urgency(task, today=today, window_days=self.ctx.config.urgent_window_days),
            days_left=policy.days_remaining(task.deadline, today=today) if task.deadline else None,
            actions=policy.available_actions(task, self.principal),
        )

    def cards(self, spec: Optional[FilterSpec] = None, today: Optional[date] = None) -> List[TaskCard]:
        return [self.card(t, today) for t in self.list(spec)]

    def assignee_options(self) -> List[str]:
        return [e.name for e in self.ctx.employees.list()]

    def department_options(self) -> List[str]:
        return self.ctx.departments.names() or distinct_values(self.ctx.tasks.list(), "department")

    def add(self, draft: Mapping[str, Any]) -> ActionResult:
        return self._guarded(
            "manage_tasks",
            lambda: self.ctx.tasks.create(draft, self.principal),
            success_key="notice.created",
        )

    def update(self, task_id: str, patch: Mapping[str, Any]) -> ActionResult:
        return self._guarded(
            "manage_tasks", lambda: self.ctx.tasks.update(task_id, patch), success_key="notice.updated"
        )

    def delete(self, task_id: str) -> ActionResult:
        return self._guarded("manage_tasks", lambda: self.ctx.tasks.delete(task_id), success_key="notice.deleted")

    def perform(self, task_id: str, action: str) -> ActionResult:
        """Run a status-changing card action (start, complete, decline, approve)."""

        def run():
            target = policy.ACTION_TARGETS.get(action)
            if target is None:
                raise ValidationError("Unknown action", fields=[action])
            return self.ctx.tasks.change_status(task_id, target, self.principal)

        return self.ctx.run(run, success_key="notice.status_changed")

    def add_note(self, task_id: str, text: str) -> ActionResult:
        return self.ctx.run(
            lambda: self.ctx.tasks.add_note(task_id, text, self.principal), success_key="notice.updated"
        )


class FilesController(_Controller):
    def list(self, spec: Optional[FilterSpec] = None) -> List[FileAttachment]:
        policy.require(self.principal, "view_files")
        return filter_records(self.ctx.files.list(), spec)

    def task_options(self) -> List[str]:
        return [t.title for t in self.visible_tasks()]

    def can_delete(self, file: FileAttachment) -> bool:
        return policy.can_delete_file(file, self.principal)

    def upload(
        self,
        name: str,
        size_bytes: int,
        task_title: str,
        mime_type: Optional[str] = None,
    ) -> ActionResult:
        draft = {"name": name, "size_bytes": size_bytes, "task_title": task_title, "mime_type": mime_type}
        return self._guarded(
            "upload_files",
            lambda: self.ctx.files.create(draft, self.principal),
            success_key="notice.created",
        )

    def delete(self, file_id: str) -> ActionResult:
        def run():
            file = self.ctx.files.get(file_id)
            if not self.can_delete(file):
                role = self.principal.role.value if self.principal else "anonymous"
                raise PermissionDenied("delete_files", role)
            self.ctx.files.delete(file_id)

        return self.ctx.run(run, success_key="notice.deleted")
