"""Aggregates shown on the dashboard page."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional, Sequence

import pandas as pd

from taskboard.models import Employee, Task, TaskStatus, Urgency
from taskboard.policy import URGENT_WINDOW_DAYS, task_urgency

DONE_STATUSES = frozenset({TaskStatus.COMPLETED, TaskStatus.APPROVED})
CLOSED_STATUSES = DONE_STATUSES | {TaskStatus.DECLINED}


@dataclass(frozen=True)
class DashboardStats:
    total_tasks: int
    completed_tasks: int
    in_progress_tasks: int
    pending_tasks: int
    overdue_tasks: int
    urgent_tasks: int
    employees: int

    @property
    def completion_rate(self) -> float:
        """Percentage of tasks that are completed or approved, one decimal."""
        if not self.total_tasks:
            return 0.0
        return round(100.0 * self.completed_tasks / self.total_tasks, 1)


def is_overdue(task: Task, today: Optional[date] = None) -> bool:
    if task.deadline is None or task.status in CLOSED_STATUSES:
        return False
    return task.deadline < (today or date.today())


def overdue_tasks(tasks: Iterable[Task], today: Optional[date] = None) -> List[Task]:
    return [t for t in tasks if is_overdue(t, today)]


def compute_stats(
    tasks: Sequence[Task],
    employees: Sequence[Employee],
    today: Optional[date] = None,
    window_days: int = URGENT_WINDOW_DAYS,
) -> DashboardStats:
    today = today or date.today()
    return DashboardStats(
        total_tasks=len(tasks),
        completed_tasks=sum(1 for t in tasks if t.status in DONE_STATUSES),
        in_progress_tasks=sum(1 for t in tasks if t.status is TaskStatus.PROGRESS),
        pending_tasks=sum(1 for t in tasks if t.status is TaskStatus.PENDING),
        overdue_tasks=len(overdue_tasks(tasks, today)),
        urgent_tasks=sum(
            1 for t in tasks if task_urgency(t, today=today, window_days=window_days) is Urgency.URGENT
        ),
        employees=len(employees),
    )


def recent_tasks(tasks: Iterable[Task], limit: int = 5) -> List[Task]:
    """Newest first by ``created_at``; undated tasks sort last."""
    ordered = sorted(tasks, key=lambda t: t.created_at or date.min, reverse=True)
    return ordered[: max(0, limit)]


def monthly_breakdown(tasks: Iterable[Task]) -> pd.DataFrame:
    """Completed vs. open task counts per creation month (``YYYY-MM``)."""
    records = [
        {"month": t.created_at.strftime("%Y-%m"), "completed": int(t.status in DONE_STATUSES)}
        for t in tasks
        if t.created_at is not None
    ]
    if not records:
        return pd.DataFrame({"month": [], "completed": [], "open": []}).astype({"completed": int, "open": int})

    df = pd.DataFrame.from_records(records)
    grouped = df.groupby("month")["completed"].agg(["sum", "count"]).reset_index()
    return pd.DataFrame(
        {
            "month": grouped["month"],
            "completed": grouped["sum"].astype(int),
            "open": (grouped["count"] - grouped["sum"]).astype(int),
        }
    ).sort_values("month", ignore_index=True)


def _assigned_to(task: Task, employee: Employee) -> bool:
    if task.assigned_to_id:
        return task.assigned_to_id == employee.id
    return task.assigned_to == employee.name


def with_task_counts(employees: Iterable[Employee], tasks: Sequence[Task]) -> List[Employee]:
    """Copies of ``employees`` with ``tasks_count`` / ``completed_tasks`` derived from ``tasks``."""
    out: List[Employee] = []
    for e in employees:
        mine = [t for t in tasks if _assigned_to(t, e)]
        out.append(
            dataclasses.replace(
                e,
                tasks_count=len(mine),
                completed_tasks=sum(1 for t in mine if t.status in DONE_STATUSES),
            )
        )
    return out
