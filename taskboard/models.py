"""Typed domain records and their row conversions.

Rows coming from the storage boundary are plain dicts (Supabase JSON or
SQLAlchemy ``to_dict()`` output). They are converted here, once, so business
logic never handles untyped blobs.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from taskboard.files import guess_mime_type, mime_category


class Role(str, Enum):
    MANAGER = "manager"
    EMPLOYEE = "employee"
    VIEWER = "viewer"

    @classmethod
    def parse(cls, raw: Any) -> "Role":
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            return cls.EMPLOYEE


class TaskStatus(str, Enum):
    PENDING = "pending"
    PROGRESS = "progress"
    COMPLETED = "completed"
    DECLINED = "declined"
    # Terminal manager acknowledgement of a completed task.
    APPROVED = "approved"

    @classmethod
    def parse(cls, raw: Any) -> "TaskStatus":
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            return cls.PENDING


class Priority(str, Enum):
    NORMAL = "normal"
    URGENT = "urgent"

    @classmethod
    def parse(cls, raw: Any) -> "Priority":
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            return cls.NORMAL


class Urgency(str, Enum):
    PENDING = "pending"
    URGENT = "urgent"
    PROGRESS = "progress"
    COMPLETED = "completed"
    DECLINED = "declined"


def parse_date(value: Any) -> Optional[date]:
    """Accept date/datetime objects and ISO strings ("2024-02-15", "2024-02-15T10:00:00Z")."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        return None


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


def _str(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _opt_str(value: Any) -> Optional[str]:
    s = _str(value)
    return s or None


def _embedded_name(row: Mapping[str, Any], alias: str) -> Optional[str]:
    embedded = row.get(alias)
    if isinstance(embedded, Mapping):
        return _opt_str(embedded.get("name"))
    return None


@dataclass(frozen=True)
class Principal:
    """The authenticated actor. Backed by a row of the ``profiles`` table."""

    id: str
    user_id: str
    name: str
    email: str
    role: Role
    department: Optional[str] = None
    avatar_url: Optional[str] = None

    @property
    def is_manager(self) -> bool:
        return self.role is Role.MANAGER

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Principal":
        return cls(
            id=_str(row.get("id")),
            user_id=_str(row.get("user_id")),
            name=_str(row.get("name")) or "New User",
            email=_str(row.get("email")),
            role=Role.parse(row.get("role")),
            department=_opt_str(row.get("department")),
            avatar_url=_opt_str(row.get("avatar_url")),
        )


@dataclass(frozen=True)
class Department:
    id: str
    name: str

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Department":
        return cls(id=_str(row.get("id")), name=_str(row.get("name")))

    def to_row(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name}


@dataclass(frozen=True)
class Employee:
    id: str
    name: str
    email: str
    department: str
    job_title: str
    phone: Optional[str] = None
    avatar_url: Optional[str] = None
    role: Role = Role.EMPLOYEE
    user_id: Optional[str] = None
    tasks_count: int = 0
    completed_tasks: int = 0

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Employee":
        return cls(
            id=_str(row.get("id")),
            name=_str(row.get("name")),
            email=_str(row.get("email")),
            department=_str(row.get("department")),
            job_title=_str(row.get("job_title")),
            phone=_opt_str(row.get("phone")),
            avatar_url=_opt_str(row.get("avatar_url")),
            role=Role.parse(row.get("role")),
            user_id=_opt_str(row.get("user_id")),
        )

    def to_row(self) -> Dict[str, Any]:
        # Task counters are derived, never stored.
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "department": self.department,
            "job_title": self.job_title,
            "phone": self.phone,
            "avatar_url": self.avatar_url,
            "role": self.role.value,
            "user_id": self.user_id,
        }


@dataclass(frozen=True)
class Task:
    id: str
    title: str
    description: str
    deadline: Optional[date]
    assigned_to: str
    assigned_by: str
    priority: Priority = Priority.NORMAL
    status: TaskStatus = TaskStatus.PENDING
    created_at: Optional[date] = None
    department: str = ""
    assigned_to_id: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Task":
        return cls(
            id=_str(row.get("id")),
            title=_str(row.get("title")),
            description=_str(row.get("description")),
            deadline=parse_date(row.get("deadline")),
            assigned_to=_embedded_name(row, "assignee") or _str(row.get("assigned_to")),
            assigned_by=_str(row.get("assigned_by")),
            priority=Priority.parse(row.get("priority")),
            status=TaskStatus.parse(row.get("status")),
            created_at=parse_date(row.get("created_at")),
            department=_str(row.get("department")),
            assigned_to_id=_opt_str(row.get("assigned_to_id")),
        )

    def to_row(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "deadline": _iso(self.deadline),
            "assigned_to": self.assigned_to,
            "assigned_to_id": self.assigned_to_id,
            "assigned_by": self.assigned_by,
            "priority": self.priority.value,
            "status": self.status.value,
            "created_at": _iso(self.created_at),
            "department": self.department,
        }


@dataclass(frozen=True)
class FileAttachment:
    id: str
    name: str
    mime_type: str
    mime_category: str
    size_bytes: int
    uploaded_by: str
    uploaded_at: Optional[date]
    task_title: str
    task_id: Optional[str] = None
    uploaded_by_id: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "FileAttachment":
        name = _str(row.get("name"))
        mime = _str(row.get("mime_type")) or guess_mime_type(name)
        try:
            size = int(row.get("size_bytes") or 0)
        except (TypeError, ValueError):
            size = 0
        return cls(
            id=_str(row.get("id")),
            name=name,
            mime_type=mime,
            mime_category=mime_category(name, mime),
            size_bytes=max(0, size),
            uploaded_by=_embedded_name(row, "uploader") or _str(row.get("uploaded_by")),
            uploaded_at=parse_date(row.get("uploaded_at")),
            task_title=_str(row.get("task_title")),
            task_id=_opt_str(row.get("task_id")),
            uploaded_by_id=_opt_str(row.get("uploaded_by_id")),
        )

    def to_row(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "mime_type": self.mime_type,
            "size_bytes": self.size_bytes,
            "uploaded_by": self.uploaded_by,
            "uploaded_by_id": self.uploaded_by_id,
            "uploaded_at": _iso(self.uploaded_at),
            "task_title": self.task_title,
            "task_id": self.task_id,
        }
