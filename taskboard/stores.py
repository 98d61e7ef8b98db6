"""Cached record stores over a :class:`~taskboard.backends.RecordBackend`.

Each store keeps the last fetched list in memory and applies mutations to it
optimistically: the cache changes first, the backend round trip follows, and
the pre-mutation list comes back if the round trip fails. Only one mutation
per store may be in flight; a second one gets :class:`StoreBusyError`.
"""

from __future__ import annotations

import logging
import threading
import uuid
from contextlib import contextmanager
from datetime import date
from enum import Enum
from typing import Any, Callable, Dict, Generic, Iterator, List, Mapping, Optional, Tuple, Type, TypeVar

from taskboard import policy
from taskboard.backends.base import Embed, RecordBackend
from taskboard.errors import NotFoundError, PermissionDenied, StoreBusyError, UpstreamError, ValidationError
from taskboard.files import MAX_FILE_SIZE, guess_mime_type, is_extension_blocked
from taskboard.models import Department, Employee, FileAttachment, Principal, Role, Task, TaskStatus, parse_date

logger = logging.getLogger(__name__)

R = TypeVar("R")

TransitionHook = Callable[[Task, Task, Principal], None]


def _blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def _clean(values: Mapping[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for k, v in values.items():
        if isinstance(v, str):
            v = v.strip()
        elif isinstance(v, Enum):
            v = v.value
        elif isinstance(v, date):
            v = v.isoformat()
        out[k] = v
    return out


class RecordStore(Generic[R]):
    table: str = ""
    kind: str = "record"
    record_type: Type[Any] = object
    required_fields: Tuple[str, ...] = ()
    immutable_fields: Tuple[str, ...] = ("id",)
    order_by: Optional[str] = None
    descending: bool = False
    embed: Tuple[Embed, ...] = ()

    def __init__(self, backend: RecordBackend) -> None:
        self.backend = backend
        self._items: List[R] = []
        self._lock = threading.Lock()
        self.loaded = False

    # -- reads -------------------------------------------------------------------

    def list(self) -> List[R]:
        return list(self._items)

    def find(self, record_id: str) -> Optional[R]:
        for item in self._items:
            if item.id == record_id:  # type: ignore[attr-defined]
                return item
        return None

    def get(self, record_id: str) -> R:
        item = self.find(record_id)
        if item is None:
            raise NotFoundError(self.kind, record_id)
        return item

    def refresh(self) -> List[R]:
        with self._mutation("refresh"):
            rows = self.backend.select(
                self.table,
                order_by=self.order_by,
                descending=self.descending,
                embed=self.embed,
            )
            self._items = [self.record_type.from_row(r) for r in rows]
            self.loaded = True
        logger.debug("Loaded %d %s rows", len(self._items), self.table)
        return self.list()

    def clear(self) -> None:
        self._items = []
        self.loaded = False

    # -- mutations ---------------------------------------------------------------

    @contextmanager
    def _mutation(self, action: str) -> Iterator[List[R]]:
        if not self._lock.acquire(blocking=False):
            raise StoreBusyError(self.table)
        snapshot = list(self._items)
        try:
            yield snapshot
        except UpstreamError:
            self._items = snapshot
            logger.warning("%s %s failed; cache rolled back", action, self.kind)
            raise
        finally:
            self._lock.release()

    def _check_required(self, values: Mapping[str, Any], fields: Optional[Tuple[str, ...]] = None) -> None:
        fields = self.required_fields if fields is None else fields
        missing = [f for f in fields if _blank(values.get(f))]
        if missing:
            raise ValidationError("Missing required fields", fields=missing)

    def _prepare_create(self, values: Dict[str, Any], principal: Optional[Principal]) -> Dict[str, Any]:
        return values

    def _prepare_update(self, current: R, patch: Dict[str, Any]) -> Dict[str, Any]:
        return patch

    def _insert_position(self) -> int:
        return 0 if self.descending else len(self._items)

    def create(self, draft: Mapping[str, Any], principal: Optional[Principal] = None) -> R:
        values = self._prepare_create(_clean(draft), principal)
        self._check_required(values)
        values["id"] = str(uuid.uuid4())
        record = self.record_type.from_row(values)

        with self._mutation("create"):
            self._items.insert(self._insert_position(), record)
            row = self.backend.insert(self.table, record.to_row())
            saved = self.record_type.from_row({**record.to_row(), **(row or {})})
            self._items = [saved if r is record else r for r in self._items]

        logger.info("Created %s id=%s", self.kind, saved.id)
        return saved

    def update(self, record_id: str, patch: Mapping[str, Any]) -> R:
        return self._update(record_id, patch, guarded=True)

    def _guard_patch(self, current: R, patch: Mapping[str, Any]) -> None:
        current_row = current.to_row()  # type: ignore[attr-defined]
        unknown = sorted(k for k in patch if k not in current_row)
        if unknown:
            raise ValidationError("Unknown fields", fields=unknown)
        changed = [f for f in self.immutable_fields if f in patch and patch[f] != current_row.get(f)]
        if changed:
            raise ValidationError("Fields cannot be changed", fields=changed)
        self._check_required(patch, tuple(f for f in self.required_fields if f in patch))

    def _update(self, record_id: str, patch: Mapping[str, Any], *, guarded: bool) -> R:
        current = self.get(record_id)
        patch = _clean(patch)
        if guarded:
            self._guard_patch(current, patch)
        patch = self._prepare_update(current, patch)
        updated = self.record_type.from_row({**current.to_row(), **patch})  # type: ignore[attr-defined]
        new_row = updated.to_row()
        sent = {k: new_row[k] for k in patch if k in new_row and k != "id"}

        with self._mutation("update") as snapshot:
            self._items = [updated if r is current else r for r in self._items]
            row = self.backend.update(self.table, record_id, sent)
            if row is None:
                self._items = [r for r in snapshot if r.id != record_id]  # type: ignore[attr-defined]
                logger.warning("%s %s vanished from %s", self.kind, record_id, self.table)
                raise NotFoundError(self.kind, record_id)

        logger.info("Updated %s id=%s fields=%s", self.kind, record_id, ",".join(sorted(sent)))
        return updated

    def delete(self, record_id: str) -> None:
        self.get(record_id)
        with self._mutation("delete"):
            self._items = [r for r in self._items if r.id != record_id]  # type: ignore[attr-defined]
            removed = self.backend.delete(self.table, filters={"id": record_id})
        if not removed:
            logger.warning("%s %s was already gone from %s", self.kind, record_id, self.table)
            raise NotFoundError(self.kind, record_id)
        logger.info("Deleted %s id=%s", self.kind, record_id)


class EmployeeStore(RecordStore[Employee]):
    table = "profiles"
    kind = "employee"
    record_type = Employee
    required_fields = ("name", "email", "department", "job_title")
    immutable_fields = ("id", "user_id", "role")
    order_by = "name"

    def _prepare_create(self, values: Dict[str, Any], principal: Optional[Principal]) -> Dict[str, Any]:
        # Roles are assigned out of band; new rows are always employees.
        values["role"] = Role.EMPLOYEE.value
        values.pop("user_id", None)
        # Sign-up claims unlinked profiles by lower-cased e-mail.
        if values.get("email"):
            values["email"] = values["email"].lower()
        return values

    def _prepare_update(self, current: Employee, patch: Dict[str, Any]) -> Dict[str, Any]:
        if patch.get("email"):
            patch["email"] = patch["email"].lower()
        return patch

    def find_by_name(self, name: str) -> Optional[Employee]:
        name = (name or "").strip()
        for e in self._items:
            if e.name == name:
                return e
        return None


class TaskStore(RecordStore[Task]):
    table = "tasks"
    kind = "task"
    record_type = Task
    required_fields = ("title", "description", "deadline", "assigned_to")
    immutable_fields = ("id", "created_at", "assigned_by")
    order_by = "created_at"
    descending = True
    embed = (Embed(alias="assignee", table="profiles", foreign_key="assigned_to_id"),)

    def __init__(self, backend: RecordBackend, employees: Optional[EmployeeStore] = None) -> None:
        super().__init__(backend)
        self.employees = employees
        self._hooks: List[TransitionHook] = []

    def add_transition_hook(self, hook: TransitionHook) -> Callable[[], None]:
        self._hooks.append(hook)

        def remove() -> None:
            if hook in self._hooks:
                self._hooks.remove(hook)

        return remove

    def _resolve_assignee(self, values: Dict[str, Any]) -> Optional[Employee]:
        if self.employees is None:
            return None
        assignee = None
        if values.get("assigned_to_id"):
            assignee = self.employees.find(values["assigned_to_id"])
        if assignee is None and values.get("assigned_to"):
            assignee = self.employees.find_by_name(values["assigned_to"])
        if assignee is not None:
            values["assigned_to"] = assignee.name
            values["assigned_to_id"] = assignee.id
        return assignee

    def _prepare_create(self, values: Dict[str, Any], principal: Optional[Principal]) -> Dict[str, Any]:
        values["status"] = TaskStatus.PENDING.value
        values["assigned_by"] = principal.name if principal else ""
        values["created_at"] = date.today().isoformat()
        deadline = parse_date(values.get("deadline"))
        values["deadline"] = deadline.isoformat() if deadline else None
        assignee = self._resolve_assignee(values)
        if _blank(values.get("department")) and assignee is not None:
            values["department"] = assignee.department
        return values

    def _prepare_update(self, current: Task, patch: Dict[str, Any]) -> Dict[str, Any]:
        if "assigned_to" in patch or "assigned_to_id" in patch:
            if "assigned_to_id" not in patch:
                patch["assigned_to_id"] = None
            self._resolve_assignee(patch)
        return patch

    def _guard_patch(self, current: Task, patch: Mapping[str, Any]) -> None:
        if "status" in patch and patch["status"] != current.status.value:
            raise ValidationError("Status changes go through the task actions", fields=["status"])
        super()._guard_patch(current, patch)

    def change_status(self, task_id: str, target: TaskStatus, principal: Optional[Principal]) -> Task:
        current = self.get(task_id)
        moved = policy.transition(current, target, principal)
        updated = self._update(task_id, {"status": moved.status.value}, guarded=False)
        logger.info(
            "Task %s %s -> %s by %s",
            task_id,
            current.status.value,
            updated.status.value,
            principal.name if principal else "-",
        )
        for hook in list(self._hooks):
            try:
                hook(current, updated, principal)
            except Exception:
                logger.exception("Transition hook failed for task %s", task_id)
        return updated

    def add_note(self, task_id: str, text: str, principal: Optional[Principal]) -> Task:
        """Append a dated note from the assignee to the task description."""
        text = (text or "").strip()
        if not text:
            raise ValidationError("Missing required fields", fields=["note"])
        current = self.get(task_id)
        if "add_note" not in policy.available_actions(current, principal):
            raise PermissionDenied("add_notes", principal.role.value if principal else "anonymous")
        stamp = f"[{date.today().isoformat()} {principal.name}]"
        description = f"{current.description}\n\n{stamp} {text}".strip()
        return self._update(task_id, {"description": description}, guarded=False)


class FileStore(RecordStore[FileAttachment]):
    table = "files"
    kind = "file"
    record_type = FileAttachment
    required_fields = ("name", "task_title")
    immutable_fields = ("id", "uploaded_at", "uploaded_by", "uploaded_by_id")
    order_by = "uploaded_at"
    descending = True
    embed = (Embed(alias="uploader", table="profiles", foreign_key="uploaded_by_id"),)

    def __init__(self, backend: RecordBackend, tasks: Optional[TaskStore] = None) -> None:
        super().__init__(backend)
        self.tasks = tasks

    def _prepare_create(self, values: Dict[str, Any], principal: Optional[Principal]) -> Dict[str, Any]:
        name = values.get("name") or ""
        if name and is_extension_blocked(name):
            raise ValidationError("File type is not allowed", fields=["name"])
        try:
            size = int(values.get("size_bytes") or 0)
        except (TypeError, ValueError):
            raise ValidationError("Invalid file size", fields=["size_bytes"]) from None
        if size > MAX_FILE_SIZE:
            raise ValidationError("File is too large", fields=["size_bytes"])

        values["size_bytes"] = size
        values["mime_type"] = guess_mime_type(name) if name else values.get("mime_type")
        values["uploaded_by"] = principal.name if principal else ""
        values["uploaded_by_id"] = principal.id if principal else None
        values["uploaded_at"] = date.today().isoformat()

        if self.tasks is not None and not values.get("task_id") and values.get("task_title"):
            for t in self.tasks.list():
                if t.title == values["task_title"]:
                    values["task_id"] = t.id
                    break
        return values


class DepartmentStore(RecordStore[Department]):
    table = "departments"
    kind = "department"
    record_type = Department
    required_fields = ("name",)
    order_by = "name"

    def names(self) -> List[str]:
        return [d.name for d in self._items]

    def find_by_name(self, name: str) -> Optional[Department]:
        wanted = (name or "").strip()
        for d in self._items:
            if d.name == wanted:
                return d
        return None

    def _check_unique(self, name: str, exclude_id: Optional[str] = None) -> None:
        existing = self.find_by_name(name)
        if existing is not None and existing.id != exclude_id:
            raise ValidationError("Department already exists", fields=["name"])

    def _insert_position(self) -> int:
        return len(self._items)

    def _prepare_create(self, values: Dict[str, Any], principal: Optional[Principal]) -> Dict[str, Any]:
        self._check_unique(values.get("name") or "")
        return values

    def _prepare_update(self, current: Department, patch: Dict[str, Any]) -> Dict[str, Any]:
        if "name" in patch:
            self._check_unique(patch["name"], exclude_id=current.id)
        return patch

    def delete_by_name(self, name: str) -> None:
        dept = self.find_by_name(name)
        if dept is None:
            raise NotFoundError(self.kind, name)
        self.delete(dept.id)
