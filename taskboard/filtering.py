"""Search and category filters over in-memory record lists."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, TypeVar

from taskboard.models import Employee, FileAttachment, Principal, Role, Task
from taskboard.policy import is_assignee

R = TypeVar("R")

SEARCH_FIELDS: Dict[type, Tuple[str, ...]] = {
    Task: ("title", "description", "assigned_to"),
    Employee: ("name", "email", "job_title"),
    FileAttachment: ("name", "uploaded_by"),
}

# FilterSpec field -> record attribute, per record type. Filters that a
# record type does not carry are ignored for it.
CATEGORY_FIELDS: Dict[type, Dict[str, str]] = {
    Task: {"status": "status", "priority": "priority", "department": "department"},
    Employee: {"department": "department"},
    FileAttachment: {"category": "mime_category"},
}


@dataclass(frozen=True)
class FilterSpec:
    search_text: str = ""
    status: Optional[str] = None
    priority: Optional[str] = None
    department: Optional[str] = None
    category: Optional[str] = None

    def active_filters(self) -> Dict[str, str]:
        out: Dict[str, str] = {}
        for name in ("status", "priority", "department", "category"):
            value = _plain(getattr(self, name))
            if value:
                out[name] = value
        return out


def _plain(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def matches_search(record: Any, search_text: str) -> bool:
    needle = (search_text or "").strip().lower()
    if not needle:
        return True
    for field in SEARCH_FIELDS.get(type(record), ()):
        if needle in _plain(getattr(record, field, "")).lower():
            return True
    return False


def matches_categories(record: Any, spec: FilterSpec) -> bool:
    fields = CATEGORY_FIELDS.get(type(record), {})
    for name, wanted in spec.active_filters().items():
        attr = fields.get(name)
        if attr is None:
            continue
        if _plain(getattr(record, attr, None)) != wanted:
            return False
    return True


def is_visible(record: Any, principal: Optional[Principal]) -> bool:
    if isinstance(record, Task) and principal is not None and principal.role is Role.EMPLOYEE:
        return is_assignee(record, principal)
    return True


def filter_records(
    records: Iterable[R],
    spec: Optional[FilterSpec] = None,
    principal: Optional[Principal] = None,
) -> List[R]:
    """Records matching ``spec`` (and visible to ``principal``), in input order."""
    spec = spec or FilterSpec()
    return [
        r
        for r in records
        if matches_search(r, spec.search_text) and matches_categories(r, spec) and is_visible(r, principal)
    ]


def distinct_values(records: Sequence[Any], attr: str) -> List[str]:
    """Sorted distinct non-empty values of ``attr``, for filter dropdowns."""
    return sorted({_plain(getattr(r, attr, "")) for r in records} - {""})
