"""Per-session application context: localizer, identity session and stores."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Tuple, TypeVar

from taskboard.backends import Backends, build_backends
from taskboard.config import AppConfig
from taskboard.i18n import Localizer
from taskboard.notices import ActionResult, run_action
from taskboard.session import SessionContext
from taskboard.stores import DepartmentStore, EmployeeStore, FileStore, RecordStore, TaskStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class AppContext:
    config: AppConfig
    localizer: Localizer
    session: SessionContext
    departments: DepartmentStore
    employees: EmployeeStore
    tasks: TaskStore
    files: FileStore

    @classmethod
    def build(cls, config: AppConfig, backends: Optional[Backends] = None) -> "AppContext":
        # Localizer, then identity, then stores; pages rely on this order.
        localizer = Localizer(config.locale)
        backends = backends or build_backends(config)
        session = SessionContext(backends.identity, backends.records)

        employees = EmployeeStore(backends.records)
        tasks = TaskStore(backends.records, employees=employees)
        ctx = cls(
            config=config,
            localizer=localizer,
            session=session,
            departments=DepartmentStore(backends.records),
            employees=employees,
            tasks=tasks,
            files=FileStore(backends.records, tasks=tasks),
        )
        session.on_change(ctx._on_principal_change)
        return ctx

    def stores(self) -> Tuple[RecordStore, ...]:
        # Employees before tasks: task creation resolves assignees from them.
        return (self.departments, self.employees, self.tasks, self.files)

    @property
    def loaded(self) -> bool:
        return all(s.loaded for s in self.stores())

    def load(self) -> None:
        """Fetch every store. Called once after sign-in and on manual refresh."""
        for store in self.stores():
            store.refresh()
        logger.info(
            "Loaded %d employees, %d tasks, %d files, %d departments",
            len(self.employees.list()),
            len(self.tasks.list()),
            len(self.files.list()),
            len(self.departments.list()),
        )

    def teardown(self) -> None:
        for store in self.stores():
            store.clear()

    def run(self, action: Callable[[], T], *, success_key: Optional[str] = None) -> ActionResult[T]:
        return run_action(
            action,
            self.localizer,
            success_key=success_key,
            on_session_invalid=self.session.invalidate,
        )

    def _on_principal_change(self, principal) -> None:
        if principal is None:
            logger.debug("Session ended; clearing stores")
            self.teardown()

    def close(self) -> None:
        self.teardown()
        self.session.close()
