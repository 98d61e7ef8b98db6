from datetime import date

import pytest

from taskboard.backends import Backends
from taskboard.config import AppConfig
from taskboard.context import AppContext
from taskboard.models import Principal, Role
from taskboard.stores import DepartmentStore, EmployeeStore, FileStore, TaskStore
from tests.fakes import FakeBackend, FakeIdentity

TODAY = date(2024, 3, 1)


def make_principal(name: str, role: Role = Role.EMPLOYEE, pid: str = "") -> Principal:
    return Principal(
        id=pid or f"p-{name}",
        user_id=f"u-{name}",
        name=name,
        email=f"{pid or 'user'}@example.com",
        role=role,
    )


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def identity():
    return FakeIdentity()


@pytest.fixture
def manager():
    return make_principal("Mona", Role.MANAGER, pid="p-mona")


@pytest.fixture
def employee_store(backend):
    return EmployeeStore(backend)


@pytest.fixture
def task_store(backend, employee_store):
    return TaskStore(backend, employees=employee_store)


@pytest.fixture
def file_store(backend, task_store):
    return FileStore(backend, tasks=task_store)


@pytest.fixture
def department_store(backend):
    return DepartmentStore(backend)


@pytest.fixture
def config():
    return AppConfig(
        backend="sql",
        supabase_url=None,
        supabase_key=None,
        database_url="sqlite://",
        locale="en",
        urgent_window_days=30,
        log_level="INFO",
        log_dir=None,
    )


@pytest.fixture
def ctx(config, backend, identity):
    context = AppContext.build(config, Backends(records=backend, identity=identity))
    yield context
    context.close()
