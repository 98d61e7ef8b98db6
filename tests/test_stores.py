import threading
from datetime import date

import pytest

from taskboard.errors import InvalidTransition, NotFoundError, StoreBusyError, UpstreamError, ValidationError
from taskboard.models import Role, TaskStatus
from tests.conftest import make_principal

TASK_DRAFT = {
    "title": "Migrate mail server",
    "description": "Move mailboxes to the new host",
    "deadline": date(2024, 6, 1),
    "assigned_to": "سارة أحمد العلي",
}

EMPLOYEE_DRAFT = {
    "name": "سارة أحمد العلي",
    "email": "sara@example.com",
    "department": "IT",
    "job_title": "Systems Engineer",
}


@pytest.mark.parametrize("missing", ["title", "description", "deadline", "assigned_to"])
def test_task_create_with_missing_field_changes_nothing(task_store, backend, manager, missing):
    draft = dict(TASK_DRAFT, **{missing: "  " if missing != "deadline" else None})
    with pytest.raises(ValidationError) as err:
        task_store.create(draft, manager)
    assert missing in err.value.fields
    assert task_store.list() == []
    assert backend.tables["tasks"] == []


@pytest.mark.parametrize("missing", ["name", "email", "department", "job_title"])
def test_employee_create_requires_fields(employee_store, missing):
    with pytest.raises(ValidationError) as err:
        employee_store.create(dict(EMPLOYEE_DRAFT, **{missing: ""}))
    assert err.value.fields == [missing]
    assert employee_store.list() == []


def test_file_and_department_required_fields(file_store, department_store, manager):
    with pytest.raises(ValidationError) as err:
        file_store.create({"name": "plan.pdf", "size_bytes": 10, "task_title": ""}, manager)
    assert err.value.fields == ["task_title"]
    with pytest.raises(ValidationError):
        department_store.create({"name": "   "})
    assert file_store.list() == [] and department_store.list() == []


def test_task_create_sets_server_owned_fields(task_store, employee_store, manager):
    sara = employee_store.create(EMPLOYEE_DRAFT)
    task = task_store.create(dict(TASK_DRAFT, status="completed", assigned_by="someone else"), manager)

    assert task.status is TaskStatus.PENDING
    assert task.assigned_by == "Mona"
    assert task.created_at == date.today()
    assert task.assigned_to_id == sara.id
    assert task.department == "IT"
    assert len(task.id) == 36
    assert task_store.list() == [task]


def test_employee_create_always_uses_employee_role(employee_store):
    created = employee_store.create(dict(EMPLOYEE_DRAFT, role="manager"))
    assert created.role is Role.EMPLOYEE


def test_update_rejects_immutable_and_blank_fields(task_store, manager):
    task = task_store.create(TASK_DRAFT, manager)
    with pytest.raises(ValidationError) as err:
        task_store.update(task.id, {"assigned_by": "Eve"})
    assert err.value.fields == ["assigned_by"]
    with pytest.raises(ValidationError):
        task_store.update(task.id, {"created_at": "2020-01-01"})
    with pytest.raises(ValidationError):
        task_store.update(task.id, {"title": ""})
    with pytest.raises(ValidationError):
        task_store.update(task.id, {"status": "completed"})
    assert task_store.get(task.id) == task


def test_update_persists_and_returns_record(task_store, backend, manager):
    task = task_store.create(TASK_DRAFT, manager)
    updated = task_store.update(task.id, {"title": "Migrate mail", "priority": "urgent"})
    assert updated.title == "Migrate mail"
    assert updated.priority.value == "urgent"
    assert backend.tables["tasks"][0]["title"] == "Migrate mail"
    assert task_store.get(task.id) == updated


def test_unknown_id_raises_not_found(task_store):
    with pytest.raises(NotFoundError):
        task_store.update("missing", {"title": "x"})
    with pytest.raises(NotFoundError):
        task_store.delete("missing")


def test_vanished_row_is_dropped_from_cache(task_store, backend, manager):
    task = task_store.create(TASK_DRAFT, manager)
    backend.vanish("tasks", task.id)
    with pytest.raises(NotFoundError):
        task_store.update(task.id, {"title": "Renamed"})
    assert task_store.find(task.id) is None


def test_upstream_failure_on_create_rolls_back(task_store, backend, manager):
    task_store.create(TASK_DRAFT, manager)
    before = task_store.list()
    backend.fail = True
    with pytest.raises(UpstreamError):
        task_store.create(dict(TASK_DRAFT, title="Second"), manager)
    assert task_store.list() == before


def test_upstream_failure_on_update_and_delete_rolls_back(employee_store, backend):
    emp = employee_store.create(EMPLOYEE_DRAFT)
    backend.fail = True
    with pytest.raises(UpstreamError):
        employee_store.update(emp.id, {"job_title": "Lead"})
    with pytest.raises(UpstreamError):
        employee_store.delete(emp.id)
    assert employee_store.list() == [emp]


def test_second_mutation_while_one_is_in_flight_is_busy(task_store, backend, manager):
    entered = threading.Event()
    release = threading.Event()
    original_insert = backend.insert

    def slow_insert(table, row):
        entered.set()
        release.wait(5)
        return original_insert(table, row)

    backend.insert = slow_insert
    errors = []
    worker = threading.Thread(target=lambda: task_store.create(TASK_DRAFT, manager))
    worker.start()
    assert entered.wait(5)
    try:
        task_store.create(dict(TASK_DRAFT, title="Second"), manager)
    except StoreBusyError as exc:
        errors.append(exc)
    finally:
        release.set()
        worker.join(5)

    assert len(errors) == 1
    assert [t.title for t in task_store.list()] == [TASK_DRAFT["title"]]


def test_refresh_loads_in_backend_order(task_store, backend):
    backend.seed(
        "tasks",
        {"id": "a", "title": "Old", "created_at": "2024-01-01", "status": "pending"},
        {"id": "b", "title": "New", "created_at": "2024-02-01", "status": "progress"},
    )
    assert [t.id for t in task_store.refresh()] == ["b", "a"]
    assert task_store.loaded


def test_change_status_by_assignee(task_store, manager):
    task = task_store.create(dict(TASK_DRAFT, assigned_to="أحمد"), manager)
    seen = []
    task_store.add_transition_hook(lambda before, after, who: seen.append((before.status, after.status, who.name)))

    moved = task_store.change_status(task.id, TaskStatus.PROGRESS, make_principal("أحمد"))
    assert moved.status is TaskStatus.PROGRESS
    assert seen == [(TaskStatus.PENDING, TaskStatus.PROGRESS, "أحمد")]

    with pytest.raises(InvalidTransition):
        task_store.change_status(task.id, TaskStatus.COMPLETED, make_principal("سارة"))
    assert task_store.get(task.id).status is TaskStatus.PROGRESS


def test_change_status_rejected_for_other_employee(task_store, manager):
    task = task_store.create(dict(TASK_DRAFT, assigned_to="أحمد"), manager)
    with pytest.raises(InvalidTransition):
        task_store.change_status(task.id, TaskStatus.PROGRESS, make_principal("سارة"))
    assert task_store.get(task.id).status is TaskStatus.PENDING


def test_add_note_appends_to_description(task_store, manager):
    task = task_store.create(dict(TASK_DRAFT, assigned_to="أحمد"), manager)
    ahmad = make_principal("أحمد")
    task_store.change_status(task.id, TaskStatus.PROGRESS, ahmad)
    noted = task_store.add_note(task.id, "Half the mailboxes moved", ahmad)
    assert noted.description.startswith(TASK_DRAFT["description"])
    assert noted.description.endswith("Half the mailboxes moved")


def test_department_delete_and_re_add(department_store):
    it = department_store.create({"name": "IT"})
    hr = department_store.create({"name": "HR"})
    assert department_store.names() == ["IT", "HR"]

    department_store.delete_by_name("HR")
    assert department_store.names() == ["IT"]

    again = department_store.create({"name": "HR"})
    assert department_store.names() == ["IT", "HR"]
    assert again.id != hr.id
    assert department_store.get(it.id) == it


def test_department_names_are_unique(department_store):
    department_store.create({"name": "IT"})
    with pytest.raises(ValidationError) as err:
        department_store.create({"name": " IT "})
    assert err.value.fields == ["name"]

    # Names compare exactly, so a different spelling is a different department.
    department_store.create({"name": "it"})
    assert department_store.names() == ["IT", "it"]
    department_store.delete_by_name("it")
    assert department_store.names() == ["IT"]
    with pytest.raises(NotFoundError):
        department_store.delete_by_name("Finance")


def test_file_create_blocks_executables_and_derives_mime(file_store, task_store, manager):
    task = task_store.create(TASK_DRAFT, manager)
    with pytest.raises(ValidationError):
        file_store.create({"name": "payload.exe", "size_bytes": 10, "task_title": task.title}, manager)

    f = file_store.create({"name": "plan.pdf", "size_bytes": 2048, "task_title": task.title}, manager)
    assert f.mime_type == "application/pdf"
    assert f.mime_category == "pdf"
    assert f.uploaded_by == "Mona"
    assert f.uploaded_by_id == manager.id
    assert f.task_id == task.id
    assert f.uploaded_at == date.today()
