from datetime import timedelta

import pytest

from taskboard.controllers import DashboardController, EmployeesController, FilesController, TasksController
from taskboard.errors import PermissionDenied
from taskboard.models import TaskStatus
from taskboard.notices import ERROR, SUCCESS, WARNING
from tests.conftest import TODAY


def sign_in(ctx, identity, backend, name, role, department="IT"):
    email = f"{name.lower()}@example.com"
    user_id = identity.add_account(email, "secret1")
    backend.seed(
        "profiles",
        {
            "id": f"p-{name.lower()}",
            "user_id": user_id,
            "name": name,
            "email": email,
            "role": role,
            "department": department,
            "job_title": "Engineer",
        },
    )
    ctx.session.sign_in(email, "secret1")
    ctx.load()
    return ctx.session.principal


def seed_task(backend, task_id, assignee_id, assignee_name, status="pending", deadline=None, **extra):
    row = {
        "id": task_id,
        "title": f"Task {task_id}",
        "description": "Do the thing",
        "deadline": (deadline or TODAY + timedelta(days=60)).isoformat(),
        "assigned_to": assignee_name,
        "assigned_to_id": assignee_id,
        "assigned_by": "Mona",
        "priority": "normal",
        "status": status,
        "created_at": "2024-02-01",
        "department": "IT",
    }
    row.update(extra)
    backend.seed("tasks", row)


def test_manager_adds_employee(ctx, identity, backend):
    sign_in(ctx, identity, backend, "Mona", "manager")
    result = EmployeesController(ctx).add(
        {"name": "Sara", "email": "sara@example.com", "department": "IT", "job_title": "Support"}
    )

    assert result.ok
    assert result.notice.level == SUCCESS
    assert result.notice.message == "Saved."
    assert "Sara" in [e.name for e in EmployeesController(ctx).list()]


def test_employee_cannot_manage_employees(ctx, identity, backend):
    sign_in(ctx, identity, backend, "Sara", "employee")
    result = EmployeesController(ctx).add(
        {"name": "Omar", "email": "omar@example.com", "department": "IT", "job_title": "Support"}
    )

    assert not result.ok
    assert result.notice.level == WARNING
    assert result.notice.message == ctx.localizer.t("notice.permission")
    assert [r["name"] for r in backend.tables["profiles"]] == ["Sara"]
    with pytest.raises(PermissionDenied):
        EmployeesController(ctx).list()


def test_missing_fields_are_reported_as_notice(ctx, identity, backend):
    sign_in(ctx, identity, backend, "Mona", "manager")
    result = TasksController(ctx).add({"title": "Only a title"})

    assert not result.ok
    assert result.notice.level == ERROR
    assert "description" in result.notice.detail
    assert ctx.tasks.list() == []


def test_upstream_failure_keeps_cache_and_reports_error(ctx, identity, backend):
    sign_in(ctx, identity, backend, "Mona", "manager")
    seed_task(backend, "t1", "p-mona", "Mona")
    ctx.load()
    backend.fail = True

    result = TasksController(ctx).update("t1", {"title": "Renamed"})

    assert not result.ok
    assert result.notice.level == ERROR
    assert result.notice.message == ctx.localizer.t("notice.upstream")
    assert not result.signed_out
    assert ctx.tasks.get("t1").title == "Task t1"
    assert ctx.session.is_authenticated


def test_failed_task_create_leaves_list_unchanged(ctx, identity, backend):
    sign_in(ctx, identity, backend, "Mona", "manager")
    seed_task(backend, "t1", "p-mona", "Mona")
    ctx.load()
    backend.fail = True

    result = TasksController(ctx).add(
        {"title": "New", "description": "Later", "deadline": "2024-05-01", "assigned_to": "Mona"}
    )

    assert not result.ok
    assert result.notice.message == ctx.localizer.t("notice.upstream")
    assert [t.id for t in ctx.tasks.list()] == ["t1"]


def test_rejected_credentials_sign_the_user_out(ctx, identity, backend):
    sign_in(ctx, identity, backend, "Mona", "manager")
    seed_task(backend, "t1", "p-mona", "Mona")
    ctx.load()
    backend.fail = True
    backend.fail_invalidates_session = True

    result = TasksController(ctx).delete("t1")

    assert result.signed_out
    assert result.notice.message == ctx.localizer.t("notice.session_expired")
    assert not ctx.session.is_authenticated
    assert ctx.tasks.list() == []
    assert not ctx.loaded


def test_employee_sees_and_moves_only_own_tasks(ctx, identity, backend):
    seed_task(backend, "t1", "p-sara", "Sara")
    seed_task(backend, "t2", "p-omar", "Omar")
    sign_in(ctx, identity, backend, "Sara", "employee")
    tasks = TasksController(ctx)

    cards = tasks.cards(today=TODAY)
    assert [c.task.id for c in cards] == ["t1"]
    assert cards[0].actions == ["view", "start"]

    assert tasks.perform("t1", "start").ok
    assert ctx.tasks.get("t1").status is TaskStatus.PROGRESS
    assert tasks.card(ctx.tasks.get("t1"), TODAY).actions == ["view", "complete", "add_note", "upload_file", "decline"]

    other = tasks.perform("t2", "start")
    assert not other.ok
    assert other.notice.level == WARNING
    assert ctx.tasks.get("t2").status is TaskStatus.PENDING


def test_unknown_or_disallowed_action(ctx, identity, backend):
    seed_task(backend, "t1", "p-sara", "Sara")
    sign_in(ctx, identity, backend, "Sara", "employee")
    tasks = TasksController(ctx)

    assert tasks.perform("t1", "launch").notice.level == ERROR
    approve = tasks.perform("t1", "approve")
    assert approve.notice.message == ctx.localizer.t("notice.transition")


def test_manager_approves_completed_task(ctx, identity, backend):
    seed_task(backend, "t1", "p-sara", "Sara", status="completed")
    sign_in(ctx, identity, backend, "Mona", "manager")
    tasks = TasksController(ctx)

    assert tasks.card(ctx.tasks.get("t1"), TODAY).actions == ["view", "edit", "approve"]
    result = tasks.perform("t1", "approve")
    assert result.ok
    assert result.notice.message == ctx.localizer.t("notice.status_changed")
    assert backend.tables["tasks"][0]["status"] == "approved"


def test_add_note_appends_to_description(ctx, identity, backend):
    seed_task(backend, "t1", "p-sara", "Sara", status="progress")
    sign_in(ctx, identity, backend, "Sara", "employee")

    result = TasksController(ctx).add_note("t1", "Waiting on the vendor")

    assert result.ok
    description = ctx.tasks.get("t1").description
    assert description.startswith("Do the thing")
    assert description.endswith("Sara] Waiting on the vendor")


def test_add_note_refused_on_pending_task(ctx, identity, backend):
    seed_task(backend, "t1", "p-sara", "Sara")
    sign_in(ctx, identity, backend, "Sara", "employee")

    result = TasksController(ctx).add_note("t1", "Too early")

    assert not result.ok
    assert ctx.tasks.get("t1").description == "Do the thing"


def test_file_upload_and_delete_permissions(ctx, identity, backend):
    seed_task(backend, "t1", "p-sara", "Sara", status="progress")
    backend.seed(
        "files",
        {
            "id": "f-omar",
            "name": "budget.xlsx",
            "size_bytes": 2048,
            "uploaded_by": "Omar",
            "uploaded_by_id": "p-omar",
            "uploaded_at": "2024-02-10",
            "task_title": "Task t9",
        },
    )
    sign_in(ctx, identity, backend, "Sara", "employee")
    files = FilesController(ctx)

    assert files.task_options() == ["Task t1"]
    uploaded = files.upload("notes.pdf", 1024, "Task t1")
    assert uploaded.ok
    assert uploaded.value.task_id == "t1"
    assert uploaded.value.uploaded_by == "Sara"
    assert files.can_delete(uploaded.value)

    denied = files.delete("f-omar")
    assert not denied.ok
    assert denied.notice.message == ctx.localizer.t("notice.permission")
    assert files.delete(uploaded.value.id).ok
    assert [f.id for f in files.list()] == ["f-omar"]


def test_blocked_upload_is_rejected(ctx, identity, backend):
    seed_task(backend, "t1", "p-sara", "Sara", status="progress")
    sign_in(ctx, identity, backend, "Sara", "employee")

    result = FilesController(ctx).upload("setup.exe", 10, "Task t1")

    assert not result.ok
    assert result.notice.detail == "name"
    assert backend.tables["files"] == []


def test_departments_through_controller(ctx, identity, backend):
    sign_in(ctx, identity, backend, "Mona", "manager")
    employees = EmployeesController(ctx)

    assert employees.department_options() == ["IT"]
    assert employees.add_department("HR").ok
    assert employees.department_options() == ["HR"]
    duplicate = employees.add_department(" HR ")
    assert not duplicate.ok
    assert employees.delete_department("HR").ok
    assert not employees.delete_department("HR").ok


def test_dashboard_view_counts_visible_tasks(ctx, identity, backend):
    seed_task(backend, "t1", "p-sara", "Sara", status="completed")
    seed_task(backend, "t2", "p-sara", "Sara", deadline=TODAY - timedelta(days=3))
    seed_task(backend, "t3", "p-omar", "Omar", deadline=TODAY + timedelta(days=5))
    sign_in(ctx, identity, backend, "Sara", "employee")

    view = DashboardController(ctx).view(today=TODAY)

    assert view.stats.total_tasks == 2
    assert view.stats.completed_tasks == 1
    assert view.stats.overdue_tasks == 1
    assert [t.id for t in view.overdue] == ["t2"]
    sara = next(e for e in view.employees if e.name == "Sara")
    assert (sara.tasks_count, sara.completed_tasks) == (2, 1)


def test_viewer_gets_dashboard_but_not_tasks(ctx, identity, backend):
    seed_task(backend, "t1", "p-sara", "Sara")
    sign_in(ctx, identity, backend, "Vera", "viewer")

    assert DashboardController(ctx).view(today=TODAY).stats.total_tasks == 1
    with pytest.raises(PermissionDenied):
        TasksController(ctx).list()
    assert TasksController(ctx).card(ctx.tasks.get("t1"), TODAY).actions == []


def test_sign_out_clears_loaded_data(ctx, identity, backend):
    seed_task(backend, "t1", "p-mona", "Mona")
    sign_in(ctx, identity, backend, "Mona", "manager")
    assert ctx.loaded

    ctx.session.sign_out()

    assert not ctx.loaded
    assert ctx.tasks.list() == []
    ctx.session.sign_in("mona@example.com", "secret1")
    ctx.load()
    assert [t.id for t in ctx.tasks.list()] == ["t1"]


def test_manager_edits_employee_but_not_role(ctx, identity, backend):
    sign_in(ctx, identity, backend, "Mona", "manager")
    employees = EmployeesController(ctx)
    sara = employees.add({"name": "Sara", "email": "sara@example.com", "department": "IT", "job_title": "Support"})

    result = employees.update(sara.value.id, {"job_title": "Team Lead", "email": "Sara.Lead@Example.com"})

    assert result.ok
    assert result.notice.message == ctx.localizer.t("notice.updated")
    row = next(r for r in backend.tables["profiles"] if r["id"] == sara.value.id)
    assert row["job_title"] == "Team Lead"
    assert row["email"] == "sara.lead@example.com"

    promote = employees.update(sara.value.id, {"role": "manager"})

    assert not promote.ok
    assert promote.notice.level == ERROR
    assert promote.notice.detail == "role"
    assert row["role"] == "employee"
    assert ctx.employees.get(sara.value.id).role.value == "employee"


def test_employee_added_by_manager_sees_tasks_after_sign_up(ctx, identity, backend):
    sign_in(ctx, identity, backend, "Mona", "manager")
    added = EmployeesController(ctx).add(
        {"name": "Sara", "email": "Sara@Example.com", "department": "IT", "job_title": "Support"}
    )
    task = TasksController(ctx).add(
        {"title": "Onboarding", "description": "Read the handbook", "deadline": "2024-05-01", "assigned_to": "Sara"}
    )
    assert task.value.assigned_to_id == added.value.id

    ctx.session.sign_out()
    principal = ctx.session.sign_up("sara@example.com", "secret1", "Sara")
    ctx.load()

    assert principal.id == added.value.id
    assert [r["name"] for r in backend.tables["profiles"]].count("Sara") == 1
    tasks = TasksController(ctx)
    assert [t.id for t in tasks.list()] == [task.value.id]
    assert tasks.perform(task.value.id, "start").ok
    assert ctx.tasks.get(task.value.id).status is TaskStatus.PROGRESS
