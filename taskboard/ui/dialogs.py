"""Modal dialogs. Each ``open_*`` call renders its dialog for the current run."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Optional

import streamlit as st

from taskboard.controllers import EmployeesController, FilesController, TaskCard, TasksController
from taskboard.files import format_file_size
from taskboard.i18n import Localizer
from taskboard.models import Employee, Priority
from taskboard.ui.components import badge_html, show_inline
from taskboard.ui.state import handle


def open_add_employee(ctrl: EmployeesController, localizer: Localizer) -> None:
    t = localizer.t

    @st.dialog(t("employees.add_new"))
    def _dlg() -> None:
        with st.form("tb-add-employee"):
            name = st.text_input(t("employees.name"))
            email = st.text_input(t("employees.email"))
            phone = st.text_input(t("employees.phone"))
            departments = ctrl.department_options()
            department = st.selectbox(t("employees.department"), options=[""] + departments)
            job_title = st.text_input(t("employees.job_title"))
            submitted = st.form_submit_button(t("common.save"), type="primary")
        if submitted:
            result = ctrl.add(
                {
                    "name": name,
                    "email": email,
                    "phone": phone or None,
                    "department": department,
                    "job_title": job_title,
                }
            )
            if not handle(result):
                show_inline(result.notice)

    _dlg()


def open_edit_employee(employee: Employee, ctrl: EmployeesController, localizer: Localizer) -> None:
    t = localizer.t

    @st.dialog(t("common.edit"))
    def _dlg() -> None:
        departments = ctrl.department_options()
        if employee.department and employee.department not in departments:
            departments = [employee.department] + departments
        with st.form("tb-edit-employee"):
            name = st.text_input(t("employees.name"), value=employee.name)
            email = st.text_input(t("employees.email"), value=employee.email)
            phone = st.text_input(t("employees.phone"), value=employee.phone or "")
            department = st.selectbox(
                t("employees.department"),
                options=[""] + departments,
                index=([""] + departments).index(employee.department or ""),
            )
            job_title = st.text_input(t("employees.job_title"), value=employee.job_title)
            submitted = st.form_submit_button(t("common.save"), type="primary")
        if submitted:
            result = ctrl.update(
                employee.id,
                {
                    "name": name,
                    "email": email,
                    "phone": phone or None,
                    "department": department,
                    "job_title": job_title,
                },
            )
            if not handle(result):
                show_inline(result.notice)

    _dlg()


def open_manage_departments(ctrl: EmployeesController, localizer: Localizer) -> None:
    t = localizer.t

    @st.dialog(t("departments.manage"))
    def _dlg() -> None:
        names = ctrl.ctx.departments.names()
        if not names:
            st.caption(t("departments.empty"))
        for name in names:
            c1, c2 = st.columns([4, 1])
            c1.write(name)
            if c2.button("🗑", key=f"tb-dept-del-{name}", help=t("common.delete")):
                result = ctrl.delete_department(name)
                if not handle(result):
                    show_inline(result.notice)

        st.divider()
        with st.form("tb-add-department", clear_on_submit=True):
            new_name = st.text_input(t("departments.new"))
            if st.form_submit_button(t("departments.add"), type="primary"):
                result = ctrl.add_department(new_name)
                if not handle(result):
                    show_inline(result.notice)

    _dlg()


def open_add_task(ctrl: TasksController, localizer: Localizer) -> None:
    t = localizer.t

    @st.dialog(t("tasks.add_new"), width="large")
    def _dlg() -> None:
        with st.form("tb-add-task"):
            title = st.text_input(t("tasks.title"))
            description = st.text_area(t("tasks.description"))
            c1, c2 = st.columns(2)
            with c1:
                assigned_to = st.selectbox(t("tasks.assigned_to"), options=[""] + ctrl.assignee_options())
                deadline = st.date_input(t("tasks.deadline"), value=date.today() + timedelta(days=30))
            with c2:
                priority = st.selectbox(
                    t("tasks.priority"),
                    options=[p.value for p in Priority],
                    format_func=localizer.status,
                )
                department = st.selectbox(t("tasks.department"), options=[""] + ctrl.department_options())
            submitted = st.form_submit_button(t("common.save"), type="primary")
        if submitted:
            result = ctrl.add(
                {
                    "title": title,
                    "description": description,
                    "assigned_to": assigned_to,
                    "deadline": deadline,
                    "priority": priority,
                    "department": department,
                }
            )
            if not handle(result):
                show_inline(result.notice)

    _dlg()


def open_view_task(card: TaskCard, ctrl: TasksController, localizer: Localizer) -> None:
    t = localizer.t
    task = card.task

    @st.dialog(task.title or t("common.view"), width="large")
    def _dlg() -> None:
        st.markdown(
            badge_html(card.urgency, localizer) + " " + badge_html(task.priority, localizer, prefix="priority-"),
            unsafe_allow_html=True,
        )
        st.write(task.description)
        c1, c2, c3 = st.columns(3)
        c1.metric(t("tasks.deadline"), task.deadline.isoformat() if task.deadline else "-")
        c2.metric(t("tasks.days_left"), card.days_left if card.days_left is not None else "-")
        c3.metric(t("tasks.status"), localizer.status(task.status))
        st.caption(
            f"{t('tasks.assigned_to')}: {task.assigned_to} · {t('tasks.assigned_by')}: {task.assigned_by}"
            f" · {t('tasks.department')}: {task.department or '-'}"
        )

        if "add_note" in card.actions:
            with st.form("tb-task-note", clear_on_submit=True):
                note = st.text_area(t("tasks.note"))
                if st.form_submit_button(t("tasks.add_note")):
                    result = ctrl.add_note(task.id, note)
                    if not handle(result):
                        show_inline(result.notice)

        files = [f for f in ctrl.ctx.files.list() if f.task_id == task.id or f.task_title == task.title]
        for f in files:
            st.write(f"📎 {f.name} · {format_file_size(f.size_bytes)} · {f.uploaded_by}")

    _dlg()


def open_upload_file(ctrl: FilesController, localizer: Localizer, task_title: Optional[str] = None) -> None:
    t = localizer.t

    @st.dialog(t("files.upload"))
    def _dlg() -> None:
        options = ctrl.task_options()
        index = options.index(task_title) + 1 if task_title in options else 0
        with st.form("tb-upload-file"):
            chosen_task = st.selectbox(t("files.task"), options=[""] + options, index=index)
            upload = st.file_uploader(t("files.choose"))
            submitted = st.form_submit_button(t("files.upload"), type="primary")
        if submitted:
            # Only metadata is recorded; file bytes are hosted elsewhere.
            result = ctrl.upload(
                name=upload.name if upload is not None else "",
                size_bytes=upload.size if upload is not None else 0,
                task_title=chosen_task,
                mime_type=upload.type if upload is not None else None,
            )
            if not handle(result):
                show_inline(result.notice)

    _dlg()


def open_edit_task(card: TaskCard, ctrl: TasksController, localizer: Localizer) -> None:
    t = localizer.t
    task = card.task

    @st.dialog(t("common.edit"), width="large")
    def _dlg() -> None:
        assignees = ctrl.assignee_options()
        if task.assigned_to not in assignees:
            assignees = [task.assigned_to] + assignees
        departments = ctrl.department_options()
        if task.department and task.department not in departments:
            departments = [task.department] + departments
        priorities = [p.value for p in Priority]

        with st.form("tb-edit-task"):
            title = st.text_input(t("tasks.title"), value=task.title)
            description = st.text_area(t("tasks.description"), value=task.description)
            c1, c2 = st.columns(2)
            with c1:
                assigned_to = st.selectbox(
                    t("tasks.assigned_to"), options=assignees, index=assignees.index(task.assigned_to)
                )
                deadline = st.date_input(t("tasks.deadline"), value=task.deadline or date.today())
            with c2:
                priority = st.selectbox(
                    t("tasks.priority"),
                    options=priorities,
                    index=priorities.index(task.priority.value),
                    format_func=localizer.status,
                )
                department = st.selectbox(
                    t("tasks.department"),
                    options=[""] + departments,
                    index=([""] + departments).index(task.department or ""),
                )
            saved = st.form_submit_button(t("common.save"), type="primary")
        if saved:
            result = ctrl.update(
                task.id,
                {
                    "title": title,
                    "description": description,
                    "assigned_to": assigned_to,
                    "deadline": deadline,
                    "priority": priority,
                    "department": department,
                },
            )
            if not handle(result):
                show_inline(result.notice)

        if st.button(t("common.delete"), key=f"tb-task-delete-{task.id}"):
            result = ctrl.delete(task.id)
            if not handle(result):
                show_inline(result.notice)

    _dlg()
