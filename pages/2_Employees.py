import pandas as pd
import streamlit as st

from taskboard.controllers import EmployeesController
from taskboard.ui.components import filter_bar
from taskboard.ui.dialogs import open_add_employee, open_edit_employee, open_manage_departments
from taskboard.ui.state import get_context, handle

ctx = get_context()
t = ctx.localizer.t
ctrl = EmployeesController(ctx)

head, add_col, dept_col = st.columns([3, 1.2, 1.2])
head.title(t("nav.employees"))
if add_col.button(t("employees.add_new"), type="primary", use_container_width=True):
    open_add_employee(ctrl, ctx.localizer)
if dept_col.button(t("departments.manage"), use_container_width=True):
    open_manage_departments(ctrl, ctx.localizer)

spec = filter_bar(ctx.localizer, key="tb-emp", departments=ctrl.department_options())
employees = ctrl.list(spec)

if not employees:
    st.info(t("employees.empty"))
else:
    table = pd.DataFrame(
        [
            {
                t("employees.name"): e.name,
                t("employees.email"): e.email,
                t("employees.phone"): e.phone or "",
                t("employees.department"): e.department,
                t("employees.job_title"): e.job_title,
                t("employees.tasks"): e.tasks_count,
                t("employees.completed"): e.completed_tasks,
            }
            for e in employees
        ]
    )
    st.dataframe(table, use_container_width=True, hide_index=True)

    with st.expander(t("common.edit")):
        chosen = st.selectbox(
            t("employees.name"),
            options=[e.id for e in employees],
            format_func=lambda eid: next((e.name for e in employees if e.id == eid), eid),
            key="tb-emp-edit",
        )
        if st.button(t("common.edit"), key="tb-emp-edit-btn"):
            open_edit_employee(ctx.employees.get(chosen), ctrl, ctx.localizer)

    with st.expander(t("common.delete")):
        victim = st.selectbox(
            t("employees.name"),
            options=[e.id for e in employees],
            format_func=lambda eid: next((e.name for e in employees if e.id == eid), eid),
            key="tb-emp-delete",
        )
        if st.button(t("common.delete"), key="tb-emp-delete-btn"):
            handle(ctrl.delete(victim))
