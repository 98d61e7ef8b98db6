import html

import plotly.express as px
import streamlit as st

from taskboard.controllers import DashboardController, EmployeesController
from taskboard.policy import can, task_urgency
from taskboard.ui.components import badge_html, kpi
from taskboard.ui.dialogs import open_manage_departments
from taskboard.ui.state import get_context, handle

ctx = get_context()
t = ctx.localizer.t
ctrl = DashboardController(ctx)

head, actions = st.columns([4, 1.4])
head.title(t("dashboard.title"))
with actions:
    if st.button("↻", help="Refresh", key="tb-dash-refresh"):
        handle(ctrl.refresh())
    if can(ctx.session.principal, "manage_departments"):
        if st.button(t("departments.manage"), use_container_width=True):
            open_manage_departments(EmployeesController(ctx), ctx.localizer)

view = ctrl.view()
stats = view.stats

k1, k2, k3, k4, k5 = st.columns(5)
with k1:
    kpi(t("dashboard.total_tasks"), stats.total_tasks)
with k2:
    kpi(t("dashboard.completed_tasks"), stats.completed_tasks, tone="tb-kpi-good")
with k3:
    kpi(t("dashboard.in_progress"), stats.in_progress_tasks)
with k4:
    kpi(t("dashboard.overdue"), stats.overdue_tasks, tone="tb-kpi-bad" if stats.overdue_tasks else "")
with k5:
    kpi(t("dashboard.employees"), stats.employees)

st.progress(min(1.0, stats.completion_rate / 100.0), text=f"{t('dashboard.completion_rate')}: {stats.completion_rate}%")

left, right = st.columns([1.4, 1])
with left:
    st.subheader(t("dashboard.performance"))
    if view.monthly.empty:
        st.caption(t("dashboard.no_tasks"))
    else:
        chart = view.monthly.rename(
            columns={"completed": t("tasks.completed"), "open": t("dashboard.open")}
        )
        fig = px.bar(
            chart,
            x="month",
            y=[t("tasks.completed"), t("dashboard.open")],
            barmode="group",
            color_discrete_sequence=["#00b894", "#0b63d6"],
        )
        fig.update_layout(height=320, margin=dict(l=10, r=10, t=10, b=10), legend_title_text="", xaxis_title="")
        st.plotly_chart(fig, use_container_width=True)

with right:
    st.subheader(t("dashboard.recent_tasks"))
    if not view.recent:
        st.caption(t("dashboard.no_tasks"))
    for task in view.recent:
        urgency = task_urgency(task, window_days=ctx.config.urgent_window_days)
        st.markdown(
            f'<div class="tb-card"><div class="tb-card-title">{html.escape(task.title)}</div>'
            f'<div class="tb-card-meta">{html.escape(task.assigned_to)} · {task.deadline or "-"}</div>'
            f"{badge_html(urgency, ctx.localizer)}</div>",
            unsafe_allow_html=True,
        )

    st.subheader(f"{t('dashboard.overdue')} ({stats.overdue_tasks})")
    for task in view.overdue[:3]:
        st.markdown(f'<span class="tb-overdue">{html.escape(task.title)}</span> · {task.deadline}', unsafe_allow_html=True)
