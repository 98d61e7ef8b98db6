import html

import streamlit as st

from taskboard.controllers import FilesController, TasksController
from taskboard.models import Priority, TaskStatus
from taskboard.policy import can
from taskboard.ui.components import badge_html, filter_bar
from taskboard.ui.dialogs import open_add_task, open_edit_task, open_upload_file, open_view_task
from taskboard.ui.state import get_context, handle

ctx = get_context()
t = ctx.localizer.t
ctrl = TasksController(ctx)

head, add_col = st.columns([4, 1.2])
head.title(t("nav.tasks"))
if can(ctx.session.principal, "manage_tasks"):
    if add_col.button(t("tasks.add_new"), type="primary", use_container_width=True):
        open_add_task(ctrl, ctx.localizer)

spec = filter_bar(
    ctx.localizer,
    key="tb-task",
    statuses=[s.value for s in TaskStatus],
    priorities=[p.value for p in Priority],
    departments=ctrl.department_options(),
)
cards = ctrl.cards(spec)

if not cards:
    st.info(t("tasks.empty"))

_LABELS = {
    "view": "common.view",
    "edit": "common.edit",
    "approve": "tasks.approve",
    "start": "tasks.start",
    "complete": "tasks.complete",
    "decline": "tasks.decline",
    "add_note": "tasks.add_note",
    "upload_file": "tasks.upload_file",
}

for card in cards:
    task = card.task
    overdue = card.days_left is not None and card.days_left < 0
    deadline = task.deadline.isoformat() if task.deadline else "-"
    st.markdown(
        f'<div class="tb-card"><div class="tb-card-title">{html.escape(task.title)} '
        f"{badge_html(card.urgency, ctx.localizer)} "
        f"{badge_html(task.priority, ctx.localizer, prefix='priority-')}</div>"
        f'<div class="tb-card-meta">{t("tasks.assigned_to")}: {html.escape(task.assigned_to)} · '
        f'<span class="{"tb-overdue" if overdue else ""}">{t("tasks.deadline")}: {deadline}</span>'
        f" · {html.escape(task.department or '-')}</div></div>",
        unsafe_allow_html=True,
    )
    # Notes are added from the view dialog.
    buttons = [a for a in card.actions if a != "add_note"]
    if not buttons:
        continue
    cols = st.columns(len(buttons) + 2)
    for col, action in zip(cols, buttons):
        if not col.button(t(_LABELS[action]), key=f"tb-{action}-{task.id}", use_container_width=True):
            continue
        if action == "view":
            open_view_task(card, ctrl, ctx.localizer)
        elif action == "edit":
            open_edit_task(card, ctrl, ctx.localizer)
        elif action == "upload_file":
            open_upload_file(FilesController(ctx), ctx.localizer, task_title=task.title)
        else:
            handle(ctrl.perform(task.id, action))
