import streamlit as st

from taskboard.controllers import FilesController
from taskboard.files import CATEGORIES, format_file_size
from taskboard.policy import can
from taskboard.ui.components import filter_bar
from taskboard.ui.dialogs import open_upload_file
from taskboard.ui.state import get_context, handle

ctx = get_context()
t = ctx.localizer.t
ctrl = FilesController(ctx)

_ICONS = {"pdf": "📕", "image": "🖼️", "document": "📄", "spreadsheet": "📊", "file": "📎"}

head, upload_col = st.columns([4, 1.2])
head.title(t("nav.files"))
if can(ctx.session.principal, "upload_files"):
    if upload_col.button(t("files.upload"), type="primary", use_container_width=True):
        open_upload_file(ctrl, ctx.localizer)

spec = filter_bar(ctx.localizer, key="tb-file", categories=CATEGORIES)
files = ctrl.list(spec)

if not files:
    st.info(t("files.empty"))

for f in files:
    c1, c2, c3, c4, c5 = st.columns([3, 1, 1.6, 1.4, 0.6])
    c1.write(f"{_ICONS.get(f.mime_category, '📎')} **{f.name}**")
    c1.caption(f"{t('files.task')}: {f.task_title}")
    c2.write(format_file_size(f.size_bytes))
    c3.write(f.uploaded_by)
    c4.write(f.uploaded_at.isoformat() if f.uploaded_at else "-")
    if ctrl.can_delete(f) and c5.button("🗑", key=f"tb-file-del-{f.id}", help=t("common.delete")):
        handle(ctrl.delete(f.id))
