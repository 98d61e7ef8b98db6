from __future__ import annotations

import html
from typing import List, Optional

import streamlit as st

from taskboard.context import AppContext
from taskboard.filtering import FilterSpec
from taskboard.i18n import SUPPORTED_LOCALES, Localizer
from taskboard.notices import ERROR, SUCCESS, WARNING, Notice
from taskboard.ui.state import handle, pop_notices

_NOTICE_ICONS = {SUCCESS: "✅", WARNING: "⚠️", ERROR: "❌"}
_LOCALE_LABELS = {"en": "English", "ar": "العربية"}


def badge_html(value: str, localizer: Localizer, *, prefix: str = "") -> str:
    value = str(getattr(value, "value", value))
    css = f"tb-badge-{prefix}{value}"
    return f'<span class="tb-badge {css}">{html.escape(localizer.status(value))}</span>'


def show_notices() -> None:
    for n in pop_notices():
        text = f"{n.message} ({n.detail})" if n.detail else n.message
        st.toast(text, icon=_NOTICE_ICONS.get(n.level))


def show_inline(notice: Optional[Notice]) -> None:
    """Render a notice inside a dialog, where a toast would be hidden behind the overlay."""
    if notice is None:
        return
    text = f"{notice.message} ({notice.detail})" if notice.detail else notice.message
    {SUCCESS: st.success, WARNING: st.warning}.get(notice.level, st.error)(text)


def kpi(label: str, value, *, tone: str = "") -> None:
    st.markdown(
        f'<div class="tb-kpi"><div class="tb-kpi-label">{html.escape(label)}</div>'
        f'<div class="tb-kpi-value {tone}">{html.escape(str(value))}</div></div>',
        unsafe_allow_html=True,
    )


def language_switcher(ctx: AppContext) -> None:
    t = ctx.localizer.t
    current = ctx.localizer.locale
    choice = st.sidebar.selectbox(
        t("common.language"),
        options=list(SUPPORTED_LOCALES),
        index=list(SUPPORTED_LOCALES).index(current),
        format_func=lambda code: _LOCALE_LABELS.get(code, code),
        key="tb-locale",
    )
    if choice != current:
        ctx.localizer.set_locale(choice)
        st.rerun()


def logout_button(ctx: AppContext) -> None:
    t = ctx.localizer.t
    principal = ctx.session.principal
    if principal is not None:
        st.sidebar.caption(f"{principal.name} · {t('role.' + principal.role.value)}")

    @st.dialog(t("auth.sign_out"))
    def _confirm() -> None:
        st.write(t("auth.confirm_sign_out"))
        c1, c2 = st.columns(2)
        with c1:
            if st.button(t("auth.sign_out"), type="primary", use_container_width=True):
                handle(ctx.run(ctx.session.sign_out))
                st.rerun()
        with c2:
            if st.button(t("common.cancel"), use_container_width=True):
                st.rerun()

    if st.sidebar.button(t("auth.sign_out"), use_container_width=True, key="tb-sign-out"):
        _confirm()


def filter_bar(
    localizer: Localizer,
    *,
    key: str,
    statuses: Optional[List[str]] = None,
    priorities: Optional[List[str]] = None,
    departments: Optional[List[str]] = None,
    categories: Optional[List[str]] = None,
) -> FilterSpec:
    """Search box plus one dropdown per given option list. ``All`` leaves a filter unset."""
    t = localizer.t
    all_label = t("common.all")
    selects = [
        ("status", t("tasks.status"), statuses, localizer.status),
        ("priority", t("tasks.priority"), priorities, localizer.status),
        ("department", t("employees.department"), departments, str),
        ("category", t("files.type"), categories, lambda c: t(f"files.{c}")),
    ]
    selects = [s for s in selects if s[2] is not None]

    cols = st.columns([2.2] + [1.0] * len(selects))
    with cols[0]:
        search = st.text_input(t("common.search"), key=f"{key}-search", label_visibility="collapsed",
                               placeholder=t("common.search"))
    chosen = {}
    for col, (name, label, options, fmt) in zip(cols[1:], selects):
        with col:
            value = st.selectbox(
                label,
                options=[""] + list(options),
                format_func=lambda v, fmt=fmt: fmt(v) if v else all_label,
                key=f"{key}-{name}",
            )
            chosen[name] = value or None
    return FilterSpec(search_text=search, **chosen)
