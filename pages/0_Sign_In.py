import streamlit as st

from taskboard.ui.components import show_inline
from taskboard.ui.state import get_context, handle

ctx = get_context()
t = ctx.localizer.t

st.title(t("app.title"))

sign_in_tab, sign_up_tab = st.tabs([t("auth.sign_in"), t("auth.sign_up")])

with sign_in_tab:
    with st.form("tb-sign-in"):
        email = st.text_input(t("auth.email"))
        password = st.text_input(t("auth.password"), type="password")
        submitted = st.form_submit_button(t("auth.sign_in"), type="primary")
    if submitted:
        result = ctx.run(lambda: ctx.session.sign_in(email, password))
        if not handle(result):
            show_inline(result.notice)

with sign_up_tab:
    with st.form("tb-sign-up"):
        name = st.text_input(t("auth.name"))
        new_email = st.text_input(t("auth.email"), key="tb-sign-up-email")
        new_password = st.text_input(t("auth.password"), type="password", key="tb-sign-up-password")
        created = st.form_submit_button(t("auth.sign_up"), type="primary")
    if created:
        result = ctx.run(lambda: ctx.session.sign_up(new_email, new_password, name))
        if result.ok and result.value is None:
            st.info(t("auth.check_email"))
        elif not handle(result):
            show_inline(result.notice)
