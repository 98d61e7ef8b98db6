import streamlit as st

from taskboard.page_catalog import SIGN_IN_PAGE, pages_for_role
from taskboard.theme import set_theme
from taskboard.ui.components import language_switcher, logout_button, show_notices
from taskboard.ui.state import ensure_loaded, get_context

ctx = get_context()
t = ctx.localizer.t
set_theme(page_title=t("app.title"), direction=ctx.localizer.direction)

principal = ctx.session.principal
if principal is None:
    # Anonymous users only ever see the sign-in page.
    pages = [st.Page(SIGN_IN_PAGE, title=t("nav.sign_in"), icon="🔐", default=True)]
else:
    ensure_loaded(ctx)
    pages = [
        st.Page(p.path, title=t(p.title_key), icon=p.icon, default=p.default)
        for p in pages_for_role(principal.role)
    ]
    logout_button(ctx)

language_switcher(ctx)
show_notices()
st.navigation(pages).run()
