import os

import streamlit as st
from streamlit.errors import StreamlitAPIException


def set_theme(
    page_title: str = "Taskboard",
    page_icon: str = "📋",
    layout: str = "wide",
    direction: str = "ltr",
):
    """Configure the Streamlit page and inject the global CSS.

    ``direction`` is ``rtl`` for Arabic; the whole app container is flipped so
    labels, tables and sidebar read right-to-left.
    """
    try:
        st.set_page_config(
            page_title=page_title,
            page_icon=page_icon,
            layout=layout,
            initial_sidebar_state="expanded",
        )
    except StreamlitAPIException:
        # set_page_config can only be called once per run.
        pass

    theme_file = os.path.join(os.path.dirname(os.path.abspath(__file__)), "..", "assets", "taskboard.css")
    try:
        with open(theme_file, "r", encoding="utf-8") as f:
            css = f.read()
    except FileNotFoundError:
        st.error(f"Theme file not found at {theme_file}. Please check the file path.")
        css = ""

    if direction == "rtl":
        css += '\n.stApp, section[data-testid="stSidebar"] { direction: rtl; }'
    st.markdown(f"<style>{css}</style>", unsafe_allow_html=True)
