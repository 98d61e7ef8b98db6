"""Streamlit widgets, dialogs and per-session state. Needs a running Streamlit script."""
