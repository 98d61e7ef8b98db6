"""Taskboard: role-based task and employee management on Streamlit."""

__version__ = "0.1.0"
