"""
Standardized feedback utilities for consistent error, empty, and loading states.

Provides reusable components for displaying errors, empty states, toasts and
loading indicators across the page in a consistent manner.
"""

from contextlib import contextmanager
from typing import Callable, Optional

import streamlit as st

TOAST_ICONS = {
    "success": "✅",
    "warning": "⚠️",
    "error": "❌",
}


def show_error(message: str, hint: Optional[str] = None) -> None:
    """
    Display a standardized error message with optional hint.

    Args:
        message: Main error message to display
        hint: Optional hint text to help users resolve the issue
    """
    st.error(f"⚠️ {message}")
    if hint:
        st.caption(f"💡 {hint}")


def show_empty_state(
    title: str,
    subtitle: Optional[str] = None,
    action_label: Optional[str] = None,
    on_action: Optional[Callable[[], None]] = None,
    key: str = "empty_state_action",
) -> None:
    """
    Display a standardized empty state, optionally with one action button.

    Args:
        title: Main empty state title
        subtitle: Optional subtitle/description text
        action_label: Button label; no button is shown without it
        on_action: Button callback
        key: Widget key of the button
    """
    st.info(f"📭 **{title}**")
    if subtitle:
        st.caption(subtitle)
    if action_label:
        st.button(action_label, key=key, on_click=on_action)


def notify(level: str, message: str) -> None:
    """
    Show a transient toast.

    Args:
        level: "success", "warning" or "error"
        message: Toast text
    """
    st.toast(message, icon=TOAST_ICONS.get(level, "ℹ️"))


@contextmanager
def working_spinner(label: str = "Working…"):
    """
    Context manager wrapper for standardized loading spinners.

    Usage:
        with working_spinner("Finding recipes…"):
            # Do work here
            pass
    """
    with st.spinner(label):
        yield
