"""
UI Styling and Components Module.

This module provides global CSS styling and reusable UI components
for the Gourmet Guru Streamlit app.
"""

from ui.feedback import notify, show_empty_state, show_error, working_spinner
from ui.styles import load_global_styles

__all__ = [
    "load_global_styles",
    "notify",
    "show_empty_state",
    "show_error",
    "working_spinner",
]
