"""
Layout primitives for consistent page structure.

Provides the page header (brand plus right-hand controls) and section titles.
"""

from typing import Callable, Optional

import streamlit as st


def page_header(title: str, subtitle: Optional[str] = None, right: Optional[Callable[[], None]] = None) -> None:
    """
    Render the page header with the brand and optional right-side controls.

    Args:
        title: Brand / page title
        subtitle: Optional tagline
        right: Optional callable that renders right-side content (e.g., buttons)
    """
    if right is not None:
        col_title, col_right = st.columns([3, 2])
    else:
        col_title, col_right = st.container(), None

    with col_title:
        st.markdown(f'<div class="gg-brand">👨‍🍳 {title}</div>', unsafe_allow_html=True)
        if subtitle:
            st.caption(subtitle)

    if col_right is not None:
        with col_right:
            right()

    st.divider()


def section(title: str, caption: Optional[str] = None) -> None:
    """Render a section heading with an optional caption."""
    st.markdown(f"### {title}")
    if caption:
        st.caption(caption)
