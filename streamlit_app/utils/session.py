"""
Signed-in user management for the Streamlit frontend.

The user returned by the backend's /auth endpoints (uid, email, id_token) is
kept in st.session_state, so it survives reruns but not a page refresh.
"""

from typing import Any, Dict, Optional

import streamlit as st

USER_KEY = "current_user"


def get_current_user() -> Optional[Dict[str, Any]]:
    """
    Get the signed-in user, or None.

    Returns:
        Dictionary with uid, email and id_token, or None when nobody is signed in
    """
    return st.session_state.get(USER_KEY)


def get_user_id() -> Optional[str]:
    user = get_current_user()
    return user.get("uid") if user else None


def get_id_token() -> Optional[str]:
    user = get_current_user()
    return user.get("id_token") if user else None


def set_current_user(user: Dict[str, Any]) -> None:
    """Remember the user returned by sign-in or sign-up."""
    st.session_state[USER_KEY] = {
        "uid": user.get("uid"),
        "email": user.get("email"),
        "id_token": user.get("id_token"),
    }


def clear_current_user() -> None:
    """Forget the signed-in user."""
    st.session_state.pop(USER_KEY, None)
