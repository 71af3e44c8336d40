"""
Global CSS Styling for Gourmet Guru.

This module provides load_global_styles() to inject consistent styling into
the page, including the light/dark theme chosen with the header toggle.
"""

import html

import streamlit as st

LIGHT_THEME = {
    "background": "#f9fafb",
    "surface": "#ffffff",
    "text": "#111827",
    "muted": "#4b5563",
    "border": "rgba(17, 24, 39, 0.08)",
}

DARK_THEME = {
    "background": "#111827",
    "surface": "#1f2937",
    "text": "#f9fafb",
    "muted": "#d1d5db",
    "border": "rgba(249, 250, 251, 0.12)",
}

# Badge colors per difficulty and diet label
BADGE_COLORS = {
    "Easy": ("#dcfce7", "#166534"),
    "Medium": ("#fef9c3", "#854d0e"),
    "Hard": ("#fee2e2", "#991b1b"),
    "Vegan": ("#d1fae5", "#065f46"),
    "Vegetarian": ("#ecfccb", "#3f6212"),
    "Non-Veg": ("#ffedd5", "#9a3412"),
    "unknown": ("#f3f4f6", "#1f2937"),
}


def badge(label: str) -> str:
    """Return the HTML of a rounded badge for a difficulty or diet label."""
    background, color = BADGE_COLORS.get(label, BADGE_COLORS["unknown"])
    return (
        f'<span class="gg-badge" style="background-color:{background};color:{color};">'
        f"{html.escape(label)}</span>"
    )


def card_title(title: str) -> str:
    """Return the HTML of a card title, with the recipe title escaped."""
    return f'<div class="gg-card-title">{html.escape(title)}</div>'


def load_global_styles(dark: bool = False) -> None:
    """
    Inject global CSS styles for the Gourmet Guru app.

    This function:
    - Imports Google Fonts (Nunito) for friendly typography
    - Applies the light or dark palette to the page background and cards
    - Styles recipe cards, badges and ingredient chips

    Args:
        dark: Use the dark palette
    """
    theme = DARK_THEME if dark else LIGHT_THEME
    css = f"""
    <style>
        @import url('https://fonts.googleapis.com/css2?family=Nunito:wght@400;600;700&display=swap');

        html, body, [class*="css"] {{
            font-family: 'Nunito', 'sans serif' !important;
        }}

        .stApp {{
            background-color: {theme["background"]} !important;
            color: {theme["text"]} !important;
        }}

        .stApp h1, .stApp h2, .stApp h3, .stApp h4, .stApp p, .stApp label {{
            color: {theme["text"]} !important;
        }}

        .main .block-container {{
            max-width: 1200px !important;
            padding-top: 1.5rem !important;
            padding-bottom: 2.5rem !important;
        }}

        .stButton > button {{
            border-radius: 50px !important;
            font-weight: 600 !important;
        }}

        .gg-card {{
            border-radius: 12px;
            background-color: {theme["surface"]};
            border: 1px solid {theme["border"]};
            padding: 0.75rem 1rem;
            margin-bottom: 0.5rem;
        }}

        .gg-card-title {{
            font-weight: 700;
            font-size: 1.05rem;
            min-height: 2.8rem;
            color: {theme["text"]};
        }}

        .gg-card-facts {{
            display: flex;
            justify-content: space-between;
            color: {theme["muted"]};
            font-size: 0.9rem;
        }}

        .gg-badge {{
            display: inline-block;
            padding: 0.15rem 0.6rem;
            border-radius: 999px;
            font-size: 0.75rem;
            margin-right: 0.35rem;
        }}

        .gg-brand {{
            font-size: 1.75rem;
            font-weight: 700;
            color: {theme["text"]};
        }}
    </style>
    """
    st.markdown(css, unsafe_allow_html=True)
