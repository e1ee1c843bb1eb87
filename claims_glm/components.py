"""
Streamlit building blocks shared by the dashboard pages.
"""

import streamlit as st


def fmt_number(value, decimals=0, prefix="", suffix=""):
    """Format a number with spaces as thousand separators."""
    formatted = f"{value:,.{decimals}f}".replace(",", " ")
    return f"{prefix}{formatted}{suffix}"


def _card_html(title, value, highlight):
    css_class = "kpi-card-green" if highlight else "kpi-card"
    return f'<div class="{css_class}"><h3>{title}</h3><h1>{value}</h1></div>'


def kpi_row(cards, highlight=()):
    """Render ``(title, value)`` pairs as one row of KPI cards.

    Titles listed in ``highlight`` get the green card style.
    """
    columns = st.columns(len(cards))
    for column, (title, value) in zip(columns, cards):
        with column:
            st.markdown(_card_html(title, value, title in highlight), unsafe_allow_html=True)


def section_title(icon, text):
    st.markdown(f'<div class="section-header">{icon} {text}</div>', unsafe_allow_html=True)
