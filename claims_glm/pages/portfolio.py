"""
Page 1 — Portfolio Overview
Exposure distribution, exposure-weighted claim counts (overall and by
no-claims discount), one-way frequency by rating factor.
"""

import streamlit as st

from claims_glm import config, plots
from claims_glm.components import fmt_number, kpi_row, section_title
from claims_glm.config import FACTOR_LABELS


def render(df):
    """Render the Portfolio Overview page."""

    st.title("📊 Portfolio Overview")
    st.markdown("*Structure of the SingaporeAuto portfolio: exposure, claim counts and rating factors.*")

    exposure = df[config.EXPOSURE_COL].sum()
    claims = df[config.CLAIMS_COL].sum()

    kpi_row([
        ("Policies", fmt_number(len(df))),
        ("Total Exposure", fmt_number(exposure, decimals=1, suffix=" PY")),
        ("Total Claims", fmt_number(claims)),
        ("Avg Frequency", f"{claims / exposure:.4f}"),
    ])

    section_title("⏱️", "Exposure & Claim Counts")

    col_left, col_right = st.columns(2)
    with col_left:
        st.plotly_chart(plots.exposure_histogram(df), use_container_width=True)
    with col_right:
        st.plotly_chart(plots.claim_count_bar(df), use_container_width=True)

    st.plotly_chart(plots.claim_count_bar_by_ncd(df), use_container_width=True)

    section_title("📋", "One-Way Frequency Analysis")

    factor = st.selectbox(
        "Select rating factor:",
        config.FACTOR_COLS,
        format_func=lambda x: FACTOR_LABELS.get(x, x),
    )
    st.plotly_chart(plots.frequency_by_factor(df, factor), use_container_width=True)
