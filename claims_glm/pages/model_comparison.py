"""
Page 3 — Model Comparison & trimmed model export
"""

import json
import pickle

import streamlit as st

from claims_glm import config, plots
from claims_glm.components import section_title
from claims_glm.models import compute_lift_curve, predict_counts


def render(result):
    """Render the intercept / full / stepwise comparison page."""

    st.title("⚖️ Model Comparison")
    st.markdown("""
    *Deviance and AIC measure in-sample fit; Gini concordance (Somers' Dxy) measures how well
    predicted claim counts rank the observed frequency, on training and held-out validation data.*
    """)

    table = result.comparison

    section_title("📊", "Comparison Table")
    st.dataframe(table.round(4), use_container_width=True, hide_index=True)
    st.plotly_chart(plots.gini_comparison_chart(table), use_container_width=True)

    # --- Lift ---
    section_title("📈", "Validation Lift Curves")
    validation = result.validation
    cols = st.columns(len(result.models))
    for col, (key, glm) in zip(cols, result.models.items()):
        lift = compute_lift_curve(validation[config.CLAIMS_COL],
                                  predict_counts(glm, validation),
                                  validation[config.EXPOSURE_COL])
        with col:
            st.plotly_chart(plots.lift_chart(lift, title=config.MODEL_LABELS.get(key, key)),
                            use_container_width=True)

    # --- Export ---
    section_title("📦", "Trimmed Stepwise Model")
    trimmed = result.trimmed
    st.markdown(f"""
    The stepwise model is exported without training data, residuals or weights:
    only coefficients, factor levels, link and offset are kept.

    **Formula:** `{trimmed.formula}` &nbsp; **Coefficients:** {len(trimmed.params)}
    """)

    c1, c2 = st.columns(2)
    with c1:
        st.download_button("⬇️ Download (pickle)", data=pickle.dumps(trimmed),
                           file_name="stepwise_glm.pkl", mime="application/octet-stream")
    with c2:
        st.download_button("⬇️ Download (JSON)", data=json.dumps(trimmed.to_dict(), indent=2),
                           file_name="stepwise_glm.json", mime="application/json")
