"""
Page 2 — GLM Frequency Models
"""

import numpy as np
import plotly.graph_objects as go
import streamlit as st

from claims_glm import config
from claims_glm.components import kpi_row, section_title
from claims_glm.config import COLORS
from claims_glm.models import compute_glm_diagnostics, relativity_table


def render(result):
    """Render the GLM model page."""

    st.title("🎯 Poisson GLM Frequency Models")
    st.markdown("*Claim counts modelled with a Poisson GLM, log link and log(exposure) offset.*")

    stepwise = result.models["stepwise"]

    kpi_row([
        ("Training Rows", f"{len(result.train):,}"),
        ("Validation Rows", f"{len(result.validation):,}"),
        ("Selected Factors", f"{len(result.trimmed.predictors)}"),
        ("Stepwise AIC", f"{stepwise.aic:,.1f}"),
    ], highlight={"Stepwise AIC"})

    # --- Stepwise search ---
    section_title("🪜", "Stepwise Selection Path")
    st.dataframe(result.stepwise_history, use_container_width=True, hide_index=True)

    # --- Relativities ---
    section_title("📐", "Frequency Relativities (exp(β))")

    key = st.radio("Model", list(result.models),
                   format_func=lambda k: config.MODEL_LABELS.get(k, k), horizontal=True)
    glm = result.models[key]
    coef_df = relativity_table(glm)

    factor_rows = coef_df[coef_df["Variable"] != "Intercept"]
    if not factor_rows.empty:
        colors = [COLORS["accent"] if r > 1 else COLORS["success"]
                  for r in factor_rows["Relativity"]]
        fig_rel = go.Figure(go.Bar(
            x=factor_rows["Variable"], y=factor_rows["Relativity"],
            marker_color=colors, text=np.round(factor_rows["Relativity"], 3),
            textposition="outside",
        ))
        fig_rel.add_hline(y=1, line_dash="dash", line_color="gray",
                          annotation_text="Reference = 1.0")
        fig_rel.update_layout(yaxis_title="Relativity (exp(β))",
                              template="plotly_white", height=420)
        fig_rel.update_xaxes(tickangle=-45)
        st.plotly_chart(fig_rel, use_container_width=True)

    st.dataframe(coef_df.round(4), use_container_width=True, hide_index=True)

    # --- Diagnostics ---
    section_title("🩺", "Goodness of Fit")
    diag = compute_glm_diagnostics(glm)
    d1, d2, d3, d4 = st.columns(4)
    d1.metric("Deviance", f"{diag['deviance']:,.1f}")
    d2.metric("Pseudo R²", f"{diag['pseudo_r2']:.4f}")
    d3.metric("Dispersion", f"{diag['dispersion_ratio']:.3f}")
    d4.metric("LR p-value", f"{diag['lr_pvalue']:.2e}")
    if diag["overdispersed"]:
        st.warning("Pearson dispersion above 1.5: the Poisson variance assumption looks too tight.")
