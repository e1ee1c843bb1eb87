"""
Descriptive charts of the portfolio and model comparison charts (plotly).
"""

import plotly.express as px
import plotly.graph_objects as go
from plotly.subplots import make_subplots

from claims_glm import config
from claims_glm.config import COLORS, FACTOR_LABELS


def exposure_histogram(df, nbins=30):
    """Distribution of exposure weights (fraction of a year covered)."""
    fig = px.histogram(
        df, x=config.EXPOSURE_COL, nbins=nbins,
        color_discrete_sequence=[COLORS["secondary"]],
    )
    fig.update_layout(
        title="Exposure Distribution",
        xaxis_title="Exposure (years)", yaxis_title="Policies",
        template="plotly_white", height=380, bargap=0.05,
    )
    return fig


def _exposure_by_claim_count(df, by=None):
    keys = [by, config.CLAIMS_COL] if by else [config.CLAIMS_COL]
    agg = (
        df.groupby(keys, observed=True)[config.EXPOSURE_COL]
        .sum()
        .reset_index()
    )
    agg[config.CLAIMS_COL] = agg[config.CLAIMS_COL].astype(str)
    return agg


def claim_count_bar(df):
    """Claim counts weighted by exposure."""
    agg = _exposure_by_claim_count(df)
    fig = px.bar(
        agg, x=config.CLAIMS_COL, y=config.EXPOSURE_COL,
        color_discrete_sequence=[COLORS["primary"]],
    )
    fig.update_layout(
        title="Claim Count Distribution (exposure weighted)",
        xaxis_title="Number of claims", yaxis_title="Exposure (years)",
        template="plotly_white", height=380,
    )
    return fig


def claim_count_bar_by_ncd(df, facet_col_wrap=3):
    """Exposure-weighted claim counts, one panel per no-claims-discount level."""
    agg = _exposure_by_claim_count(df, by="NCD")
    agg["NCD"] = agg["NCD"].astype(str)
    fig = px.bar(
        agg, x=config.CLAIMS_COL, y=config.EXPOSURE_COL,
        facet_col="NCD", facet_col_wrap=facet_col_wrap,
        color_discrete_sequence=[COLORS["primary"]],
    )
    fig.update_layout(
        title="Claim Count Distribution by No-Claims Discount",
        template="plotly_white", height=520,
    )
    fig.for_each_annotation(lambda a: a.update(text=a.text.replace("NCD=", "NCD ")))
    return fig


def frequency_by_factor(df, factor):
    """One-way view: observed frequency per level with exposure volume bars."""
    seg = df.groupby(factor, observed=True).agg(
        Exposure=(config.EXPOSURE_COL, "sum"),
        Claims=(config.CLAIMS_COL, "sum"),
    ).reset_index()
    seg["Frequency"] = seg["Claims"] / seg["Exposure"]
    seg[factor] = seg[factor].astype(str)

    fig = make_subplots(specs=[[{"secondary_y": True}]])
    fig.add_trace(go.Bar(x=seg[factor], y=seg["Exposure"], name="Exposure",
                         marker_color=COLORS["palette"][3], opacity=0.6),
                  secondary_y=False)
    fig.add_trace(go.Scatter(x=seg[factor], y=seg["Frequency"], name="Frequency",
                             mode="lines+markers",
                             line=dict(color=COLORS["accent"], width=3)),
                  secondary_y=True)
    fig.update_layout(title=f"Claim Frequency by {FACTOR_LABELS.get(factor, factor)}",
                      template="plotly_white", height=400)
    fig.update_yaxes(title_text="Exposure (years)", secondary_y=False)
    fig.update_yaxes(title_text="Claims per year", secondary_y=True)
    return fig


def gini_comparison_chart(table):
    """Grouped bars of train and validation Gini per model."""
    fig = go.Figure()
    fig.add_trace(go.Bar(x=table["Model"], y=table["Gini (train)"], name="Train",
                         marker_color=COLORS["primary"]))
    fig.add_trace(go.Bar(x=table["Model"], y=table["Gini (validation)"], name="Validation",
                         marker_color=COLORS["warning"]))
    fig.update_layout(title="Gini Concordance (Somers' Dxy)", barmode="group",
                      yaxis_title="Dxy", template="plotly_white", height=400)
    return fig


def lift_chart(lift, title="Validation Lift Curve"):
    """Actual vs predicted frequency by decile of predicted frequency."""
    fig = go.Figure()
    fig.add_trace(go.Bar(x=lift["decile_label"], y=lift["avg_actual"],
                         name="Actual", marker_color=COLORS["primary"]))
    fig.add_trace(go.Scatter(x=lift["decile_label"], y=lift["avg_predicted"],
                             name="Predicted", mode="lines+markers",
                             line=dict(color=COLORS["accent"], width=3)))
    fig.update_layout(title=title, xaxis_title="Decile of predicted frequency",
                      yaxis_title="Claims per year", template="plotly_white", height=400)
    return fig
