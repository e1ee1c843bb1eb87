"""
🚗 Claim Frequency GLM Dashboard
=================================
Exploratory analysis and Poisson GLM frequency modelling:
- Portfolio overview (exposure, claim counts, one-way frequency)
- Intercept-only, full and stepwise-selected Poisson GLMs with exposure offset
- Deviance / AIC / Gini concordance comparison on training and validation data
- Trimmed, prediction-only export of the selected model

Dataset: SingaporeAuto (Frees, Regression Modeling with Actuarial and Financial Applications)
"""

import logging
import warnings

import streamlit as st

from claims_glm import config
from claims_glm.errors import ClaimsGLMError

warnings.filterwarnings("ignore")
logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)

# ═══════════════════════════════════════════════════════════════════════════════
# PAGE CONFIG
# ═══════════════════════════════════════════════════════════════════════════════

st.set_page_config(
    page_title="Claim Frequency GLM Dashboard",
    page_icon="🚗",
    layout="wide",
    initial_sidebar_state="expanded"
)

st.markdown(config.CSS_STYLES, unsafe_allow_html=True)


# ═══════════════════════════════════════════════════════════════════════════════
# DATA & MODEL CACHING
# ═══════════════════════════════════════════════════════════════════════════════

@st.cache_resource(show_spinner="Loading SingaporeAuto dataset...")
def load_cached_data(path):
    from claims_glm.data_loader import load_data, transform_features
    return transform_features(load_data(path))


@st.cache_resource(show_spinner="Fitting intercept, full and stepwise Poisson GLMs...")
def run_cached_analysis(_df, train_fraction, seed, criterion):
    from claims_glm.pipeline import analyse
    return analyse(_df, train_fraction=train_fraction, seed=seed, criterion=criterion)


# ═══════════════════════════════════════════════════════════════════════════════
# SIDEBAR
# ═══════════════════════════════════════════════════════════════════════════════

with st.sidebar:
    st.markdown("## 🚗 Frequency GLM")
    st.markdown("---")

    page = st.radio(
        "**Navigation**",
        ["📊 Portfolio Overview",
         "🎯 GLM Models",
         "⚖️ Model Comparison"],
        index=0
    )

    st.markdown("---")
    train_fraction = st.slider("Training fraction", 0.5, 0.95, config.TRAIN_FRACTION, 0.05)
    seed = st.number_input("Random seed", value=config.RANDOM_SEED, step=1)
    criterion = st.selectbox("Stepwise criterion", ["aic", "bic"],
                             format_func=str.upper)

    st.markdown("---")
    st.markdown("""
    **Dataset:** SingaporeAuto
    *Private motor policies*

    **Models:**
    - Poisson GLM, intercept only
    - Poisson GLM, all factors
    - Poisson GLM, stepwise selection

    **Offset:** log(exposure)
    """)


# ═══════════════════════════════════════════════════════════════════════════════
# LOAD DATA
# ═══════════════════════════════════════════════════════════════════════════════

try:
    df = load_cached_data(str(config.DATA_PATH))
except ClaimsGLMError as exc:
    st.error(f"**Dataset unavailable.** {exc}\n\n"
             "Check the connection to `CLAIMS_GLM_DATA_URL` or set `CLAIMS_GLM_DATA_PATH` "
             "to a local SingaporeAuto CSV and reload.")
    st.stop()


# ═══════════════════════════════════════════════════════════════════════════════
# PAGES
# ═══════════════════════════════════════════════════════════════════════════════

from claims_glm.pages import glm_model, model_comparison, portfolio  # noqa: E402

if page == "📊 Portfolio Overview":
    portfolio.render(df)
else:
    try:
        result = run_cached_analysis(df, train_fraction, int(seed), criterion)
    except ClaimsGLMError as exc:
        st.error(f"**Model fitting failed.** {exc}")
        st.stop()

    if page == "🎯 GLM Models":
        glm_model.render(result)
    elif page == "⚖️ Model Comparison":
        model_comparison.render(result)


# ═══════════════════════════════════════════════════════════════════════════════
# FOOTER
# ═══════════════════════════════════════════════════════════════════════════════

st.markdown("""
<div class="footer">
    <strong>Claim Frequency GLM Dashboard</strong><br>
    Dataset: SingaporeAuto | Models: Poisson GLM (intercept, full, stepwise) with log(exposure) offset<br>
    <em>EDA → Train/Validation Split → GLM Fitting → Gini Evaluation → Trimmed Export</em>
</div>
""", unsafe_allow_html=True)
