"""
Centralized configuration: dataset location, column roles, modeling
parameters, color palette, factor labels, CSS styles.
"""

import os
from pathlib import Path

# ============================================================================
# DATA SOURCE
# ============================================================================

ROOT_DIR = Path(__file__).resolve().parent.parent

# SingaporeAuto (Frees, Regression Modeling with Actuarial and Financial Applications)
DATA_PATH = Path(os.environ.get("CLAIMS_GLM_DATA_PATH", ROOT_DIR / "data" / "SingaporeAuto.csv"))
DATA_URL = os.environ.get(
    "CLAIMS_GLM_DATA_URL",
    "https://instruction.bus.wisc.edu/jfrees/jfreesbooks/Regression%20Modeling/"
    "BookWebDec2010/CSVData/SingaporeAuto.csv",
)

FACTOR_COLS = ["SexInsured", "Female", "PC", "NCD", "AgeCat", "VAgeCat"]
EXPOSURE_COL = "Exp_weights"
CLAIMS_COL = "Clm_Count"
FREQ_COL = "Freq"

REQUIRED_COLS = FACTOR_COLS + [EXPOSURE_COL, CLAIMS_COL]

# ============================================================================
# SAMPLING
# ============================================================================

TRAIN_FRACTION = 0.80
RANDOM_SEED = 2024

# ============================================================================
# MODEL PARAMETERS
# ============================================================================

# Candidate predictors in search order; stepwise ties resolve to the earliest
PREDICTORS = list(FACTOR_COLS)

GLM_MAXITER = 100
STEPWISE_CRITERION = "aic"
STEPWISE_MAX_STEPS = 1000

MODEL_LABELS = {
    "intercept": "Intercept only",
    "full": "Full model",
    "stepwise": "Stepwise selection",
}

LIFT_BINS = 10

# ============================================================================
# LOGGING
# ============================================================================

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOG_LEVEL = os.environ.get("CLAIMS_GLM_LOG_LEVEL", "INFO")

# ============================================================================
# DASHBOARD
# ============================================================================

COLORS = {
    "primary": "#1e3a5f",
    "secondary": "#3d7bc7",
    "accent": "#e74c3c",
    "success": "#2ecc71",
    "warning": "#f39c12",
    "palette": ["#1e3a5f", "#3d7bc7", "#5ba3e6", "#8ec3f5", "#c4dff6",
                 "#e74c3c", "#f39c12", "#2ecc71"],
}

FACTOR_LABELS = {
    "SexInsured": "Insured Sex",
    "Female": "Female Flag",
    "PC": "Private Vehicle",
    "NCD": "No-Claims Discount",
    "AgeCat": "Age Category",
    "VAgeCat": "Vehicle Age Category",
}

CSS_STYLES = """
<style>
    .main .block-container { padding-top: 1.5rem; padding-bottom: 1rem; }
    .kpi-card {
        background: linear-gradient(135deg, #1e3a5f 0%, #2d5986 100%);
        border-radius: 12px; padding: 20px 24px; text-align: center;
        color: white; box-shadow: 0 4px 15px rgba(0,0,0,0.1); margin-bottom: 10px;
    }
    .kpi-card h3 { margin:0; font-size:14px; font-weight:400; opacity:0.85;
                    text-transform:uppercase; letter-spacing:0.5px; }
    .kpi-card h1 { margin:8px 0 0 0; font-size:32px; font-weight:700; }
    .kpi-card-green {
        background: linear-gradient(135deg, #1a7a4c 0%, #2ecc71 100%);
        border-radius: 12px; padding: 20px 24px; text-align: center;
        color: white; box-shadow: 0 4px 15px rgba(0,0,0,0.1); margin-bottom: 10px;
    }
    .kpi-card-green h3 { margin:0; font-size:14px; font-weight:400; opacity:0.85;
                          text-transform:uppercase; letter-spacing:0.5px; }
    .kpi-card-green h1 { margin:8px 0 0 0; font-size:32px; font-weight:700; }
    .section-header {
        background: linear-gradient(90deg, #1e3a5f, #3d7bc7);
        color: white; padding: 10px 20px; border-radius: 8px;
        margin: 20px 0 15px 0; font-size: 18px; font-weight: 600;
    }
    .footer {
        text-align:center; padding:20px; color:#888; font-size:13px;
        border-top:1px solid #eee; margin-top:30px;
    }
    #MainMenu {visibility: hidden;}
    footer {visibility: hidden;}
</style>
"""
