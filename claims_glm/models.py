"""
Modeling module: Poisson GLM claim frequency models (intercept-only, full,
stepwise-selected) with log(exposure) offset, and their evaluation.
"""

import logging
import warnings
from dataclasses import asdict, dataclass

import numpy as np
import pandas as pd
import statsmodels.api as sm
import statsmodels.formula.api as smf
from scipy import stats
from statsmodels.tools.sm_exceptions import ConvergenceWarning

from claims_glm import config
from claims_glm.errors import ModelFitError

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Fitting
# ─────────────────────────────────────────────────────────────────────────────

def build_formula(terms):
    """Patsy formula for the claim count response on the given factor terms."""
    rhs = " + ".join(terms) if terms else "1"
    return f"{config.CLAIMS_COL} ~ {rhs}"


def log_exposure(df):
    return np.log(df[config.EXPOSURE_COL].to_numpy(dtype=float))


def fit_poisson_glm(df, terms, maxiter=config.GLM_MAXITER):
    """
    Fit a Poisson GLM (log link) of claim count on ``terms`` with
    log(exposure) as offset.

    Raises ModelFitError if IRLS does not converge or the deviance is not
    finite. Aliased design columns are only reported.
    """
    formula = build_formula(terms)
    model = smf.glm(
        formula,
        data=df,
        family=sm.families.Poisson(link=sm.families.links.Log()),
        offset=log_exposure(df),
    )

    n_cols = model.exog.shape[1]
    rank = int(model.df_model) + 1
    if rank < n_cols:
        logger.warning("Design for '%s' is rank deficient (rank %d < %d columns); "
                       "aliased coefficients are not identifiable", formula, rank, n_cols)

    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always", ConvergenceWarning)
        try:
            results = model.fit(maxiter=maxiter, method="IRLS")
        except (np.linalg.LinAlgError, ValueError, FloatingPointError) as exc:
            raise ModelFitError(f"Fitting '{formula}' failed: {exc}") from exc

    convergence_warnings = [w for w in caught if issubclass(w.category, ConvergenceWarning)]
    if convergence_warnings or not getattr(results, "converged", True):
        raise ModelFitError(
            f"'{formula}' did not converge within {maxiter} IRLS iterations"
        )
    if not np.isfinite(results.deviance):
        raise ModelFitError(f"'{formula}' produced a non-finite deviance")

    logger.debug("Fitted %s: deviance=%.4f aic=%.4f", formula, results.deviance, results.aic)
    return results


def fit_intercept_model(train):
    """Intercept-only Poisson GLM: one overall claim rate."""
    return fit_poisson_glm(train, [])


def fit_full_model(train, predictors=None):
    """Poisson GLM on every rating factor."""
    predictors = list(config.PREDICTORS if predictors is None else predictors)
    return fit_poisson_glm(train, predictors)


def _criterion_value(results, criterion):
    if criterion == "aic":
        return float(results.aic)
    if criterion == "bic":
        return float(results.bic_llf)
    raise ValueError(f"Unknown selection criterion: {criterion!r}")


@dataclass
class StepwiseResult:
    results: object
    terms: list
    history: pd.DataFrame
    criterion: str


def fit_stepwise_model(train, lower=(), upper=None, criterion=config.STEPWISE_CRITERION,
                       max_steps=config.STEPWISE_MAX_STEPS):
    """
    Bidirectional stepwise selection starting from the ``lower`` model.

    At each step every single-term drop (terms of ``lower`` are never dropped)
    and every single-term addition from ``upper`` is fitted; the move with the
    lowest criterion is taken if it strictly improves on the current model.
    Candidates are scanned as: current model, drops in current term order,
    additions in ``upper`` order. Ties keep the earliest candidate.
    """
    upper = list(config.PREDICTORS if upper is None else upper)
    lower = list(lower)
    if not set(lower) <= set(upper):
        raise ValueError("lower scope must be a subset of the upper scope")

    fitted = {}

    def fit_terms(terms):
        key = frozenset(terms)
        if key not in fitted:
            fitted[key] = fit_poisson_glm(train, terms)
        return fitted[key]

    current_terms = list(lower)
    current = fit_terms(current_terms)
    current_score = _criterion_value(current, criterion)
    history = [{"step": 0, "action": "start", "term": None,
                "formula": build_formula(current_terms), criterion: current_score}]
    logger.info("Stepwise start: %s  %s=%.3f", build_formula(current_terms),
                criterion.upper(), current_score)

    for step in range(1, max_steps + 1):
        candidates = [("drop", t, [x for x in current_terms if x != t])
                      for t in current_terms if t not in lower]
        candidates += [("add", t, current_terms + [t])
                       for t in upper if t not in current_terms]

        best = None
        best_score = current_score
        for action, term, terms in candidates:
            score = _criterion_value(fit_terms(terms), criterion)
            if score < best_score:
                best, best_score = (action, term, terms), score

        if best is None:
            break

        action, term, current_terms = best
        current = fit_terms(current_terms)
        current_score = best_score
        history.append({"step": step, "action": action, "term": term,
                        "formula": build_formula(current_terms), criterion: current_score})
        logger.info("Step %d: %s %s -> %s=%.3f", step, action, term,
                    criterion.upper(), current_score)
    else:
        logger.warning("Stepwise search stopped after max_steps=%d", max_steps)

    return StepwiseResult(
        results=current,
        terms=current_terms,
        history=pd.DataFrame(history),
        criterion=criterion,
    )


def fit_candidate_models(train, criterion=config.STEPWISE_CRITERION):
    """Fit the intercept, full and stepwise models, in that order."""
    logger.info("Fitting intercept-only model on %d rows", len(train))
    intercept = fit_intercept_model(train)
    logger.info("Fitting full model")
    full = fit_full_model(train)
    logger.info("Running stepwise selection (%s)", criterion.upper())
    stepwise = fit_stepwise_model(train, criterion=criterion)

    models = {
        "intercept": intercept,
        "full": full,
        "stepwise": stepwise.results,
    }
    return models, stepwise


# ─────────────────────────────────────────────────────────────────────────────
# Evaluation
# ─────────────────────────────────────────────────────────────────────────────

def _untied_pairs(values):
    n = len(values)
    _, counts = np.unique(values, return_counts=True)
    return n * (n - 1) / 2 - np.sum(counts * (counts - 1) / 2)


def concordance_dxy(predicted, actual):
    """
    Somers' Dxy between predictions and observed outcomes.

    Only pairs with different actual outcomes are comparable; a pair tied on
    the prediction counts one half. Dxy = 2 * C - 1, in [-1, 1]. Returns NaN
    if no pair is comparable and 0.0 if every prediction is tied.
    """
    predicted = np.asarray(predicted, dtype=float)
    actual = np.asarray(actual, dtype=float)
    if predicted.shape != actual.shape:
        raise ValueError("predicted and actual must have the same length")

    untied_actual = _untied_pairs(actual)
    if untied_actual == 0:
        logger.warning("No comparable pairs: all %d actual outcomes are tied", len(actual))
        return float("nan")

    untied_pred = _untied_pairs(predicted)
    if untied_pred == 0:
        return 0.0

    # tau_b = (P - Q) / sqrt(untied_pred * untied_actual)
    tau_b, _ = stats.kendalltau(predicted, actual)
    dxy = tau_b * np.sqrt(untied_pred / untied_actual)
    return float(np.clip(dxy, -1.0, 1.0))


def predict_counts(results, df):
    """Expected claim counts for ``df`` including its exposure offset."""
    return np.asarray(results.predict(df, offset=log_exposure(df)), dtype=float)


@dataclass
class EvaluationRow:
    description: str
    deviance: float
    aic: float
    gini_train: float
    gini_validation: float

    def to_dict(self):
        return asdict(self)


def evaluate_model(description, results, train, validation):
    """Deviance, AIC and train/validation concordance for one fitted model."""
    gini_train = concordance_dxy(np.asarray(results.fittedvalues), train[config.FREQ_COL])
    gini_validation = concordance_dxy(predict_counts(results, validation),
                                      validation[config.FREQ_COL])
    return EvaluationRow(
        description=description,
        deviance=float(results.deviance),
        aic=float(results.aic),
        gini_train=gini_train,
        gini_validation=gini_validation,
    )


COMPARISON_COLUMNS = {
    "description": "Model",
    "deviance": "Deviance",
    "aic": "AIC",
    "gini_train": "Gini (train)",
    "gini_validation": "Gini (validation)",
}


def build_comparison_table(models, train, validation):
    """One evaluation row per model, in the mapping's (fit) order."""
    rows = [
        evaluate_model(config.MODEL_LABELS.get(key, key), results, train, validation).to_dict()
        for key, results in models.items()
    ]
    return pd.DataFrame(rows, columns=list(COMPARISON_COLUMNS)).rename(columns=COMPARISON_COLUMNS)


def relativity_table(results):
    """Coefficients with standard errors, p-values and relativities exp(β)."""
    coef_df = pd.DataFrame({
        "Variable": results.params.index,
        "Coefficient": results.params.values,
        "Std Error": results.bse.values,
        "P-value": results.pvalues.values,
        "Relativity": np.exp(results.params.values),
    })
    coef_df["Significant"] = coef_df["P-value"] < 0.05
    return coef_df


def compute_glm_diagnostics(results):
    """
    Goodness-of-fit diagnostics for a Poisson GLM.
    Returns dictionary with test statistics and dispersion check.
    """
    diagnostics = {
        "deviance": float(results.deviance),
        "null_deviance": float(results.null_deviance),
        "df_resid": float(results.df_resid),
        "df_model": float(results.df_model),
        "aic": float(results.aic),
        "bic": float(results.bic_llf),
    }

    if results.null_deviance > 0:
        diagnostics["pseudo_r2"] = 1 - results.deviance / results.null_deviance
    else:
        diagnostics["pseudo_r2"] = 0.0

    # Pearson chi-square and overdispersion
    pearson_chi2 = float(results.pearson_chi2)
    diagnostics["pearson_chi2"] = pearson_chi2
    if results.df_resid > 0:
        diagnostics["dispersion_ratio"] = pearson_chi2 / results.df_resid
        diagnostics["overdispersed"] = diagnostics["dispersion_ratio"] > 1.5
    else:
        diagnostics["dispersion_ratio"] = 1.0
        diagnostics["overdispersed"] = False

    # Likelihood ratio test (model vs intercept-only)
    lr_stat = results.null_deviance - results.deviance
    diagnostics["lr_statistic"] = float(lr_stat)
    if results.df_model > 0:
        diagnostics["lr_pvalue"] = float(stats.chi2.sf(lr_stat, results.df_model))
    else:
        diagnostics["lr_pvalue"] = 1.0

    return diagnostics


def compute_lift_curve(claims, predicted_counts, exposure, n_bins=config.LIFT_BINS):
    """Actual vs predicted frequency by decile of predicted frequency."""
    df_lift = pd.DataFrame({
        "claims": np.asarray(claims, dtype=float),
        "pred": np.asarray(predicted_counts, dtype=float),
        "w": np.asarray(exposure, dtype=float),
    })
    pred_freq = df_lift["pred"] / df_lift["w"]
    # rank first so constant predictions still fill every bin
    df_lift["decile"] = pd.qcut(pred_freq.rank(method="first"), q=n_bins, labels=False)

    lift = df_lift.groupby("decile").agg(
        claims=("claims", "sum"),
        predicted=("pred", "sum"),
        exposure=("w", "sum"),
        count=("w", "size"),
    ).reset_index()
    lift["avg_actual"] = lift["claims"] / lift["exposure"]
    lift["avg_predicted"] = lift["predicted"] / lift["exposure"]
    lift["decile_label"] = [f"D{i+1}" for i in range(len(lift))]
    return lift
