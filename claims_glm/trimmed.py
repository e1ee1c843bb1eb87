"""
Prediction-only representation of a fitted frequency GLM.

A statsmodels results object keeps the training frame, residuals, weights,
the formula evaluation environment and the family callbacks alive. TrimmedGLM
retains the coefficients and the factor levels needed to rebuild the
treatment-coded design matrix for new policies.
"""

import logging
from dataclasses import dataclass, field

import numpy as np
import pandas as pd

from claims_glm import config
from claims_glm.models import build_formula

logger = logging.getLogger(__name__)


def _to_builtin(value):
    return value.item() if isinstance(value, np.generic) else value


@dataclass
class TrimmedGLM:
    params: pd.Series
    formula: str
    response: str
    intercept: bool
    # factor -> list of (design column, level)
    columns: dict = field(default_factory=dict)
    levels: dict = field(default_factory=dict)
    link: str = "log"
    family: str = "Poisson"
    offset_col: str = config.EXPOSURE_COL

    @property
    def predictors(self):
        return list(self.columns)

    def design_matrix(self, df):
        """Treatment-coded design matrix for ``df`` in coefficient order."""
        exog = pd.DataFrame(index=df.index)
        if self.intercept:
            exog["Intercept"] = np.ones(len(df))

        for factor, cols in self.columns.items():
            raw = np.asarray(df[factor], dtype=object)
            unknown = ~pd.Series(raw).isin(self.levels[factor]).to_numpy()
            if unknown.any():
                bad = sorted({str(v) for v in raw[unknown]})
                raise ValueError(f"Unknown levels for {factor}: {bad}")

            for col_name, level in cols:
                exog[col_name] = (raw == level).astype(float)

        # C order keeps the dot product on the same path as statsmodels' exog
        return np.ascontiguousarray(exog[list(self.params.index)].to_numpy(dtype=float))

    def offset(self, df):
        return np.log(df[self.offset_col].to_numpy(dtype=float))

    def linear_predictor(self, df):
        return np.dot(self.design_matrix(df), self.params.to_numpy()) + self.offset(df)

    def predict(self, df):
        """Expected claim counts (mean response) for ``df``."""
        return np.exp(self.linear_predictor(df))

    def to_dict(self):
        return {
            "params": {k: float(v) for k, v in self.params.items()},
            "formula": self.formula,
            "response": self.response,
            "intercept": self.intercept,
            "columns": {f: [[c, _to_builtin(lvl)] for c, lvl in cols]
                        for f, cols in self.columns.items()},
            "levels": {f: [_to_builtin(v) for v in lv] for f, lv in self.levels.items()},
            "link": self.link,
            "family": self.family,
            "offset_col": self.offset_col,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            params=pd.Series(data["params"], dtype=float),
            formula=data["formula"],
            response=data["response"],
            intercept=data["intercept"],
            columns={f: [tuple(pair) for pair in cols] for f, cols in data["columns"].items()},
            levels={f: list(lv) for f, lv in data["levels"].items()},
            link=data["link"],
            family=data["family"],
            offset_col=data["offset_col"],
        )


def _factor_columns(factor, categories, exog_names):
    """Pair each non-reference level of ``factor`` with its design column."""
    by_label = {f"{factor}[T.{level}]": level for level in categories[1:]}
    if all(name in exog_names for name in by_label):
        return list(by_label.items())

    # fall back to position when the formula engine labels levels differently
    names = [n for n in exog_names if n.startswith(f"{factor}[")]
    if len(names) != len(categories) - 1:
        raise ValueError(f"Term {factor} is not treatment coded against its first level")
    return list(zip(names, categories[1:]))


def trim_model(results, data, offset_col=config.EXPOSURE_COL):
    """Convert fitted formula-GLM results into a TrimmedGLM.

    ``data`` is the frame the model was fitted on; its categorical dtypes
    supply the factor levels. Only main effects of categorical factors under
    a log link are supported, which is what the frequency models use.
    """
    model = results.model
    exog_names = list(model.exog_names)

    link_name = type(model.family.link).__name__.lower()
    if link_name != "log":
        raise ValueError(f"Unsupported link function: {link_name}")

    factors = [
        col for col in data.columns
        if isinstance(data[col].dtype, pd.CategoricalDtype)
        and any(name.startswith(f"{col}[") for name in exog_names)
    ]
    factors.sort(key=lambda col: min(i for i, n in enumerate(exog_names)
                                     if n.startswith(f"{col}[")))

    columns = {}
    levels = {}
    for factor in factors:
        categories = list(data[factor].cat.categories)
        levels[factor] = categories
        columns[factor] = _factor_columns(factor, categories, exog_names)

    covered = {"Intercept"} | {c for cols in columns.values() for c, _ in cols}
    uncovered = [n for n in exog_names if n not in covered]
    if uncovered:
        raise ValueError(f"Design columns without a categorical factor: {uncovered}")

    trimmed = TrimmedGLM(
        params=results.params.copy(),
        formula=build_formula(factors),
        response=model.endog_names,
        intercept="Intercept" in exog_names,
        columns=columns,
        levels=levels,
        link=link_name,
        family=type(model.family).__name__,
        offset_col=offset_col,
    )
    logger.info("Trimmed %s to %d coefficients", trimmed.formula, len(trimmed.params))
    return trimmed
