"""
End-to-end analysis: load -> transform -> split -> fit -> evaluate -> trim.
"""

import logging
from dataclasses import dataclass

import pandas as pd

from claims_glm import config
from claims_glm.data_loader import load_data, split_train_validation, transform_features
from claims_glm.models import build_comparison_table, fit_candidate_models
from claims_glm.trimmed import TrimmedGLM, trim_model

logger = logging.getLogger(__name__)


@dataclass
class AnalysisResult:
    data: pd.DataFrame
    train: pd.DataFrame
    validation: pd.DataFrame
    models: dict
    stepwise_history: pd.DataFrame
    comparison: pd.DataFrame
    trimmed: TrimmedGLM


def analyse(df, train_fraction=config.TRAIN_FRACTION, seed=config.RANDOM_SEED,
            criterion=config.STEPWISE_CRITERION):
    """Run the modelling steps on an already transformed frame."""
    train, validation = split_train_validation(df, train_fraction, seed)
    models, stepwise = fit_candidate_models(train, criterion=criterion)
    comparison = build_comparison_table(models, train, validation)
    trimmed = trim_model(models["stepwise"], train)

    return AnalysisResult(
        data=df,
        train=train,
        validation=validation,
        models=models,
        stepwise_history=stepwise.history,
        comparison=comparison,
        trimmed=trimmed,
    )


def run_pipeline(path=None, train_fraction=config.TRAIN_FRACTION, seed=config.RANDOM_SEED,
                 criterion=config.STEPWISE_CRITERION, download=True):
    raw = load_data(path, download=download)
    df = transform_features(raw)
    result = analyse(df, train_fraction=train_fraction, seed=seed, criterion=criterion)
    logger.info("Selected terms: %s", ", ".join(result.trimmed.predictors) or "(none)")
    return result
