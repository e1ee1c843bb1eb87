"""
Data loading and preparation module.
Uses the SingaporeAuto dataset: private motor policies from a Singapore
insurer (Frees, Regression Modeling with Actuarial and Financial Applications).
"""

import logging
from pathlib import Path

import numpy as np
import pandas as pd

from claims_glm import config
from claims_glm.errors import DataValidationError, DatasetUnavailableError

logger = logging.getLogger(__name__)


def _read_remote_csv(url):
    return pd.read_csv(url)


def fetch_dataset(path, url=None) -> Path:
    """
    Download the published SingaporeAuto CSV and cache it at ``path``.
    Raises DatasetUnavailableError if the download fails.
    """
    url = url or config.DATA_URL
    path = Path(path)
    logger.info("Downloading SingaporeAuto dataset from %s", url)
    try:
        df = _read_remote_csv(url)
    except (OSError, ValueError) as exc:
        # URLError/HTTPError are OSError; parser errors are ValueError
        logger.error("Could not download dataset from %s: %s", url, exc)
        raise DatasetUnavailableError(f"Could not download dataset from {url}: {exc}") from exc

    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=False)
    logger.info("Cached %d records at %s", len(df), path)
    return path


def load_data(path=None, download=True) -> pd.DataFrame:
    """Load the raw SingaporeAuto policy table.

    A missing file is downloaded from ``config.DATA_URL`` and cached first,
    unless ``download`` is False. Raises DatasetUnavailableError when the
    file cannot be obtained or read, or lacks one of the columns the
    transform step references.
    """
    path = Path(path) if path is not None else config.DATA_PATH

    if not path.is_file():
        if not download:
            logger.error("Dataset not found at %s", path)
            raise DatasetUnavailableError(f"Dataset not found: {path}")
        fetch_dataset(path)

    try:
        df = pd.read_csv(path)
    except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as exc:
        logger.error("Could not read dataset %s: %s", path, exc)
        raise DatasetUnavailableError(f"Could not read dataset {path}: {exc}") from exc

    missing = [c for c in config.REQUIRED_COLS if c not in df.columns]
    if missing:
        logger.error("Dataset %s is missing columns %s", path, missing)
        raise DatasetUnavailableError(f"Dataset {path} is missing columns: {missing}")

    # -------------------------------------------------------------------
    # Basic type conversions
    # -------------------------------------------------------------------
    for col in [config.EXPOSURE_COL, config.CLAIMS_COL]:
        df[col] = pd.to_numeric(df[col], errors="coerce")

    if not pd.api.types.is_numeric_dtype(df["SexInsured"]):
        df["SexInsured"] = df["SexInsured"].astype(str).str.strip("'\" ")

    logger.info("Loaded %d policy records from %s", len(df), path)
    return df


def transform_features(df: pd.DataFrame) -> pd.DataFrame:
    """Recode rating factors as unordered categoricals and derive claim frequency.

    Returns a new frame with the six factors, exposure, claim count and
    ``Freq``; the input frame is left untouched.
    """
    exposure = df[config.EXPOSURE_COL]
    bad_exposure = ~(exposure > 0)
    if bad_exposure.any():
        n_bad = int(bad_exposure.sum())
        logger.error("%d records have missing or non-positive exposure", n_bad)
        raise DataValidationError(
            f"{n_bad} records have missing or non-positive {config.EXPOSURE_COL}"
        )

    claims = df[config.CLAIMS_COL]
    bad_claims = ~(claims >= 0)
    if bad_claims.any():
        n_bad = int(bad_claims.sum())
        logger.error("%d records have missing or negative claim counts", n_bad)
        raise DataValidationError(
            f"{n_bad} records have missing or negative {config.CLAIMS_COL}"
        )

    out = pd.DataFrame(index=df.index)
    for col in config.FACTOR_COLS:
        out[col] = pd.Categorical(df[col], ordered=False)

    out[config.EXPOSURE_COL] = df[config.EXPOSURE_COL].astype(float)
    out[config.CLAIMS_COL] = df[config.CLAIMS_COL]
    out[config.FREQ_COL] = out[config.CLAIMS_COL] / out[config.EXPOSURE_COL]

    return out


def split_train_validation(df: pd.DataFrame, train_fraction=config.TRAIN_FRACTION,
                           seed=config.RANDOM_SEED):
    """
    Partition rows into training and validation sets.

    Draws floor(N * train_fraction) row positions without replacement from a
    generator seeded with ``seed``; every other row goes to validation. Both
    subsets keep the original row order and index labels.
    """
    if not 0 < train_fraction < 1:
        raise ValueError(f"train_fraction must lie strictly between 0 and 1, got {train_fraction}")

    n_rows = len(df)
    n_train = int(np.floor(n_rows * train_fraction))

    rng = np.random.default_rng(seed)
    train_pos = np.sort(rng.choice(n_rows, size=n_train, replace=False))

    in_train = np.zeros(n_rows, dtype=bool)
    in_train[train_pos] = True

    train = df.iloc[train_pos].copy()
    validation = df.iloc[np.flatnonzero(~in_train)].copy()

    logger.info("Split %d rows into %d training / %d validation (seed=%s)",
                n_rows, len(train), len(validation), seed)
    return train, validation
