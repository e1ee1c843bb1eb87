"""
Command line entry point: ``python -m claims_glm``.
"""

import argparse
import logging
import pickle
import sys
from pathlib import Path
from typing import List, Optional

import pandas as pd

from claims_glm import config
from claims_glm.errors import ClaimsGLMError
from claims_glm.pipeline import run_pipeline

logger = logging.getLogger("claims_glm")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Fit and compare Poisson claim frequency GLMs on the SingaporeAuto portfolio."
    )
    parser.add_argument("--data", type=Path, default=None,
                        help=f"CSV dataset path (default: {config.DATA_PATH}).")
    parser.add_argument("--train-fraction", type=float, default=config.TRAIN_FRACTION,
                        help="Share of rows sampled into the training set.")
    parser.add_argument("--seed", type=int, default=config.RANDOM_SEED,
                        help="Seed for the train/validation split.")
    parser.add_argument("--criterion", choices=["aic", "bic"], default=config.STEPWISE_CRITERION,
                        help="Information criterion for stepwise selection.")
    parser.add_argument("--output-model", type=Path, default=None,
                        help="Pickle the trimmed stepwise model to this path.")
    parser.add_argument("--no-download", action="store_true",
                        help="Fail instead of downloading the dataset when the CSV is missing.")
    parser.add_argument("--log-level", default=config.LOG_LEVEL,
                        help="Logging level (DEBUG, INFO, WARNING, ...).")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format=config.LOG_FORMAT)

    try:
        result = run_pipeline(args.data, train_fraction=args.train_fraction,
                              seed=args.seed, criterion=args.criterion,
                              download=not args.no_download)
    except (ClaimsGLMError, ValueError) as exc:
        logger.error("Analysis failed: %s", exc)
        return 1

    with pd.option_context("display.width", 120, "display.float_format", "{:.4f}".format):
        print(result.stepwise_history.to_string(index=False))
        print()
        print(result.comparison.to_string(index=False))

    if args.output_model is not None:
        args.output_model.parent.mkdir(parents=True, exist_ok=True)
        with open(args.output_model, "wb") as fh:
            pickle.dump(result.trimmed, fh)
        logger.info("Wrote trimmed model to %s", args.output_model)

    return 0


if __name__ == "__main__":
    sys.exit(main())
