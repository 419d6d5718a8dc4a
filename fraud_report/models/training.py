"""Fit every selected classifier on the balanced training set."""

import logging
import time
from typing import Dict, Iterable, Optional

import pandas as pd
from joblib import Parallel, delayed

from .classifiers import DEFAULT_MODELS, FraudClassifier, create_model


logger = logging.getLogger(__name__)


def _fit_one(model_type: str, X: pd.DataFrame, y: pd.Series, config) -> FraudClassifier:
    start = time.perf_counter()
    model = create_model(model_type, config).fit(X, y)
    logger.info(f"Fitted {model_type} on {len(X):,} rows in {time.perf_counter() - start:.2f}s")
    return model


def fit_models(
    X: pd.DataFrame,
    y: pd.Series,
    config=None,
    model_types: Optional[Iterable[str]] = None,
    n_jobs: int = 1
) -> Dict[str, FraudClassifier]:
    """
    Fit each model family independently.

    Args:
        X: Balanced training features
        y: Balanced training labels
        config: ReportConfig with the seed and hyperparameter knobs
        model_types: Families to fit (defaults to config.models or DEFAULT_MODELS)
        n_jobs: Fit families in parallel when > 1 or -1; results do not depend on it

    Returns:
        Dictionary of fitted models keyed by model type, in request order
    """
    if model_types is None:
        model_types = config.models if config is not None else DEFAULT_MODELS
    model_types = list(model_types)

    if n_jobs == 1 or len(model_types) == 1:
        fitted = [_fit_one(name, X, y, config) for name in model_types]
    else:
        fitted = Parallel(n_jobs=n_jobs)(
            delayed(_fit_one)(name, X, y, config) for name in model_types
        )

    return dict(zip(model_types, fitted))
