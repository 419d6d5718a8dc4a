"""Rebalance the training split by oversampling."""

import logging
from typing import Optional

import numpy as np
import pandas as pd
from imblearn.over_sampling import SMOTE

from ..exceptions import DegenerateSplitError
from .loading import TARGET_COL


logger = logging.getLogger(__name__)


def _kernel_bandwidth(X: np.ndarray) -> np.ndarray:
    """
    Per-feature Gaussian kernel width for a smoothed bootstrap.

    Uses the normal-reference rule (4 / ((d + 2) n)) ** (1 / (d + 4)) scaled
    by each feature's standard deviation within the class.
    """
    n, d = X.shape
    if n < 2:
        return np.zeros(d)
    constant = (4.0 / ((d + 2) * n)) ** (1.0 / (d + 4))
    return constant * X.std(axis=0, ddof=1)


def _smoothed_bootstrap(
    X: np.ndarray,
    n_samples: int,
    rng: np.random.Generator
) -> np.ndarray:
    """Draw rows with replacement and jitter them, clipped to the class range."""
    if n_samples == 0:
        return np.empty((0, X.shape[1]))
    idx = rng.integers(0, len(X), size=n_samples)
    noise = rng.standard_normal((n_samples, X.shape[1])) * _kernel_bandwidth(X)
    return np.clip(X[idx] + noise, X.min(axis=0), X.max(axis=0))


def rose_balance(
    train: pd.DataFrame,
    seed: int = 123,
    p: float = 0.5,
    n_samples: Optional[int] = None,
    target_col: str = TARGET_COL
) -> pd.DataFrame:
    """
    Build a synthetic balanced sample by smoothed bootstrap of both classes.

    Args:
        train: Training split with features and target
        seed: Random seed for reproducibility
        p: Expected share of the minority label in the output
        n_samples: Output size (defaults to the input size)
        target_col: Name of target column

    Returns:
        New DataFrame with the same columns and a fresh index
    """
    if not 0.0 < p < 1.0:
        raise ValueError(f"p must be in (0, 1), got {p}")

    counts = train[target_col].value_counts()
    if len(counts) < 2:
        raise DegenerateSplitError("Balancing needs both labels in the training split")

    n_total = len(train) if n_samples is None else int(n_samples)
    if n_total < 2:
        raise DegenerateSplitError(f"Cannot build a balanced sample of {n_total} row(s)")

    minority = counts.idxmin() if counts.iloc[0] != counts.iloc[1] else max(counts.index)
    majority = [label for label in counts.index if label != minority][0]

    rng = np.random.default_rng(seed)
    n_minority = int(np.clip(rng.binomial(n_total, p), 1, n_total - 1))
    n_majority = n_total - n_minority

    feature_cols = [col for col in train.columns if col != target_col]
    parts = []
    for label, size in [(majority, n_majority), (minority, n_minority)]:
        X_class = train.loc[train[target_col] == label, feature_cols].to_numpy(dtype=float)
        synthetic = pd.DataFrame(
            _smoothed_bootstrap(X_class, size, rng),
            columns=feature_cols
        )
        synthetic[target_col] = label
        parts.append(synthetic)

    balanced = pd.concat(parts, ignore_index=True)
    order = rng.permutation(len(balanced))
    balanced = balanced.iloc[order].reset_index(drop=True)
    balanced[target_col] = balanced[target_col].astype(train[target_col].dtype)
    return balanced[list(train.columns)]


def smote_balance(
    train: pd.DataFrame,
    seed: int = 123,
    target_col: str = TARGET_COL
) -> pd.DataFrame:
    """Oversample the minority label with SMOTE up to the majority count."""
    counts = train[target_col].value_counts()
    if len(counts) < 2:
        raise DegenerateSplitError("Balancing needs both labels in the training split")
    if counts.min() < 2:
        raise DegenerateSplitError("SMOTE needs at least 2 minority rows")

    X = train.drop(columns=[target_col])
    y = train[target_col]

    smote = SMOTE(random_state=seed, k_neighbors=min(5, int(counts.min()) - 1))
    X_resampled, y_resampled = smote.fit_resample(X, y)

    balanced = pd.DataFrame(X_resampled, columns=X.columns)
    balanced[target_col] = np.asarray(y_resampled)
    return balanced[list(train.columns)].reset_index(drop=True)


def balance(
    train: pd.DataFrame,
    seed: int = 123,
    p: float = 0.5,
    n_samples: Optional[int] = None,
    method: str = 'rose',
    target_col: str = TARGET_COL
) -> pd.DataFrame:
    """
    Return a class-balanced resample of the training split.

    Args:
        train: Training split (the test split must never be passed here)
        seed: Random seed for reproducibility
        p: Minority share for the smoothed bootstrap
        n_samples: Output size for the smoothed bootstrap
        method: 'rose' (smoothed bootstrap) or 'smote'
        target_col: Name of target column

    Returns:
        Balanced DataFrame used only for fitting
    """
    if method == 'rose':
        balanced = rose_balance(train, seed=seed, p=p, n_samples=n_samples, target_col=target_col)
    elif method == 'smote':
        balanced = smote_balance(train, seed=seed, target_col=target_col)
    else:
        raise ValueError(f"Unknown balance method: {method}")

    before = train[target_col].value_counts().to_dict()
    after = balanced[target_col].value_counts().to_dict()
    logger.info(f"Balanced training set with {method}: {before} -> {after}")
    return balanced
