"""Amount rescaling and column removal ahead of the train/test split."""

import logging

import numpy as np
import pandas as pd
from sklearn.base import BaseEstimator, TransformerMixin

from ..exceptions import SchemaError
from .loading import AMOUNT_COL, TARGET_COL, TIME_COL


logger = logging.getLogger(__name__)


class AmountScaler(BaseEstimator, TransformerMixin):
    """Min-max scale the Amount feature into [0, 1]."""

    def __init__(self, column: str = AMOUNT_COL):
        self.column = column

    def fit(self, X, y=None):
        if self.column not in X.columns:
            raise SchemaError(f"Missing required column: {self.column}")
        self.min_ = float(X[self.column].min())
        self.max_ = float(X[self.column].max())
        return self

    def transform(self, X):
        X = X.copy()
        span = self.max_ - self.min_
        if span == 0:
            X[self.column] = 0.0
        else:
            scaled = (X[self.column].astype(float) - self.min_) / span
            X[self.column] = scaled.clip(0.0, 1.0)
        return X


def normalize_amount(df: pd.DataFrame) -> pd.DataFrame:
    """
    Min-max scale Amount, fitting the range on the frame passed in.

    The report calls this on the full dataset before splitting, which lets
    the test split's Amount range shape the scaling. That matches the
    reference analysis and is kept for parity.

    Args:
        df: Transactions with an Amount column

    Returns:
        New DataFrame with Amount in [0, 1]
    """
    scaler = AmountScaler().fit(df)
    logger.debug(f"Amount range fitted on {len(df):,} rows: [{scaler.min_}, {scaler.max_}]")
    return scaler.transform(df)


def drop_column(df: pd.DataFrame, column: str = TIME_COL) -> pd.DataFrame:
    """Remove one column, keeping the order of the others."""
    if column not in df.columns:
        raise SchemaError(f"Cannot drop missing column: {column}")
    return df.drop(columns=[column])


def preprocess(df: pd.DataFrame) -> pd.DataFrame:
    """
    Apply the report preprocessing: scale Amount, then drop Time.

    Args:
        df: Validated transactions

    Returns:
        Preprocessed DataFrame
    """
    logger.warning(
        "Amount scaling is fitted on the full dataset before the split; "
        "test-set range information leaks into preprocessing"
    )
    return drop_column(normalize_amount(df), TIME_COL)


def split_features_target(
    df: pd.DataFrame,
    target_col: str = TARGET_COL
) -> tuple[pd.DataFrame, pd.Series]:
    """Separate the feature matrix from the label column."""
    if target_col not in df.columns:
        raise SchemaError(f"Missing target column: {target_col}")
    X = df.drop(columns=[target_col])
    y = df[target_col].astype(np.int64)
    return X, y
