"""Load and validate the credit card transaction table."""

import logging
from pathlib import Path
from typing import Union

import numpy as np
import pandas as pd

from ..exceptions import DataLoadError, SchemaError


logger = logging.getLogger(__name__)

TIME_COL = 'Time'
AMOUNT_COL = 'Amount'
TARGET_COL = 'Class'
PCA_FEATURES = [f'V{i}' for i in range(1, 29)]
EXPECTED_COLUMNS = [TIME_COL] + PCA_FEATURES + [AMOUNT_COL, TARGET_COL]


def load_transactions(path: Union[str, Path]) -> pd.DataFrame:
    """
    Read a delimited transaction file with a header row.

    Args:
        path: Path to creditcard.csv

    Returns:
        DataFrame with one row per transaction

    Raises:
        FileNotFoundError: If the path does not exist
        DataLoadError: If the file is empty or cannot be parsed
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Dataset not found at {path}")

    try:
        df = pd.read_csv(path)
    except (pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError) as e:
        raise DataLoadError(f"Could not parse {path}: {e}") from e

    if df.empty:
        raise DataLoadError(f"No transactions in {path}")

    logger.info(f"Loaded {len(df):,} transactions with {df.shape[1]} columns from {path}")
    return df


def validate_schema(df: pd.DataFrame) -> bool:
    """
    Validate input data schema.

    Args:
        df: Input DataFrame

    Returns:
        True if schema is valid

    Raises:
        SchemaError: If schema validation fails
    """
    missing_cols = set(EXPECTED_COLUMNS) - set(df.columns)
    if missing_cols:
        raise SchemaError(f"Missing required columns: {sorted(missing_cols)}")

    extra_cols = set(df.columns) - set(EXPECTED_COLUMNS)
    if extra_cols:
        raise SchemaError(f"Unexpected columns: {sorted(extra_cols)}")

    non_numeric = [
        col for col in EXPECTED_COLUMNS
        if not pd.api.types.is_numeric_dtype(df[col]) or pd.api.types.is_bool_dtype(df[col])
    ]
    if non_numeric:
        raise SchemaError(f"Non-numeric values in columns: {non_numeric}")

    if df.isnull().any().any():
        raise SchemaError("Data contains missing values")

    if not np.isfinite(df[EXPECTED_COLUMNS].to_numpy(dtype=float)).all():
        raise SchemaError("Data contains infinite values")

    if (df[AMOUNT_COL] < 0).any():
        raise SchemaError("Amount column contains negative values")

    labels = set(df[TARGET_COL].unique())
    if not labels <= {0, 1}:
        raise SchemaError(f"Class column must hold only 0/1, found {sorted(labels)}")

    return True
