"""Create the stratified train/test split."""

import hashlib
import logging

import pandas as pd
from sklearn.model_selection import train_test_split

from ..exceptions import DegenerateSplitError, SchemaError
from .loading import TARGET_COL


logger = logging.getLogger(__name__)


def stratified_split(
    df: pd.DataFrame,
    train_fraction: float = 0.8,
    seed: int = 123,
    target_col: str = TARGET_COL
) -> tuple[pd.DataFrame, pd.DataFrame]:
    """
    Create a stratified train/test split.

    Args:
        df: Input DataFrame with features and target
        train_fraction: Proportion of rows for the training set, in (0, 1)
        seed: Random seed for reproducibility
        target_col: Name of target column

    Returns:
        Tuple of (train_df, test_df); the original index is kept so the
        union of both indices is the input index

    Raises:
        DegenerateSplitError: If the fraction is out of range or the split
            would leave a side empty or holding a single label
    """
    if not 0.0 < train_fraction < 1.0:
        raise DegenerateSplitError(
            f"train_fraction must be in (0, 1), got {train_fraction}"
        )
    if target_col not in df.columns:
        raise SchemaError(f"Missing target column: {target_col}")

    counts = df[target_col].value_counts()
    if len(counts) < 2:
        raise DegenerateSplitError(
            f"Stratification needs two labels, found {sorted(counts.index.tolist())}"
        )
    if counts.min() < 2:
        raise DegenerateSplitError(
            f"Label {counts.idxmin()} has {counts.min()} row(s); "
            "at least 2 are needed to appear in both splits"
        )

    n_train = int(train_fraction * len(df))
    if n_train == 0 or n_train == len(df):
        raise DegenerateSplitError(
            f"train_fraction {train_fraction} on {len(df)} rows leaves an empty split"
        )

    try:
        train_df, test_df = train_test_split(
            df,
            train_size=train_fraction,
            random_state=seed,
            stratify=df[target_col]
        )
    except ValueError as e:
        raise DegenerateSplitError(f"Stratified split impossible: {e}") from e

    for name, part in [('train', train_df), ('test', test_df)]:
        if part[target_col].nunique() < 2:
            raise DegenerateSplitError(
                f"The {name} split holds a single label; use more data "
                "or a different train_fraction"
            )

    logger.info(
        f"Split {len(df):,} rows into {len(train_df):,} train / {len(test_df):,} test "
        f"(train_fraction={train_fraction}, seed={seed})"
    )
    return train_df, test_df


def compute_dataset_hash(df: pd.DataFrame) -> str:
    """Compute SHA256 hash of dataset for versioning."""
    df_bytes = pd.util.hash_pandas_object(df, index=True).values.tobytes()
    return hashlib.sha256(df_bytes).hexdigest()


def split_summary(
    train_df: pd.DataFrame,
    test_df: pd.DataFrame,
    target_col: str = TARGET_COL
) -> pd.DataFrame:
    """Row count, fraud count and fraud percentage per split."""
    rows = []
    for name, part in [('Train', train_df), ('Test', test_df)]:
        fraud = int(part[target_col].sum())
        rows.append({
            'split': name,
            'rows': len(part),
            'fraud': fraud,
            'fraud_pct': 100 * fraud / len(part) if len(part) else 0.0,
            'hash': compute_dataset_hash(part),
        })
    return pd.DataFrame(rows).set_index('split')


def print_split_stats(
    train_df: pd.DataFrame,
    test_df: pd.DataFrame,
    target_col: str = TARGET_COL
) -> None:
    """Print statistics about the splits."""
    summary = split_summary(train_df, test_df, target_col)
    for name, row in summary.iterrows():
        print(f"{name:10s}: {row['rows']:6d} rows, {row['fraud']:4d} fraud ({row['fraud_pct']:.3f}%)")
    print(f"{'Total':10s}: {len(train_df) + len(test_df):6d} rows")
