"""Tests for preprocessing module."""

import pytest
import pandas as pd
import numpy as np

from fraud_report.data.loading import EXPECTED_COLUMNS
from fraud_report.data.preprocessing import (
    AmountScaler,
    normalize_amount,
    drop_column,
    preprocess,
    split_features_target
)
from fraud_report.exceptions import SchemaError


@pytest.fixture
def sample_data():
    """Create sample transaction data."""
    np.random.seed(42)
    n_samples = 100

    data = {
        'Time': np.random.uniform(0, 172800, n_samples),
        'Amount': np.random.lognormal(4, 1.5, n_samples),
        'Class': np.random.choice([0, 1], n_samples, p=[0.9, 0.1])
    }

    for i in range(1, 29):
        data[f'V{i}'] = np.random.randn(n_samples)

    return pd.DataFrame(data)[EXPECTED_COLUMNS]


def test_amount_scaler_range(sample_data):
    """Test min-max scaling maps Amount into [0, 1]."""
    result = AmountScaler().fit_transform(sample_data)

    assert result['Amount'].between(0, 1).all()
    assert result['Amount'].min() == 0.0
    assert result['Amount'].max() == 1.0


def test_normalize_amount_extremes_exact(sample_data):
    """Test fitted min and max map to exactly 0 and 1."""
    lo = sample_data['Amount'].idxmin()
    hi = sample_data['Amount'].idxmax()

    result = normalize_amount(sample_data)

    assert result.loc[lo, 'Amount'] == 0.0
    assert result.loc[hi, 'Amount'] == 1.0


def test_normalize_amount_idempotent(sample_data):
    """Test a second application leaves the data unchanged."""
    once = normalize_amount(sample_data)
    twice = normalize_amount(once)

    pd.testing.assert_frame_equal(once, twice)


def test_normalize_amount_does_not_mutate(sample_data):
    """Test the input frame is left untouched."""
    original = sample_data.copy()
    normalize_amount(sample_data)

    pd.testing.assert_frame_equal(sample_data, original)


def test_normalize_amount_constant_column(sample_data):
    """Test a constant Amount column maps to zero."""
    sample_data['Amount'] = 7.5
    result = normalize_amount(sample_data)

    assert (result['Amount'] == 0.0).all()


def test_normalize_amount_preserves_order(sample_data):
    """Test scaling is monotone in Amount."""
    result = normalize_amount(sample_data)

    assert (
        sample_data['Amount'].rank().values == result['Amount'].rank().values
    ).all()


def test_drop_column_removes_time(sample_data):
    """Test dropping Time keeps every other column in order."""
    result = drop_column(sample_data, 'Time')

    assert 'Time' not in result.columns
    assert list(result.columns) == [c for c in sample_data.columns if c != 'Time']


def test_drop_column_missing():
    """Test dropping an absent column fails."""
    df = pd.DataFrame({'Amount': [1.0, 2.0]})

    with pytest.raises(SchemaError, match="missing column"):
        drop_column(df, 'Time')


def test_preprocess(sample_data):
    """Test full preprocessing."""
    result = preprocess(sample_data)

    assert result.shape == (len(sample_data), 30)
    assert 'Time' not in result.columns
    assert result['Amount'].between(0, 1).all()
    assert list(result.columns) == EXPECTED_COLUMNS[1:]


def test_split_features_target(sample_data):
    """Test separating features from the label."""
    X, y = split_features_target(preprocess(sample_data))

    assert 'Class' not in X.columns
    assert X.shape[1] == 29
    assert y.name == 'Class'
    assert len(X) == len(y)
