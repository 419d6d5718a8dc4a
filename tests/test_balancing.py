"""Tests for training-split balancing."""

import pytest
import pandas as pd
import numpy as np

from fraud_report.data.balancing import balance, rose_balance, smote_balance
from fraud_report.exceptions import DegenerateSplitError


@pytest.fixture
def train_data():
    """Create an imbalanced training split (99:1)."""
    np.random.seed(42)
    n_samples = 800
    labels = np.random.permutation([1] * 8 + [0] * (n_samples - 8))

    data = {}
    for i in range(1, 29):
        data[f'V{i}'] = np.random.randn(n_samples) + 2.0 * labels
    data['Amount'] = np.random.uniform(0, 1, n_samples)
    data['Class'] = labels

    df = pd.DataFrame(data)
    df.index = np.arange(1000, 1000 + n_samples)
    return df


def _within_class_range(source, balanced):
    features = [c for c in source.columns if c != 'Class']
    for label in (0, 1):
        src = source.loc[source['Class'] == label, features]
        out = balanced.loc[balanced['Class'] == label, features]
        if out.empty:
            continue
        assert (out.min() >= src.min()).all()
        assert (out.max() <= src.max()).all()


def test_balance_label_ratio(train_data):
    """Test labels come out approximately equal."""
    balanced = balance(train_data, seed=123)
    fraud_share = balanced['Class'].mean()

    assert 0.4 <= fraud_share <= 0.6


def test_balance_size_defaults_to_input(train_data):
    """Test output size defaults to the input size."""
    balanced = balance(train_data, seed=123)

    assert len(balanced) == len(train_data)
    assert list(balanced.columns) == list(train_data.columns)
    assert balanced['Class'].dtype == train_data['Class'].dtype


def test_balance_custom_size(train_data):
    """Test an explicit output size."""
    balanced = rose_balance(train_data, seed=1, n_samples=2000)

    assert len(balanced) == 2000
    assert 0.4 <= balanced['Class'].mean() <= 0.6


@pytest.mark.parametrize('seed', [0, 1, 123])
def test_balance_stays_in_class_range(train_data, seed):
    """Test no synthetic value leaves its source class's observed range."""
    balanced = balance(train_data, seed=seed)

    _within_class_range(train_data, balanced)


def test_balance_deterministic(train_data):
    """Test the same seed gives the same sample."""
    a = balance(train_data, seed=99)
    b = balance(train_data, seed=99)

    pd.testing.assert_frame_equal(a, b)


def test_balance_seed_changes_sample(train_data):
    """Test different seeds give different samples."""
    a = balance(train_data, seed=1)
    b = balance(train_data, seed=2)

    assert not a.equals(b)


def test_balance_does_not_mutate(train_data):
    """Test the training split is left untouched."""
    original = train_data.copy()
    balance(train_data, seed=123)

    pd.testing.assert_frame_equal(train_data, original)


def test_balance_smoothes_samples(train_data):
    """Test majority rows are jittered rather than copied verbatim."""
    balanced = balance(train_data, seed=123)
    majority = balanced[balanced['Class'] == 0]

    merged = majority.merge(train_data, how='inner', on=list(train_data.columns))
    assert len(merged) < len(majority)


def test_balance_single_label(train_data):
    """Test balancing needs both labels."""
    train_data['Class'] = 0

    with pytest.raises(DegenerateSplitError):
        balance(train_data)


@pytest.mark.parametrize('p', [0.0, 1.0])
def test_balance_invalid_p(train_data, p):
    """Test the minority share must be in (0, 1)."""
    with pytest.raises(ValueError):
        balance(train_data, p=p)


def test_balance_unknown_method(train_data):
    """Test unknown methods are rejected."""
    with pytest.raises(ValueError, match="Unknown balance method"):
        balance(train_data, method='undersample')


def test_smote_balance(train_data):
    """Test SMOTE brings the minority up to the majority count."""
    balanced = smote_balance(train_data, seed=123)
    counts = balanced['Class'].value_counts()

    assert counts[0] == counts[1] == 792
    _within_class_range(train_data, balanced)


def test_smote_balance_deterministic(train_data):
    """Test SMOTE is deterministic under the seed."""
    a = balance(train_data, seed=5, method='smote')
    b = balance(train_data, seed=5, method='smote')

    pd.testing.assert_frame_equal(a, b)
