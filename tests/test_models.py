"""Tests for classifier wrappers, training and evaluation."""

import pytest
import pandas as pd
import numpy as np

from fraud_report.config import ReportConfig
from fraud_report.exceptions import SchemaError
from fraud_report.models.classifiers import (
    DEFAULT_MODELS,
    MODEL_REGISTRY,
    GradientBoostingModel,
    LogisticModel,
    RandomForestModel,
    create_model
)
from fraud_report.models.evaluation import (
    apply_threshold,
    compare_models,
    evaluate_model,
    evaluate_scores,
    print_metrics
)
from fraud_report.models.training import fit_models


@pytest.fixture
def balanced_data():
    """Create a balanced, roughly separable training set."""
    np.random.seed(42)
    n_samples = 400
    y = np.array([0, 1] * (n_samples // 2))

    data = {f'V{i}': np.random.randn(n_samples) + 1.5 * y for i in range(1, 29)}
    data['Amount'] = np.random.uniform(0, 1, n_samples)

    return pd.DataFrame(data), pd.Series(y, name='Class')


@pytest.fixture
def holdout_data():
    """Create an imbalanced held-out set."""
    np.random.seed(7)
    n_samples = 200
    y = np.array([1] * 10 + [0] * (n_samples - 10))

    data = {f'V{i}': np.random.randn(n_samples) + 1.5 * y for i in range(1, 29)}
    data['Amount'] = np.random.uniform(0, 1, n_samples)

    return pd.DataFrame(data), pd.Series(y, name='Class')


@pytest.fixture
def small_config():
    return ReportConfig(n_trees=20, boost_rounds=20)


def test_registry_has_default_models():
    """Test the three compared families are registered."""
    assert set(DEFAULT_MODELS) <= set(MODEL_REGISTRY)
    assert MODEL_REGISTRY['logistic'] is LogisticModel
    assert MODEL_REGISTRY['random_forest'] is RandomForestModel
    assert MODEL_REGISTRY['xgboost'] is GradientBoostingModel


def test_create_model_uses_config():
    """Test config knobs reach the underlying estimators."""
    config = ReportConfig(
        seed=9, n_trees=33, boost_max_depth=4,
        boost_learning_rate=0.3, boost_rounds=17
    )

    forest = create_model('random_forest', config)
    assert forest.model.n_estimators == 33
    assert forest.model.random_state == 9

    booster = create_model('xgboost', config)
    params = booster.model.get_params()
    assert params['max_depth'] == 4
    assert params['learning_rate'] == 0.3
    assert params['n_estimators'] == 17
    assert params['objective'] == 'binary:logistic'


def test_create_model_defaults():
    """Test defaults when no config is given."""
    forest = create_model('random_forest')
    assert forest.model.n_estimators == 100
    assert forest.model.random_state == 123

    booster = create_model('xgboost')
    params = booster.model.get_params()
    assert params['max_depth'] == 6
    assert params['learning_rate'] == 0.1
    assert params['n_estimators'] == 100
    assert params['eval_metric'] is None


def test_create_model_unknown():
    """Test unknown families are rejected."""
    with pytest.raises(ValueError, match="Unknown model type"):
        create_model('svm')


@pytest.mark.parametrize('model_type', DEFAULT_MODELS + ('lightgbm',))
def test_predict_proba_in_unit_interval(model_type, balanced_data, holdout_data, small_config):
    """Test every family scores in [0, 1]."""
    X_train, y_train = balanced_data
    X_test, _ = holdout_data

    model = create_model(model_type, small_config).fit(X_train, y_train)
    proba = model.predict_proba(X_test)

    assert proba.shape == (len(X_test),)
    assert ((proba >= 0) & (proba <= 1)).all()


def test_unfitted_model_raises(holdout_data):
    """Test scoring before fitting fails."""
    X_test, _ = holdout_data

    with pytest.raises(RuntimeError, match="not been fitted"):
        create_model('logistic').predict_proba(X_test)


def test_feature_schema_mismatch(balanced_data, holdout_data, small_config):
    """Test evaluating on a different feature schema fails."""
    X_train, y_train = balanced_data
    X_test, y_test = holdout_data
    model = create_model('logistic', small_config).fit(X_train, y_train)

    with pytest.raises(SchemaError, match="schema mismatch"):
        evaluate_model(model, X_test.drop(columns=['V5']), y_test)

    with pytest.raises(SchemaError):
        evaluate_model(model, X_test[list(reversed(X_test.columns))], y_test)


def test_apply_threshold_strict():
    """Test a score equal to the threshold is class 0."""
    scores = np.array([0.0, 0.49, 0.5, 0.5000001, 1.0])

    assert list(apply_threshold(scores, 0.5)) == [0, 0, 0, 1, 1]


@pytest.mark.parametrize('model_type', DEFAULT_MODELS)
def test_threshold_tie_break_per_model(model_type, balanced_data, holdout_data, small_config, monkeypatch):
    """Test a probability of exactly 0.5 is legitimate for every family."""
    X_train, y_train = balanced_data
    X_test, y_test = holdout_data
    model = create_model(model_type, small_config).fit(X_train, y_train)

    half = np.full((len(X_test), 2), 0.5)
    monkeypatch.setattr(model.model, 'predict_proba', lambda X: half)

    assert (model.predict(X_test, threshold=0.5) == 0).all()

    result = evaluate_model(model, X_test, y_test, threshold=0.5)
    assert result.true_positives == 0
    assert result.false_positives == 0
    assert result.true_negatives == (y_test == 0).sum()
    assert result.false_negatives == (y_test == 1).sum()


def test_evaluate_model_metrics(balanced_data, holdout_data, small_config):
    """Test confusion matrix cells and derived metrics agree."""
    X_train, y_train = balanced_data
    X_test, y_test = holdout_data
    model = create_model('random_forest', small_config).fit(X_train, y_train)

    result = evaluate_model(model, X_test, y_test)

    cm = result.confusion_matrix
    assert cm.shape == (2, 2)
    assert cm.sum() == len(X_test)
    assert result.n_rows == len(X_test)

    tp, fp, fn = result.true_positives, result.false_positives, result.false_negatives
    assert result.accuracy == pytest.approx((result.true_negatives + tp) / len(X_test))
    if tp + fp:
        assert result.precision == pytest.approx(tp / (tp + fp))
    assert result.recall == pytest.approx(tp / (tp + fn))
    assert 0 <= result.pr_auc <= 1
    assert len(result.pr_curve_precision) == len(result.pr_curve_recall)


def test_evaluate_scores_known_values():
    """Test metrics on a hand-checked example."""
    y = np.array([0, 0, 0, 1, 1])
    scores = np.array([0.1, 0.6, 0.2, 0.9, 0.4])

    result = evaluate_scores(y, scores, threshold=0.5)

    assert (result.true_negatives, result.false_positives) == (2, 1)
    assert (result.false_negatives, result.true_positives) == (1, 1)
    assert result.accuracy == pytest.approx(0.6)
    assert result.precision == pytest.approx(0.5)
    assert result.recall == pytest.approx(0.5)
    assert result.f1_score == pytest.approx(0.5)


def test_evaluate_scores_no_positive_predictions():
    """Test zero-division metrics fall back to zero."""
    y = np.array([0, 1, 0, 1])
    result = evaluate_scores(y, np.zeros(4))

    assert result.precision == 0.0
    assert result.f1_score == 0.0
    assert result.confusion_matrix.sum() == 4


def test_as_dict_is_serializable(balanced_data, holdout_data, small_config):
    """Test scalar metrics export."""
    import json

    X_train, y_train = balanced_data
    X_test, y_test = holdout_data
    model = create_model('logistic', small_config).fit(X_train, y_train)

    metrics = evaluate_model(model, X_test, y_test).as_dict()
    json.dumps(metrics)

    assert metrics['model_type'] == 'logistic'
    assert metrics['threshold'] == 0.5


def test_fit_models_all_families(balanced_data, holdout_data, small_config):
    """Test fitting the default families."""
    X_train, y_train = balanced_data
    models = fit_models(X_train, y_train, config=small_config)

    assert list(models) == list(DEFAULT_MODELS)
    for name, model in models.items():
        assert model.model_type == name


def test_fit_models_parallel_matches_sequential(balanced_data, holdout_data, small_config):
    """Test parallel fitting gives the same models as sequential fitting."""
    X_train, y_train = balanced_data
    X_test, _ = holdout_data
    names = ['logistic', 'random_forest']

    sequential = fit_models(X_train, y_train, config=small_config, model_types=names)
    parallel = fit_models(X_train, y_train, config=small_config, model_types=names, n_jobs=2)

    for name in names:
        np.testing.assert_array_equal(
            sequential[name].predict_proba(X_test),
            parallel[name].predict_proba(X_test)
        )


def test_compare_models(balanced_data, holdout_data, small_config):
    """Test the comparison table."""
    X_train, y_train = balanced_data
    X_test, y_test = holdout_data
    models = fit_models(X_train, y_train, config=small_config)

    table = compare_models({
        name: evaluate_model(model, X_test, y_test) for name, model in models.items()
    })

    assert list(table.index) == list(DEFAULT_MODELS)
    assert {'accuracy', 'precision', 'recall', 'f1_score', 'pr_auc'} <= set(table.columns)


def test_print_metrics(capsys):
    """Test printed metrics."""
    result = evaluate_scores(np.array([0, 1]), np.array([0.2, 0.8]))
    print_metrics(result, "Test")

    out = capsys.readouterr().out
    assert "Test Performance" in out
    assert "Confusion Matrix" in out


def test_metrics_without_positives_export_null():
    """Test undefined curve areas are exported as null, not NaN."""
    import json

    result = evaluate_scores(np.zeros(4, dtype=int), np.full(4, 0.3))
    metrics = result.as_dict()

    assert np.isnan(result.pr_auc)
    assert metrics['pr_auc'] is None
    assert metrics['average_precision'] is None
    assert metrics['roc_auc'] is None
    json.dumps(metrics, allow_nan=False)
