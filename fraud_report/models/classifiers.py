"""Classifier families compared in the report, behind one interface."""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import numpy as np
import pandas as pd
from lightgbm import LGBMClassifier
from sklearn.ensemble import RandomForestClassifier
from sklearn.linear_model import LogisticRegression
from xgboost import XGBClassifier

from ..exceptions import SchemaError


class FraudClassifier(ABC):
    """Wrapper for fraud detection models with consistent interface."""

    model_type: str = ''

    def __init__(
        self,
        hyperparams: Optional[Dict[str, Any]] = None,
        random_state: int = 123
    ):
        """
        Initialize fraud detection model.

        Args:
            hyperparams: Model-specific hyperparameters overriding the defaults
            random_state: Random seed for reproducibility
        """
        self.random_state = random_state
        self.hyperparams = hyperparams or {}
        self.model = self._create_model()
        self.feature_names_: Optional[list] = None

    @abstractmethod
    def _create_model(self):
        """Create the underlying estimator."""

    def fit(self, X: pd.DataFrame, y):
        """Train the model."""
        self.feature_names_ = list(X.columns)
        self.model.fit(X, np.asarray(y))
        return self

    def _check_features(self, X: pd.DataFrame) -> pd.DataFrame:
        if self.feature_names_ is None:
            raise RuntimeError(f"{self.model_type} model has not been fitted")
        if list(X.columns) != self.feature_names_:
            missing = set(self.feature_names_) - set(X.columns)
            extra = set(X.columns) - set(self.feature_names_)
            raise SchemaError(
                f"Feature schema mismatch for {self.model_type}: "
                f"missing={sorted(missing)}, unexpected={sorted(extra)}"
            )
        return X

    def predict_proba(self, X: pd.DataFrame) -> np.ndarray:
        """Predict positive-class probabilities in [0, 1]."""
        X = self._check_features(X)
        proba = np.asarray(self.model.predict_proba(X)[:, 1], dtype=np.float64)
        return np.clip(proba, 0.0, 1.0)

    def predict(self, X: pd.DataFrame, threshold: float = 0.5) -> np.ndarray:
        """Predict classes; a score equal to the threshold is class 0."""
        return (self.predict_proba(X) > threshold).astype(int)

    def __repr__(self):
        return f"{type(self).__name__}(hyperparams={self.hyperparams!r}, random_state={self.random_state})"


class LogisticModel(FraudClassifier):
    """Logistic regression fitted by maximum likelihood, library defaults."""

    model_type = 'logistic'

    def _create_model(self):
        default_params = {
            'max_iter': 1000,
            'random_state': self.random_state,
        }
        default_params.update(self.hyperparams)
        return LogisticRegression(**default_params)


class RandomForestModel(FraudClassifier):
    """Bagged decision trees; the score is the share of trees voting fraud."""

    model_type = 'random_forest'

    def _create_model(self):
        default_params = {
            'n_estimators': 100,
            'random_state': self.random_state,
            'n_jobs': -1
        }
        default_params.update(self.hyperparams)
        return RandomForestClassifier(**default_params)


class GradientBoostingModel(FraudClassifier):
    """Gradient-boosted trees minimizing logistic loss."""

    model_type = 'xgboost'

    def _create_model(self):
        default_params = {
            'objective': 'binary:logistic',
            'max_depth': 6,
            'learning_rate': 0.1,
            'n_estimators': 100,
            'tree_method': 'hist',
            'random_state': self.random_state
        }
        default_params.update(self.hyperparams)
        return XGBClassifier(**default_params)


class LightGBMModel(FraudClassifier):
    """Leaf-wise gradient boosting, available as an extra comparison."""

    model_type = 'lightgbm'

    def _create_model(self):
        default_params = {
            'num_leaves': 31,
            'learning_rate': 0.05,
            'n_estimators': 100,
            'random_state': self.random_state,
            'verbose': -1
        }
        default_params.update(self.hyperparams)
        return LGBMClassifier(**default_params)


MODEL_REGISTRY = {
    cls.model_type: cls
    for cls in (LogisticModel, RandomForestModel, GradientBoostingModel, LightGBMModel)
}

DEFAULT_MODELS = ('logistic', 'random_forest', 'xgboost')

MODEL_LABELS = {
    'logistic': 'Logistic Regression',
    'random_forest': 'Random Forest',
    'xgboost': 'XGBoost',
    'lightgbm': 'LightGBM',
}


def hyperparams_from_config(model_type: str, config) -> Dict[str, Any]:
    """Map the report config knobs onto one model family's parameters."""
    if model_type == 'random_forest':
        return {'n_estimators': config.n_trees}
    if model_type == 'xgboost':
        return {
            'max_depth': config.boost_max_depth,
            'learning_rate': config.boost_learning_rate,
            'n_estimators': config.boost_rounds,
        }
    if model_type == 'lightgbm':
        return {
            'learning_rate': config.boost_learning_rate,
            'n_estimators': config.boost_rounds,
        }
    return {}


def create_model(model_type: str, config=None) -> FraudClassifier:
    """
    Create an unfitted model of the given family.

    Args:
        model_type: One of MODEL_REGISTRY's keys
        config: ReportConfig supplying the seed and tree knobs (defaults if None)

    Returns:
        Unfitted FraudClassifier
    """
    if model_type not in MODEL_REGISTRY:
        raise ValueError(f"Unknown model type: {model_type}")

    if config is None:
        from ..config import ReportConfig
        config = ReportConfig()

    return MODEL_REGISTRY[model_type](
        hyperparams=hyperparams_from_config(model_type, config),
        random_state=config.seed
    )
