"""Confusion-matrix and precision-recall evaluation on the held-out split."""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping

import numpy as np
import pandas as pd
from sklearn.metrics import (
    accuracy_score, auc, average_precision_score, confusion_matrix,
    f1_score, precision_recall_curve, precision_score, recall_score,
    roc_auc_score
)

from .classifiers import FraudClassifier


def apply_threshold(scores, threshold: float = 0.5) -> np.ndarray:
    """Hard labels from scores; strictly greater than the threshold is fraud."""
    return (np.asarray(scores, dtype=np.float64) > threshold).astype(int)


def _finite_or_none(value: float):
    """NaN areas (one-label sets) become null in JSON."""
    return None if np.isnan(value) else float(value)


@dataclass
class EvaluationResult:
    """Metrics for one model on one labeled set."""

    model_type: str
    threshold: float
    n_rows: int
    true_negatives: int
    false_positives: int
    false_negatives: int
    true_positives: int
    accuracy: float
    precision: float
    recall: float
    f1_score: float
    pr_auc: float
    average_precision: float
    roc_auc: float
    pr_curve_precision: np.ndarray = field(repr=False)
    pr_curve_recall: np.ndarray = field(repr=False)
    scores: np.ndarray = field(repr=False)

    @property
    def confusion_matrix(self) -> np.ndarray:
        return np.array([
            [self.true_negatives, self.false_positives],
            [self.false_negatives, self.true_positives],
        ])

    def as_dict(self) -> Dict[str, Any]:
        """Scalar metrics, JSON-serializable."""
        return {
            'model_type': self.model_type,
            'threshold': float(self.threshold),
            'n_rows': int(self.n_rows),
            'accuracy': float(self.accuracy),
            'precision': float(self.precision),
            'recall': float(self.recall),
            'f1_score': float(self.f1_score),
            'pr_auc': _finite_or_none(self.pr_auc),
            'average_precision': _finite_or_none(self.average_precision),
            'roc_auc': _finite_or_none(self.roc_auc),
            'true_negatives': int(self.true_negatives),
            'false_positives': int(self.false_positives),
            'false_negatives': int(self.false_negatives),
            'true_positives': int(self.true_positives),
        }


def evaluate_scores(
    y,
    y_proba,
    threshold: float = 0.5,
    model_type: str = ''
) -> EvaluationResult:
    """
    Evaluate precomputed scores against true labels.

    Args:
        y: True labels (0/1)
        y_proba: Positive-class scores in [0, 1]
        threshold: Classification threshold
        model_type: Name recorded on the result

    Returns:
        EvaluationResult
    """
    y = np.asarray(y).astype(int)
    y_proba = np.asarray(y_proba, dtype=np.float64)
    y_pred = apply_threshold(y_proba, threshold)

    tn, fp, fn, tp = confusion_matrix(y, y_pred, labels=[0, 1]).ravel()

    if y.sum() > 0:
        precision_curve, recall_curve, _ = precision_recall_curve(y, y_proba)
        pr_auc = auc(recall_curve, precision_curve)
        avg_precision = average_precision_score(y, y_proba)
    else:
        precision_curve = recall_curve = np.array([])
        pr_auc = avg_precision = float('nan')

    roc_auc = roc_auc_score(y, y_proba) if len(np.unique(y)) == 2 else float('nan')

    return EvaluationResult(
        model_type=model_type,
        threshold=threshold,
        n_rows=len(y),
        true_negatives=int(tn),
        false_positives=int(fp),
        false_negatives=int(fn),
        true_positives=int(tp),
        accuracy=float(accuracy_score(y, y_pred)),
        precision=float(precision_score(y, y_pred, zero_division=0)),
        recall=float(recall_score(y, y_pred, zero_division=0)),
        f1_score=float(f1_score(y, y_pred, zero_division=0)),
        pr_auc=float(pr_auc),
        average_precision=float(avg_precision),
        roc_auc=float(roc_auc),
        pr_curve_precision=precision_curve,
        pr_curve_recall=recall_curve,
        scores=y_proba,
    )


def evaluate_model(
    model: FraudClassifier,
    X: pd.DataFrame,
    y: pd.Series,
    threshold: float = 0.5
) -> EvaluationResult:
    """
    Evaluate model performance.

    Args:
        model: Trained model
        X: Features (same columns, same order as at fit time)
        y: True labels
        threshold: Classification threshold

    Returns:
        EvaluationResult

    Raises:
        SchemaError: If X does not match the fitted feature schema
    """
    y_proba = model.predict_proba(X)
    return evaluate_scores(y, y_proba, threshold=threshold, model_type=model.model_type)


def compare_models(results: Mapping[str, EvaluationResult]) -> pd.DataFrame:
    """One row of scalar metrics per model."""
    rows = {name: result.as_dict() for name, result in results.items()}
    table = pd.DataFrame.from_dict(rows, orient='index')
    return table.drop(columns=['model_type'])


def print_metrics(result: EvaluationResult, name: str = "Model") -> None:
    """Print formatted metrics."""
    print(f"\n{name} Performance:")
    print(f"  Accuracy:    {result.accuracy:.4f}")
    print(f"  F1-Score:    {result.f1_score:.4f}")
    print(f"  Precision:   {result.precision:.4f}")
    print(f"  Recall:      {result.recall:.4f}")
    print(f"  PR-AUC:      {result.pr_auc:.4f}")
    print(f"  ROC-AUC:     {result.roc_auc:.4f}")

    print("\n  Confusion Matrix:")
    print(f"    TP: {result.true_positives:5d}  FP: {result.false_positives:5d}")
    print(f"    FN: {result.false_negatives:5d}  TN: {result.true_negatives:5d}")
