"""Run every report stage once, in order, handing data off in memory."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

import pandas as pd

from .config import ReportConfig
from .data.balancing import balance
from .data.loading import load_transactions, validate_schema
from .data.preprocessing import preprocess, split_features_target
from .data.splits import split_summary, stratified_split
from .explore import explore, plot_precision_recall_curves, render_exploration
from .models.classifiers import FraudClassifier, MODEL_LABELS
from .models.evaluation import EvaluationResult, compare_models, evaluate_model
from .models.training import fit_models


logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Everything one run produced, kept for the report writer and tests."""

    config: ReportConfig
    raw: pd.DataFrame
    exploration: dict
    processed: pd.DataFrame
    train: pd.DataFrame
    test: pd.DataFrame
    balanced: pd.DataFrame
    models: Dict[str, FraudClassifier]
    evaluations: Dict[str, EvaluationResult]
    figures: Dict[str, Path] = field(default_factory=dict)

    @property
    def split_summary(self) -> pd.DataFrame:
        return split_summary(self.train, self.test)

    @property
    def comparison(self) -> pd.DataFrame:
        return compare_models(self.evaluations)


def run_pipeline(
    config: ReportConfig,
    df: Optional[pd.DataFrame] = None,
    render: Optional[bool] = None
) -> PipelineResult:
    """
    Load, explore, preprocess, split, balance, fit and evaluate.

    Args:
        config: Validated run configuration
        df: Raw transactions; read from config.data_path when None
        render: Write figures under config.output_dir (defaults to config.render_plots)

    Returns:
        PipelineResult
    """
    render = config.render_plots if render is None else render

    logger.info("=" * 60)
    logger.info("CREDIT CARD FRAUD REPORT")
    logger.info(f"Seed: {config.seed}, models: {', '.join(config.models)}")
    logger.info("=" * 60)

    if df is None:
        df = load_transactions(config.data_path)
    validate_schema(df)

    exploration = explore(df)
    logger.info(
        f"Dataset: {exploration['n_rows']:,} transactions, "
        f"fraud rate {exploration['fraud_pct']:.3f}%, "
        f"imbalance {exploration['imbalance_ratio']:.1f}:1"
    )

    figures: Dict[str, Path] = {}
    figures_dir = Path(config.output_dir) / 'figures'
    if render:
        figures.update(render_exploration(
            df, figures_dir, sample_size=config.sample_size, seed=config.seed
        ))

    processed = preprocess(df)

    train_df, test_df = stratified_split(
        processed, train_fraction=config.train_fraction, seed=config.seed
    )

    balanced = balance(
        train_df,
        seed=config.seed,
        p=config.balance_p,
        method=config.balance_method
    )

    X_train, y_train = split_features_target(balanced)
    X_test, y_test = split_features_target(test_df)

    models = fit_models(X_train, y_train, config=config, n_jobs=config.n_jobs)

    evaluations = {
        name: evaluate_model(model, X_test, y_test, threshold=config.threshold)
        for name, model in models.items()
    }
    for name, result in evaluations.items():
        logger.info(
            f"{MODEL_LABELS.get(name, name)}: F1={result.f1_score:.4f} "
            f"precision={result.precision:.4f} recall={result.recall:.4f} "
            f"AUPRC={result.pr_auc:.4f}"
        )

    if render:
        figures['precision_recall'] = plot_precision_recall_curves(
            evaluations, figures_dir / 'precision_recall.png', labels=MODEL_LABELS
        )

    return PipelineResult(
        config=config,
        raw=df,
        exploration=exploration,
        processed=processed,
        train=train_df,
        test=test_df,
        balanced=balanced,
        models=models,
        evaluations=evaluations,
        figures=figures,
    )
