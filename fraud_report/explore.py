"""Read-only exploration of the transaction table: tables and figures."""

import logging
from pathlib import Path
from typing import Mapping, Optional

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns

from .data.loading import AMOUNT_COL, PCA_FEATURES, TARGET_COL


logger = logging.getLogger(__name__)

CLASS_COLORS = {0: '#2ecc71', 1: '#e74c3c'}
CLASS_NAMES = {0: 'Legitimate (0)', 1: 'Fraud (1)'}
SCATTER_FEATURES = ['V1', 'V2', 'V3', 'V4', 'V12', 'V14', 'V17']


def class_counts(df: pd.DataFrame, target_col: str = TARGET_COL) -> pd.Series:
    """Transactions per label, always indexed [0, 1]."""
    return df[target_col].value_counts().reindex([0, 1], fill_value=0)


def imbalance_ratio(df: pd.DataFrame, target_col: str = TARGET_COL) -> float:
    counts = class_counts(df, target_col)
    if counts.min() == 0:
        return float('inf')
    return float(counts.max() / counts.min())


def summary_statistics(df: pd.DataFrame) -> pd.DataFrame:
    return df.describe()


def amount_by_class(df: pd.DataFrame, target_col: str = TARGET_COL) -> pd.DataFrame:
    """Mean, median, max and spread of Amount for each label."""
    return (
        df.groupby(target_col)[AMOUNT_COL]
        .agg(['count', 'mean', 'median', 'max', 'std'])
        .reindex([0, 1])
    )


def feature_correlations(df: pd.DataFrame, target_col: str = TARGET_COL) -> pd.Series:
    """Pearson correlation of every feature with the label, sorted descending."""
    features = [col for col in PCA_FEATURES + [AMOUNT_COL] if col in df.columns]
    corr = df[features + [target_col]].corr()[target_col].drop(target_col)
    return corr.sort_values(ascending=False)


def stratified_sample(
    df: pd.DataFrame,
    size: int,
    seed: int = 123,
    target_col: str = TARGET_COL
) -> pd.DataFrame:
    """
    Up to `size` rows split evenly between labels, for readable plots.

    The minority label is kept in full when it has fewer rows than half
    the requested size.
    """
    per_class = max(size // 2, 1)
    parts = []
    for label, group in df.groupby(target_col):
        parts.append(group.sample(min(per_class, len(group)), random_state=seed))
    return pd.concat(parts)


def explore(df: pd.DataFrame) -> dict:
    """Collect every summary table for the report."""
    counts = class_counts(df)
    return {
        'n_rows': len(df),
        'n_columns': df.shape[1],
        'class_counts': counts,
        'fraud_pct': 100 * counts[1] / len(df) if len(df) else 0.0,
        'imbalance_ratio': imbalance_ratio(df),
        'summary_statistics': summary_statistics(df),
        'amount_by_class': amount_by_class(df),
        'feature_correlations': feature_correlations(df),
    }


def _save(fig, path: Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.tight_layout()
    fig.savefig(path, dpi=100, bbox_inches='tight')
    plt.close(fig)
    logger.debug(f"Saved figure {path}")
    return path


def plot_class_distribution(df: pd.DataFrame, path: Path) -> Path:
    counts = class_counts(df)
    colors = [CLASS_COLORS[label] for label in counts.index]

    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(12, 4))

    counts.plot(kind='bar', ax=ax1, color=colors)
    ax1.set_title('Class Distribution (Absolute Counts)', fontsize=12, fontweight='bold')
    ax1.set_xlabel('Class')
    ax1.set_ylabel('Count')
    ax1.set_xticklabels([CLASS_NAMES[label] for label in counts.index], rotation=0)

    counts.replace(0, np.nan).plot(kind='bar', ax=ax2, color=colors, logy=True)
    ax2.set_title('Class Distribution (Log Scale)', fontsize=12, fontweight='bold')
    ax2.set_xlabel('Class')
    ax2.set_ylabel('Count (log scale)')
    ax2.set_xticklabels([CLASS_NAMES[label] for label in counts.index], rotation=0)

    return _save(fig, path)


def plot_pairwise_scatter(
    df: pd.DataFrame,
    path: Path,
    features: Optional[list] = None,
    sample_size: int = 1000,
    seed: int = 123
) -> Path:
    """Pairwise scatter of a few PCA features on a label-balanced sample."""
    features = [f for f in (features or SCATTER_FEATURES[:4]) if f in df.columns]
    sample = stratified_sample(df, sample_size, seed=seed)

    sample = sample[features].assign(label=sample[TARGET_COL].map(CLASS_NAMES))
    palette = {CLASS_NAMES[label]: color for label, color in CLASS_COLORS.items()}

    grid = sns.pairplot(
        sample,
        hue='label',
        palette=palette,
        plot_kws={'alpha': 0.5, 's': 12},
        corner=True,
    )
    grid.figure.suptitle('Pairwise Feature Scatter (Balanced Sample)', y=1.02, fontweight='bold')
    return _save(grid.figure, path)


def plot_amount_density(df: pd.DataFrame, path: Path) -> Path:
    fig, ax = plt.subplots(figsize=(10, 4))
    for label, group in df.groupby(TARGET_COL):
        if group[AMOUNT_COL].nunique() < 2:
            continue
        sns.kdeplot(
            group[AMOUNT_COL], ax=ax, fill=True, alpha=0.4,
            color=CLASS_COLORS.get(label), label=CLASS_NAMES.get(label, str(label)),
            warn_singular=False,
        )
    ax.set_title('Amount Density by Class', fontsize=12, fontweight='bold')
    ax.set_xlabel('Amount')
    ax.legend()
    return _save(fig, path)


def plot_amount_boxplot(df: pd.DataFrame, path: Path) -> Path:
    fig, ax = plt.subplots(figsize=(8, 5))
    sns.boxplot(data=df, x=TARGET_COL, y=AMOUNT_COL, color='steelblue', ax=ax)
    ax.set_yscale('symlog')
    ax.set_title('Amount by Class', fontsize=12, fontweight='bold')
    return _save(fig, path)


def plot_correlation_heatmap(df: pd.DataFrame, path: Path) -> Path:
    features = [col for col in PCA_FEATURES + [AMOUNT_COL] if col in df.columns]
    fig, ax = plt.subplots(figsize=(12, 10))
    sns.heatmap(
        df[features + [TARGET_COL]].corr(),
        annot=False,
        cmap='coolwarm',
        center=0,
        ax=ax,
        square=True
    )
    ax.set_title('Feature Correlation Heatmap', fontsize=13, fontweight='bold')
    return _save(fig, path)


def plot_precision_recall_curves(results: Mapping, path: Path, labels: Optional[Mapping] = None) -> Path:
    """Overlay the precision-recall curve of every evaluated model."""
    labels = labels or {}
    fig, ax = plt.subplots(figsize=(8, 6))
    for name, result in results.items():
        if len(result.pr_curve_recall) == 0:
            continue
        ax.plot(
            result.pr_curve_recall,
            result.pr_curve_precision,
            label=f"{labels.get(name, name)} (AUPRC={result.pr_auc:.3f})"
        )
    ax.set_xlabel('Recall')
    ax.set_ylabel('Precision')
    ax.set_xlim(0, 1)
    ax.set_ylim(0, 1.05)
    ax.set_title('Precision-Recall Curves (Test Split)', fontsize=12, fontweight='bold')
    ax.legend(loc='lower left')
    return _save(fig, path)


def render_exploration(df: pd.DataFrame, figures_dir: Path, sample_size: int = 1000, seed: int = 123) -> dict:
    """Write every exploration figure and return their paths by name."""
    figures_dir = Path(figures_dir)
    return {
        'class_distribution': plot_class_distribution(df, figures_dir / 'class_distribution.png'),
        'pairwise_scatter': plot_pairwise_scatter(
            df, figures_dir / 'pairwise_scatter.png', sample_size=sample_size, seed=seed
        ),
        'amount_density': plot_amount_density(df, figures_dir / 'amount_density.png'),
        'amount_boxplot': plot_amount_boxplot(df, figures_dir / 'amount_boxplot.png'),
        'correlation_heatmap': plot_correlation_heatmap(df, figures_dir / 'correlation_heatmap.png'),
    }
