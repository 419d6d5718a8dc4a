"""Write the run's tables, figures and metrics to an output directory."""

import html
import json
import logging
from datetime import datetime
from pathlib import Path

from . import __version__
from .data.loading import TARGET_COL
from .models.classifiers import MODEL_LABELS


logger = logging.getLogger(__name__)


def build_metrics(result) -> dict:
    """JSON-serializable record of the run: config, splits and model metrics."""
    summary = result.split_summary
    exploration = result.exploration
    return {
        'version': __version__,
        'timestamp': datetime.now().isoformat(),
        'config': result.config.to_dict(),
        'dataset': {
            'rows': int(exploration['n_rows']),
            'fraud_count': int(exploration['class_counts'][1]),
            'fraud_percentage': float(exploration['fraud_pct']),
            'imbalance_ratio': float(exploration['imbalance_ratio']),
        },
        'splits': {
            name.lower(): {
                'rows': int(row['rows']),
                'fraud_count': int(row['fraud']),
                'hash': row['hash'],
            }
            for name, row in summary.iterrows()
        },
        'balanced_train': {
            'rows': len(result.balanced),
            'class_counts': {
                str(k): int(v)
                for k, v in result.balanced[TARGET_COL].value_counts().sort_index().items()
            },
        },
        'models': {name: ev.as_dict() for name, ev in result.evaluations.items()},
    }


def _section(title: str, body: str) -> str:
    return f"<h2>{html.escape(title)}</h2>\n{body}\n"


def _figure(path: Path, root: Path, caption: str) -> str:
    rel = Path(path).relative_to(root) if Path(path).is_relative_to(root) else Path(path)
    return (
        f'<figure><img src="{html.escape(rel.as_posix())}" alt="{html.escape(caption)}">'
        f'<figcaption>{html.escape(caption)}</figcaption></figure>'
    )


def render_html(result, output_dir: Path) -> str:
    """Assemble the report page from pandas tables and saved figures."""
    exploration = result.exploration
    figures = result.figures
    parts = [
        "<!DOCTYPE html>",
        "<html><head><meta charset='utf-8'><title>Credit Card Fraud Report</title>",
        "<style>body{font-family:sans-serif;margin:2em}table{border-collapse:collapse}"
        "td,th{padding:2px 8px;border:1px solid #ccc}img{max-width:900px}</style>",
        "</head><body>",
        "<h1>Credit Card Fraud Detection Report</h1>",
    ]

    overview = (
        f"<p>{exploration['n_rows']:,} transactions, "
        f"{int(exploration['class_counts'][1]):,} fraudulent "
        f"({exploration['fraud_pct']:.3f}%), imbalance ratio "
        f"{exploration['imbalance_ratio']:.1f}:1.</p>"
    )
    overview += exploration['class_counts'].rename('count').to_frame().to_html()
    if 'class_distribution' in figures:
        overview += _figure(figures['class_distribution'], output_dir, 'Class distribution')
    parts.append(_section('Dataset Overview', overview))

    parts.append(_section(
        'Summary Statistics',
        exploration['summary_statistics'].to_html(float_format='%.4f')
    ))

    amount = exploration['amount_by_class'].to_html(float_format='%.2f')
    for key, caption in [
        ('amount_density', 'Amount density by class'),
        ('amount_boxplot', 'Amount by class'),
    ]:
        if key in figures:
            amount += _figure(figures[key], output_dir, caption)
    parts.append(_section('Amount by Class', amount))

    features = exploration['feature_correlations'].rename('corr_with_class').to_frame().to_html(
        float_format='%.4f'
    )
    for key, caption in [
        ('pairwise_scatter', 'Pairwise feature scatter'),
        ('correlation_heatmap', 'Feature correlation heatmap'),
    ]:
        if key in figures:
            features += _figure(figures[key], output_dir, caption)
    parts.append(_section('Features', features))

    splits = result.split_summary.drop(columns=['hash']).to_html(float_format='%.3f')
    splits += (
        f"<p>Balanced training set ({html.escape(result.config.balance_method)}): "
        f"{len(result.balanced):,} rows, "
        f"{int(result.balanced[TARGET_COL].sum()):,} fraud.</p>"
        "<p>Amount scaling is fitted on the full dataset before the split.</p>"
    )
    parts.append(_section('Train/Test Split', splits))

    comparison = result.comparison.rename(index=MODEL_LABELS)
    models = comparison.to_html(float_format='%.4f')
    if 'precision_recall' in figures:
        models += _figure(figures['precision_recall'], output_dir, 'Precision-recall curves')
    parts.append(_section(
        f"Model Comparison (threshold {result.config.threshold})", models
    ))

    parts.append("</body></html>")
    return "\n".join(parts)


def write_report(result, output_dir: Path) -> Path:
    """
    Save report.html and metrics.json.

    Args:
        result: PipelineResult from run_pipeline
        output_dir: Directory to save artifacts

    Returns:
        Path to report.html
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    with open(output_dir / 'metrics.json', 'w') as f:
        json.dump(build_metrics(result), f, indent=2)

    report_path = output_dir / 'report.html'
    report_path.write_text(render_html(result, output_dir), encoding='utf-8')

    logger.info(f"Report written to {report_path}")
    return report_path
