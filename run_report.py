"""Run the credit card fraud exploratory analysis and model comparison report."""

import argparse
import logging
import sys
from pathlib import Path

import matplotlib
matplotlib.use('Agg')

from fraud_report.config import BALANCE_METHODS, load_config
from fraud_report.data.splits import print_split_stats
from fraud_report.exceptions import FraudReportError
from fraud_report.models.classifiers import MODEL_LABELS, MODEL_REGISTRY
from fraud_report.models.evaluation import print_metrics
from fraud_report.pipeline import run_pipeline
from fraud_report.reporting import write_report


logger = logging.getLogger('fraud_report')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Credit card fraud analysis report')
    parser.add_argument('--data', type=Path, help='Path to creditcard.csv')
    parser.add_argument('--output-dir', type=Path, help='Report output directory')
    parser.add_argument('--config', type=Path, help='YAML file with report settings')
    parser.add_argument('--seed', type=int, help='Random seed (default 123)')
    parser.add_argument('--train-fraction', type=float, help='Training share of rows (default 0.8)')
    parser.add_argument('--threshold', type=float, help='Classification threshold (default 0.5)')
    parser.add_argument('--n-trees', type=int, help='Random forest tree count (default 100)')
    parser.add_argument('--boost-max-depth', type=int, help='Boosting max tree depth (default 6)')
    parser.add_argument('--boost-learning-rate', type=float, help='Boosting learning rate (default 0.1)')
    parser.add_argument('--boost-rounds', type=int, help='Boosting rounds (default 100)')
    parser.add_argument('--models', nargs='+', choices=sorted(MODEL_REGISTRY),
                        help='Model families to compare')
    parser.add_argument('--balance-method', choices=BALANCE_METHODS,
                        help='Oversampling method for the training split')
    parser.add_argument('--n-jobs', type=int, help='Fit model families in parallel')
    parser.add_argument('--no-plots', action='store_true', help='Skip figure rendering')
    parser.add_argument('--log-level', default='INFO',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'])
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    logging.getLogger('matplotlib').setLevel(logging.WARNING)

    try:
        config = load_config(
            args.config,
            data_path=args.data,
            output_dir=args.output_dir,
            seed=args.seed,
            train_fraction=args.train_fraction,
            threshold=args.threshold,
            n_trees=args.n_trees,
            boost_max_depth=args.boost_max_depth,
            boost_learning_rate=args.boost_learning_rate,
            boost_rounds=args.boost_rounds,
            models=tuple(args.models) if args.models else None,
            balance_method=args.balance_method,
            n_jobs=args.n_jobs,
            render_plots=False if args.no_plots else None,
        )

        print(f"Running fraud report...")
        print(f"  Data:   {config.data_path}")
        print(f"  Output: {config.output_dir}")
        print(f"  Models: {', '.join(config.models)}")

        result = run_pipeline(config)
        report_path = write_report(result, config.output_dir)
    except (FraudReportError, OSError, ValueError) as e:
        logger.error(f"Report failed: {e}")
        return 1

    print()
    print_split_stats(result.train, result.test)

    for name, evaluation in result.evaluations.items():
        print_metrics(evaluation, MODEL_LABELS.get(name, name))

    print(f"\nReport artifacts saved to {config.output_dir}")
    print(f"  - {report_path.name}")
    print(f"  - metrics.json")
    if result.figures:
        print(f"  - figures/ ({len(result.figures)} plots)")

    return 0


if __name__ == '__main__':
    sys.exit(main())
