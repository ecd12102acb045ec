"""
featurenorm inspect command - Summarize invalid values before filtering.

Usage:
    featurenorm inspect --input runs/HCTSA [--plot figures/quality.png]
"""

import argparse
import logging
from pathlib import Path

from featurenorm.io.loaders import load_feature_dataset
from featurenorm.quality.masking import QualityMasker


def register_parser(subparsers: argparse._SubParsersAction) -> None:
    """Register the inspect subcommand."""
    parser = subparsers.add_parser(
        "inspect",
        help="Report good-value ranges per observation and per feature",
        description="Mask invalid entries and report how good values are spread, "
                    "to help choose the normalize thresholds"
    )
    parser.add_argument("--input", "-i", type=Path, required=True,
                        help="Base path of the input dataset (<input>.data.csv, ...)")
    parser.add_argument("--plot", type=Path, default=None,
                        help="Save a good-value distribution figure to this path")
    parser.add_argument("--codes-plot", type=Path, default=None,
                        help="Save a quality-code heatmap to this path")
    parser.set_defaults(func=run_inspect)


def run_inspect(args: argparse.Namespace) -> int:
    """Execute the inspect command."""
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')

    try:
        matrix, _, _ = load_feature_dataset(args.input)
    except (FileNotFoundError, ValueError) as e:
        print(f"ERROR: Could not load dataset: {e}")
        return 1

    report = QualityMasker().mask(matrix)
    obs_min, obs_max = report.summary.observation_range
    feat_min, feat_max = report.summary.feature_range

    print(f"\nMatrix: {matrix.n_observations} observations × {matrix.n_features} features")
    print(f"  Entries with bad quality codes: {report.n_special_codes}")
    print(f"  Non-finite entries:             {report.n_nonfinite}")
    print(f"  Missing after masking:          {report.n_masked} "
          f"({100 * report.n_masked / max(matrix.data.size, 1):.2f}%)")
    print(f"  Observations vary from {obs_min:.2f}--{obs_max:.2f}% good values")
    print(f"  Features vary from {feat_min:.2f}--{feat_max:.2f}% good values")

    if args.plot or args.codes_plot:
        from featurenorm.viz.qc import QualityVisualizer

        viz = QualityVisualizer()
        if args.plot:
            fig = viz.plot_good_value_distribution(matrix)
            print(f"Saved {fig.save(args.plot)}")
            fig.close()
        if args.codes_plot:
            fig = viz.plot_quality_codes(matrix)
            print(f"Saved {fig.save(args.codes_plot)}")
            fig.close()

    return 0
