"""
featurenorm normalize command - Trim and normalize a feature dataset.

Usage:
    featurenorm normalize --input runs/HCTSA [--config normalize.yaml]
"""

import argparse
import logging
from datetime import datetime
from pathlib import Path

from featurenorm.config import NormalizeConfig, load_config
from featurenorm.core.errors import FeatureNormError
from featurenorm.io.loaders import load_feature_dataset
from featurenorm.io.writers import write_normalized_dataset
from featurenorm.pipeline import trim_and_normalize
from featurenorm.stats.normalization import available_normalizations


def build_config(args: argparse.Namespace) -> NormalizeConfig:
    """
    Merge config file values with CLI arguments.

    Priority (highest to lowest):
    1. Explicitly provided CLI arguments
    2. Config file values
    3. NormalizeConfig defaults

    Raises:
        FileNotFoundError: If the config file doesn't exist
        ValueError: If the config file is malformed or has unknown keys
    """
    config = NormalizeConfig()
    if args.config:
        config = NormalizeConfig.from_dict(load_config(args.config))

    filter_options = None
    if args.row_threshold is not None or args.col_threshold is not None:
        filter_options = (
            config.observation_threshold if args.row_threshold is None else args.row_threshold,
            config.feature_threshold if args.col_threshold is None else args.col_threshold,
        )

    return config.with_overrides(
        norm_function=args.norm_function,
        filter_options=filter_options,
        class_var_filter=args.class_var_filter,
        class_column=args.class_column,
        keep_calc_time=args.keep_calc_time,
    )


def register_parser(subparsers: argparse._SubParsersAction) -> None:
    """Register the normalize subcommand."""
    parser = subparsers.add_parser(
        "normalize",
        help="Trim and normalize a feature dataset",
        description="Remove bad observations/features, apply a normalizing transform, "
                    "and write the result next to the input with an _N suffix"
    )

    parser.add_argument("--config", "-c", type=Path, default=None,
                        help="Path to YAML/JSON config file (optional, CLI args override config values)")
    parser.add_argument("--input", "-i", type=Path, required=True,
                        help="Base path of the input dataset (<input>.data.csv, ...)")
    parser.add_argument("--output", "-o", type=Path, default=None,
                        help="Output base path (default: <input>_N)")
    parser.add_argument("--norm-function", "-n", default=None,
                        help="Normalizing transform: 'none' or one of "
                             f"{', '.join(available_normalizations())} (default: mixedSigmoid)")
    parser.add_argument("--row-threshold", type=float, default=None,
                        help="Minimum proportion of good values per observation (default: 0.70)")
    parser.add_argument("--col-threshold", type=float, default=None,
                        help="Minimum proportion of good values per feature (default: 1.0)")
    parser.add_argument("--class-var-filter", action="store_true", default=None,
                        help="Also remove features that are near-constant within any class")
    parser.add_argument("--class-column", default=None,
                        help="Observation metadata column with class labels (default: Group)")
    parser.add_argument("--keep-calc-time", action="store_true", default=None,
                        help="Keep calculation times in the output")

    parser.set_defaults(func=run_normalize)


def run_normalize(args: argparse.Namespace) -> int:
    """Execute the normalize command."""
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')

    try:
        config = build_config(args)
        config.validate()
    except (FileNotFoundError, ValueError) as e:
        print(f"ERROR: Config error: {e}")
        return 1

    start_time = datetime.now()
    print(f"\n{'='*70}")
    print("  Trim and Normalize")
    print(f"{'='*70}")
    print(f"Started: {start_time.strftime('%Y-%m-%d %H:%M:%S')}")
    print(f"  Transform: {config.norm_function}")
    print(f"  Thresholds: observations {config.observation_threshold:.2f}, "
          f"features {config.feature_threshold:.2f}\n")

    try:
        matrix, master_operations, provenance = load_feature_dataset(args.input)
    except (FileNotFoundError, ValueError) as e:
        print(f"ERROR: Could not load dataset: {e}")
        return 1

    print(f"Loaded {matrix.n_observations} observations × {matrix.n_features} features")

    try:
        dataset = trim_and_normalize(
            matrix,
            config,
            provenance=provenance,
            master_operations=master_operations,
        )
    except FeatureNormError as e:
        print(f"ERROR: {e}")
        return 1

    try:
        if args.output is not None:
            out_base = write_normalized_dataset(dataset, args.output, add_suffix=False)
        else:
            out_base = write_normalized_dataset(dataset, args.input)
    except OSError as e:
        print(f"ERROR: Could not write dataset: {e}")
        return 1

    elapsed = (datetime.now() - start_time).total_seconds()
    n_obs, n_feat = dataset.matrix.shape
    print(f"\nFinal matrix: {n_obs} observations × {n_feat} features")
    print(f"Wrote {out_base}.* ({elapsed:.1f}s)")
    return 0
