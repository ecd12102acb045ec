"""
featurenorm CLI - Command-line interface for trimming and normalizing feature matrices.

Commands:
    featurenorm normalize   - Filter, normalize and save a feature dataset
    featurenorm inspect     - Report good-value ranges to help choose thresholds
"""

import argparse
import sys
from typing import Optional, List


def main(args: Optional[List[str]] = None) -> int:
    """Main CLI dispatcher for featurenorm."""
    parser = argparse.ArgumentParser(
        prog="featurenorm",
        description="Trim and normalize time-series feature matrices",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  normalize     Filter bad observations/features, normalize, and save <input>_N
  inspect       Report per-observation and per-feature good-value ranges

Examples:
  featurenorm inspect --input runs/HCTSA --plot figures/quality.png
  featurenorm normalize --input runs/HCTSA
  featurenorm normalize --input runs/HCTSA --norm-function scaledRobustSigmoid --row-threshold 0.8
  featurenorm normalize --input runs/HCTSA --config normalize.yaml --class-var-filter
        """
    )

    parser.add_argument(
        "--version", "-V",
        action="version",
        version="%(prog)s 0.1.0"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Import and register subcommands
    from featurenorm.cli import normalize, inspect_quality
    normalize.register_parser(subparsers)
    inspect_quality.register_parser(subparsers)

    parsed_args = parser.parse_args(args)

    if parsed_args.command is None:
        parser.print_help()
        return 0

    # Dispatch to subcommand
    return parsed_args.func(parsed_args)


if __name__ == "__main__":
    sys.exit(main())
