"""
CSV loader for feature-extraction datasets.

A dataset on disk is a set of files sharing one base path:

    <base>.data.csv               feature values (observations × features)
    <base>.quality.csv            quality codes, same layout (optional, default all 0)
    <base>.observations.csv       observation table, first column = observation id
    <base>.features.csv           feature table, first column = feature id
    <base>.calc_time.csv          calculation times, same layout as data (optional)
    <base>.master_operations.csv  master operation table (optional)
    <base>.provenance.json        from_database / git_info fields (optional)

Engineering Design:
    - Tables are re-indexed to the order of the data matrix, so files may
      list ids in any order
    - Ids are read as strings (preserves leading zeros)
    - Non-finite values are kept: masking them is the pipeline's job

Examples:
    >>> from featurenorm.io.loaders import load_feature_dataset
    >>>
    >>> matrix, master_operations, provenance = load_feature_dataset(Path("runs/HCTSA"))
    >>> print(f"Loaded {matrix.n_observations} observations × {matrix.n_features} features")
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional, Tuple
import warnings
import numpy as np
import pandas as pd

from featurenorm.core.featurematrix import FeatureMatrix
from featurenorm.core.quality import QualityCode
from featurenorm.result import Provenance

logger = logging.getLogger(__name__)

__all__ = ['dataset_paths', 'load_csv_table', 'load_feature_dataset']


def dataset_paths(base: Path) -> dict[str, Path]:
    """Map each dataset component to its file path for ``base``."""
    base = str(base)
    return {
        'data': Path(base + ".data.csv"),
        'quality': Path(base + ".quality.csv"),
        'observations': Path(base + ".observations.csv"),
        'features': Path(base + ".features.csv"),
        'calc_time': Path(base + ".calc_time.csv"),
        'master_operations': Path(base + ".master_operations.csv"),
        'provenance': Path(base + ".provenance.json"),
        'normalization': Path(base + ".normalization.json"),
    }


def load_csv_table(path: Path) -> pd.DataFrame:
    """
    Read a CSV whose first column holds identifiers.

    Raises:
        FileNotFoundError: If path does not exist
        ValueError: If the file is empty or unreadable
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"CSV file not found: {path}")
    if not path.is_file():
        raise ValueError(f"Path is not a file: {path}")

    try:
        df = pd.read_csv(path, index_col=0)
    except pd.errors.EmptyDataError as e:
        raise ValueError(f"CSV file is empty: {path}") from e
    except Exception as e:
        raise ValueError(f"Failed to read CSV file {path}: {e}") from e

    df.index = df.index.astype(str)
    df.columns = df.columns.astype(str)
    return df


def _numeric_values(df: pd.DataFrame, path: Path) -> np.ndarray:
    try:
        return df.to_numpy(dtype=float)
    except ValueError as e:
        raise ValueError(f"CSV contains non-numeric values: {path}") from e


def _aligned_layer(
    path: Path,
    observation_ids: pd.Index,
    feature_ids: pd.Index,
) -> np.ndarray:
    """Load a matrix-shaped layer (quality codes, timings) in the data's order."""
    df = load_csv_table(path)
    missing_rows = observation_ids.difference(df.index)
    missing_cols = feature_ids.difference(df.columns)
    if len(missing_rows) or len(missing_cols):
        raise ValueError(
            f"{path} does not cover the data matrix: {len(missing_rows)} observations and "
            f"{len(missing_cols)} features missing"
        )
    return _numeric_values(df.loc[observation_ids, feature_ids], path)


def _aligned_table(path: Path, ids: pd.Index, what: str) -> pd.DataFrame:
    """Load a metadata table re-indexed to ``ids``; empty table if the file is absent."""
    if not path.exists():
        logger.info(f"No {what} table at {path}; using an empty table")
        return pd.DataFrame(index=ids)

    table = load_csv_table(path)
    if table.index.duplicated().any():
        raise ValueError(f"{path} contains duplicate {what} ids")
    missing = ids.difference(table.index)
    if len(missing):
        raise ValueError(
            f"{path} is missing {len(missing)} {what} ids, e.g. {list(missing[:5])}"
        )
    return table.loc[ids]


def load_feature_dataset(
    base: Path,
) -> Tuple[FeatureMatrix, Optional[pd.DataFrame], Provenance]:
    """
    Load a feature-extraction dataset from its CSV/JSON files.

    Args:
        base: Path prefix shared by the dataset files (see module docstring)

    Returns:
        (matrix, master_operations, provenance). ``matrix.calc_times`` is set
        only when a calc_time file exists; ``master_operations`` is None when
        no master operation table exists.

    Raises:
        FileNotFoundError: If the data file does not exist
        ValueError: If any file is malformed or does not match the data matrix
    """
    paths = dataset_paths(base)

    df = load_csv_table(paths['data'])
    if df.shape[0] == 0 or df.shape[1] == 0:
        raise ValueError(f"CSV contains no data: {paths['data']}")
    if df.index.duplicated().any() or df.columns.duplicated().any():
        raise ValueError(f"Duplicate observation or feature ids in {paths['data']}")

    observation_ids = pd.Index(df.index)
    feature_ids = pd.Index(df.columns)
    data = _numeric_values(df, paths['data'])

    if paths['quality'].exists():
        quality_codes = _aligned_layer(paths['quality'], observation_ids, feature_ids)
        if np.isnan(quality_codes).any():
            raise ValueError(f"Quality codes must not be missing: {paths['quality']}")
        quality_codes = quality_codes.astype(int)
    else:
        warnings.warn(
            f"No quality codes at {paths['quality']}; treating every entry as "
            f"{QualityCode.GOOD.name}",
            UserWarning
        )
        quality_codes = np.full(data.shape, QualityCode.GOOD, dtype=int)

    calc_times = None
    if paths['calc_time'].exists():
        calc_times = _aligned_layer(paths['calc_time'], observation_ids, feature_ids)

    master_operations = None
    if paths['master_operations'].exists():
        master_operations = load_csv_table(paths['master_operations'])

    provenance_values = None
    if paths['provenance'].exists():
        with open(paths['provenance'], 'r') as f:
            try:
                provenance_values = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid JSON in {paths['provenance']}: {e}") from e

    matrix = FeatureMatrix(
        data=data,
        observation_ids=observation_ids,
        feature_ids=feature_ids,
        observation_metadata=_aligned_table(paths['observations'], observation_ids, "observation"),
        feature_metadata=_aligned_table(paths['features'], feature_ids, "feature"),
        quality_codes=quality_codes,
        calc_times=calc_times,
    )

    logger.info(
        f"Loaded {matrix.n_observations} observations × {matrix.n_features} features "
        f"from {paths['data']}"
    )
    return matrix, master_operations, Provenance.from_dict(provenance_values)
