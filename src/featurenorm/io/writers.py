"""
Writer for normalized datasets.

Writes a NormalizedDataset in the same file layout the loader reads,
under the input base path with an ``_N`` suffix, plus one JSON record
describing the normalization, the clustering placeholders and the
pass-through provenance fields.

Examples:
    >>> from featurenorm.io.writers import write_normalized_dataset
    >>>
    >>> out_base = write_normalized_dataset(dataset, Path("runs/HCTSA"))
    >>> out_base
    PosixPath('runs/HCTSA_N')
"""

from __future__ import annotations

import logging
from pathlib import Path
import pandas as pd

from featurenorm.io.loaders import dataset_paths
from featurenorm.result import NormalizedDataset
from featurenorm.utils.fileio import atomic_write_csv, atomic_write_json

logger = logging.getLogger(__name__)

__all__ = ['normalized_base', 'write_normalized_dataset']


def normalized_base(base: Path) -> Path:
    """Output base path for a normalized version of the dataset at ``base``."""
    base = Path(base)
    return base.with_name(base.name + "_N")


def write_normalized_dataset(
    dataset: NormalizedDataset,
    base: Path,
    add_suffix: bool = True,
) -> Path:
    """
    Write a normalized dataset to disk.

    Args:
        dataset: Result of trim_and_normalize
        base: Base path of the input dataset
        add_suffix: Append "_N" to ``base`` (set False to write to ``base`` itself)

    Returns:
        Base path of the written files

    Raises:
        TypeError: If dataset is not a NormalizedDataset
        OSError: If a file cannot be written
    """
    if not isinstance(dataset, NormalizedDataset):
        raise TypeError(f"dataset must be NormalizedDataset, got {type(dataset)}")

    out_base = normalized_base(base) if add_suffix else Path(base)
    if out_base.parent != Path('.') and not out_base.parent.exists():
        out_base.parent.mkdir(parents=True, exist_ok=True)

    paths = dataset_paths(out_base)
    matrix = dataset.matrix

    def layer(values) -> pd.DataFrame:
        return pd.DataFrame(values, index=matrix.observation_ids, columns=matrix.feature_ids)

    logger.info(f"Saving the trimmed, normalized data to {out_base}.*")
    try:
        atomic_write_csv(paths['data'], layer(matrix.data))
        atomic_write_csv(paths['quality'], layer(matrix.quality_codes))
        atomic_write_csv(paths['observations'], matrix.observation_metadata)
        atomic_write_csv(paths['features'], matrix.feature_metadata)
        if matrix.calc_times is not None:
            atomic_write_csv(paths['calc_time'], layer(matrix.calc_times))
        if dataset.master_operations is not None:
            atomic_write_csv(paths['master_operations'], dataset.master_operations)
        atomic_write_json(paths['provenance'], dataset.provenance.to_dict())
        atomic_write_json(paths['normalization'], dataset.to_dict())
    except OSError as e:
        raise OSError(f"Failed to write normalized dataset to {out_base}: {e}") from e

    return out_base
