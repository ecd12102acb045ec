"""
I/O module for loading feature datasets and writing normalized results.

Key Functions:
    - load_feature_dataset: Load matrix, quality codes, tables and provenance
    - write_normalized_dataset: Write a NormalizedDataset (``_N`` output)

Examples:
    >>> from featurenorm.io import load_feature_dataset, write_normalized_dataset
    >>> from featurenorm.pipeline import trim_and_normalize
    >>>
    >>> matrix, master_operations, provenance = load_feature_dataset(Path("HCTSA"))
    >>> dataset = trim_and_normalize(matrix, provenance=provenance,
    ...                              master_operations=master_operations)
    >>> write_normalized_dataset(dataset, Path("HCTSA"))
"""

from featurenorm.io.loaders import dataset_paths, load_csv_table, load_feature_dataset
from featurenorm.io.writers import normalized_base, write_normalized_dataset

__all__ = [
    'dataset_paths',
    'load_csv_table',
    'load_feature_dataset',
    'normalized_base',
    'write_normalized_dataset',
]
