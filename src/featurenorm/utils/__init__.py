"""Utility modules for feature-matrix processing."""

from featurenorm.utils.fileio import (
    atomic_write_json,
    atomic_write_csv,
)
from featurenorm.utils.statistics import (
    NEAR_CONSTANT_TOL,
    nan_std,
    near_constant_mask,
    good_value_proportion,
)

__all__ = [
    # Atomic file-write utilities
    'atomic_write_json',
    'atomic_write_csv',
    # Statistical utilities
    'NEAR_CONSTANT_TOL',
    'nan_std',
    'near_constant_mask',
    'good_value_proportion',
]
