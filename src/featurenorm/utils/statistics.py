"""
Shared missing-aware statistics for the filtering and normalization stages.

Functions:
    nan_std: Sample standard deviation ignoring missing values
    near_constant_mask: Flag columns whose spread is below the constant tolerance
    good_value_proportion: Fraction of non-missing entries per row or column
"""

from __future__ import annotations

import numpy as np


__all__ = [
    'NEAR_CONSTANT_TOL',
    'nan_std',
    'near_constant_mask',
    'good_value_proportion',
]

# Values closer than this are treated as equal.
NEAR_CONSTANT_TOL = 10 * np.finfo(float).eps


def nan_std(data: np.ndarray, axis: int = 0) -> np.ndarray:
    """
    Sample standard deviation (ddof=1) along ``axis``, ignoring NaNs.

    Unlike ``np.nanstd`` this never warns on short slices:
    a slice with one good value has std 0 (a single value is constant) and
    a slice with no good values has std NaN.

    Args:
        data: 2D array with NaN as the missing marker.
        axis: Axis to reduce over (0 = per column, 1 = per row).

    Returns:
        1D array of standard deviations.

    Example:
        >>> nan_std(np.array([[1.0, 3.0], [np.nan, 3.0], [3.0, np.nan]]))
        array([1.41421356, 0.        ])
    """
    data = np.moveaxis(np.asarray(data, dtype=float), axis, 0)
    good = ~np.isnan(data)
    n_good = good.sum(axis=0)

    filled = np.where(good, data, 0.0)
    mean = filled.sum(axis=0) / np.maximum(n_good, 1)
    deviations = np.where(good, data - mean, 0.0)
    sum_squares = (deviations ** 2).sum(axis=0)

    std = np.full(n_good.shape, np.nan)
    single = n_good == 1
    several = n_good >= 2
    std[single] = 0.0
    std[several] = np.sqrt(sum_squares[several] / (n_good[several] - 1))
    return std


def near_constant_mask(
    data: np.ndarray,
    axis: int = 0,
    tol: float = NEAR_CONSTANT_TOL,
) -> np.ndarray:
    """
    Flag slices whose missing-aware standard deviation is below ``tol``.

    Slices with undefined spread (no good values) are never flagged.
    """
    std = nan_std(data, axis=axis)
    with np.errstate(invalid='ignore'):
        return std < tol


def good_value_proportion(data: np.ndarray, axis: int = 0) -> np.ndarray:
    """
    Proportion of non-missing values for each item along ``axis``.

    ``axis=0`` gives one proportion per row, ``axis=1`` one per column.
    """
    good = ~np.isnan(np.asarray(data, dtype=float))
    if axis == 0:
        return good.mean(axis=1) if good.shape[1] else np.zeros(good.shape[0])
    if axis == 1:
        return good.mean(axis=0) if good.shape[0] else np.zeros(good.shape[1])
    raise ValueError(f"axis must be 0 or 1, got {axis}")
