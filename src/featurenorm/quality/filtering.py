"""
Good-value proportion filtering for feature matrices.

Removes observations (rows) and then features (columns) that do not have
a high enough proportion of good, non-missing values. One algorithm
serves both axes: the column pass runs the row routine on the transposed
matrix, so the two can never drift apart.

Engineering Design:
    - Pure functions (Transform): input matrix -> output matrix
    - Row filtering must be applied before column proportions are
      computed; ThresholdFilter instances are chained, never merged
    - A threshold of 1 guarantees no missing values remain along that axis

Examples:
    >>> rows = ThresholdFilter(threshold=0.7, axis=0)
    >>> cols = ThresholdFilter(threshold=1.0, axis=1)
    >>> filtered = cols.apply(rows.apply(masked_matrix))
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List
import numpy as np

from featurenorm.core.errors import InvalidThreshold, ThresholdTooStrict
from featurenorm.core.featurematrix import FeatureMatrix
from featurenorm.core.transform import Transform

logger = logging.getLogger(__name__)

__all__ = ['ThresholdFilter', 'ThresholdFilterResult', 'compute_keep_mask', 'AXIS_NAMES']

AXIS_NAMES = {0: "observations", 1: "features"}


@dataclass
class ThresholdFilterResult:
    """Results from threshold filtering along one axis."""
    matrix: FeatureMatrix
    keep_mask: np.ndarray
    removed_ids: List[str] = field(default_factory=list)
    axis: int = 0
    threshold: float = 0.0

    @property
    def n_before(self) -> int:
        return len(self.keep_mask)

    @property
    def n_after(self) -> int:
        return int(self.keep_mask.sum())

    @property
    def n_removed(self) -> int:
        return self.n_before - self.n_after

    @property
    def kept_all(self) -> bool:
        return self.n_removed == 0


def _filter_rows(data: np.ndarray, threshold: float, object_name: str) -> np.ndarray:
    """Keep-mask of rows of ``data`` with at least ``threshold`` good values."""
    n_rows = data.shape[0]

    if threshold == 0:
        return np.ones(n_rows, dtype=bool)

    if data.shape[1] == 0:
        prop_missing = np.ones(n_rows)
    else:
        prop_missing = np.isnan(data).mean(axis=1)
    keep = (1 - prop_missing) >= threshold

    if not keep.any():
        raise ThresholdTooStrict(object_name, threshold)

    if keep.all():
        logger.info(
            f"All {n_rows} {object_name} have at least {threshold * 100:4.2f}% good values. "
            f"Keeping them all."
        )
    else:
        logger.info(
            f"Removing {int((~keep).sum())} {object_name} with fewer than "
            f"{threshold * 100:4.2f}% good values: from {n_rows} to {int(keep.sum())}."
        )
    return keep


def compute_keep_mask(data: np.ndarray, threshold: float, axis: int = 0) -> np.ndarray:
    """
    Compute which rows (axis=0) or columns (axis=1) meet the good-value threshold.

    An item is kept iff ``1 - proportion_missing >= threshold``. A threshold
    of exactly 0 keeps everything without inspecting the data.

    Args:
        data: 2D array with NaN as the missing marker
        threshold: Minimum good-value proportion in [0, 1]
        axis: 0 for rows, 1 for columns

    Returns:
        Boolean keep-mask with one entry per item along ``axis``

    Raises:
        ThresholdTooStrict: If no item meets the threshold
    """
    if axis not in AXIS_NAMES:
        raise ValueError(f"axis must be 0 or 1, got {axis}")
    oriented = data if axis == 0 else data.T
    return _filter_rows(oriented, threshold, AXIS_NAMES[axis])


class ThresholdFilter(Transform):
    """
    Remove observations or features below a good-value proportion threshold.

    Params:
        threshold: Minimum proportion of good values in [0, 1].
                   0 keeps everything; 1 leaves no missing values on this axis.
        axis: 0 filters observations (rows), 1 filters features (columns).

    Examples:
        >>> result = ThresholdFilter(threshold=0.7, axis=0).filter(matrix)
        >>> print(result.removed_ids)
    """

    def __init__(self, threshold: float, axis: int = 0):
        if axis not in AXIS_NAMES:
            raise ValueError(f"axis must be 0 or 1, got {axis}")
        if not 0 <= threshold <= 1:
            raise InvalidThreshold(
                f"Threshold for {AXIS_NAMES[axis]} must lie in the unit interval, got {threshold}"
            )
        super().__init__(
            name="ThresholdFilter",
            params={"threshold": threshold, "axis": axis}
        )
        self.threshold = threshold
        self.axis = axis

    def filter(self, matrix: FeatureMatrix) -> ThresholdFilterResult:
        """Apply the filter and return the trimmed matrix with what was removed."""
        keep_mask = compute_keep_mask(matrix.data, self.threshold, self.axis)

        ids = matrix.observation_ids if self.axis == 0 else matrix.feature_ids
        removed_ids = [str(i) for i in ids[~keep_mask]]

        if removed_ids:
            logger.info(f"{AXIS_NAMES[self.axis].capitalize()} removed: {', '.join(removed_ids)}")
            filtered = matrix.select(keep_mask, axis=self.axis)
        else:
            filtered = matrix

        return ThresholdFilterResult(
            matrix=filtered,
            keep_mask=keep_mask,
            removed_ids=removed_ids,
            axis=self.axis,
            threshold=self.threshold,
        )

    def apply(self, matrix: FeatureMatrix) -> FeatureMatrix:
        return self.filter(matrix).matrix
