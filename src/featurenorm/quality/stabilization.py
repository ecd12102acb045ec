"""
Degeneracy sweeps applied after normalization.

Squashing transforms can manufacture new degeneracies: a column whose
rescale range collapses becomes entirely NaN (0/0), and a column whose
values all saturate the sigmoid becomes constant. Both sweeps here run on
the normalized matrix, with quality codes, timings and the feature table
trimmed in step.
"""

from __future__ import annotations

import logging
import numpy as np

from featurenorm.core.errors import AllColumnsBadAfterNormalization
from featurenorm.core.featurematrix import FeatureMatrix
from featurenorm.core.transform import Transform
from featurenorm.quality.degeneracy import DegeneracyFilter
from featurenorm.quality.masking import log_missing_entries
from featurenorm.utils.statistics import NEAR_CONSTANT_TOL

logger = logging.getLogger(__name__)

__all__ = ['AllMissingColumnFilter', 'PostNormalizationStabilizer']


class AllMissingColumnFilter(Transform):
    """
    Drop columns in which every entry is missing.

    Params:
        norm_function: Name of the transform that produced the matrix (for logging)
    """

    def __init__(self, norm_function: str = ''):
        super().__init__(name="AllMissingColumnFilter", params={"norm_function": norm_function})
        self.norm_function = norm_function

    def apply(self, matrix: FeatureMatrix) -> FeatureMatrix:
        if matrix.n_observations == 0:
            nan_col = np.ones(matrix.n_features, dtype=bool)
        else:
            nan_col = np.isnan(matrix.data).all(axis=0)

        if nan_col.all():
            raise AllColumnsBadAfterNormalization(
                f"After {self.norm_function} normalization, all {len(nan_col)} columns were "
                f"bad values"
            )

        if nan_col.any():
            logger.info(
                f"Removed {int(nan_col.sum())} all-NaN columns introduced by "
                f"{self.norm_function} normalization"
            )
            return matrix.select_features(~nan_col)

        return matrix


class PostNormalizationStabilizer(Transform):
    """
    Re-check the normalized matrix for all-missing and near-constant columns.

    Runs the all-missing sweep, then the near-constant sweep, then reports
    how many missing entries remain.

    Examples:
        >>> stable = PostNormalizationStabilizer('mixedSigmoid').apply(normalized)
    """

    def __init__(self, norm_function: str = '', tol: float = NEAR_CONSTANT_TOL):
        super().__init__(
            name="PostNormalizationStabilizer",
            params={"norm_function": norm_function, "tol": tol}
        )
        self.norm_function = norm_function
        self.tol = tol

    def apply(self, matrix: FeatureMatrix) -> FeatureMatrix:
        stable = AllMissingColumnFilter(self.norm_function).apply(matrix)
        stable = DegeneracyFilter(tol=self.tol, stage="post-normalization").apply(stable)
        log_missing_entries(stable, "post-normalization")
        return stable
