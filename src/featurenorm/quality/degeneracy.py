"""
Removal of features that carry no discriminating signal.

A feature whose values are (near-)constant across all observations cannot
separate anything, and many downstream algorithms (correlation distances,
z-scoring, classifiers) break on zero-variance inputs. The same holds
within a class: a feature constant inside one class often trips up
class-aware classifiers.

Near-constant means the missing-aware sample standard deviation is below
``10 * eps``.
"""

from __future__ import annotations

import logging
from typing import Optional
import numpy as np
import pandas as pd

from featurenorm.core.errors import (
    AllFeaturesDegenerate,
    AllFeaturesClassDegenerate,
    InsufficientObservations,
)
from featurenorm.core.featurematrix import FeatureMatrix
from featurenorm.core.transform import Transform
from featurenorm.utils.statistics import NEAR_CONSTANT_TOL, nan_std, near_constant_mask

logger = logging.getLogger(__name__)

__all__ = [
    'DegeneracyFilter',
    'ClassVarianceFilter',
    'class_near_constant_mask',
    'require_multiple_observations',
]


def require_multiple_observations(matrix: FeatureMatrix) -> None:
    """
    Fail if exactly one observation remains.

    Raises:
        InsufficientObservations: With a single observation, normalization is meaningless
    """
    if matrix.n_observations == 1:
        raise InsufficientObservations(
            "Only a single observation remains in the dataset -- normalization cannot be applied"
        )


class DegeneracyFilter(Transform):
    """
    Drop features with near-constant outputs across all observations.

    Skipped when fewer than two observations remain (every feature would
    look constant). Raises if every feature is near-constant.

    Params:
        tol: Standard deviation below which a feature counts as constant
        stage: Label used in log messages (e.g. "post-normalization")
    """

    def __init__(self, tol: float = NEAR_CONSTANT_TOL, stage: Optional[str] = None):
        super().__init__(name="DegeneracyFilter", params={"tol": tol, "stage": stage})
        self.tol = tol
        self.stage = stage

    def _prefix(self) -> str:
        return f"({self.stage}): " if self.stage else ""

    def apply(self, matrix: FeatureMatrix) -> FeatureMatrix:
        if matrix.n_observations < 2:
            logger.info(
                f"{self._prefix()}Only {matrix.n_observations} observation(s) remain; "
                f"skipping near-constant feature check"
            )
            return matrix

        bad_feature = near_constant_mask(matrix.data, axis=0, tol=self.tol)

        if bad_feature.all():
            raise AllFeaturesDegenerate(
                f"All {len(bad_feature)} features produced constant outputs on the "
                f"{matrix.n_observations} observations"
            )

        if bad_feature.any():
            logger.info(
                f"{self._prefix()}Removed {int(bad_feature.sum())} features with near-constant "
                f"outputs: from {len(bad_feature)} to {int((~bad_feature).sum())}."
            )
            return matrix.select_features(~bad_feature)

        logger.info(f"{self._prefix()}No features had near-constant outputs on the dataset")
        return matrix


def _class_labels(labels: pd.Series) -> list:
    """Declared classes, in order. Categorical columns keep unused categories."""
    if isinstance(labels.dtype, pd.CategoricalDtype):
        return list(labels.cat.categories)
    return list(pd.unique(labels.dropna()))


def class_near_constant_mask(
    data: np.ndarray,
    labels: pd.Series,
    tol: float = NEAR_CONSTANT_TOL,
) -> np.ndarray:
    """
    Flag columns that are near-constant within at least one class.

    Args:
        data: 2D array (observations × features) with NaN as missing marker
        labels: Class label per observation (row-aligned with data)
        tol: Standard deviation tolerance

    Returns:
        Boolean mask, True for columns with a near-constant class
    """
    label_values = labels.to_numpy()
    flagged = np.zeros(data.shape[1], dtype=bool)
    for class_name in _class_labels(labels):
        in_class = label_values == class_name
        class_std = nan_std(data[in_class, :], axis=0)
        with np.errstate(invalid='ignore'):
            flagged |= class_std < tol
    return flagged


class ClassVarianceFilter(Transform):
    """
    Drop features that are near-constant within any declared class.

    Class labels are read from ``observation_metadata[class_column]``. When
    that column is absent the pass is skipped with a warning.

    Params:
        class_column: Observation metadata column holding class labels
        tol: Standard deviation tolerance

    Examples:
        >>> filtered = ClassVarianceFilter(class_column='Group').apply(matrix)
    """

    def __init__(self, class_column: str = 'Group', tol: float = NEAR_CONSTANT_TOL):
        super().__init__(
            name="ClassVarianceFilter",
            params={"class_column": class_column, "tol": tol}
        )
        self.class_column = class_column
        self.tol = tol

    def apply(self, matrix: FeatureMatrix) -> FeatureMatrix:
        metadata = matrix.observation_metadata
        if self.class_column not in metadata.columns or metadata[self.class_column].isna().all():
            logger.warning(
                f"Class labels ('{self.class_column}') not assigned to observations, "
                f"so cannot filter on class variance"
            )
            return matrix

        labels = metadata[self.class_column]
        zero_class_var = class_near_constant_mask(matrix.data, labels, tol=self.tol)

        if zero_class_var.all():
            raise AllFeaturesClassDegenerate(
                f"All {len(zero_class_var)} features produced near-constant class-wise outputs "
                f"on the {matrix.n_observations} observations"
            )

        if zero_class_var.any():
            logger.info(
                f"Removed {int(zero_class_var.sum())} features with near-constant class-wise "
                f"outputs: from {len(zero_class_var)} to {int((~zero_class_var).sum())}."
            )
            return matrix.select_features(~zero_class_var)

        logger.info("No features had near-constant class-wise outputs")
        return matrix
