"""
Conversion of invalid entries into the missing-value marker.

Upstream feature extraction leaves two kinds of invalid entries behind:
non-finite numbers (NaN, +Inf, -Inf) and entries whose quality code is
strictly positive (the computation failed, whatever number was stored).
QualityMasker turns both into NaN so that every later stage only needs to
ask one question: ``np.isnan``.

It also reports the good-value percentage range per observation and per
feature before any filtering, which is what an analyst looks at to pick
the row/column thresholds.

Examples:
    >>> from featurenorm.quality.masking import QualityMasker, summarize_good_values
    >>>
    >>> masked = QualityMasker().apply(matrix)
    >>> summary = summarize_good_values(masked)
    >>> print(summary.observation_range)
    (40.0, 100.0)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
import numpy as np
import pandas as pd

from featurenorm.core.featurematrix import FeatureMatrix
from featurenorm.core.quality import bad_quality_mask
from featurenorm.core.transform import Transform
from featurenorm.utils.statistics import good_value_proportion

logger = logging.getLogger(__name__)

__all__ = [
    'QualityMasker',
    'MaskingReport',
    'GoodValueSummary',
    'summarize_good_values',
    'log_good_value_ranges',
    'log_missing_entries',
]


@dataclass(frozen=True)
class GoodValueSummary:
    """Per-observation and per-feature percentage of good (non-missing) values."""
    observation_percent: pd.Series
    feature_percent: pd.Series

    @property
    def observation_range(self) -> tuple[float, float]:
        return _percent_range(self.observation_percent)

    @property
    def feature_range(self) -> tuple[float, float]:
        return _percent_range(self.feature_percent)


def _percent_range(percent: pd.Series) -> tuple[float, float]:
    if percent.empty:
        return (float('nan'), float('nan'))
    return (float(percent.min()), float(percent.max()))


@dataclass(frozen=True)
class MaskingReport:
    """
    Outcome of masking.

    Attributes:
        matrix: Matrix with every invalid entry set to NaN
        n_special_codes: Entries with a strictly positive quality code
        n_nonfinite: Entries that were non-finite in the raw data
        n_masked: Total entries that are missing after masking
        summary: Good-value percentages before any filtering
    """
    matrix: FeatureMatrix
    n_special_codes: int
    n_nonfinite: int
    n_masked: int
    summary: GoodValueSummary


def summarize_good_values(matrix: FeatureMatrix) -> GoodValueSummary:
    """Compute the percentage of good values for every observation and every feature."""
    return GoodValueSummary(
        observation_percent=pd.Series(
            good_value_proportion(matrix.data, axis=0) * 100,
            index=matrix.observation_ids,
            name='percent_good',
        ),
        feature_percent=pd.Series(
            good_value_proportion(matrix.data, axis=1) * 100,
            index=matrix.feature_ids,
            name='percent_good',
        ),
    )


def log_good_value_ranges(summary: GoodValueSummary, stage: str) -> None:
    """Log the min--max good-value percentage across observations and across features."""
    obs_min, obs_max = summary.observation_range
    feat_min, feat_max = summary.feature_range
    logger.info(f"({stage}): Observations vary from {obs_min:.2f}--{obs_max:.2f}% good values")
    logger.info(f"({stage}): Features vary from {feat_min:.2f}--{feat_max:.2f}% good values")


def log_missing_entries(matrix: FeatureMatrix, stage: str) -> int:
    """
    Log how many missing entries remain in ``matrix``.

    Returns:
        Number of missing entries
    """
    n_missing = int(matrix.missing_mask.sum())
    n_obs, n_feat = matrix.shape
    if n_missing == 0:
        logger.info(f"({stage}): No special-valued entries in the {n_obs}x{n_feat} data matrix")
    else:
        percent = 100 * n_missing / matrix.data.size
        logger.info(
            f"({stage}): {n_missing} special-valued entries ({percent:4.2f}%) remain "
            f"in the {n_obs}x{n_feat} data matrix"
        )
    return n_missing


class QualityMasker(Transform):
    """
    Mark non-finite and quality-flagged entries as missing (NaN).

    After this stage the invariant "quality code > 0 implies NaN" holds for
    every entry. Quality codes themselves are left untouched; they travel
    with the matrix to the output.

    Examples:
        >>> masker = QualityMasker()
        >>> report = masker.mask(matrix)
        >>> print(report.n_special_codes, report.n_masked)
    """

    def __init__(self):
        super().__init__(name="QualityMasker", params={})

    def mask(self, matrix: FeatureMatrix) -> MaskingReport:
        """Mask invalid entries and collect diagnostics."""
        errors = self.validate(matrix)
        if errors:
            raise ValueError("Validation failed:\n" + "\n".join(f"  - {e}" for e in errors))

        data = np.array(matrix.data, dtype=float, copy=True)

        nonfinite = ~np.isfinite(data)
        special = bad_quality_mask(matrix.quality_codes)
        data[nonfinite | special] = np.nan

        masked = matrix.with_data(data)
        summary = summarize_good_values(masked)

        report = MaskingReport(
            matrix=masked,
            n_special_codes=int(special.sum()),
            n_nonfinite=int(nonfinite.sum()),
            n_masked=int(np.isnan(data).sum()),
            summary=summary,
        )

        logger.info(f"There are {report.n_special_codes} special values in the data matrix")
        if report.n_nonfinite:
            logger.info(f"Converted {report.n_nonfinite} non-finite values to NaN")
        log_good_value_ranges(summary, "pre-filtering")

        return report

    def apply(self, matrix: FeatureMatrix) -> FeatureMatrix:
        return self.mask(matrix).matrix
