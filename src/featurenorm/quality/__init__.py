"""
Quality control stages for feature matrices.

Components:
    QualityMasker: Turns non-finite and quality-flagged entries into NaN
    ThresholdFilter: Drops observations/features below a good-value proportion
    DegeneracyFilter: Drops features that are near-constant across observations
    ClassVarianceFilter: Drops features that are near-constant within any class
    PostNormalizationStabilizer: Re-checks the normalized matrix for degeneracies

Workflow:
    1. Mask (QualityMasker) - every invalid entry becomes NaN
    2. Filter rows, then columns (ThresholdFilter) - rows first, always
    3. Drop constant features (DegeneracyFilter, optionally ClassVarianceFilter)
    4. Normalize (featurenorm.stats.normalization)
    5. Stabilize (PostNormalizationStabilizer)

Examples:
    >>> from featurenorm.quality import QualityMasker, ThresholdFilter, DegeneracyFilter
    >>>
    >>> masked = QualityMasker().apply(matrix)
    >>> rows_ok = ThresholdFilter(threshold=0.7, axis=0).apply(masked)
    >>> clean = DegeneracyFilter().apply(ThresholdFilter(threshold=1.0, axis=1).apply(rows_ok))
"""

from featurenorm.quality.masking import (
    QualityMasker,
    MaskingReport,
    GoodValueSummary,
    summarize_good_values,
)
from featurenorm.quality.filtering import (
    ThresholdFilter,
    ThresholdFilterResult,
    compute_keep_mask,
)
from featurenorm.quality.degeneracy import (
    DegeneracyFilter,
    ClassVarianceFilter,
    require_multiple_observations,
)
from featurenorm.quality.stabilization import (
    AllMissingColumnFilter,
    PostNormalizationStabilizer,
)

__all__ = [
    # Masking
    'QualityMasker',
    'MaskingReport',
    'GoodValueSummary',
    'summarize_good_values',
    # Threshold filtering
    'ThresholdFilter',
    'ThresholdFilterResult',
    'compute_keep_mask',
    # Degeneracy
    'DegeneracyFilter',
    'ClassVarianceFilter',
    'require_multiple_observations',
    # Post-normalization
    'AllMissingColumnFilter',
    'PostNormalizationStabilizer',
]
