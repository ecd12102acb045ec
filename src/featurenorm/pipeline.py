"""
Trim-and-normalize pipeline for feature matrices.

Takes the raw output of a feature-extraction run and produces a clean,
normalized matrix ready for clustering and classification:

    1. Mask non-finite and quality-flagged entries as missing
    2. Drop observations, then features, below the good-value thresholds
    3. Drop features that are near-constant (globally, optionally per class)
    4. Apply the named normalizing transform
    5. Drop columns the transform made all-missing or constant
    6. Package the result with a record of how it was produced

Each stage receives the previous stage's matrix and returns a new one, so
the ordering (e.g. column proportions computed on the row-filtered
matrix) is an explicit data dependency. Any stage may raise a
FeatureNormError, which aborts the whole run.

Examples:
    >>> from featurenorm.pipeline import trim_and_normalize
    >>> from featurenorm.config import NormalizeConfig
    >>>
    >>> dataset = trim_and_normalize(matrix, NormalizeConfig(filter_options=(0.8, 1.0)))
    >>> dataset.matrix.shape
    (95, 6722)
    >>> dataset.normalization_info.code_to_run
    "trim_and_normalize('mixedSigmoid', filter_options=[0.800000, 1.000000])"
"""

from __future__ import annotations

import logging
from typing import Mapping, Optional

import pandas as pd

from featurenorm.config import NormalizeConfig
from featurenorm.core.featurematrix import FeatureMatrix
from featurenorm.quality.degeneracy import (
    ClassVarianceFilter,
    DegeneracyFilter,
    require_multiple_observations,
)
from featurenorm.quality.filtering import ThresholdFilter
from featurenorm.quality.masking import (
    QualityMasker,
    log_good_value_ranges,
    log_missing_entries,
    summarize_good_values,
)
from featurenorm.quality.stabilization import PostNormalizationStabilizer
from featurenorm.result import NormalizedDataset, Provenance, ResultAssembler
from featurenorm.stats.normalization import NormalizationDispatcher, NormalizationFunc

logger = logging.getLogger(__name__)

__all__ = ['TrimNormalizePipeline', 'trim_and_normalize']


class TrimNormalizePipeline:
    """
    Run every trimming and normalization stage in order.

    Args:
        config: Run settings (validated here, once)
        registry: Optional name -> transform mapping used instead of the built-ins

    Raises:
        InvalidThreshold: If the configured thresholds are outside [0, 1]
    """

    def __init__(
        self,
        config: Optional[NormalizeConfig] = None,
        registry: Optional[Mapping[str, NormalizationFunc]] = None,
    ):
        self.config = config if config is not None else NormalizeConfig()
        self.config.validate()
        self.registry = registry

    def _filter(self, matrix: FeatureMatrix) -> FeatureMatrix:
        """Stages 1-3: mask, threshold-filter, and drop degenerate features."""
        config = self.config

        logger.info(
            f"Removing observations with more than "
            f"{(1 - config.observation_threshold) * 100:.2f}% special-valued outputs"
        )
        logger.info(
            f"Removing features with more than "
            f"{(1 - config.feature_threshold) * 100:.2f}% special-valued outputs"
        )

        matrix = QualityMasker().apply(matrix)

        # Rows first: column proportions are computed on the row-filtered matrix
        matrix = ThresholdFilter(config.observation_threshold, axis=0).apply(matrix)
        matrix = ThresholdFilter(config.feature_threshold, axis=1).apply(matrix)

        matrix = DegeneracyFilter().apply(matrix)

        if config.class_var_filter:
            matrix = ClassVarianceFilter(class_column=config.class_column).apply(matrix)

        return matrix

    def _report_post_filtering(self, matrix: FeatureMatrix) -> None:
        n_missing = log_missing_entries(matrix, "post-filtering")
        if n_missing:
            log_good_value_ranges(summarize_good_values(matrix), "post-filtering")

    def run(
        self,
        matrix: FeatureMatrix,
        provenance: Optional[Provenance] = None,
        master_operations: Optional[pd.DataFrame] = None,
    ) -> NormalizedDataset:
        """
        Trim and normalize ``matrix``.

        Args:
            matrix: Raw feature matrix with quality codes (and optional timings)
            provenance: Upstream provenance fields, passed through unchanged
            master_operations: Master operation table, passed through unchanged

        Returns:
            NormalizedDataset with the final matrix and normalization record

        Raises:
            FeatureNormError: If any stage cannot produce a valid matrix
        """
        config = self.config

        if config.keep_calc_time and matrix.calc_times is None:
            logger.warning("Calculation times were requested but the input carries none")
        elif not config.keep_calc_time and matrix.calc_times is not None:
            matrix = matrix.without_calc_times()

        matrix = self._filter(matrix)

        require_multiple_observations(matrix)
        self._report_post_filtering(matrix)

        matrix = NormalizationDispatcher(config.norm_function, registry=self.registry).apply(matrix)
        matrix = PostNormalizationStabilizer(config.norm_function).apply(matrix)

        return ResultAssembler(config).assemble(
            matrix,
            provenance=provenance,
            master_operations=master_operations,
        )


def trim_and_normalize(
    matrix: FeatureMatrix,
    config: Optional[NormalizeConfig] = None,
    registry: Optional[Mapping[str, NormalizationFunc]] = None,
    provenance: Optional[Provenance] = None,
    master_operations: Optional[pd.DataFrame] = None,
) -> NormalizedDataset:
    """Run TrimNormalizePipeline once; see TrimNormalizePipeline.run."""
    return TrimNormalizePipeline(config, registry=registry).run(
        matrix,
        provenance=provenance,
        master_operations=master_operations,
    )
