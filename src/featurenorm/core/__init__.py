"""
Core data structures and abstractions for feature-matrix trimming.

1. FeatureMatrix: Feature values with observation/feature tables and quality codes
2. QualityCode: Integer codes marking invalid entries
3. Transform: Abstract base class for immutable matrix transformations
4. Errors: Fatal error kinds raised by pipeline stages
"""

from featurenorm.core.featurematrix import FeatureMatrix
from featurenorm.core.quality import QualityCode, bad_quality_mask
from featurenorm.core.transform import Transform
from featurenorm.core.errors import (
    FeatureNormError,
    InvalidThreshold,
    ThresholdTooStrict,
    AllFeaturesDegenerate,
    AllFeaturesClassDegenerate,
    InsufficientObservations,
    AllColumnsBadAfterNormalization,
    UnknownNormalization,
)

__all__ = [
    'FeatureMatrix',
    'QualityCode',
    'bad_quality_mask',
    'Transform',
    'FeatureNormError',
    'InvalidThreshold',
    'ThresholdTooStrict',
    'AllFeaturesDegenerate',
    'AllFeaturesClassDegenerate',
    'InsufficientObservations',
    'AllColumnsBadAfterNormalization',
    'UnknownNormalization',
]
