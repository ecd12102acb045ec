"""
featurenorm - Trimming and normalization of time-series feature matrices

Removes observations and features with too many invalid values, drops
features that carry no signal, and squashes the remaining features onto
comparable scales for clustering and classification.
"""

__version__ = "0.1.0"

from featurenorm.core.featurematrix import FeatureMatrix
from featurenorm.core.transform import Transform
from featurenorm.core.quality import QualityCode
from featurenorm.config import NormalizeConfig
from featurenorm.pipeline import TrimNormalizePipeline, trim_and_normalize

__all__ = [
    "FeatureMatrix",
    "Transform",
    "QualityCode",
    "NormalizeConfig",
    "TrimNormalizePipeline",
    "trim_and_normalize",
]
