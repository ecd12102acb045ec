"""Normalizing transforms and the registry that dispatches them by name."""

from featurenorm.stats.normalization import (
    NormalizationMethod,
    NormalizationResult,
    NormalizationDispatcher,
    IDENTITY_NAMES,
    normalize,
    register_normalization,
    get_normalization,
    available_normalizations,
)

__all__ = [
    'NormalizationMethod',
    'NormalizationResult',
    'NormalizationDispatcher',
    'IDENTITY_NAMES',
    'normalize',
    'register_normalization',
    'get_normalization',
    'available_normalizations',
]
