"""
Column-wise normalizing transforms for feature matrices.

Features computed on time series live on wildly different scales (counts,
p-values, spectral powers, lags...). Before distances or classifiers are
computed they are squashed onto comparable scales, one feature (column)
at a time:

- sigmoid: logistic function of the column z-score
- scaledSigmoid: sigmoid, then rescaled to the unit interval
- robustSigmoid: logistic function of the median/IQR-standardized column,
  insensitive to outliers
- scaledRobustSigmoid: robustSigmoid, then rescaled to the unit interval
- mixedSigmoid: scaledSigmoid for columns with zero IQR (where the robust
  version is undefined), scaledRobustSigmoid otherwise
- zscore: (x - mean) / std
- minMax: linear rescale to the unit interval

All statistics ignore missing values. Rescaling a constant column divides
zero by zero and yields NaN; the post-normalization sweeps remove such
columns.

Transforms are held in a registry keyed by name so new ones can be added
without touching the filtering code.

References:
    - Fulcher, Little & Jones (2013) J. R. Soc. Interface 10:20130048
    - Fulcher & Jones (2017) Cell Systems 5:527
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Mapping, Optional

import numpy as np
from numpy.typing import NDArray
from scipy.stats import iqr

from featurenorm.core.errors import UnknownNormalization
from featurenorm.core.featurematrix import FeatureMatrix
from featurenorm.core.transform import Transform
from featurenorm.quality.degeneracy import require_multiple_observations
from featurenorm.utils.statistics import nan_std

logger = logging.getLogger(__name__)

__all__ = [
    'NormalizationMethod',
    'NormalizationResult',
    'IDENTITY_NAMES',
    'sigmoid',
    'scaled_sigmoid',
    'robust_sigmoid',
    'scaled_robust_sigmoid',
    'mixed_sigmoid',
    'zscore',
    'min_max',
    'register_normalization',
    'get_normalization',
    'available_normalizations',
    'normalize',
    'NormalizationDispatcher',
]

NormalizationFunc = Callable[[NDArray[np.float64]], NDArray[np.float64]]

# Names meaning "apply no transform".
IDENTITY_NAMES = frozenset({"nothing", "none"})

# Scales the IQR to the standard deviation of a normal distribution.
IQR_TO_SD = 1.35


class NormalizationMethod(Enum):
    """Built-in normalization methods."""

    SIGMOID = "sigmoid"
    SCALED_SIGMOID = "scaledSigmoid"
    ROBUST_SIGMOID = "robustSigmoid"
    SCALED_ROBUST_SIGMOID = "scaledRobustSigmoid"
    MIXED_SIGMOID = "mixedSigmoid"
    ZSCORE = "zscore"
    MIN_MAX = "minMax"


@dataclass(frozen=True)
class NormalizationResult:
    """Result of a normalization.

    Attributes:
        data: Normalized matrix (observations × features)
        method: Name of the transform applied
        n_missing_before: Missing entries in the input
        n_missing_after: Missing entries in the output
    """

    data: NDArray[np.float64]
    method: str
    n_missing_before: int
    n_missing_after: int

    @property
    def n_missing_introduced(self) -> int:
        return self.n_missing_after - self.n_missing_before


def _logistic(z: NDArray[np.float64]) -> NDArray[np.float64]:
    with np.errstate(over='ignore'):
        return 1.0 / (1.0 + np.exp(-z))


def _rescale_unit(data: NDArray[np.float64]) -> NDArray[np.float64]:
    """Linear rescale of each column to [0, 1]; constant columns become NaN."""
    good = ~np.isnan(data)
    col_min = np.where(good, data, np.inf).min(axis=0, initial=np.inf)
    col_max = np.where(good, data, -np.inf).max(axis=0, initial=-np.inf)
    with np.errstate(divide='ignore', invalid='ignore'):
        return (data - col_min) / (col_max - col_min)


def zscore(data: NDArray[np.float64]) -> NDArray[np.float64]:
    """Standardize each column to zero mean and unit (sample) standard deviation."""
    data = np.asarray(data, dtype=float)
    good = ~np.isnan(data)
    n_good = good.sum(axis=0)
    col_mean = np.where(good, data, 0.0).sum(axis=0) / np.maximum(n_good, 1)
    col_std = nan_std(data, axis=0)
    with np.errstate(divide='ignore', invalid='ignore'):
        return (data - col_mean) / col_std


def min_max(data: NDArray[np.float64]) -> NDArray[np.float64]:
    """Rescale each column linearly to the unit interval."""
    return _rescale_unit(np.asarray(data, dtype=float))


def sigmoid(data: NDArray[np.float64]) -> NDArray[np.float64]:
    """Logistic function of the column z-scores."""
    return _logistic(zscore(data))


def scaled_sigmoid(data: NDArray[np.float64]) -> NDArray[np.float64]:
    """Sigmoid followed by a rescale to [0, 1]."""
    return _rescale_unit(sigmoid(data))


def _column_median(data: NDArray[np.float64]) -> NDArray[np.float64]:
    medians = np.full(data.shape[1], np.nan)
    for j in range(data.shape[1]):
        col = data[~np.isnan(data[:, j]), j]
        if col.size:
            medians[j] = np.median(col)
    return medians


def _column_iqr(data: NDArray[np.float64]) -> NDArray[np.float64]:
    if data.shape[0] == 0:
        return np.full(data.shape[1], np.nan)
    return np.asarray(iqr(data, axis=0, nan_policy='omit'), dtype=float)


def robust_sigmoid(data: NDArray[np.float64]) -> NDArray[np.float64]:
    """
    Outlier-robust sigmoid.

    Mathematical formulation:
        f(x) = 1 / (1 + exp(-(x - median(x)) / (IQR(x) / 1.35)))
    """
    data = np.asarray(data, dtype=float)
    col_median = _column_median(data)
    col_iqr = _column_iqr(data)
    with np.errstate(divide='ignore', invalid='ignore'):
        return _logistic((data - col_median) / (col_iqr / IQR_TO_SD))


def scaled_robust_sigmoid(data: NDArray[np.float64]) -> NDArray[np.float64]:
    """Robust sigmoid followed by a rescale to [0, 1]."""
    return _rescale_unit(robust_sigmoid(data))


def mixed_sigmoid(data: NDArray[np.float64]) -> NDArray[np.float64]:
    """
    Scaled robust sigmoid, falling back to the scaled sigmoid for columns with zero IQR.

    Columns dominated by a single value have IQR = 0, which makes the robust
    standardization divide by zero; those use the mean/std version instead.
    """
    data = np.asarray(data, dtype=float)
    zero_iqr = _column_iqr(data) == 0
    return np.where(zero_iqr[np.newaxis, :], scaled_sigmoid(data), scaled_robust_sigmoid(data))


_REGISTRY: dict[str, NormalizationFunc] = {
    NormalizationMethod.SIGMOID.value: sigmoid,
    NormalizationMethod.SCALED_SIGMOID.value: scaled_sigmoid,
    NormalizationMethod.ROBUST_SIGMOID.value: robust_sigmoid,
    NormalizationMethod.SCALED_ROBUST_SIGMOID.value: scaled_robust_sigmoid,
    NormalizationMethod.MIXED_SIGMOID.value: mixed_sigmoid,
    NormalizationMethod.ZSCORE.value: zscore,
    NormalizationMethod.MIN_MAX.value: min_max,
    "maxmin": min_max,
}


def register_normalization(name: str, func: NormalizationFunc, overwrite: bool = False) -> None:
    """
    Add a transform to the default registry.

    Args:
        name: Name used to select the transform
        func: Function mapping an (observations × features) array to one of the same shape
        overwrite: Allow replacing an existing entry

    Raises:
        ValueError: If the name is reserved or already registered
    """
    if name in IDENTITY_NAMES:
        raise ValueError(f"'{name}' is reserved for the identity transform")
    if name in _REGISTRY and not overwrite:
        raise ValueError(f"Normalization '{name}' is already registered")
    _REGISTRY[name] = func


def get_normalization(
    name: str,
    registry: Optional[Mapping[str, NormalizationFunc]] = None,
) -> NormalizationFunc:
    """Look up a transform by name, in ``registry`` or the default registry."""
    source = _REGISTRY if registry is None else registry
    try:
        return source[name]
    except KeyError:
        raise UnknownNormalization(
            f"Unknown normalization '{name}'. Available: {sorted(source)}"
        ) from None


def available_normalizations() -> list[str]:
    return sorted(_REGISTRY)


def normalize(
    data: NDArray[np.float64],
    method: NormalizationMethod | str = NormalizationMethod.MIXED_SIGMOID,
    registry: Optional[Mapping[str, NormalizationFunc]] = None,
) -> NormalizationResult:
    """
    Apply a named normalization to a data matrix.

    Args:
        data: 2D array (observations × features), NaN marks missing
        method: Transform name or NormalizationMethod
        registry: Optional name -> function mapping used instead of the default

    Returns:
        NormalizationResult with the transformed matrix

    Raises:
        UnknownNormalization: If the name is not registered
        ValueError: If the transform changes the matrix shape
    """
    if isinstance(method, NormalizationMethod):
        method = method.value

    n_missing_before = int(np.isnan(data).sum())

    if method in IDENTITY_NAMES:
        out = np.array(data, dtype=float, copy=True)
    else:
        func = get_normalization(method, registry)
        out = np.asarray(func(np.array(data, dtype=float, copy=True)), dtype=float)

    if out.shape != data.shape:
        raise ValueError(
            f"Normalization '{method}' changed the matrix shape from {data.shape} to {out.shape}"
        )

    return NormalizationResult(
        data=out,
        method=method,
        n_missing_before=n_missing_before,
        n_missing_after=int(np.isnan(out).sum()),
    )


class NormalizationDispatcher(Transform):
    """
    Apply a named transform to the filtered matrix.

    "nothing" and "none" leave the matrix untouched. Any other name is
    looked up in the registry; whatever matrix the transform returns is
    taken as is, including any missing values it introduces.

    Params:
        norm_function: Transform name
        registry: Optional name -> function mapping (defaults to the built-ins)

    Raises:
        InsufficientObservations: If a single observation remains
    """

    def __init__(
        self,
        norm_function: str = NormalizationMethod.MIXED_SIGMOID.value,
        registry: Optional[Mapping[str, NormalizationFunc]] = None,
    ):
        super().__init__(name="NormalizationDispatcher", params={"norm_function": norm_function})
        self.norm_function = norm_function
        self.registry = registry

    def apply(self, matrix: FeatureMatrix) -> FeatureMatrix:
        require_multiple_observations(matrix)

        if self.norm_function in IDENTITY_NAMES:
            logger.warning(
                f"You specified '{self.norm_function}', so NO NORMALIZING IS ACTUALLY BEING DONE"
            )
            return matrix

        logger.info(
            f"Normalizing a {matrix.n_observations} x {matrix.n_features} object "
            f"using '{self.norm_function}'"
        )
        result = normalize(matrix.data, self.norm_function, registry=self.registry)
        logger.info(
            f"Normalized! The data matrix contains {result.n_missing_after} "
            f"special-valued elements"
        )
        return matrix.with_data(result.data)
