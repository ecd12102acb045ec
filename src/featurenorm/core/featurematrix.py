"""
Core data structure for feature-by-observation matrices.

FeatureMatrix unifies the numerical output of a feature-extraction run
(one row per observed time series, one column per computed feature) with
the tables that describe it (observation and feature metadata) and the
out-of-band quality codes that mark individual entries as invalid.

Context:
    A feature-extraction run produces several parallel structures:
    - Rows = observations (time series, samples)
    - Columns = features (operations applied to every observation)
    - Values = computed feature outputs, possibly NaN/Inf
    - Quality codes = per-entry integer, >0 meaning the computation failed

    Every trimming step must keep these structures aligned. Removing a row
    from the data without removing it from the quality codes or the
    observation table silently corrupts everything downstream.

Engineering Design:
    - Immutable: Operations return new instances (functional style)
    - Type-safe: NumPy arrays for values, Pandas for metadata
    - Validated: Constructor checks shape and index consistency
    - Optional calculation timings travel with the matrix so they are
      trimmed in lock-step without any extra bookkeeping

Examples:
    >>> import numpy as np
    >>> import pandas as pd
    >>> from featurenorm.core.featurematrix import FeatureMatrix
    >>>
    >>> observation_ids = pd.Index(["ts_1", "ts_2"])
    >>> feature_ids = pd.Index(["op_1", "op_2", "op_3"])
    >>> matrix = FeatureMatrix(
    ...     data=np.array([[0.1, 2.0, np.nan], [0.3, 1.0, 4.0]]),
    ...     observation_ids=observation_ids,
    ...     feature_ids=feature_ids,
    ...     observation_metadata=pd.DataFrame({'Group': ['a', 'b']}, index=observation_ids),
    ...     feature_metadata=pd.DataFrame({'master_id': [1, 1, 2]}, index=feature_ids),
    ...     quality_codes=np.zeros((2, 3), dtype=int),
    ... )
    >>> first_two = matrix.select_features(np.array([True, True, False]))
"""

from __future__ import annotations

from typing import Optional
import numpy as np
import pandas as pd

__all__ = ['FeatureMatrix']


class FeatureMatrix:
    """
    Immutable container for feature values + metadata tables + quality codes.

    Attributes:
        data: Feature values (observations × features), float
        observation_ids: Row identifiers (time series names)
        feature_ids: Column identifiers (operation names)
        observation_metadata: Per-observation descriptors, indexed by observation_ids
        feature_metadata: Per-feature descriptors, indexed by feature_ids
        quality_codes: Per-entry quality codes (>0 marks an invalid entry)
        calc_times: Optional per-entry calculation times (same shape as data)

    Shape Invariants:
        - data.shape == (len(observation_ids), len(feature_ids))
        - quality_codes.shape == data.shape
        - calc_times is None or calc_times.shape == data.shape
        - observation_metadata.index equals observation_ids
        - feature_metadata.index equals feature_ids
    """

    def __init__(
        self,
        data: np.ndarray,
        observation_ids: pd.Index,
        feature_ids: pd.Index,
        observation_metadata: pd.DataFrame,
        feature_metadata: pd.DataFrame,
        quality_codes: np.ndarray,
        calc_times: Optional[np.ndarray] = None,
    ):
        """
        Initialize FeatureMatrix with validation.

        Args:
            data: Feature matrix (observations × features)
            observation_ids: Row identifiers
            feature_ids: Column identifiers
            observation_metadata: DataFrame indexed by observation_ids
            feature_metadata: DataFrame indexed by feature_ids
            quality_codes: Integer matrix, same shape as data
            calc_times: Optional calculation times, same shape as data

        Raises:
            ValueError: If shapes are inconsistent or indices don't match
            TypeError: If data types are incorrect
        """
        # Type validation
        if not isinstance(data, np.ndarray):
            raise TypeError(f"data must be np.ndarray, got {type(data)}")
        if not isinstance(observation_ids, pd.Index):
            raise TypeError(f"observation_ids must be pd.Index, got {type(observation_ids)}")
        if not isinstance(feature_ids, pd.Index):
            raise TypeError(f"feature_ids must be pd.Index, got {type(feature_ids)}")
        if not isinstance(observation_metadata, pd.DataFrame):
            raise TypeError(
                f"observation_metadata must be pd.DataFrame, got {type(observation_metadata)}"
            )
        if not isinstance(feature_metadata, pd.DataFrame):
            raise TypeError(f"feature_metadata must be pd.DataFrame, got {type(feature_metadata)}")
        if not isinstance(quality_codes, np.ndarray):
            raise TypeError(f"quality_codes must be np.ndarray, got {type(quality_codes)}")
        if calc_times is not None and not isinstance(calc_times, np.ndarray):
            raise TypeError(f"calc_times must be np.ndarray or None, got {type(calc_times)}")

        # Shape validation
        if data.ndim != 2:
            raise ValueError(f"data must be 2D, got shape {data.shape}")

        n_observations, n_features = data.shape

        if len(observation_ids) != n_observations:
            raise ValueError(
                f"observation_ids length ({len(observation_ids)}) must match data rows "
                f"({n_observations})"
            )
        if len(feature_ids) != n_features:
            raise ValueError(
                f"feature_ids length ({len(feature_ids)}) must match data columns ({n_features})"
            )
        if quality_codes.shape != data.shape:
            raise ValueError(
                f"quality_codes shape {quality_codes.shape} must match data shape {data.shape}"
            )
        if calc_times is not None and calc_times.shape != data.shape:
            raise ValueError(
                f"calc_times shape {calc_times.shape} must match data shape {data.shape}"
            )

        # Index validation
        if not observation_metadata.index.equals(observation_ids):
            raise ValueError(
                "observation_metadata.index must match observation_ids exactly. "
                f"Got {len(observation_metadata.index)} metadata rows for "
                f"{len(observation_ids)} observations."
            )
        if not feature_metadata.index.equals(feature_ids):
            raise ValueError(
                "feature_metadata.index must match feature_ids exactly. "
                f"Got {len(feature_metadata.index)} metadata rows for {len(feature_ids)} features."
            )

        # Store as private attributes (immutability by convention)
        self._data = data.astype(float, copy=False)
        self._observation_ids = observation_ids
        self._feature_ids = feature_ids
        self._observation_metadata = observation_metadata
        self._feature_metadata = feature_metadata
        self._quality_codes = quality_codes
        self._calc_times = calc_times

    @property
    def data(self) -> np.ndarray:
        """Feature values (observations × features)."""
        return self._data

    @property
    def observation_ids(self) -> pd.Index:
        return self._observation_ids

    @property
    def feature_ids(self) -> pd.Index:
        return self._feature_ids

    @property
    def observation_metadata(self) -> pd.DataFrame:
        return self._observation_metadata

    @property
    def feature_metadata(self) -> pd.DataFrame:
        return self._feature_metadata

    @property
    def quality_codes(self) -> np.ndarray:
        """Quality code matrix (same shape as data)."""
        return self._quality_codes

    @property
    def calc_times(self) -> Optional[np.ndarray]:
        """Calculation times, or None when timings are not carried."""
        return self._calc_times

    @property
    def shape(self) -> tuple[int, int]:
        """Matrix dimensions (n_observations, n_features)."""
        return self._data.shape

    @property
    def n_observations(self) -> int:
        return self._data.shape[0]

    @property
    def n_features(self) -> int:
        return self._data.shape[1]

    @property
    def missing_mask(self) -> np.ndarray:
        """Boolean matrix, True where the value is the missing sentinel (NaN)."""
        return np.isnan(self._data)

    def select_observations(self, mask: np.ndarray | pd.Series) -> FeatureMatrix:
        """
        Subset matrix by observations (rows).

        Returns new FeatureMatrix with selected rows; quality codes, timings
        and the observation table are filtered with the same mask.

        Args:
            mask: Boolean array/Series indicating which observations to keep
                If Series, uses values and ignores index

        Raises:
            ValueError: If mask length doesn't match n_observations
        """
        if isinstance(mask, pd.Series):
            mask = mask.values
        mask = np.asarray(mask, dtype=bool)

        if len(mask) != self.n_observations:
            raise ValueError(
                f"mask length ({len(mask)}) must match n_observations ({self.n_observations})"
            )

        return FeatureMatrix(
            data=self._data[mask, :],
            observation_ids=self._observation_ids[mask],
            feature_ids=self._feature_ids,
            observation_metadata=self._observation_metadata.iloc[mask],
            feature_metadata=self._feature_metadata,
            quality_codes=self._quality_codes[mask, :],
            calc_times=None if self._calc_times is None else self._calc_times[mask, :],
        )

    def select_features(self, mask: np.ndarray | pd.Series) -> FeatureMatrix:
        """
        Subset matrix by features (columns).

        Returns new FeatureMatrix with selected columns; quality codes, timings
        and the feature table are filtered with the same mask.

        Args:
            mask: Boolean array/Series indicating which features to keep
                If Series, uses values and ignores index

        Raises:
            ValueError: If mask length doesn't match n_features
        """
        if isinstance(mask, pd.Series):
            mask = mask.values
        mask = np.asarray(mask, dtype=bool)

        if len(mask) != self.n_features:
            raise ValueError(
                f"mask length ({len(mask)}) must match n_features ({self.n_features})"
            )

        return FeatureMatrix(
            data=self._data[:, mask],
            observation_ids=self._observation_ids,
            feature_ids=self._feature_ids[mask],
            observation_metadata=self._observation_metadata,
            feature_metadata=self._feature_metadata.iloc[mask],
            quality_codes=self._quality_codes[:, mask],
            calc_times=None if self._calc_times is None else self._calc_times[:, mask],
        )

    def select(self, mask: np.ndarray, axis: int) -> FeatureMatrix:
        """Subset along ``axis`` (0 = observations, 1 = features)."""
        if axis == 0:
            return self.select_observations(mask)
        if axis == 1:
            return self.select_features(mask)
        raise ValueError(f"axis must be 0 or 1, got {axis}")

    def with_data(self, data: np.ndarray) -> FeatureMatrix:
        """
        Return a copy whose values are replaced by ``data``.

        Used by value-rewriting stages (masking, normalization). Shape must
        be unchanged; all other structures are shared.
        """
        if data.shape != self.shape:
            raise ValueError(
                f"replacement data shape {data.shape} must match matrix shape {self.shape}"
            )
        return FeatureMatrix(
            data=data,
            observation_ids=self._observation_ids,
            feature_ids=self._feature_ids,
            observation_metadata=self._observation_metadata,
            feature_metadata=self._feature_metadata,
            quality_codes=self._quality_codes,
            calc_times=self._calc_times,
        )

    def without_calc_times(self) -> FeatureMatrix:
        """Return a shallow copy that no longer carries calculation times."""
        return FeatureMatrix(
            data=self._data,
            observation_ids=self._observation_ids,
            feature_ids=self._feature_ids,
            observation_metadata=self._observation_metadata,
            feature_metadata=self._feature_metadata,
            quality_codes=self._quality_codes,
        )

    def copy(self, deep: bool = True) -> FeatureMatrix:
        """
        Create a copy of this matrix.

        Args:
            deep: If True, copy all arrays. If False, share arrays (faster but mutable)
        """
        if deep:
            return FeatureMatrix(
                data=self._data.copy(),
                observation_ids=self._observation_ids.copy(),
                feature_ids=self._feature_ids.copy(),
                observation_metadata=self._observation_metadata.copy(),
                feature_metadata=self._feature_metadata.copy(),
                quality_codes=self._quality_codes.copy(),
                calc_times=None if self._calc_times is None else self._calc_times.copy(),
            )
        else:
            return FeatureMatrix(
                data=self._data,
                observation_ids=self._observation_ids,
                feature_ids=self._feature_ids,
                observation_metadata=self._observation_metadata,
                feature_metadata=self._feature_metadata,
                quality_codes=self._quality_codes,
                calc_times=self._calc_times,
            )

    def to_frame(self) -> pd.DataFrame:
        """Feature values as a DataFrame (observation_ids × feature_ids)."""
        return pd.DataFrame(self._data, index=self._observation_ids, columns=self._feature_ids)

    def __repr__(self) -> str:
        """String representation for debugging."""
        if self.n_observations == 0 or self.n_features == 0:
            return f"FeatureMatrix({self.n_observations} observations × {self.n_features} features)"
        return (
            f"FeatureMatrix({self.n_observations} observations × {self.n_features} features)\n"
            f"  Observations: {self.observation_ids[0]}...{self.observation_ids[-1]}\n"
            f"  Features: {self.feature_ids[0]}...{self.feature_ids[-1]}\n"
            f"  Observation metadata columns: {list(self.observation_metadata.columns)}"
        )

    def __str__(self) -> str:
        return self.__repr__()
