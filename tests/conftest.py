"""
Pytest configuration and shared fixtures for the featurenorm test suites.

This module provides feature-matrix generators and shared fixtures.
"""

import matplotlib
matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

from featurenorm.core.featurematrix import FeatureMatrix
from featurenorm.core.quality import QualityCode


def make_matrix(
    data,
    quality_codes=None,
    groups=None,
    calc_times=None,
) -> FeatureMatrix:
    """
    Wrap a literal array in a FeatureMatrix with generated ids.

    Args:
        data: 2D array-like (observations × features)
        quality_codes: Optional quality code array (default all GOOD)
        groups: Optional class label per observation, stored as 'Group'
        calc_times: Optional calculation times, same shape as data
    """
    data = np.asarray(data, dtype=float)
    n_obs, n_feat = data.shape
    observation_ids = pd.Index([f"ts_{i}" for i in range(n_obs)])
    feature_ids = pd.Index([f"op_{j}" for j in range(n_feat)])

    observation_metadata = pd.DataFrame(index=observation_ids)
    if groups is not None:
        observation_metadata['Group'] = list(groups)
    feature_metadata = pd.DataFrame(
        {'master_id': [j // 2 for j in range(n_feat)]},
        index=feature_ids,
    )

    if quality_codes is None:
        quality_codes = np.full(data.shape, QualityCode.GOOD, dtype=int)

    return FeatureMatrix(
        data=data,
        observation_ids=observation_ids,
        feature_ids=feature_ids,
        observation_metadata=observation_metadata,
        feature_metadata=feature_metadata,
        quality_codes=np.asarray(quality_codes, dtype=int),
        calc_times=None if calc_times is None else np.asarray(calc_times, dtype=float),
    )


def generate_feature_matrix(
    n_observations: int,
    n_features: int,
    bad_fraction: float = 0.0,
    with_calc_times: bool = False,
    seed: int = 42,
) -> FeatureMatrix:
    """
    Generate a synthetic feature-extraction output with realistic properties.

    Args:
        n_observations: Number of time series (rows)
        n_features: Number of operations (columns)
        bad_fraction: Fraction of entries marked with a non-GOOD quality code
        with_calc_times: Attach positive calculation times
        seed: Random seed for reproducibility

    Design:
        - Every feature has its own location and scale (features are not comparable)
        - A few heavy-tailed features exercise the robust transforms
        - Bad entries get a random failure code; NaN/Inf codes also get the
          matching non-finite value, other codes keep a finite placeholder
        - Observations alternate between classes 'A' and 'B'
    """
    rng = np.random.RandomState(seed)

    locations = rng.uniform(-100, 100, size=n_features)
    scales = rng.lognormal(mean=0, sigma=2, size=n_features)
    data = locations + scales * rng.randn(n_observations, n_features)
    if n_features >= 4:
        data[:, :n_features // 4] = rng.standard_cauchy((n_observations, n_features // 4))

    quality_codes = np.full(data.shape, QualityCode.GOOD, dtype=int)
    n_bad = int(data.size * bad_fraction)
    if n_bad:
        positions = rng.choice(data.size, size=n_bad, replace=False)
        rows, cols = np.unravel_index(positions, data.shape)
        codes = rng.randint(QualityCode.FATAL_ERROR, QualityCode.LINK_ERROR + 1, size=n_bad)
        quality_codes[rows, cols] = codes
        data[rows[codes == QualityCode.NAN], cols[codes == QualityCode.NAN]] = np.nan
        data[rows[codes == QualityCode.POSITIVE_INF], cols[codes == QualityCode.POSITIVE_INF]] = np.inf
        data[rows[codes == QualityCode.NEGATIVE_INF], cols[codes == QualityCode.NEGATIVE_INF]] = -np.inf

    calc_times = rng.exponential(0.05, size=data.shape) if with_calc_times else None
    groups = ['A' if i % 2 == 0 else 'B' for i in range(n_observations)]

    return make_matrix(data, quality_codes=quality_codes, groups=groups, calc_times=calc_times)


@pytest.fixture
def small_matrix():
    """Clean test matrix (20 observations × 30 features) for fast unit tests."""
    return generate_feature_matrix(n_observations=20, n_features=30, seed=42)


@pytest.fixture
def noisy_matrix():
    """Matrix with 3% bad entries and calculation times (40 × 60)."""
    return generate_feature_matrix(
        n_observations=40,
        n_features=60,
        bad_fraction=0.03,
        with_calc_times=True,
        seed=7,
    )


def write_dataset(matrix: FeatureMatrix, base, with_quality: bool = True) -> None:
    """Save a FeatureMatrix in the on-disk dataset layout for I/O tests."""
    def layer(values):
        return pd.DataFrame(values, index=matrix.observation_ids, columns=matrix.feature_ids)

    layer(matrix.data).to_csv(f"{base}.data.csv")
    if with_quality:
        layer(matrix.quality_codes).to_csv(f"{base}.quality.csv")
    matrix.observation_metadata.to_csv(f"{base}.observations.csv")
    matrix.feature_metadata.to_csv(f"{base}.features.csv")
    if matrix.calc_times is not None:
        layer(matrix.calc_times).to_csv(f"{base}.calc_time.csv")
