"""
Tests for the column-wise normalizing transforms and their registry.
"""

import logging

import numpy as np
import pytest
from numpy.testing import assert_allclose

from featurenorm.core.errors import InsufficientObservations, UnknownNormalization
from featurenorm.stats import normalization
from featurenorm.stats.normalization import (
    NormalizationDispatcher,
    NormalizationMethod,
    available_normalizations,
    get_normalization,
    min_max,
    mixed_sigmoid,
    normalize,
    register_normalization,
    robust_sigmoid,
    scaled_robust_sigmoid,
    scaled_sigmoid,
    sigmoid,
    zscore,
)

from conftest import make_matrix, generate_feature_matrix


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def heavy_tailed():
    """Columns on very different scales, one with an extreme outlier."""
    rng = np.random.RandomState(42)
    data = np.column_stack([
        rng.randn(50),
        rng.randn(50) * 1e6 + 3e7,
        np.append(rng.randn(49), 1e9),
    ])
    return data


# =============================================================================
# Individual transforms
# =============================================================================

class TestTransforms:

    def test_zscore_column_statistics(self, heavy_tailed):
        out = zscore(heavy_tailed)
        assert_allclose(out.mean(axis=0), 0.0, atol=1e-10)
        assert_allclose(out.std(axis=0, ddof=1), 1.0)

    def test_zscore_ignores_missing(self):
        data = np.array([[1.0], [np.nan], [3.0]])
        out = zscore(data)
        assert_allclose(out[[0, 2], 0], [-1 / np.sqrt(2), 1 / np.sqrt(2)])
        assert np.isnan(out[1, 0])

    def test_min_max_range(self, heavy_tailed):
        out = min_max(heavy_tailed)
        assert_allclose(out.min(axis=0), 0.0)
        assert_allclose(out.max(axis=0), 1.0)

    def test_min_max_constant_column_is_nan(self):
        data = np.array([[1.0, 2.0], [1.0, 3.0], [1.0, 5.0]])
        out = min_max(data)
        assert np.isnan(out[:, 0]).all()
        assert_allclose(out[:, 1], [0.0, 1 / 3, 1.0])

    def test_sigmoid_is_logistic_of_zscore(self, heavy_tailed):
        assert_allclose(sigmoid(heavy_tailed), 1 / (1 + np.exp(-zscore(heavy_tailed))))

    def test_sigmoid_open_unit_interval(self, heavy_tailed):
        out = sigmoid(heavy_tailed[:, :2])
        assert (out > 0).all() and (out < 1).all()

    @pytest.mark.parametrize("func", [scaled_sigmoid, scaled_robust_sigmoid, mixed_sigmoid])
    def test_scaled_variants_span_unit_interval(self, func, heavy_tailed):
        out = func(heavy_tailed)
        assert_allclose(np.nanmin(out, axis=0), 0.0, atol=1e-12)
        assert_allclose(np.nanmax(out, axis=0), 1.0)

    def test_robust_sigmoid_centers_median(self):
        data = np.array([[1.0], [2.0], [3.0], [4.0], [5.0]])
        out = robust_sigmoid(data)
        assert out[2, 0] == pytest.approx(0.5)
        # IQR of 1..5 is 2, so the scale is 2 / 1.35
        assert out[4, 0] == pytest.approx(1 / (1 + np.exp(-2 * 1.35 / 2)))

    def test_robust_sigmoid_resists_outlier(self, heavy_tailed):
        """The outlier does not squash the bulk of the column to one value."""
        bulk = robust_sigmoid(heavy_tailed)[:49, 2]
        assert bulk.std() > 0.05

    def test_mixed_sigmoid_uses_scaled_sigmoid_for_zero_iqr(self):
        # Column 0 is dominated by one value: IQR == 0
        data = np.array([
            [0.0, 1.0],
            [0.0, 2.0],
            [0.0, 3.0],
            [0.0, 4.0],
            [0.0, 9.0],
            [5.0, 6.0],
        ])
        out = mixed_sigmoid(data)
        assert_allclose(out[:, 0], scaled_sigmoid(data)[:, 0])
        assert_allclose(out[:, 1], scaled_robust_sigmoid(data)[:, 1])

    def test_mixed_sigmoid_keeps_missing(self):
        data = np.array([[1.0], [np.nan], [3.0], [7.0]])
        out = mixed_sigmoid(data)
        assert np.isnan(out[1, 0])
        assert (out[[0, 2, 3], 0] >= 0).all() and (out[[0, 2, 3], 0] <= 1).all()


# =============================================================================
# Registry
# =============================================================================

class TestRegistry:

    def test_builtin_names(self):
        names = available_normalizations()
        for method in NormalizationMethod:
            assert method.value in names
        assert "maxmin" in names

    def test_unknown_name(self):
        with pytest.raises(UnknownNormalization, match="Unknown normalization 'bogus'"):
            get_normalization("bogus")

    def test_unknown_name_is_key_error(self):
        with pytest.raises(KeyError):
            get_normalization("bogus")

    def test_custom_registry(self):
        registry = {"double": lambda x: 2 * x}
        result = normalize(np.array([[1.0], [2.0]]), "double", registry=registry)
        assert_allclose(result.data, [[2.0], [4.0]])
        with pytest.raises(UnknownNormalization):
            normalize(np.ones((2, 1)), "mixedSigmoid", registry=registry)

    def test_register_rejects_reserved_and_duplicate(self):
        with pytest.raises(ValueError, match="reserved"):
            register_normalization("none", lambda x: x)
        with pytest.raises(ValueError, match="already registered"):
            register_normalization("zscore", lambda x: x)

    def test_register_new_transform(self, monkeypatch):
        monkeypatch.setattr(normalization, "_REGISTRY", dict(normalization._REGISTRY))
        register_normalization("negate", lambda x: -x)
        assert get_normalization("negate")(np.ones(1))[0] == -1.0
        assert "negate" in available_normalizations()

    def test_registry_restored_after_registration(self):
        assert "negate" not in available_normalizations()

    def test_shape_change_rejected(self):
        registry = {"squash": lambda x: x[:, :1]}
        with pytest.raises(ValueError, match="changed the matrix shape"):
            normalize(np.ones((3, 2)), "squash", registry=registry)

    def test_missing_counts(self):
        result = normalize(np.array([[1.0, 2.0], [1.0, np.nan], [1.0, 4.0]]), "minMax")
        assert result.n_missing_before == 1
        assert result.n_missing_after == 4
        assert result.n_missing_introduced == 3

    def test_enum_method(self):
        result = normalize(np.array([[1.0], [3.0]]), NormalizationMethod.MIN_MAX)
        assert result.method == "minMax"
        assert_allclose(result.data, [[0.0], [1.0]])


# =============================================================================
# Dispatcher
# =============================================================================

class TestNormalizationDispatcher:

    @pytest.mark.parametrize("name", ["none", "nothing"])
    def test_identity_leaves_matrix_unchanged(self, name, small_matrix, caplog):
        with caplog.at_level(logging.WARNING, logger='featurenorm.stats.normalization'):
            result = NormalizationDispatcher(name).apply(small_matrix)
        assert result is small_matrix
        assert any("NO NORMALIZING IS ACTUALLY BEING DONE" in r.message for r in caplog.records)

    def test_default_is_mixed_sigmoid(self, small_matrix):
        result = NormalizationDispatcher().apply(small_matrix)
        assert_allclose(result.data, mixed_sigmoid(small_matrix.data))
        assert result.shape == small_matrix.shape
        assert result.feature_ids.equals(small_matrix.feature_ids)

    def test_single_observation_rejected_before_transform(self):
        calls = []

        def spy(data):
            calls.append(data.shape)
            return data

        dispatcher = NormalizationDispatcher("spy", registry={"spy": spy})
        with pytest.raises(InsufficientObservations):
            dispatcher.apply(make_matrix([[1.0, 2.0, 3.0]]))
        assert calls == []

    def test_unknown_name_raises(self, small_matrix):
        with pytest.raises(UnknownNormalization):
            NormalizationDispatcher("notATransform").apply(small_matrix)

    def test_output_in_unit_interval(self):
        matrix = generate_feature_matrix(25, 12, seed=9)
        out = NormalizationDispatcher("scaledRobustSigmoid").apply(matrix).data
        assert (out >= 0).all() and (out <= 1).all()
