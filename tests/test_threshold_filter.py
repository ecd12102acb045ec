"""
Tests for good-value threshold filtering of observations and features.
"""

import logging

import numpy as np
import pytest

from featurenorm.core.errors import InvalidThreshold, ThresholdTooStrict
from featurenorm.quality.filtering import ThresholdFilter, compute_keep_mask
from featurenorm.quality.masking import QualityMasker

from conftest import make_matrix, generate_feature_matrix


class TestComputeKeepMask:

    def test_zero_threshold_keeps_every_row_of_non_square_matrix(self):
        """Keep vector is sized by the filtered axis, not the other one."""
        data = np.full((7, 3), np.nan)

        rows = compute_keep_mask(data, 0.0, axis=0)
        cols = compute_keep_mask(data, 0.0, axis=1)

        assert rows.shape == (7,)
        assert cols.shape == (3,)
        assert rows.all() and cols.all()

    def test_zero_threshold_wide_matrix(self):
        data = np.ones((2, 9))
        assert compute_keep_mask(data, 0.0, axis=0).shape == (2,)
        assert compute_keep_mask(data, 0.0, axis=1).shape == (9,)

    def test_threshold_is_inclusive(self):
        # 3 of 4 good = exactly 75%
        data = np.array([[1.0, 2.0, 3.0, np.nan], [1.0, np.nan, np.nan, np.nan]])
        np.testing.assert_array_equal(compute_keep_mask(data, 0.75, axis=0), [True, False])

    def test_threshold_one_removes_any_missing(self):
        data = np.array([[1.0, 2.0], [3.0, np.nan], [5.0, 6.0]])
        np.testing.assert_array_equal(compute_keep_mask(data, 1.0, axis=1), [True, False])

    @pytest.mark.parametrize("axis,name", [(0, "observations"), (1, "features")])
    def test_all_missing_raises_threshold_too_strict(self, axis, name):
        data = np.full((4, 5), np.nan)
        with pytest.raises(ThresholdTooStrict, match=f"No {name} had at least 50.00% good values") as excinfo:
            compute_keep_mask(data, 0.5, axis=axis)
        assert excinfo.value.axis == name
        assert excinfo.value.threshold == 0.5

    def test_invalid_axis(self):
        with pytest.raises(ValueError, match="axis"):
            compute_keep_mask(np.ones((2, 2)), 0.5, axis=2)


class TestThresholdFilter:

    def test_one_bad_row_removed(self):
        """10 × 5 matrix, row 3 is 80% missing, row threshold 0.7."""
        data = np.arange(50, dtype=float).reshape(10, 5)
        data[3, 1:] = np.nan
        matrix = make_matrix(data, calc_times=np.ones((10, 5)))

        result = ThresholdFilter(0.7, axis=0).filter(matrix)

        assert result.matrix.shape == (9, 5)
        assert result.removed_ids == ["ts_3"]
        assert result.n_removed == 1
        assert "ts_3" not in result.matrix.observation_ids
        assert result.matrix.observation_metadata.shape[0] == 9
        assert result.matrix.quality_codes.shape == (9, 5)
        assert result.matrix.calc_times.shape == (9, 5)

    def test_keep_all_logs_and_returns_same_matrix(self, small_matrix, caplog):
        with caplog.at_level(logging.INFO, logger='featurenorm.quality.filtering'):
            result = ThresholdFilter(1.0, axis=0).filter(small_matrix)
        assert result.kept_all
        assert result.matrix is small_matrix
        assert any(
            "All 20 observations have at least 100.00% good values. Keeping them all." in r.message
            for r in caplog.records
        )

    def test_columns_after_rows(self):
        """A column looks bad only because of a row that the row pass drops."""
        data = np.ones((4, 3)) * np.arange(4)[:, None]
        data[0, :] = np.nan
        data[0, 0] = 1.0
        matrix = make_matrix(data)

        # Filtering columns first would remove features 1 and 2
        rows_first = ThresholdFilter(0.9, axis=0).apply(matrix)
        result = ThresholdFilter(1.0, axis=1).apply(rows_first)

        assert result.shape == (3, 3)

    def test_postconditions_on_noisy_matrix(self):
        matrix = QualityMasker().apply(generate_feature_matrix(50, 40, bad_fraction=0.08, seed=11))
        after_rows = ThresholdFilter(0.9, axis=0).apply(matrix)
        after_cols = ThresholdFilter(0.95, axis=1).apply(after_rows)

        assert ((~np.isnan(after_rows.data)).mean(axis=1) >= 0.9).all()
        assert ((~np.isnan(after_cols.data)).mean(axis=0) >= 0.95).all()
        assert set(after_cols.observation_ids) <= set(matrix.observation_ids)

    def test_full_threshold_leaves_no_missing(self):
        matrix = QualityMasker().apply(generate_feature_matrix(30, 30, bad_fraction=0.02, seed=5))
        result = ThresholdFilter(1.0, axis=1).apply(ThresholdFilter(0.5, axis=0).apply(matrix))
        assert not np.isnan(result.data).any()

    @pytest.mark.parametrize("threshold", [-0.1, 1.5])
    def test_out_of_range_threshold(self, threshold):
        with pytest.raises(InvalidThreshold):
            ThresholdFilter(threshold, axis=0)

    def test_invalid_threshold_is_value_error(self):
        with pytest.raises(ValueError):
            ThresholdFilter(2.0, axis=1)

    def test_repr(self):
        assert repr(ThresholdFilter(0.7, axis=1)) == "ThresholdFilter(threshold=0.7, axis=1)"
