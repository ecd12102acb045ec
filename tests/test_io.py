"""
Tests for reading datasets and writing normalized results.
"""

import json

import numpy as np
import pandas as pd
import pytest
from numpy.testing import assert_allclose

from featurenorm.io.loaders import dataset_paths, load_feature_dataset
from featurenorm.io.writers import normalized_base, write_normalized_dataset
from featurenorm.pipeline import trim_and_normalize
from featurenorm.config import NormalizeConfig

from conftest import generate_feature_matrix, write_dataset


@pytest.fixture
def dataset_base(tmp_path):
    """Noisy dataset with timings saved under tmp_path/run/HCTSA."""
    matrix = generate_feature_matrix(12, 10, bad_fraction=0.05, with_calc_times=True, seed=21)
    base = tmp_path / "run" / "HCTSA"
    base.parent.mkdir()
    write_dataset(matrix, base)
    return base, matrix


class TestLoader:

    def test_round_trip(self, dataset_base):
        base, original = dataset_base
        matrix, master_operations, provenance = load_feature_dataset(base)

        assert list(matrix.observation_ids) == list(original.observation_ids)
        assert list(matrix.feature_ids) == list(original.feature_ids)
        assert_allclose(matrix.data, original.data, rtol=1e-12)
        np.testing.assert_array_equal(matrix.quality_codes, original.quality_codes)
        assert_allclose(matrix.calc_times, original.calc_times, rtol=1e-12)
        assert list(matrix.observation_metadata['Group']) == list(original.observation_metadata['Group'])
        assert master_operations is None
        assert provenance.from_database is True
        assert provenance.git_info is None

    def test_tables_reordered_to_data(self, dataset_base):
        base, original = dataset_base
        features = pd.read_csv(f"{base}.features.csv", index_col=0)
        features.iloc[::-1].to_csv(f"{base}.features.csv")

        matrix, _, _ = load_feature_dataset(base)

        assert matrix.feature_metadata.index.equals(matrix.feature_ids)
        assert list(matrix.feature_metadata['master_id']) == list(original.feature_metadata['master_id'])

    def test_missing_quality_warns(self, tmp_path):
        base = tmp_path / "noq"
        write_dataset(generate_feature_matrix(4, 3), base, with_quality=False)
        with pytest.warns(UserWarning, match="No quality codes"):
            matrix, _, _ = load_feature_dataset(base)
        assert (matrix.quality_codes == 0).all()

    def test_missing_data_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_feature_dataset(tmp_path / "absent")

    def test_metadata_must_cover_ids(self, dataset_base):
        base, _ = dataset_base
        observations = pd.read_csv(f"{base}.observations.csv", index_col=0)
        observations.iloc[:-1].to_csv(f"{base}.observations.csv")
        with pytest.raises(ValueError, match="missing 1 observation ids"):
            load_feature_dataset(base)

    def test_provenance_and_master_operations(self, dataset_base):
        base, _ = dataset_base
        paths = dataset_paths(base)
        paths['provenance'].write_text(json.dumps({'from_database': False, 'git_info': {'hash': 'abc'}}))
        pd.DataFrame({'name': ['CO_AutoCorr', 'SB_MotifTwo']}, index=[1, 2]).to_csv(
            paths['master_operations']
        )

        _, master_operations, provenance = load_feature_dataset(base)

        assert provenance.from_database is False
        assert provenance.git_info == {'hash': 'abc'}
        assert list(master_operations.index) == ['1', '2']


class TestWriter:

    def test_normalized_base(self, tmp_path):
        assert normalized_base(tmp_path / "HCTSA") == tmp_path / "HCTSA_N"

    def test_write_then_reload(self, dataset_base):
        base, _ = dataset_base
        matrix, master_operations, provenance = load_feature_dataset(base)
        dataset = trim_and_normalize(
            matrix,
            NormalizeConfig(filter_options=(0.7, 0.9), keep_calc_time=True),
            provenance=provenance,
            master_operations=master_operations,
        )

        out_base = write_normalized_dataset(dataset, base)

        assert out_base == normalized_base(base)
        reloaded, _, _ = load_feature_dataset(out_base)
        assert list(reloaded.feature_ids) == list(dataset.matrix.feature_ids)
        assert_allclose(reloaded.data, dataset.data, rtol=1e-12)
        assert_allclose(reloaded.calc_times, dataset.calc_times, rtol=1e-12)

        record = json.loads(dataset_paths(out_base)['normalization'].read_text())
        assert record['normalization_info']['code_to_run'] == (
            "trim_and_normalize('mixedSigmoid', filter_options=[0.700000, 0.900000])"
        )
        assert record['shape'] == list(dataset.matrix.shape)
        assert record['observation_clustering']['distance_metric'] == 'none'
        assert record['has_calc_times'] is True

    def test_no_calc_time_file_when_dropped(self, dataset_base, tmp_path):
        base, _ = dataset_base
        matrix, _, _ = load_feature_dataset(base)
        dataset = trim_and_normalize(matrix, NormalizeConfig(filter_options=(0.7, 0.9)))

        out_base = write_normalized_dataset(dataset, tmp_path / "out" / "clean", add_suffix=False)

        assert out_base == tmp_path / "out" / "clean"
        assert dataset_paths(out_base)['data'].exists()
        assert not dataset_paths(out_base)['calc_time'].exists()

    def test_rejects_wrong_type(self, tmp_path):
        with pytest.raises(TypeError):
            write_normalized_dataset("not a dataset", tmp_path / "x")
