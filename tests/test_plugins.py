"""Tests for the bundled dataset plugins."""

import pytest

from plugins.datasets.blobs import load_blobs
from plugins.datasets.tabular import load_tabular


class TestBlobs:
    def test_shape_and_labels(self):
        dataset = load_blobs(n_samples=50, n_classes=4, data_dim=3, seed=1)
        assert len(dataset) == 50
        assert dataset.data_dim == 3
        assert set(dataset.classes) <= {0, 1, 2, 3}
        assert all(r.assigned_cluster is not None for r in dataset)

    def test_no_noise_assignment_matches_labels(self):
        dataset = load_blobs(n_samples=40, noise=0.0)
        assert all(r.assigned_cluster == r.true_class for r in dataset)

    def test_deterministic(self):
        first = load_blobs(n_samples=20, seed=5)
        second = load_blobs(n_samples=20, seed=5)
        assert [r.true_class for r in first] == [r.true_class for r in second]

    def test_invalid_noise(self):
        with pytest.raises(ValueError):
            load_blobs(noise=1.5)


class TestTabular:
    @pytest.fixture
    def csv_path(self, tmp_path):
        path = tmp_path / "points.csv"
        path.write_text(
            "x,y,species,cluster\n"
            "0.0,1.0,setosa,0\n"
            "0.5,1.5,setosa,0\n"
            "4.0,4.0,virginica,1\n"
            "4.5,3.5,,1\n"
        )
        return path

    def test_load_with_columns(self, csv_path):
        dataset = load_tabular(
            str(csv_path), label_column="species", assignment_column="cluster"
        )
        assert len(dataset) == 4
        assert dataset.data_dim == 2
        assert dataset.classes == ("setosa", "virginica")
        assert dataset[3].true_class is None
        assert [r.assigned_cluster for r in dataset] == [0, 0, 1, 1]

    def test_explicit_feature_columns(self, csv_path):
        dataset = load_tabular(str(csv_path), feature_columns=["y"])
        assert dataset.data_dim == 1
        assert not dataset.has_labels

    def test_missing_column(self, csv_path):
        with pytest.raises(ValueError):
            load_tabular(str(csv_path), label_column="genus")
        with pytest.raises(ValueError):
            load_tabular(str(csv_path), feature_columns=["z"])

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_tabular(str(tmp_path / "absent.csv"))
