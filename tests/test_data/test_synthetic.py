"""
Тесты генерации и загрузки датасетов.
"""

import numpy as np
import pytest

from dpmeans.data.dataset import Dataset
from dpmeans.data.synthetic import generate_blobs, save_dataset


class TestGenerateBlobs:
    def test_shapes(self):
        ds = generate_blobs(200, 3, 4, seed=0)

        assert ds.data.shape == (200, 3)
        assert ds.labels.shape == (200,)
        assert ds.centers.shape == (4, 3)
        assert set(np.unique(ds.labels)) == {0, 1, 2, 3}
        assert ds.metadata["K"] == 4

    def test_standardized(self):
        ds = generate_blobs(500, 2, 3, seed=1)

        np.testing.assert_allclose(ds.data.mean(axis=0), 0.0, atol=1e-10)
        np.testing.assert_allclose(ds.data.std(axis=0), 1.0, atol=1e-10)

    def test_reproducible(self):
        a = generate_blobs(100, 2, 3, seed=5)
        b = generate_blobs(100, 2, 3, seed=5)
        np.testing.assert_array_equal(a.data, b.data)

    def test_too_few_points(self):
        with pytest.raises(ValueError, match="N must be greater than D"):
            generate_blobs(5, 5, 2)


class TestDataset:
    def test_text_roundtrip(self, tmp_path):
        ds = generate_blobs(50, 2, 2, seed=3)
        path = save_dataset(ds, tmp_path / "blobs" / "data.txt")

        loaded = Dataset(path)

        np.testing.assert_allclose(loaded.X, ds.data, rtol=1e-9)
        np.testing.assert_array_equal(loaded.labels_true, ds.labels)
        assert loaded.dataset_info["K"] == 2
        assert loaded.dataset_info["N"] == 50

    def test_text_without_header(self, tmp_path):
        path = tmp_path / "plain.txt"
        path.write_text("0 1.0 2.0\n1 3.0 4.0\n\n1 5.0 6.0\n", encoding="utf-8")

        loaded = Dataset(path)

        assert loaded.X.shape == (3, 2)
        np.testing.assert_array_equal(loaded.labels_true, [0, 1, 1])
        assert loaded.dataset_info == {"N": 3, "D": 2}

    def test_empty_text_file(self, tmp_path):
        path = tmp_path / "empty.txt"
        path.write_text("# {}\n", encoding="utf-8")

        with pytest.raises(ValueError, match="No data points"):
            Dataset(path)

    def test_npy(self, tmp_path, small_dataset):
        path = tmp_path / "points.npy"
        np.save(path, small_dataset)

        loaded = Dataset(path)

        np.testing.assert_array_equal(loaded.X, small_dataset)
        assert loaded.labels_true is None
        assert loaded.dataset_info == {"N": 60, "D": 2}

    def test_npy_not_a_matrix(self, tmp_path):
        path = tmp_path / "vector.npy"
        np.save(path, np.arange(5.0))

        with pytest.raises(ValueError):
            Dataset(path)

    def test_from_arrays(self, small_dataset):
        labels = np.repeat([0, 1], 30)
        ds = Dataset.from_arrays(small_dataset, labels, {"K": 2})

        assert ds.data_path is None
        assert ds.labels_true is labels
        assert ds.dataset_info == {"K": 2, "N": 60, "D": 2}
