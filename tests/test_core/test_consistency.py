"""
Тесты согласованности между реализациями пакетного шага DP-means.

Последовательный проход общий, поэтому при одинаковом random_state все
бэкенды должны давать одинаковые метки.
"""

import numpy as np
import pytest

from dpmeans.core.cpu_multiprocessing import (
    DPMeansCPUMultiprocessing,
    MultiprocessingConfig,
)
from dpmeans.core.cpu_numpy import DPMeansCPUNumpy
from dpmeans.core.gpu_cupy import DPMeansGPUCuPy, gpu_available


class TestImplementationConsistency:
    """Тесты согласованности между реализациями."""

    def test_cpu_numpy_vs_multiprocessing(self, medium_dataset):
        """CPU NumPy и Multiprocessing должны давать одинаковые результаты."""
        model_numpy = DPMeansCPUNumpy(lam=30.0, random_state=1)
        res_numpy = model_numpy.fit(medium_dataset)

        model_mp = DPMeansCPUMultiprocessing(
            lam=30.0,
            random_state=1,
            mp=MultiprocessingConfig(n_processes=2),
        )
        res_mp = model_mp.fit(medium_dataset)

        np.testing.assert_array_equal(res_numpy.assignments, res_mp.assignments)
        np.testing.assert_allclose(
            res_numpy.centers,
            res_mp.centers,
            rtol=1e-8,
            atol=1e-8,
            err_msg="CPU NumPy и Multiprocessing дают разные центры",
        )
        np.testing.assert_allclose(res_numpy.objective, res_mp.objective, rtol=1e-8)

    def test_multiprocessing_chunk_size(self, medium_dataset):
        """Явный chunk_size не влияет на результат."""
        res_numpy = DPMeansCPUNumpy(lam=30.0, random_state=2).fit(medium_dataset)
        res_mp = DPMeansCPUMultiprocessing(
            lam=30.0,
            random_state=2,
            mp=MultiprocessingConfig(n_processes=2, chunk_size=17),
        ).fit(medium_dataset)

        np.testing.assert_array_equal(res_numpy.assignments, res_mp.assignments)

    def test_multiprocessing_pool_closed_after_fit(self, small_dataset):
        model = DPMeansCPUMultiprocessing(
            lam=10.0, mp=MultiprocessingConfig(n_processes=2)
        )
        model.fit(small_dataset)

        assert model._pool is None
        assert model._chunks is None

    def test_multiprocessing_features_layout(self, medium_dataset):
        rows = DPMeansCPUNumpy(lam=30.0, random_state=4).fit(medium_dataset)
        cols = DPMeansCPUMultiprocessing(
            lam=30.0,
            random_state=4,
            layout="features",
            mp=MultiprocessingConfig(n_processes=2),
        ).fit(medium_dataset.T)

        np.testing.assert_array_equal(rows.assignments, cols.assignments)
        np.testing.assert_allclose(rows.centers, cols.centers.T, atol=1e-8)

    def test_make_chunks(self):
        model = DPMeansCPUMultiprocessing(lam=1.0, mp=MultiprocessingConfig(chunk_size=4))
        assert model._make_chunks(10, 2) == [(0, 4), (4, 8), (8, 10)]

        model = DPMeansCPUMultiprocessing(lam=1.0)
        chunks = model._make_chunks(10, 3)
        assert chunks[0][0] == 0
        assert chunks[-1][1] == 10
        assert len(chunks) == 3

    def test_make_chunks_invalid_size(self):
        model = DPMeansCPUMultiprocessing(lam=1.0, mp=MultiprocessingConfig(chunk_size=0))
        with pytest.raises(ValueError, match="chunk_size"):
            model._make_chunks(10, 2)

    @pytest.mark.skipif(not gpu_available(), reason="GPU недоступен")
    def test_cpu_vs_gpu_cupy(self, medium_dataset):
        """CPU и GPU реализации должны давать одинаковые результаты."""
        res_cpu = DPMeansCPUNumpy(lam=30.0, random_state=1).fit(medium_dataset)

        model_gpu = DPMeansGPUCuPy(lam=30.0, random_state=1)
        res_gpu = model_gpu.fit(medium_dataset)

        np.testing.assert_array_equal(res_cpu.assignments, res_gpu.assignments)
        np.testing.assert_allclose(res_cpu.centers, res_gpu.centers, rtol=1e-6, atol=1e-6)
        assert model_gpu.t_h2d > 0

    @pytest.mark.skipif(gpu_available(), reason="GPU доступен")
    def test_gpu_unavailable_raises(self):
        with pytest.raises(RuntimeError):
            DPMeansGPUCuPy(lam=1.0)
