"""
Тесты командной строки dpmeans.
"""

import json

import numpy as np
import pytest

from dpmeans.main import build_parser, main


class TestParser:
    def test_generate_shape(self):
        args = build_parser().parse_args(["--generate", "100,2,3", "--lam", "1"])
        assert args.generate == (100, 2, 3)
        assert args.input is None
        assert args.repeats == 0

    def test_bad_shape(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--generate", "100,2", "--lam", "1"])

    def test_source_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--lam", "1"])


class TestMain:
    def test_single_fit_saves_result(self, tmp_path):
        out = tmp_path / "result.npz"
        code = main([
            "--generate", "200,2,3",
            "--lam", "1.0",
            "--seed", "0",
            "--quiet",
            "--output", str(out),
        ])

        assert code == 0
        saved = np.load(out)
        assert saved["assignments"].shape == (200,)
        assert saved["centers"].shape[1] == 2
        assert saved["objective"].shape == saved["n_clusters"].shape

    def test_features_layout(self, tmp_path):
        out = tmp_path / "result.npz"
        main([
            "--generate", "200,2,3",
            "--lam", "1.0",
            "--seed", "0",
            "--layout", "features",
            "--collapse-threshold", "1",
            "--quiet",
            "--output", str(out),
        ])

        saved = np.load(out)
        assert saved["centers"].shape[0] == 2
        assert saved["assignments"].max() < saved["centers"].shape[1]

    def test_saved_dataset_reloaded(self, tmp_path):
        data_path = tmp_path / "blobs.txt"
        main([
            "--generate", "150,3,2",
            "--lam", "2.0",
            "--quiet",
            "--save-dataset", str(data_path),
        ])
        assert data_path.exists()

        out = tmp_path / "result.npz"
        code = main(["--input", str(data_path), "--lam", "2.0", "--quiet", "--output", str(out)])

        assert code == 0
        assert np.load(out)["assignments"].shape == (150,)

    def test_benchmark_appends_ndjson(self, tmp_path):
        out = tmp_path / "bench.ndjson"
        argv = [
            "--generate", "120,2,2",
            "--lam", "2.0",
            "--repeats", "2",
            "--warmup", "0",
            "--quiet",
            "--output", str(out),
        ]

        assert main(argv) == 0
        assert main(argv) == 0

        lines = out.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 2
        record = json.loads(lines[0])
        assert record["backend"] == "numpy"
        assert record["dataset"]["lam"] == 2.0
        assert record["timing"]["repeats_done"] == 2
        assert "ari_avg" in record["timing"]

    def test_benchmark_with_numpy_baseline(self, tmp_path):
        out = tmp_path / "bench.ndjson"
        code = main([
            "--generate", "120,2,2",
            "--lam", "2.0",
            "--backend", "multiprocessing",
            "--processes", "2",
            "--baseline",
            "--repeats", "1",
            "--warmup", "0",
            "--quiet",
            "--output", str(out),
        ])

        assert code == 0
        timing = json.loads(out.read_text(encoding="utf-8"))["timing"]
        assert timing["speedup"] > 0
        assert timing["efficiency"] == pytest.approx(timing["speedup"] / timing["n_workers"])
