# main.py
from pathlib import Path
import argparse
import functools
import json
from typing import List, Optional

import numpy as np

from dpmeans.api import Backend, fit, make_model
from dpmeans.core.config import Layout
from dpmeans.data.dataset import Dataset
from dpmeans.data.synthetic import generate_blobs, save_dataset
from dpmeans.experiments.config import BenchmarkConfig
from dpmeans.experiments.runner import BenchmarkRunner
from dpmeans.metrics.metrics import dpmeans_objective
from dpmeans.utils.logging import setup_logger


def _parse_shape(value: str) -> tuple[int, int, int]:
    try:
        N, D, K = (int(v) for v in value.split(","))
    except ValueError as exc:
        raise argparse.ArgumentTypeError(
            f"expected N,D,K (e.g. 10000,2,5), got {value!r}"
        ) from exc
    return N, D, K


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dpmeans",
        description="Кластеризация DP-means: один прогон или серия замеров.",
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--input",
        type=Path,
        help="Датасет: текстовый файл (метка + координаты) или .npy (N, D).",
    )
    source.add_argument(
        "--generate",
        type=_parse_shape,
        metavar="N,D,K",
        help="Сгенерировать синтетический датасет make_blobs.",
    )
    parser.add_argument("--lam", type=float, required=True, help="Порог lambda (> 0).")
    parser.add_argument("--max-iter", type=int, default=100)
    parser.add_argument(
        "--no-shuffle",
        action="store_true",
        help="Не перемешивать точки перед fit (результат зависит от порядка).",
    )
    parser.add_argument(
        "--collapse-threshold",
        type=float,
        default=0,
        help="Минимальный размер кластера после сходимости (0 = выкл.).",
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed перестановки.")
    parser.add_argument(
        "--layout",
        choices=[l.value for l in Layout],
        default=Layout.POINTS_MAJOR.value,
        help="Раскладка в памяти: points (N, D) или features (D, N).",
    )
    parser.add_argument(
        "--backend",
        choices=[b.value for b in Backend],
        default=Backend.NUMPY.value,
    )
    parser.add_argument(
        "--processes",
        type=int,
        default=None,
        help="Число процессов для бэкенда multiprocessing.",
    )
    parser.add_argument(
        "--repeats",
        type=int,
        default=0,
        help="Если > 0, серия замеров вместо одного прогона.",
    )
    parser.add_argument("--warmup", type=int, default=1)
    parser.add_argument(
        "--baseline",
        action="store_true",
        help="Для серии замеров: прогнать также numpy-бэкенд и посчитать speedup/efficiency.",
    )
    parser.add_argument(
        "--max-seconds",
        type=float,
        default=1800.0,
        help="Лимит времени (в секундах) на warmup+замеры.",
    )
    parser.add_argument(
        "--save-dataset",
        type=Path,
        default=None,
        help="Куда сохранить сгенерированный датасет (с --generate).",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Результат: .npz для одного прогона, NDJSON для серии замеров.",
    )
    parser.add_argument("--quiet", action="store_true", help="Не печатать suppressible предупреждения.")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logger = setup_logger()

    if args.generate is not None:
        N, D, K = args.generate
        generated = generate_blobs(N, D, K, seed=args.seed if args.seed is not None else 42)
        if args.save_dataset is not None:
            save_dataset(generated, args.save_dataset)
            logger.info(f"Dataset saved to {args.save_dataset}")
        dataset = Dataset.from_arrays(generated.data, generated.labels, generated.metadata)
    else:
        dataset = Dataset(args.input)

    X = dataset.X
    if args.layout == Layout.FEATURES_MAJOR.value:
        X = np.ascontiguousarray(X.T)
        dataset = Dataset.from_arrays(X, dataset.labels_true, dataset.dataset_info)

    common = dict(
        n_iters=args.max_iter,
        shuffle=not args.no_shuffle,
        collapse_threshold=args.collapse_threshold,
        suppress_warning=args.quiet,
        layout=args.layout,
    )

    if args.repeats > 0:
        dataset.dataset_info["lam"] = args.lam
        config = BenchmarkConfig(
            repeats=args.repeats,
            warmup=args.warmup,
            max_seconds=args.max_seconds,
        )

        baseline_seconds = None
        if args.baseline and args.backend != Backend.NUMPY.value:
            logger.info("Measuring numpy baseline")
            baseline = BenchmarkRunner(
                dataset=dataset,
                model_factory=functools.partial(
                    make_model, args.lam, backend=Backend.NUMPY, **common
                ),
                logger=logger,
            ).run(config)
            baseline_seconds = baseline["T_fit_avg"]

        runner = BenchmarkRunner(
            dataset=dataset,
            model_factory=functools.partial(
                make_model,
                args.lam,
                backend=args.backend,
                n_processes=args.processes,
                **common,
            ),
            logger=logger,
        )
        stats = runner.run(config, baseline_seconds=baseline_seconds)
        record = {
            "dataset": dataset.dataset_info,
            "backend": args.backend,
            "layout": args.layout,
            "timing": stats,
        }
        if args.output is not None:
            with open(args.output, "a", encoding="utf-8") as f:
                f.write(json.dumps(record, ensure_ascii=False))
                f.write("\n")
            logger.info(f"Benchmark results appended to {args.output}")
        return 0

    result = fit(
        X,
        args.lam,
        max_iter=args.max_iter,
        shuffle=not args.no_shuffle,
        collapse_threshold=args.collapse_threshold,
        suppress_warning=args.quiet,
        layout=args.layout,
        random_state=args.seed,
        backend=args.backend,
        logger=logger,
    )
    final_objective = dpmeans_objective(
        X, result.assignments, result.centers, args.lam, layout=args.layout
    )
    logger.info(
        f"Finished: clusters={np.unique(result.assignments).size}, "
        f"iterations={result.n_iter}, converged={result.converged}, "
        f"objective={final_objective:.6g}"
    )

    if args.output is not None:
        np.savez(
            args.output,
            assignments=result.assignments,
            centers=result.centers,
            objective=result.objective,
            n_clusters=result.n_clusters,
        )
        logger.info(f"Result saved to {args.output}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
