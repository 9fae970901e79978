import logging
import time
from typing import Any, Callable, Dict, List, Optional

import numpy as np
from sklearn.metrics import adjusted_rand_score

from dpmeans.core.config import Layout
from dpmeans.experiments.config import BenchmarkConfig
from dpmeans.metrics.metrics import efficiency, speedup, throughput
from dpmeans.metrics.timers import Timer
from dpmeans.utils.logging import format_dataset_prefix

# Прогревочные прогоны не пересекаются по seed с измеряемыми (1..repeats)
_WARMUP_SEED = 10_000


class _PrefixedLogger:
    """Обёртка над логгером, добавляющая префикс к каждому сообщению."""

    def __init__(self, base_logger: logging.Logger | None, prefix: str) -> None:
        self._base = base_logger
        self._prefix = prefix

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        if self._base:
            self._base.info(f"{self._prefix} {msg}", *args, **kwargs)

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None:
        if self._base:
            self._base.warning(f"{self._prefix} {msg}", *args, **kwargs)


class BenchmarkRunner:
    """
    Запускает серию прогонов DP-means на одном датасете.

    Ожидается, что снаружи будет передан:
    - dataset: объект с атрибутами X, labels_true (или None) и dataset_info
    - model_factory: callable(logger=..., random_state=...) -> модель DP-means
    """

    def __init__(
        self,
        dataset: Any,
        model_factory: Callable[..., Any],
        logger: logging.Logger | None = None,
    ) -> None:
        self.dataset = dataset
        self.model_factory = model_factory
        self.logger = logger

        meta: Dict[str, Any] = self.dataset.dataset_info
        self._dataset_prefix = format_dataset_prefix(meta)

    def _create_model(self, seed: int) -> Any:
        """Новая модель на каждый прогон; seed перестановки = номер прогона."""
        logger = _PrefixedLogger(self.logger, self._dataset_prefix)
        return self.model_factory(logger=logger, random_state=seed)

    def run(
        self,
        config: BenchmarkConfig = BenchmarkConfig(),
        baseline_seconds: Optional[float] = None,
    ) -> Dict[str, Any]:
        """
        Запускает несколько прогонов DP-means с таймингом.

        baseline_seconds: среднее T_fit однопроцессного numpy-бэкенда на том же
        датасете; если задано, в статистику добавляются speedup и efficiency.

        Если прогнозируемое время превысит config.max_seconds, цикл прерывается,
        а результаты дополняются оценкой полного времени.

        :return: словарь с агрегированной статистикой времени и кластеризации
        """
        X = self.dataset.X
        labels_true: Optional[np.ndarray] = getattr(self.dataset, "labels_true", None)
        meta = self.dataset.dataset_info
        N, D = int(meta["N"]), int(meta["D"])

        if self.logger:
            self.logger.info(f"{self._dataset_prefix} Warmup x{config.warmup}")

        warmup_start = time.perf_counter()
        for w in range(config.warmup):
            self._create_model(seed=_WARMUP_SEED + w).fit(X)
        warmup_elapsed = time.perf_counter() - warmup_start

        n_workers = 1
        times: List[float] = []
        runs: List[Dict[str, Any]] = []

        estimated = False
        estimated_total_seconds: float | None = None

        for run_idx in range(1, config.repeats + 1):
            if self.logger:
                self.logger.info(
                    f"{self._dataset_prefix} Run {run_idx}/{config.repeats}"
                )

            model = self._create_model(seed=run_idx)
            n_workers = int(model.n_workers)
            with Timer() as t_fit:
                result = model.fit(X)
            t_fit_val = float(t_fit.elapsed)
            times.append(t_fit_val)

            axis = 0 if model.layout is Layout.POINTS_MAJOR else 1
            n_centers = int(result.centers.shape[axis])
            run = {
                "run_idx": run_idx,
                "T_fit": t_fit_val,
                "T_batch_total": float(model.t_batch_total),
                "T_pass_total": float(model.t_pass_total),
                "T_update_total": float(model.t_update_total),
                "T_iter_total": float(model.t_iter_total),
                "n_iters_actual": int(model.n_iters_actual),
                "converged": bool(result.converged),
                "n_clusters": int(np.unique(result.assignments).size),
                "n_centers": n_centers,
                "objective_final": float(result.objective[-1]),
                "throughput_ops": float(
                    throughput(N, n_centers, D, int(model.n_iters_actual), t_fit_val)
                    if t_fit_val > 0.0
                    else 0.0
                ),
                # Время передачи для GPU (если модель его измерила)
                "T_transfer": float(
                    getattr(model, "t_h2d", 0.0) + getattr(model, "t_d2h", 0.0)
                ),
            }
            if labels_true is not None:
                run["ari"] = float(adjusted_rand_score(labels_true, result.assignments))
            runs.append(run)

            if config.max_seconds is not None:
                avg_time = float(sum(times) / len(times))
                remaining = (config.repeats - run_idx) * avg_time
                spent = warmup_elapsed + sum(times)
                if run_idx < config.repeats and spent + remaining > config.max_seconds:
                    estimated = True
                    estimated_total_seconds = spent + remaining
                    if self.logger:
                        self.logger.warning(
                            f"{self._dataset_prefix} Early exit by time limit: "
                            f"spent={spent:.2f}s, remaining_est={remaining:.2f}s, "
                            f"limit={config.max_seconds:.2f}s"
                        )
                    break

        def _avg(key: str) -> float:
            return float(np.mean([r[key] for r in runs]))

        stats: Dict[str, Any] = {
            "T_fit_avg": float(np.mean(times)),
            "T_fit_std": float(np.std(times)),
            "T_fit_min": float(np.min(times)),
            "T_batch_total_avg": _avg("T_batch_total"),
            "T_pass_total_avg": _avg("T_pass_total"),
            "T_update_total_avg": _avg("T_update_total"),
            "T_iter_total_avg": _avg("T_iter_total"),
            "n_iters_avg": _avg("n_iters_actual"),
            "n_clusters_avg": _avg("n_clusters"),
            "n_clusters_min": int(min(r["n_clusters"] for r in runs)),
            "n_clusters_max": int(max(r["n_clusters"] for r in runs)),
            "converged_ratio": _avg("converged"),
            "throughput_ops_avg": _avg("throughput_ops"),
            "throughput_ops_med": float(np.median([r["throughput_ops"] for r in runs])),
            "T_transfer_avg": _avg("T_transfer"),
            "runs": runs,
            "estimated": estimated,
            "repeats_done": len(times),
            "repeats_requested": config.repeats,
            "estimated_total_seconds": estimated_total_seconds,
            "warmup_seconds": warmup_elapsed,
            "time_spent_seconds": warmup_elapsed + sum(times),
        }
        if labels_true is not None:
            stats["ari_avg"] = _avg("ari")
        if baseline_seconds is not None:
            stats["baseline_T_fit_avg"] = float(baseline_seconds)
            stats["speedup"] = speedup(baseline_seconds, stats["T_fit_avg"])
            stats["efficiency"] = efficiency(stats["speedup"], n_workers)
        stats["n_workers"] = n_workers

        if self.logger:
            self.logger.info(
                f"{self._dataset_prefix} Timing: "
                f"T_fit_avg={stats['T_fit_avg']:.6f}s, "
                f"T_fit_std={stats['T_fit_std']:.6f}s, "
                f"T_batch_total_avg={stats['T_batch_total_avg']:.6f}s, "
                f"T_pass_total_avg={stats['T_pass_total_avg']:.6f}s, "
                f"clusters_avg={stats['n_clusters_avg']:.2f}"
            )
            if "speedup" in stats:
                self.logger.info(
                    f"{self._dataset_prefix} Speedup vs numpy: "
                    f"S={stats['speedup']:.3f}, E={stats['efficiency']:.3f} "
                    f"(p={n_workers})"
                )

        return stats
