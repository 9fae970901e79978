from .timers import Timer
from .metrics import speedup, efficiency, throughput, dpmeans_objective

__all__ = [
    "Timer",
    "speedup",
    "efficiency",
    "throughput",
    "dpmeans_objective",
]
