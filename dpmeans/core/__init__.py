from .base import DPMeansBase, DPMeansResult, IterationState
from .config import Layout
from .cpu_numpy import DPMeansCPUNumpy
from .cpu_multiprocessing import DPMeansCPUMultiprocessing, MultiprocessingConfig
from .exceptions import (
    DegenerateCollapseWarning,
    DimensionMismatch,
    DPMeansError,
    InvalidShapeError,
    NonConvergenceWarning,
)
from .gpu_cupy import DPMeansGPUCuPy, gpu_available

__all__ = [
    "DPMeansBase",
    "DPMeansResult",
    "IterationState",
    "Layout",
    "DPMeansCPUNumpy",
    "DPMeansCPUMultiprocessing",
    "MultiprocessingConfig",
    "DPMeansGPUCuPy",
    "gpu_available",
    "DPMeansError",
    "DimensionMismatch",
    "InvalidShapeError",
    "NonConvergenceWarning",
    "DegenerateCollapseWarning",
]
