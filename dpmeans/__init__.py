from .api import Backend, fit, make_model
from .core import (
    DegenerateCollapseWarning,
    DimensionMismatch,
    DPMeansError,
    DPMeansResult,
    InvalidShapeError,
    IterationState,
    Layout,
    NonConvergenceWarning,
)

__all__ = [
    "fit",
    "make_model",
    "Backend",
    "Layout",
    "DPMeansResult",
    "IterationState",
    "DPMeansError",
    "DimensionMismatch",
    "InvalidShapeError",
    "NonConvergenceWarning",
    "DegenerateCollapseWarning",
]
