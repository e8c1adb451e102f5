"""Texture group selection, extraction and the optimization driver."""
from .context import RunContext
from .optimizer import (
    GroupFailure,
    GroupResult,
    OptimizationReport,
    Optimizer,
    PackedAtlas,
)

__all__ = [
    "RunContext",
    "GroupFailure",
    "GroupResult",
    "OptimizationReport",
    "Optimizer",
    "PackedAtlas",
]
