"""Diagnostics and scaling utilities."""

from algloop.utils.diagnostics import Diagnostics, DiagnosticRecord
from algloop.utils.scaling import is_converged, scaled_merit, clip_step

__all__ = [
    "Diagnostics",
    "DiagnosticRecord",
    "is_converged",
    "scaled_merit",
    "clip_step",
]
