"""Portable Workout Format: plan and history validation plus device file conversion."""

from loguru import logger

from pwf.converters import fit_to_pwf, gpx_to_pwf, pwf_to_csv, pwf_to_gpx, pwf_to_tcx, tcx_to_pwf
from pwf.resolver import ResolvedExercise, resolve_exercise
from pwf.validation import Diagnostic, Severity, ValidationResult, validate_history, validate_plan
from pwf.version import __version__

logger.disable("pwf")

__all__ = [
    "Diagnostic",
    "ResolvedExercise",
    "Severity",
    "ValidationResult",
    "__version__",
    "fit_to_pwf",
    "gpx_to_pwf",
    "pwf_to_csv",
    "pwf_to_gpx",
    "pwf_to_tcx",
    "resolve_exercise",
    "tcx_to_pwf",
    "validate_history",
    "validate_plan",
]
