"""Plan and history validators."""

from pwf.validation.diagnostics import Diagnostic, Severity, ValidationResult
from pwf.validation.history_validator import HistoryValidationResult, validate_history
from pwf.validation.plan_validator import PlanValidationResult, validate_plan

__all__ = [
    "Diagnostic",
    "HistoryValidationResult",
    "PlanValidationResult",
    "Severity",
    "ValidationResult",
    "validate_history",
    "validate_plan",
]
