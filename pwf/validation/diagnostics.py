"""Diagnostic records shared by the plan and history validators."""

from __future__ import annotations

from enum import StrEnum
from typing import Generic, TypeVar

from pydantic import BaseModel, Field

DocumentT = TypeVar("DocumentT")
StatisticsT = TypeVar("StatisticsT")


class Severity(StrEnum):
    ERROR = "error"
    WARNING = "warning"


class Diagnostic(BaseModel):
    """A single validation finding.

    ``path`` is dotted with list indices, e.g. ``cycle.days[2].exercises[0].group``;
    an empty path refers to the document root.
    """

    path: str
    message: str
    severity: Severity
    code: str | None = None

    @classmethod
    def error(cls, path: str, message: str, code: str | None = None) -> Diagnostic:
        return cls(path=path, message=message, severity=Severity.ERROR, code=code)

    @classmethod
    def warning(cls, path: str, message: str, code: str | None = None) -> Diagnostic:
        return cls(path=path, message=message, severity=Severity.WARNING, code=code)

    def __str__(self) -> str:
        location = self.path or "(root)"
        prefix = f"[{self.code}] " if self.code else ""
        return f"{prefix}{location}: {self.message}"


class ValidationResult(BaseModel, Generic[DocumentT, StatisticsT]):
    """Outcome of validating one document.

    ``valid`` holds exactly when ``errors`` is empty; the parsed document and
    statistics are only populated for valid documents.
    """

    valid: bool
    document: DocumentT | None = None
    errors: list[Diagnostic] = Field(default_factory=list)
    warnings: list[Diagnostic] = Field(default_factory=list)
    statistics: StatisticsT | None = None

    def has_warnings(self) -> bool:
        return bool(self.warnings)

    def codes(self) -> list[str]:
        """Codes of every diagnostic, errors first, in walk order."""
        return [d.code for d in [*self.errors, *self.warnings] if d.code]

    def error_codes(self) -> list[str]:
        return [d.code for d in self.errors if d.code]

    def warning_codes(self) -> list[str]:
        return [d.code for d in self.warnings if d.code]

    def passes(self, strict: bool = False) -> bool:
        """Whether the document passes, treating warnings as failures in strict mode."""
        return self.valid and (not strict or not self.warnings)


class DiagnosticCollector:
    """Accumulates diagnostics in document-walk order."""

    def __init__(self) -> None:
        self.errors: list[Diagnostic] = []
        self.warnings: list[Diagnostic] = []

    def error(self, path: str, message: str, code: str | None = None) -> None:
        self.errors.append(Diagnostic.error(path, message, code))

    def warning(self, path: str, message: str, code: str | None = None) -> None:
        self.warnings.append(Diagnostic.warning(path, message, code))

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)
