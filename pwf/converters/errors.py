"""Conversion errors, warnings and result bundles.

Errors halt a single conversion. Warnings never do: they are collected on the
result so callers can report them after the artifact is produced.
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, Field


class ConversionError(Exception):
    """Base exception for all conversion errors."""

    pass


class FitReadError(ConversionError):
    """Raised when FIT bytes cannot be decoded."""

    def __init__(self, message: str) -> None:
        super().__init__(f"Failed to read FIT file: {message}")


class InvalidFitDataError(ConversionError):
    """Raised when decoded FIT records cannot form a history document."""

    def __init__(self, message: str) -> None:
        super().__init__(f"Invalid FIT data: {message}")


class TcxReadError(ConversionError):
    """Raised when TCX XML is malformed."""

    def __init__(self, message: str) -> None:
        super().__init__(f"Failed to read TCX file: {message}")


class InvalidTcxDataError(ConversionError):
    """Raised when a well-formed TCX document has no usable activities."""

    def __init__(self, message: str) -> None:
        super().__init__(f"Invalid TCX data: {message}")


class TcxWriteError(ConversionError):
    def __init__(self, message: str) -> None:
        super().__init__(f"Failed to write TCX file: {message}")


class GpxReadError(ConversionError):
    """Raised when GPX XML cannot be parsed."""

    def __init__(self, message: str) -> None:
        super().__init__(f"Failed to read GPX file: {message}")


class InvalidGpxDataError(ConversionError):
    """Raised when a GPX document has no tracks to convert."""

    def __init__(self, message: str) -> None:
        super().__init__(f"Invalid GPX data: {message}")


class GpxWriteError(ConversionError):
    def __init__(self, message: str) -> None:
        super().__init__(f"Failed to write GPX file: {message}")


class PwfValidationError(ConversionError):
    """Raised when a PWF history handed to an exporter does not parse."""

    def __init__(self, message: str) -> None:
        super().__init__(f"PWF validation failed: {message}")


class YamlError(ConversionError):
    def __init__(self, message: str) -> None:
        super().__init__(f"YAML serialization error: {message}")


class UnsupportedFormatError(ConversionError):
    def __init__(self, message: str) -> None:
        super().__init__(f"Unsupported format: {message}")


class MissingRequiredFieldError(ConversionError):
    def __init__(self, message: str) -> None:
        super().__init__(f"Missing required field: {message}")


class CsvWriteError(ConversionError):
    def __init__(self, message: str) -> None:
        super().__init__(f"Failed to write CSV file: {message}")


# ---------------------------------------------------------------------------
# Warnings
# ---------------------------------------------------------------------------


class MissingField(BaseModel):
    kind: Literal["missing_field"] = "missing_field"
    source_field: str
    reason: str

    def __str__(self) -> str:
        return f"Missing field '{self.source_field}': {self.reason}"


class ValueClamped(BaseModel):
    kind: Literal["value_clamped"] = "value_clamped"
    field: str
    original: str
    clamped: str

    def __str__(self) -> str:
        return f"Value clamped in '{self.field}': {self.original} -> {self.clamped}"


class UnsupportedFeature(BaseModel):
    kind: Literal["unsupported_feature"] = "unsupported_feature"
    feature: str

    def __str__(self) -> str:
        return f"Unsupported feature: {self.feature}"


class TimeSeriesSkipped(BaseModel):
    kind: Literal["time_series_skipped"] = "time_series_skipped"
    reason: str

    def __str__(self) -> str:
        return f"Time-series data skipped: {self.reason}"


class DataQualityIssue(BaseModel):
    kind: Literal["data_quality_issue"] = "data_quality_issue"
    issue: str

    def __str__(self) -> str:
        return f"Data quality issue: {self.issue}"


ConversionWarning = Annotated[
    MissingField | ValueClamped | UnsupportedFeature | TimeSeriesSkipped | DataQualityIssue,
    Field(discriminator="kind"),
]


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


class _ResultBase(BaseModel):
    warnings: list[ConversionWarning] = Field(default_factory=list)

    def add_warning(self, warning: ConversionWarning) -> None:
        self.warnings.append(warning)

    def has_warnings(self) -> bool:
        return bool(self.warnings)


class ConversionResult(_ResultBase):
    """Outcome of an import (FIT/TCX/GPX to PWF)."""

    pwf_yaml: str


class TcxExportResult(_ResultBase):
    tcx_xml: str


class GpxExportResult(_ResultBase):
    gpx_xml: str


class CsvExportResult(_ResultBase):
    csv_data: str
    data_points: int = 0
    workouts_processed: int = 0
