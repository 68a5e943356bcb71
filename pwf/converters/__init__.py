"""Converters between PWF history documents and device file formats."""

from pwf.converters.base import HistoryExporter, load_history
from pwf.converters.csv_export import CsvExporter, pwf_to_csv
from pwf.converters.errors import (
    ConversionError,
    ConversionResult,
    ConversionWarning,
    CsvExportResult,
    GpxExportResult,
    TcxExportResult,
    UnsupportedFormatError,
)
from pwf.converters.fit import fit_to_pwf
from pwf.converters.gpx import GpxExporter, gpx_to_pwf, pwf_to_gpx
from pwf.converters.tcx import TcxExporter, pwf_to_tcx, tcx_to_pwf

__all__ = [
    "ConversionError",
    "ConversionResult",
    "ConversionWarning",
    "CsvExportResult",
    "CsvExporter",
    "GpxExportResult",
    "GpxExporter",
    "HistoryExporter",
    "TcxExportResult",
    "TcxExporter",
    "UnsupportedFormatError",
    "fit_to_pwf",
    "gpx_to_pwf",
    "load_history",
    "pwf_to_csv",
    "pwf_to_gpx",
    "pwf_to_tcx",
    "tcx_to_pwf",
]
