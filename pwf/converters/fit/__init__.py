"""FIT import."""

from pwf.converters.fit.parser import convert_fit_records, fit_to_pwf
from pwf.converters.fit.records import FitRecord, decode_fit

__all__ = ["FitRecord", "convert_fit_records", "decode_fit", "fit_to_pwf"]
