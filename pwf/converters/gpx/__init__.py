from pwf.converters.gpx.exporter import GpxExporter, pwf_to_gpx
from pwf.converters.gpx.parser import gpx_to_pwf

__all__ = ["GpxExporter", "gpx_to_pwf", "pwf_to_gpx"]
