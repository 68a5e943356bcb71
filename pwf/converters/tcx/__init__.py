from pwf.converters.tcx.exporter import TcxExporter, pwf_to_tcx, xml_escape
from pwf.converters.tcx.parser import tcx_to_pwf

__all__ = ["TcxExporter", "pwf_to_tcx", "tcx_to_pwf", "xml_escape"]
