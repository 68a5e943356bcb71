"""Typed data model for PWF plan and history documents."""

from pwf.schema.common import DistanceUnit, Modality, Sport, WeightUnit
from pwf.schema.history import History, HistoryStatistics
from pwf.schema.parsing import DocumentParseError, dump_document, parse_history, parse_plan
from pwf.schema.plan import Plan, PlanStatistics

__all__ = [
    "DistanceUnit",
    "DocumentParseError",
    "History",
    "HistoryStatistics",
    "Modality",
    "Plan",
    "PlanStatistics",
    "Sport",
    "WeightUnit",
    "dump_document",
    "parse_history",
    "parse_plan",
]
