"""Shared pieces for importers and exporters."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

import yaml

from pwf.converters.errors import PwfValidationError, YamlError
from pwf.schema.history import ExportSource, History, Units
from pwf.schema.parsing import DocumentParseError, dump_document, parse_history
from pwf.version import __version__

ResultT = TypeVar("ResultT")


def export_source(app_name: str, platform: str | None = None) -> ExportSource:
    return ExportSource(app_name=app_name, app_version=__version__, platform=platform)


def new_history(
    app_name: str,
    platform: str | None = None,
    units: Units | None = None,
) -> History:
    """Empty history shell filled in by the importers."""
    return History(
        history_version=1,
        export_source=export_source(app_name, platform),
        units=units or Units(),
    )


def serialize_history(history: History) -> str:
    """Dump a history to YAML.

    Raises:
        YamlError: If the document cannot be serialized
    """
    try:
        return dump_document(history)
    except yaml.YAMLError as e:
        raise YamlError(str(e)) from e


def load_history(text: str) -> History:
    """Parse PWF history YAML for export.

    Raises:
        PwfValidationError: If the YAML does not describe a history document
    """
    try:
        return parse_history(text)
    except DocumentParseError as e:
        raise PwfValidationError(str(e)) from e


class HistoryExporter(ABC, Generic[ResultT]):
    """Base class for exporters from a PWF history to another format.

    Exporters keep no state between calls; ``build`` may be invoked repeatedly.
    """

    export_type: str

    @abstractmethod
    def build(self, history: History) -> ResultT:
        """Build export data from a history document.

        Args:
            history: Parsed PWF history

        Returns:
            Format-specific result bundle carrying the artifact and warnings

        Raises:
            ConversionError: If nothing can be exported
        """
        raise NotImplementedError
