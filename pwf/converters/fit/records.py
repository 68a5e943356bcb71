"""Decoded FIT message stream.

``decode_fit`` is the only place that touches fitparse; everything downstream
works on plain ``FitRecord`` values, so conversions can be driven from records
built in memory.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any

import fitparse
from loguru import logger
from pydantic import BaseModel, Field

from pwf.converters.errors import FitReadError
from pwf.converters.utils import fit_timestamp_to_datetime

SESSION = "session"
LAP = "lap"
RECORD = "record"
LENGTH = "length"
DEVICE_INFO = "device_info"
FILE_ID = "file_id"

FIT_KINDS = frozenset({SESSION, LAP, RECORD, LENGTH, DEVICE_INFO, FILE_ID})


class FitRecord(BaseModel):
    """One decoded FIT data message: its kind and non-null fields by name."""

    kind: str
    fields: dict[str, Any] = Field(default_factory=dict)

    def get(self, *names: str) -> Any:
        """First non-null value among ``names``."""
        for name in names:
            value = self.fields.get(name)
            if value is not None:
                return value
        return None

    def number(self, *names: str) -> float | None:
        value = self.get(*names)
        if isinstance(value, bool) or not isinstance(value, int | float):
            return None
        number = float(value)
        return number if math.isfinite(number) else None

    def integer(self, *names: str) -> int | None:
        value = self.number(*names)
        return int(value) if value is not None else None

    def time(self, *names: str) -> datetime | None:
        """Timestamp field as an aware UTC datetime.

        Raw integers are seconds since the FIT epoch; fitparse already yields
        naive UTC datetimes.
        """
        value = self.get(*names)
        if isinstance(value, datetime):
            return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
        if isinstance(value, int) and not isinstance(value, bool):
            try:
                return fit_timestamp_to_datetime(value)
            except (OverflowError, OSError, ValueError):
                return None
        return None


def decode_fit(data: bytes) -> list[FitRecord]:
    """Decode FIT bytes into the message kinds the converter uses.

    Args:
        data: Raw FIT file bytes

    Returns:
        Records in file order

    Raises:
        FitReadError: If the bytes are not a readable FIT file
    """
    records: list[FitRecord] = []
    try:
        fit_file = fitparse.FitFile(data)
        for message in fit_file.get_messages():
            if message.name not in FIT_KINDS:
                continue
            fields = {field.name: field.value for field in message if field.value is not None}
            records.append(FitRecord(kind=message.name, fields=fields))
    except fitparse.FitParseError as e:
        raise FitReadError(str(e)) from e

    logger.debug(f"Decoded {len(records)} FIT records")
    return records
