"""Tests for time-series CSV export."""

import csv
import io

import pytest

from pwf.converters.csv_export import CSV_HEADER, NO_TELEMETRY_MESSAGE, NO_TIME_SERIES_MESSAGE, pwf_to_csv
from pwf.converters.errors import MissingRequiredFieldError, TimeSeriesSkipped
from pwf.schema.history import History
from pwf.schema.parsing import parse_history

SUMMARY_ONLY_HISTORY = """\
history_version: 1
exported_at: "2025-01-01T00:00:00Z"
workouts:
  - date: "2025-01-01"
    exercises:
      - name: Run
        modality: stopwatch
        sets:
          - set_number: 1
            duration_sec: 600
            telemetry:
              heart_rate_avg: 150
"""


def _rows(csv_data: str) -> list[list[str]]:
    return list(csv.reader(io.StringIO(csv_data)))


def test_header_has_all_columns(gps_history: History):
    """Test the header row layout."""
    rows = _rows(pwf_to_csv(gps_history).csv_data)

    assert rows[0] == CSV_HEADER
    assert len(rows[0]) == 28
    assert rows[0][:4] == ["workout_label", "timestamp", "elapsed_sec", "heart_rate"]


def test_one_row_per_sample(gps_history: History):
    """Test sample rows, empty cells and the result counters."""
    result = pwf_to_csv(gps_history)
    rows = _rows(result.csv_data)

    assert result.data_points == 3
    assert result.workouts_processed == 1
    assert len(rows) == 4

    first = rows[1]
    assert first[0] == "w1-Tempo-set1"
    assert first[1] == "2025-05-10T07:00:00Z"
    assert first[2] == "0"
    assert first[3] == "140"
    assert first[4] == ""
    assert first[6] == "3.2"
    assert rows[3][3] == "145"


def test_history_without_telemetry_is_rejected(strength_history_yaml: str):
    """Test the error for a history with no telemetry at all."""
    with pytest.raises(MissingRequiredFieldError) as exc_info:
        pwf_to_csv(parse_history(strength_history_yaml))

    assert str(exc_info.value) == f"Missing required field: {NO_TELEMETRY_MESSAGE}"


def test_summary_telemetry_without_series_is_rejected():
    """Test the error for telemetry that has no time series."""
    with pytest.raises(MissingRequiredFieldError) as exc_info:
        pwf_to_csv(parse_history(SUMMARY_ONLY_HISTORY))

    assert str(exc_info.value) == f"Missing required field: {NO_TIME_SERIES_MESSAGE}"


def test_mismatched_series_is_skipped(gps_history: History):
    """Test that a series with ragged arrays is skipped with a warning."""
    series = gps_history.workouts[0].exercises[0].sets[0].telemetry.time_series
    series.heart_rate = [140, 142]

    with pytest.raises(MissingRequiredFieldError):
        pwf_to_csv(gps_history)


def test_mismatched_series_warns_when_others_export(gps_history: History):
    """Test that the skip warning names the set and the mismatch."""
    exercise = gps_history.workouts[0].exercises[0]
    good = exercise.sets[0]
    bad = good.model_copy(deep=True)
    bad.set_number = 2
    bad.telemetry.time_series.power = [200]
    exercise.sets.append(bad)

    result = pwf_to_csv(gps_history)

    assert result.data_points == 3
    assert result.warnings == [
        TimeSeriesSkipped(reason="w1-Tempo-set2: power length (1) doesn't match timestamps length (3)")
    ]
