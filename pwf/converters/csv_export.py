"""Time-series telemetry export to CSV.

One row per sample of every set-level time series in the history, in a single
wide table. Arrays that are absent (or shorter than ``timestamps``) leave empty
cells.
"""

from __future__ import annotations

import csv
import io

from loguru import logger

from pwf.converters.base import HistoryExporter
from pwf.converters.errors import CsvExportResult, CsvWriteError, MissingRequiredFieldError, TimeSeriesSkipped
from pwf.schema.history import CompletedExercise, CompletedSet, History, TimeSeriesData, Workout

# Every column after the label and timestamp is a TimeSeriesData array of the same name
DATA_COLUMNS = [
    "elapsed_sec",
    "heart_rate",
    "power",
    "cadence",
    "speed_mps",
    "elevation_m",
    "latitude",
    "longitude",
    "distance_m",
    "temperature_c",
    "grade_percent",
    "respiration_rate",
    "core_temperature_c",
    "muscle_oxygen_percent",
    "power_balance",
    "left_pedal_smoothness",
    "right_pedal_smoothness",
    "left_torque_effectiveness",
    "right_torque_effectiveness",
    "stride_length_m",
    "vertical_oscillation_cm",
    "ground_contact_time_ms",
    "ground_contact_balance",
    "stroke_rate",
    "stroke_count",
    "swolf",
]
CSV_HEADER = ["workout_label", "timestamp", *DATA_COLUMNS]

NO_TELEMETRY_MESSAGE = (
    "No telemetry data found in history export. CSV export requires workouts with time-series telemetry data."
)
NO_TIME_SERIES_MESSAGE = (
    "No time-series data found in telemetry. Only summary metrics are available. "
    "CSV export requires second-by-second time-series data."
)


def time_series_label(workout: Workout, exercise: CompletedExercise, completed_set: CompletedSet) -> str:
    """``{workout id or title}-{exercise}-set{n}``."""
    workout_label = workout.id or workout.title or "workout"
    set_number = "" if completed_set.set_number is None else completed_set.set_number
    return f"{workout_label}-{exercise.name}-set{set_number}"


def _cell(values: list | None, index: int) -> str:
    if values is None or index >= len(values):
        return ""
    value = values[index]
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class CsvExporter(HistoryExporter[CsvExportResult]):
    """Flattens set-level time series into one CSV table."""

    export_type = "csv"

    def build(self, history: History) -> CsvExportResult:
        """Build the CSV table.

        Raises:
            MissingRequiredFieldError: If the history has no set telemetry at all,
                or has telemetry but no time series
            CsvWriteError: If a row cannot be written
        """
        result = CsvExportResult(csv_data="")
        series: list[tuple[str, int, TimeSeriesData]] = []
        has_telemetry = False

        for workout_idx, workout in enumerate(history.workouts):
            if workout.telemetry is not None:
                has_telemetry = True
            for exercise in workout.exercises:
                for completed_set in exercise.sets:
                    if completed_set.telemetry is None:
                        continue
                    has_telemetry = True
                    time_series = completed_set.telemetry.time_series
                    if time_series is None:
                        continue
                    label = time_series_label(workout, exercise, completed_set)
                    mismatches = time_series.length_mismatches()
                    if mismatches:
                        result.add_warning(TimeSeriesSkipped(reason=f"{label}: {mismatches[0]}"))
                        continue
                    series.append((label, workout_idx, time_series))

        if not series:
            raise MissingRequiredFieldError(NO_TIME_SERIES_MESSAGE if has_telemetry else NO_TELEMETRY_MESSAGE)

        output = io.StringIO()
        writer = csv.writer(output, lineterminator="\n")
        try:
            writer.writerow(CSV_HEADER)
            for label, _, time_series in series:
                for index, timestamp in enumerate(time_series.timestamps):
                    row = [label, timestamp]
                    row.extend(_cell(getattr(time_series, column), index) for column in DATA_COLUMNS)
                    writer.writerow(row)
                    result.data_points += 1
        except csv.Error as e:
            raise CsvWriteError(str(e)) from e

        result.csv_data = output.getvalue()
        output.close()
        result.workouts_processed = len({workout_idx for _, workout_idx, _ in series})
        logger.info(f"Exported {result.data_points} data point(s) from {result.workouts_processed} workout(s) to CSV")
        return result


def pwf_to_csv(history: History) -> CsvExportResult:
    """Export every set-level time series of a history as CSV."""
    return CsvExporter().build(history)
