"""
Metric Extractor - Aggregates filtered export records into a HealthSummary.

Each metric is computed independently and falls back to a fixed value when no
record contributes to it:
- steps, active calories: 0
- heart rate: {resting: 60, average: 80, max: 120}
- sleep: 7.5 hours
"""

import math
from typing import Iterable, List, Sequence

from ..models import HealthSummary, HeartRate, RawRecord, RawWorkout, RecordKind

DEFAULT_RESTING_HR = 60
NO_DATA_HEART_RATE = HeartRate(resting=DEFAULT_RESTING_HR, average=80, max=120)
DEFAULT_SLEEP_HOURS = 7.5


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round halves upward (2.5 -> 3, 0.25 -> 0.3 at ndigits=1), unlike round()."""
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor


def _of_kind(records: Iterable[RawRecord], kind: RecordKind) -> List[RawRecord]:
    return [r for r in records if r.kind is kind]


def extract_steps(records: Sequence[RawRecord]) -> int:
    return int(round_half_up(sum(r.value for r in _of_kind(records, RecordKind.STEP_COUNT))))


def extract_heart_rate(records: Sequence[RawRecord]) -> HeartRate:
    """Average and max over HeartRate records; resting from the latest RestingHeartRate."""
    readings = [r.value for r in _of_kind(records, RecordKind.HEART_RATE)]
    if not readings:
        return NO_DATA_HEART_RATE

    resting = DEFAULT_RESTING_HR
    resting_records = _of_kind(records, RecordKind.RESTING_HEART_RATE)
    if resting_records:
        latest = max(resting_records, key=lambda r: r.start_time)
        resting = int(round_half_up(latest.value))

    return HeartRate(
        resting=resting,
        average=int(round_half_up(sum(readings) / len(readings))),
        max=int(round_half_up(max(readings))),
    )


def extract_sleep_hours(records: Sequence[RawRecord]) -> float:
    sleep_records = _of_kind(records, RecordKind.SLEEP_ANALYSIS)
    if not sleep_records:
        return DEFAULT_SLEEP_HOURS

    total_minutes = sum(r.duration.total_seconds() / 60 for r in sleep_records)
    return round_half_up(total_minutes / 60, 1)


def extract_active_calories(records: Sequence[RawRecord]) -> int:
    return int(round_half_up(sum(r.value for r in _of_kind(records, RecordKind.ACTIVE_ENERGY_BURNED))))


def extract_metrics(
    records: Sequence[RawRecord],
    workouts: Sequence[RawWorkout],
) -> HealthSummary:
    """
    Build a HealthSummary from records and workouts already filtered to a window.

    Args:
        records: Export records inside the window
        workouts: Export workouts inside the window

    Returns:
        HealthSummary with every field populated
    """
    return HealthSummary(
        steps=extract_steps(records),
        heart_rate=extract_heart_rate(records),
        sleep_hours=extract_sleep_hours(records),
        active_calories=extract_active_calories(records),
        workouts=len(workouts),
    )
