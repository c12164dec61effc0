"""Models module."""

from .health import (
    Timeframe, HeartRate, HealthSummary, TimeWindow, RecordKind, RawRecord,
    RawWorkout, LiveSnapshot, record_kind_for, as_aware, local_now,
)

__all__ = [
    'Timeframe', 'HeartRate', 'HealthSummary', 'TimeWindow', 'RecordKind', 'RawRecord',
    'RawWorkout', 'LiveSnapshot', 'record_kind_for', 'as_aware', 'local_now',
]
