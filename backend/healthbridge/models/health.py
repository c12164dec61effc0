"""
Health Data Models - Defines structures for health summaries, time windows and raw export records.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator


class Timeframe(str, Enum):
    """Aggregation window requested by the caller."""
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"

    @property
    def days(self) -> int:
        """Number of days the timeframe spans."""
        return {"today": 1, "week": 7, "month": 30}[self.value]


class HeartRate(BaseModel):
    """Resting / average / max heart rate in bpm."""
    model_config = ConfigDict(frozen=True)

    resting: int = Field(ge=0)
    average: int = Field(ge=0)
    max: int = Field(ge=0)


class HealthSummary(BaseModel):
    """
    Aggregated health metrics for one timeframe.

    Every field is always present; readers either build a complete summary
    or report a failure.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    steps: int = Field(ge=0)
    heart_rate: HeartRate = Field(alias="heartRate")
    sleep_hours: float = Field(ge=0, alias="sleepHours")
    active_calories: int = Field(ge=0, alias="activeCalories")
    workouts: int = Field(ge=0)


class TimeWindow(BaseModel):
    """Concrete [start, end] interval, inclusive at both ends."""
    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime

    @model_validator(mode="after")
    def _check_order(self) -> "TimeWindow":
        if self.start > self.end:
            raise ValueError(f"Inverted time window: {self.start} > {self.end}")
        return self

    def contains(self, moment: datetime) -> bool:
        """Check whether a moment falls inside the window."""
        return self.start <= moment <= self.end


class RecordKind(str, Enum):
    """Record kinds the extractor understands."""
    STEP_COUNT = "StepCount"
    HEART_RATE = "HeartRate"
    RESTING_HEART_RATE = "RestingHeartRate"
    SLEEP_ANALYSIS = "SleepAnalysis"
    ACTIVE_ENERGY_BURNED = "ActiveEnergyBurned"
    OTHER = "Other"


# Apple Health type identifiers -> record kinds
RECORD_TYPE_MAP = {
    "HKQuantityTypeIdentifierStepCount": RecordKind.STEP_COUNT,
    "HKQuantityTypeIdentifierHeartRate": RecordKind.HEART_RATE,
    "HKQuantityTypeIdentifierRestingHeartRate": RecordKind.RESTING_HEART_RATE,
    "HKCategoryTypeIdentifierSleepAnalysis": RecordKind.SLEEP_ANALYSIS,
    "HKQuantityTypeIdentifierActiveEnergyBurned": RecordKind.ACTIVE_ENERGY_BURNED,
}


def record_kind_for(type_identifier: Optional[str]) -> RecordKind:
    """Map a raw type tag onto a RecordKind; unknown tags become OTHER."""
    return RECORD_TYPE_MAP.get(type_identifier or "", RecordKind.OTHER)


@dataclass(frozen=True)
class RawRecord:
    """A single dated record from the bulk export."""
    kind: RecordKind
    value: float
    start_time: datetime
    end_time: datetime

    @property
    def duration(self) -> timedelta:
        return self.end_time - self.start_time


@dataclass(frozen=True)
class RawWorkout:
    """A workout entry; only the start time matters for counting."""
    start_time: datetime
    end_time: Optional[datetime] = None
    activity_type: Optional[str] = None
    total_distance: Optional[float] = None
    total_energy_burned: Optional[float] = None


class LiveSnapshot(BaseModel):
    """Near-real-time device state written by a live-sync client."""
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore", allow_inf_nan=False)

    steps: Optional[float] = None
    heart_rate: Optional[float] = Field(default=None, alias="heartRate")
    sleep_hours: Optional[float] = Field(default=None, alias="sleepHours")
    active_calories: Optional[float] = Field(default=None, alias="activeCalories")
    timestamp: Optional[datetime] = None

    def age(self, now: datetime) -> Optional[timedelta]:
        """Time elapsed since the snapshot was taken, or None without a timestamp."""
        if self.timestamp is None:
            return None
        return as_aware(now) - as_aware(self.timestamp)


def as_aware(moment: datetime) -> datetime:
    """Attach the local timezone to naive datetimes; aware ones pass through."""
    if moment.tzinfo is None:
        return moment.astimezone()
    return moment


def local_now() -> datetime:
    """Current moment in the local timezone."""
    return datetime.now().astimezone()
