"""
Live-sync snapshot reader.

The snapshot is a small JSON file mirroring the watch's current state:

    {"steps": 8432, "heartRate": 72, "sleepHours": 7.2,
     "activeCalories": 410, "timestamp": "2025-07-18T14:55:00Z"}

It carries a single instantaneous heart rate and no workout history, so the
heart-rate triple and the workout count are synthesized from fixed heuristics.
"""

import json
import logging
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable
import aiofiles
from pydantic import ValidationError

from ..core.errors import SourceMalformedError, SourceUnavailableError
from ..core.extractor import round_half_up
from ..models import HealthSummary, HeartRate, LiveSnapshot, Timeframe, local_now
from .base import HealthSource, SourceConfig

logger = logging.getLogger(__name__)

MAX_SNAPSHOT_AGE = timedelta(hours=24)

DEFAULT_STEPS = 0
DEFAULT_HEART_RATE = 75
DEFAULT_SLEEP_HOURS = 7.5
DEFAULT_ACTIVE_CALORIES = 400

RESTING_OFFSET = -10
MAX_OFFSET = 60
WORKOUT_CALORIE_THRESHOLD = 300
NON_DAILY_WORKOUTS = 5


def snapshot_to_summary(snapshot: LiveSnapshot, timeframe: Timeframe) -> HealthSummary:
    """
    Map a snapshot onto the summary schema.

    Missing fields default individually; workouts are derived from the
    timeframe and active calories since the snapshot has no workout history.
    """
    heart_rate = snapshot.heart_rate if snapshot.heart_rate is not None else DEFAULT_HEART_RATE
    calories = (
        snapshot.active_calories if snapshot.active_calories is not None else DEFAULT_ACTIVE_CALORIES
    )

    if Timeframe(timeframe) is Timeframe.TODAY:
        workouts = 1 if calories > WORKOUT_CALORIE_THRESHOLD else 0
    else:
        workouts = NON_DAILY_WORKOUTS

    return HealthSummary(
        steps=int(round_half_up(snapshot.steps if snapshot.steps is not None else DEFAULT_STEPS)),
        heart_rate=HeartRate(
            resting=int(round_half_up(heart_rate + RESTING_OFFSET)),
            average=int(round_half_up(heart_rate)),
            max=int(round_half_up(heart_rate + MAX_OFFSET)),
        ),
        sleep_hours=snapshot.sleep_hours if snapshot.sleep_hours is not None else DEFAULT_SLEEP_HOURS,
        active_calories=int(round_half_up(calories)),
        workouts=workouts,
    )


class LiveSyncReader(HealthSource):
    """Reads summaries from the live-sync JSON snapshot."""

    name = "live_sync"

    def __init__(
        self,
        config: SourceConfig,
        clock: Callable[[], datetime] = local_now,
    ):
        self.snapshot_path = Path(config.live_sync_path).expanduser()
        self._clock = clock

    async def load_snapshot(self) -> LiveSnapshot:
        """
        Read and validate the snapshot file.

        Raises:
            SourceUnavailableError: File missing or unreadable
            SourceMalformedError: Not a JSON object matching the snapshot schema
        """
        try:
            exists = self.snapshot_path.is_file()
        except OSError as e:
            raise SourceUnavailableError(f"Cannot access {self.snapshot_path}: {e}") from e
        if not exists:
            raise SourceUnavailableError(f"Live sync file not found: {self.snapshot_path}")

        try:
            async with aiofiles.open(self.snapshot_path, 'rb') as f:
                content = await f.read()
        except OSError as e:
            raise SourceUnavailableError(f"Cannot read {self.snapshot_path}: {e}") from e

        try:
            data = json.loads(content)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise SourceMalformedError(f"Invalid JSON in live sync file: {e}") from e

        if not isinstance(data, dict):
            raise SourceMalformedError(
                f"Live sync file must contain a JSON object, got {type(data).__name__}"
            )

        try:
            return LiveSnapshot.model_validate(data)
        except ValidationError as e:
            raise SourceMalformedError(f"Invalid live sync snapshot: {e}") from e

    async def load(self, timeframe: Timeframe) -> HealthSummary:
        snapshot = await self.load_snapshot()

        age = snapshot.age(self._clock())
        if age is None:
            raise SourceUnavailableError("Live sync snapshot has no timestamp")
        if age >= MAX_SNAPSHOT_AGE:
            raise SourceUnavailableError(f"Live sync snapshot is stale ({age} old)")

        try:
            summary = snapshot_to_summary(snapshot, timeframe)
        except (ValidationError, ValueError, OverflowError) as e:
            raise SourceMalformedError(f"Live sync values out of range: {e}") from e

        logger.debug(f"Live sync snapshot accepted ({age} old)")
        return summary
