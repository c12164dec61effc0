"""
Synthetic health data used when no real source is usable.

Values are drawn from per-day bands and scaled by the window length, so a week
totals more than a day and a month more than a week. The random stream is
seeded from the date, which keeps the output stable for a given day.
"""

import random
from datetime import datetime
from typing import Callable, Optional

from ..core.extractor import round_half_up
from ..models import HealthSummary, HeartRate, Timeframe, as_aware, local_now
from .base import HealthSource, SourceConfig


def derive_seed(now: datetime, include_hour: bool = False) -> int:
    """
    Seed formula: day of month + zero-based month index (+ hour when requested).

    2025-07-18 gives 18 + 6 = 24.
    """
    seed = now.day + (now.month - 1)
    if include_hour:
        seed += now.hour
    return seed


def seeded_rng(now: datetime, seed: int) -> random.Random:
    return random.Random(now.date().toordinal() * 100 + seed)


def generate_synthetic_summary(
    timeframe: Timeframe,
    now: datetime,
    rng: Optional[random.Random] = None,
    include_hour: bool = False,
) -> HealthSummary:
    """
    Generate a plausible summary for the timeframe.

    Args:
        timeframe: Requested timeframe
        now: Current moment; drives the seed
        rng: Random source, defaults to one seeded from `now`
        include_hour: Fold the hour into the seed so values change hourly

    Returns:
        HealthSummary with non-negative fields
    """
    timeframe = Timeframe(timeframe)
    now = as_aware(now)
    seed = derive_seed(now, include_hour)
    rng = rng or seeded_rng(now, seed)

    if timeframe is Timeframe.TODAY:
        daily_steps = rng.randrange(4000) + 7000 + seed * 100
        heart_rate = HeartRate(
            resting=rng.randrange(8) + 50 + seed % 5,
            average=rng.randrange(15) + 75 + seed % 8,
            max=rng.randrange(25) + 145 + seed % 10,
        )
        nightly_sleep = rng.random() * 1.5 + 7 + (seed % 3) * 0.2
        daily_calories = rng.randrange(200) + 350 + seed * 20
        workouts = 1 if seed % 3 == 0 else 0  # every third day
    elif timeframe is Timeframe.WEEK:
        daily_steps = rng.randrange(1500) + 8500 + seed * 50
        heart_rate = HeartRate(
            resting=rng.randrange(6) + 52 + seed % 4,
            average=rng.randrange(12) + 76 + seed % 6,
            max=rng.randrange(20) + 150 + seed % 8,
        )
        nightly_sleep = rng.random() + 7.1 + (seed % 2) * 0.3
        daily_calories = rng.randrange(60) + 400 + seed * 4
        workouts = rng.randrange(3) + 4 + seed % 3
    else:
        daily_steps = rng.randrange(1000) + 9000 + seed * 25
        heart_rate = HeartRate(
            resting=rng.randrange(4) + 53 + seed % 3,
            average=rng.randrange(8) + 77 + seed % 5,
            max=rng.randrange(15) + 155 + seed % 7,
        )
        nightly_sleep = rng.random() * 0.8 + 7.3 + (seed % 2) * 0.2
        daily_calories = rng.randrange(50) + 400 + seed * 3
        workouts = rng.randrange(5) + 18 + seed % 4

    days = timeframe.days
    return HealthSummary(
        steps=daily_steps * days,
        heart_rate=heart_rate,
        sleep_hours=round_half_up(nightly_sleep * days, 1),
        active_calories=daily_calories * days,
        workouts=workouts,
    )


class SyntheticGenerator(HealthSource):
    """Terminal source: always produces a summary, never touches the filesystem."""

    name = "synthetic"

    def __init__(
        self,
        config: Optional[SourceConfig] = None,
        clock: Callable[[], datetime] = local_now,
    ):
        self.include_hour = config.synthetic_seed_includes_hour if config else False
        self._clock = clock

    def generate(self, timeframe: Timeframe) -> HealthSummary:
        return generate_synthetic_summary(timeframe, self._clock(), include_hour=self.include_hour)

    async def load(self, timeframe: Timeframe) -> HealthSummary:
        return self.generate(timeframe)
