"""
Human-readable renderings of query results.
"""

import json
from typing import Any, Dict, List

from ..models import HealthSummary, Timeframe


def format_summary(summary: HealthSummary, timeframe: Timeframe) -> str:
    """
    Render a HealthSummary as text.

    Field order: steps, resting/average/max heart rate, sleep, active calories, workouts.
    """
    hr = summary.heart_rate
    lines = [
        f"Apple Watch Health Summary ({Timeframe(timeframe).value}):",
        "",
        f"Steps: {summary.steps}",
        f"Resting Heart Rate: {hr.resting} bpm",
        f"Average Heart Rate: {hr.average} bpm",
        f"Max Heart Rate: {hr.max} bpm",
        f"Sleep: {summary.sleep_hours:g} hours",
        f"Active Calories: {summary.active_calories}",
        f"Workouts: {summary.workouts}",
    ]
    return "\n".join(lines)


def format_workouts(workouts: List[Dict[str, Any]]) -> str:
    return f"Recent Workouts ({len(workouts)}):\n{json.dumps(workouts, indent=2)}"


def format_heart_rate_zones(zones: Dict[str, Any]) -> str:
    return f"Heart Rate Zones for {zones['date']}:\n{json.dumps(zones, indent=2)}"
