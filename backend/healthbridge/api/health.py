"""
Health API endpoints - Summary resolution plus workout and heart-rate-zone queries.
"""

import copy
import logging
from datetime import date
from functools import lru_cache
from typing import Any, Dict, List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status

from ..config import settings
from ..core.errors import InvalidTimeframeError
from ..core.formatting import format_heart_rate_zones, format_summary, format_workouts
from ..core.resolver import SourceResolver
from ..models import local_now

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["health"])

SUMMARY_ERROR_DETAIL = "Error retrieving health data. Please check the server logs."

# Fixed payloads; these queries do not consult any data source
MOCK_WORKOUTS: List[Dict[str, Any]] = [
    {
        "date": "2025-07-17",
        "type": "Running",
        "duration": "32:15",
        "distance": "4.2 miles",
        "avgHeartRate": 145,
        "maxHeartRate": 172,
        "calories": 320,
        "pace": "7:41 /mile",
    },
    {
        "date": "2025-07-16",
        "type": "Strength Training",
        "duration": "45:30",
        "avgHeartRate": 110,
        "maxHeartRate": 140,
        "calories": 280,
    },
    {
        "date": "2025-07-15",
        "type": "Cycling",
        "duration": "1:15:22",
        "distance": "18.5 miles",
        "avgHeartRate": 135,
        "maxHeartRate": 165,
        "calories": 450,
        "avgSpeed": "14.7 mph",
    },
]

MOCK_HEART_RATE_ZONES: Dict[str, Any] = {
    "zones": {
        "zone1_recovery": {"range": "52-104 bpm", "timeInZone": "4:32:15", "percentage": 18.9},
        "zone2_aerobic": {"range": "105-125 bpm", "timeInZone": "2:15:30", "percentage": 9.4},
        "zone3_anaerobic": {"range": "126-146 bpm", "timeInZone": "0:45:22", "percentage": 3.1},
        "zone4_neuromuscular": {"range": "147-167 bpm", "timeInZone": "0:12:08", "percentage": 0.8},
        "zone5_anaerobic": {"range": "168+ bpm", "timeInZone": "0:02:30", "percentage": 0.2},
    },
    "totalActiveTime": "7:47:45",
    "restingHeartRate": 52,
    "maxHeartRate": 172,
}


@lru_cache
def get_resolver() -> SourceResolver:
    """Shared resolver built once from settings; keeps the discovered export location."""
    return SourceResolver.from_config(settings.source_config())


@router.get("/summary")
async def get_health_summary(
    timeframe: str = Query(..., description="Time period for the summary (today, week, month)"),
    resolver: SourceResolver = Depends(get_resolver),
):
    """
    Get a summary of Apple Watch health data.

    Args:
        timeframe: today, week or month
        resolver: Source resolver

    Returns:
        Summary fields, the source that produced them and a text rendering
    """
    try:
        source, summary = await resolver.resolve_with_source(timeframe)
    except InvalidTimeframeError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception:
        logger.exception("Error getting health summary")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=SUMMARY_ERROR_DETAIL,
        )

    return {
        "timeframe": timeframe,
        "source": source,
        "summary": summary.model_dump(by_alias=True),
        "text": format_summary(summary, timeframe),
    }


@router.get("/workouts")
async def get_workout_details(
    limit: int = Query(default=5, ge=1, description="Number of recent workouts to retrieve"),
):
    """Get detailed information about recent workouts."""
    workouts = copy.deepcopy(MOCK_WORKOUTS[:limit])
    return {"workouts": workouts, "text": format_workouts(workouts)}


@router.get("/heart-rate-zones")
async def get_heart_rate_zones(
    day: Optional[date] = Query(default=None, alias="date", description="Date in YYYY-MM-DD format (default: today)"),
):
    """Get heart rate zone analysis for a specific date."""
    target = (day or local_now().date()).isoformat()
    zones = {"date": target, **copy.deepcopy(MOCK_HEART_RATE_ZONES)}
    return {"zones": zones, "text": format_heart_rate_zones(zones)}
