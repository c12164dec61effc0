"""
Health Source Interface - Abstract base class for every data source the resolver can consult.
Sources load a HealthSummary for a timeframe or fail with a SourceError; the
read() wrapper turns either result into a SourceOutcome.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from pydantic import BaseModel, ConfigDict, Field

from ..core.errors import SourceError, SourceOutcome
from ..models import HealthSummary, Timeframe

DEFAULT_EXPORT_DIR = Path.home() / "Documents" / "apple_health_export"
DEFAULT_LIVE_SYNC_PATH = DEFAULT_EXPORT_DIR / "live_sync.json"


class SourceConfig(BaseModel):
    """Locations and guard rails for the data sources, fixed at construction."""
    model_config = ConfigDict(frozen=True)

    health_export_dir: Path = DEFAULT_EXPORT_DIR
    live_sync_path: Path = DEFAULT_LIVE_SYNC_PATH
    max_export_bytes: int = Field(default=100 * 1024 * 1024, gt=0)  # 100 MB
    parse_timeout_seconds: float = Field(default=10.0, gt=0)
    synthetic_seed_includes_hour: bool = False


class HealthSource(ABC):
    """
    Abstract health data source.
    Implementations include the live-sync snapshot, the XML export and the synthetic generator.
    """

    name: str = "source"

    @abstractmethod
    async def load(self, timeframe: Timeframe) -> HealthSummary:
        """
        Load a complete summary for the timeframe.

        Args:
            timeframe: Requested timeframe

        Returns:
            HealthSummary: Complete summary

        Raises:
            SourceError: When the source is absent, broken or over its limits
        """
        pass

    async def read(self, timeframe: Timeframe) -> SourceOutcome:
        """
        Load a summary and wrap the result in a SourceOutcome.

        Args:
            timeframe: Requested timeframe

        Returns:
            SourceOutcome: Success with the summary, or failure with the error kind
        """
        try:
            summary = await self.load(timeframe)
        except SourceError as e:
            return SourceOutcome.failure(self.name, e)
        return SourceOutcome.success(self.name, summary)
