"""
Source Resolver - Picks the first usable data source for a request.

Order: live-sync snapshot -> XML export -> synthetic data. Each source is
tried at most once per request and the synthetic generator always answers,
so source failures never reach the caller.
"""

import logging
from datetime import datetime
from typing import Callable, Optional, Tuple

from ..models import HealthSummary, Timeframe, local_now
from ..sources import HealthSource, LiveSyncReader, SourceConfig, SyntheticGenerator, XmlExportReader
from .errors import SourceErrorKind, SourceOutcome, parse_timeframe

logger = logging.getLogger(__name__)

# Absence is expected; anything else points at a data-quality problem
_QUIET_FAILURES = {SourceErrorKind.UNAVAILABLE, SourceErrorKind.NOT_FOUND}


class SourceResolver:
    """Resolves a HealthSummary through the fallback chain."""

    def __init__(
        self,
        live_sync: HealthSource,
        xml_export: HealthSource,
        synthetic: SyntheticGenerator,
    ):
        """
        Initialize the resolver.

        Args:
            live_sync: First-choice source
            xml_export: Second-choice source
            synthetic: Terminal fallback
        """
        self.live_sync = live_sync
        self.xml_export = xml_export
        self.synthetic = synthetic

    @classmethod
    def from_config(
        cls,
        config: Optional[SourceConfig] = None,
        clock: Callable[[], datetime] = local_now,
    ) -> "SourceResolver":
        """Build the standard chain from a SourceConfig."""
        config = config or SourceConfig()
        return cls(
            live_sync=LiveSyncReader(config, clock=clock),
            xml_export=XmlExportReader(config, clock=clock),
            synthetic=SyntheticGenerator(config, clock=clock),
        )

    async def resolve(self, timeframe: str) -> HealthSummary:
        """
        Resolve a summary for the timeframe.

        Raises:
            InvalidTimeframeError: Timeframe is not today/week/month
        """
        _, summary = await self.resolve_with_source(timeframe)
        return summary

    async def resolve_with_source(self, timeframe: str) -> Tuple[str, HealthSummary]:
        """
        Resolve a summary and report which source produced it.

        Returns:
            (source name, HealthSummary)

        Raises:
            InvalidTimeframeError: Timeframe is not today/week/month
        """
        timeframe = parse_timeframe(timeframe)

        for source in (self.live_sync, self.xml_export):
            outcome = await source.read(timeframe)
            if outcome.ok:
                logger.info(f"Resolved {timeframe.value} summary from {outcome.source}")
                return outcome.source, outcome.summary
            self._log_failure(outcome)

        logger.info(f"No real data usable, generating synthetic {timeframe.value} summary")
        return self.synthetic.name, self.synthetic.generate(timeframe)

    @staticmethod
    def _log_failure(outcome: SourceOutcome) -> None:
        level = logging.INFO if outcome.error_kind in _QUIET_FAILURES else logging.WARNING
        logger.log(
            level,
            f"Source {outcome.source} failed ({outcome.error_kind.value}): {outcome.message}",
            extra={"extra_fields": {
                "source": outcome.source,
                "error_kind": outcome.error_kind.value,
            }}
        )
