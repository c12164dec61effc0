"""
Apple Health XML export reader.

Streams export.xml with ElementTree.iterparse so only one entry is held in
memory at a time. Two guard rails protect against unbounded exports:
- a size ceiling checked with stat() before the file is opened
- a parse deadline checked after every element, backed by asyncio.wait_for
"""

import asyncio
import logging
import math
import time
import xml.etree.ElementTree as ET
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Union
from pydantic import ValidationError

from ..core.errors import (
    SourceMalformedError,
    SourceNotFoundError,
    SourceTimeoutError,
    SourceTooLargeError,
    SourceUnavailableError,
)
from ..core.extractor import extract_metrics
from ..core.time_window import resolve_time_window
from ..models import (
    HealthSummary,
    RawRecord,
    RawWorkout,
    RecordKind,
    Timeframe,
    as_aware,
    local_now,
    record_kind_for,
)
from .base import HealthSource, SourceConfig

logger = logging.getLogger(__name__)

EXPORT_FILENAME = "export.xml"
ROOT_TAG = "HealthData"
EXPORT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S %z"

# Kinds whose value attribute is a category label rather than a number
_CATEGORY_KINDS = {RecordKind.SLEEP_ANALYSIS, RecordKind.OTHER}


def parse_export_datetime(text: Optional[str]) -> datetime:
    """
    Parse an export timestamp such as "2025-07-18 08:00:00 -0700".

    ISO-8601 strings are accepted as well; naive values are read as local time.

    Raises:
        ValueError: If the text is missing or unparseable
    """
    if not text:
        raise ValueError("missing timestamp")
    try:
        return datetime.strptime(text, EXPORT_DATE_FORMAT)
    except ValueError:
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        return as_aware(datetime.fromisoformat(text))


def _parse_float(text: Optional[str]) -> Optional[float]:
    if text is None:
        return None
    try:
        value = float(text)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def _record_from_attrs(attrs: dict) -> RawRecord:
    kind = record_kind_for(attrs.get("type"))
    value = _parse_float(attrs.get("value"))
    if value is None:
        if kind not in _CATEGORY_KINDS:
            raise ValueError(f"non-numeric value {attrs.get('value')!r} for {attrs.get('type')}")
        value = 0.0
    return RawRecord(
        kind=kind,
        value=value,
        start_time=parse_export_datetime(attrs.get("startDate")),
        end_time=parse_export_datetime(attrs.get("endDate")),
    )


def _workout_from_attrs(attrs: dict) -> RawWorkout:
    end = attrs.get("endDate")
    return RawWorkout(
        start_time=parse_export_datetime(attrs.get("startDate")),
        end_time=parse_export_datetime(end) if end else None,
        activity_type=attrs.get("workoutActivityType"),
        total_distance=_parse_float(attrs.get("totalDistance")),
        total_energy_burned=_parse_float(attrs.get("totalEnergyBurned")),
    )


def iter_export_entries(
    path: Path,
    deadline: Optional[float] = None,
) -> Iterator[Union[RawRecord, RawWorkout]]:
    """
    Stream Record and Workout entries that sit directly under the HealthData root.

    Entries with unparseable timestamps or values are skipped and counted.

    Args:
        path: Path to export.xml
        deadline: time.monotonic() value after which parsing is abandoned

    Raises:
        SourceMalformedError: Invalid XML or an unexpected root element
        SourceTimeoutError: The deadline passed mid-parse
    """
    depth = 0
    root = None
    skipped = 0
    try:
        for event, elem in ET.iterparse(str(path), events=("start", "end")):
            if event == "start":
                if root is None:
                    if elem.tag != ROOT_TAG:
                        raise SourceMalformedError(
                            f"Unexpected root element <{elem.tag}>, expected <{ROOT_TAG}>"
                        )
                    root = elem
                depth += 1
                continue

            depth -= 1
            if depth != 1:
                continue

            if deadline is not None and time.monotonic() > deadline:
                raise SourceTimeoutError(f"Parsing {path} exceeded its time budget")

            try:
                if elem.tag == "Record":
                    yield _record_from_attrs(elem.attrib)
                elif elem.tag == "Workout":
                    yield _workout_from_attrs(elem.attrib)
            except ValueError as e:
                skipped += 1
                logger.debug(f"Skipping export entry <{elem.tag}>: {e}")

            elem.clear()
            root.clear()
    except ET.ParseError as e:
        raise SourceMalformedError(f"Export is not well-formed XML: {e}") from e

    if root is None:
        raise SourceMalformedError(f"Export {path} is empty")
    if skipped:
        logger.warning(f"Skipped {skipped} invalid export entr{'y' if skipped == 1 else 'ies'}")


class XmlExportReader(HealthSource):
    """Reads summaries from an Apple Health bulk export directory."""

    name = "xml_export"

    def __init__(
        self,
        config: SourceConfig,
        clock: Callable[[], datetime] = local_now,
    ):
        """
        Initialize the reader.

        Args:
            config: Source locations and guard rails
            clock: Returns the current moment; injectable for tests
        """
        self.export_dir = Path(config.health_export_dir).expanduser()
        self.max_bytes = config.max_export_bytes
        self.timeout = config.parse_timeout_seconds
        self._clock = clock
        self._export_file: Optional[Path] = None

    def _candidates(self) -> List[Path]:
        # The iOS share sheet zips the export as apple_health_export/export.xml
        return [
            self.export_dir / EXPORT_FILENAME,
            self.export_dir / "apple_health_export" / EXPORT_FILENAME,
        ]

    def find_export(self) -> Path:
        """
        Locate export.xml, caching the location after the first hit.

        Raises:
            SourceNotFoundError: No export under the configured directory
            SourceUnavailableError: The directory could not be searched
        """
        try:
            if self._export_file is not None and self._export_file.is_file():
                return self._export_file

            for candidate in self._candidates():
                if candidate.is_file():
                    self._export_file = candidate
                    return candidate
        except OSError as e:
            raise SourceUnavailableError(f"Cannot access {self.export_dir}: {e}") from e

        raise SourceNotFoundError(f"{EXPORT_FILENAME} not found under {self.export_dir}")

    def check_size(self, path: Path) -> int:
        """
        Reject oversized exports before anything is read.

        Raises:
            SourceTooLargeError: File is above the configured ceiling
            SourceUnavailableError: File could not be stat'ed
        """
        try:
            size = path.stat().st_size
        except OSError as e:
            raise SourceUnavailableError(f"Cannot stat {path}: {e}") from e
        if size > self.max_bytes:
            raise SourceTooLargeError(
                f"{path} is {size} bytes, above the {self.max_bytes} byte limit"
            )
        return size

    def parse(self, timeframe: Timeframe, now: datetime) -> HealthSummary:
        """
        Parse the export synchronously and summarize the timeframe.

        Args:
            timeframe: Requested timeframe
            now: Current moment used to build the time window

        Returns:
            HealthSummary for the window
        """
        path = self.find_export()
        size = self.check_size(path)
        window = resolve_time_window(timeframe, now)
        deadline = time.monotonic() + self.timeout
        logger.info(
            f"Parsing {path} ({size} bytes) for {window.start.isoformat()} - {window.end.isoformat()}"
        )

        records: List[RawRecord] = []
        workouts: List[RawWorkout] = []
        try:
            for entry in iter_export_entries(path, deadline):
                if not window.contains(entry.start_time):
                    continue
                if isinstance(entry, RawWorkout):
                    workouts.append(entry)
                elif entry.kind is not RecordKind.OTHER:
                    records.append(entry)
        except OSError as e:
            raise SourceUnavailableError(f"Cannot read {path}: {e}") from e

        logger.info(f"Found {len(records)} health records and {len(workouts)} workouts in window")

        try:
            return extract_metrics(records, workouts)
        except (ValidationError, ValueError, OverflowError) as e:
            raise SourceMalformedError(f"Export values out of range: {e}") from e

    async def load(self, timeframe: Timeframe) -> HealthSummary:
        """Parse in a worker thread; a result arriving after the timeout is discarded."""
        now = self._clock()
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(self.parse, timeframe, now),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise SourceTimeoutError(
                f"Parsing export exceeded {self.timeout:.1f}s"
            ) from e
