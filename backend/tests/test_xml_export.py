"""
Unit tests for the XML export reader.
"""

import threading
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock, patch

import pytest

from conftest import export_document, export_record, export_workout
from healthbridge.core.errors import SourceErrorKind, SourceMalformedError, SourceTimeoutError
from healthbridge.models import RawRecord, RawWorkout, RecordKind, Timeframe
from healthbridge.sources import SourceConfig, XmlExportReader
from healthbridge.sources.xml_export import iter_export_entries, parse_export_datetime

UTC = timezone.utc
TODAY_8AM = datetime(2025, 7, 18, 8, 0, tzinfo=UTC)
THREE_DAYS_AGO = datetime(2025, 7, 15, 9, 0, tzinfo=UTC)
TWENTY_DAYS_AGO = datetime(2025, 6, 28, 9, 0, tzinfo=UTC)


def sample_export():
    return export_document(
        export_record("HKQuantityTypeIdentifierStepCount", 4000, TODAY_8AM),
        export_record("HKQuantityTypeIdentifierStepCount", 2500, TODAY_8AM + timedelta(hours=2)),
        export_record("HKQuantityTypeIdentifierHeartRate", 72, TODAY_8AM),
        export_record("HKQuantityTypeIdentifierHeartRate", 131, TODAY_8AM + timedelta(hours=1)),
        export_record("HKQuantityTypeIdentifierRestingHeartRate", 54, TODAY_8AM),
        export_record(
            "HKCategoryTypeIdentifierSleepAnalysis",
            "HKCategoryValueSleepAnalysisAsleep",
            TODAY_8AM - timedelta(hours=7),
            TODAY_8AM,
        ),
        export_record("HKQuantityTypeIdentifierActiveEnergyBurned", 180.6, TODAY_8AM),
        export_record("HKQuantityTypeIdentifierBodyMass", 75.9, TODAY_8AM),
        export_record("HKQuantityTypeIdentifierStepCount", 9000, THREE_DAYS_AGO),
        export_record("HKQuantityTypeIdentifierStepCount", 7000, TWENTY_DAYS_AGO),
        export_workout(TODAY_8AM),
        export_workout(THREE_DAYS_AGO),
        export_workout(TWENTY_DAYS_AGO),
    )


@pytest.fixture
def reader(source_config, clock):
    return XmlExportReader(source_config, clock=clock)


class TestXmlExportReader:
    """Tests for XmlExportReader."""

    @pytest.mark.asyncio
    async def test_today_summary(self, reader, write_export):
        write_export(sample_export())

        outcome = await reader.read(Timeframe.TODAY)

        assert outcome.ok
        summary = outcome.summary
        assert summary.steps == 6500
        assert (summary.heart_rate.resting, summary.heart_rate.average, summary.heart_rate.max) == (54, 102, 131)
        assert summary.sleep_hours == 7.0
        assert summary.active_calories == 181
        assert summary.workouts == 1

    @pytest.mark.asyncio
    async def test_week_and_month_windows(self, reader, write_export):
        write_export(sample_export())

        week = (await reader.read(Timeframe.WEEK)).summary
        month = (await reader.read(Timeframe.MONTH)).summary

        assert week.steps == 15500
        assert week.workouts == 2
        assert month.steps == 22500
        assert month.workouts == 3

    @pytest.mark.asyncio
    async def test_empty_window_uses_defaults(self, reader, write_export):
        write_export(export_document(
            export_record("HKQuantityTypeIdentifierStepCount", 7000, TWENTY_DAYS_AGO),
        ))

        summary = (await reader.read(Timeframe.TODAY)).summary

        assert summary.steps == 0
        assert summary.heart_rate.average == 80
        assert summary.sleep_hours == 7.5
        assert summary.workouts == 0

    @pytest.mark.asyncio
    async def test_missing_export(self, reader):
        outcome = await reader.read(Timeframe.TODAY)
        assert not outcome.ok
        assert outcome.error_kind is SourceErrorKind.NOT_FOUND

    @pytest.mark.asyncio
    async def test_truncated_export_is_malformed(self, reader, write_export):
        write_export(sample_export()[:300])
        outcome = await reader.read(Timeframe.TODAY)
        assert outcome.error_kind is SourceErrorKind.MALFORMED

    @pytest.mark.asyncio
    async def test_unexpected_root_is_malformed(self, reader, write_export):
        write_export('<?xml version="1.0"?>\n<Workouts><Workout startDate="x"/></Workouts>\n')
        outcome = await reader.read(Timeframe.TODAY)
        assert outcome.error_kind is SourceErrorKind.MALFORMED

    @pytest.mark.asyncio
    async def test_oversized_export_is_never_parsed(self, tmp_path, clock, write_export):
        config = SourceConfig(
            health_export_dir=tmp_path / "export",
            live_sync_path=tmp_path / "live_sync.json",
            max_export_bytes=100,
        )
        write_export(sample_export())
        reader = XmlExportReader(config, clock=clock)

        with patch("healthbridge.sources.xml_export.iter_export_entries") as mock_iter, \
                patch("healthbridge.sources.xml_export.ET.iterparse") as mock_iterparse:
            outcome = await reader.read(Timeframe.TODAY)

        assert outcome.error_kind is SourceErrorKind.TOO_LARGE
        mock_iter.assert_not_called()
        mock_iterparse.assert_not_called()

    @pytest.mark.asyncio
    async def test_slow_parse_times_out(self, tmp_path, clock, write_export):
        config = SourceConfig(
            health_export_dir=tmp_path / "export",
            live_sync_path=tmp_path / "live_sync.json",
            parse_timeout_seconds=0.05,
        )
        write_export(sample_export())
        reader = XmlExportReader(config, clock=clock)

        release = threading.Event()

        def slow_parse(timeframe, now):
            release.wait(timeout=5)
            return MagicMock()

        try:
            with patch.object(reader, "parse", side_effect=slow_parse):
                outcome = await reader.read(Timeframe.TODAY)
        finally:
            release.set()

        assert outcome.error_kind is SourceErrorKind.TIMEOUT

    @pytest.mark.asyncio
    async def test_finds_and_caches_zipped_layout(self, reader, source_config):
        nested = source_config.health_export_dir / "apple_health_export"
        nested.mkdir(parents=True)
        (nested / "export.xml").write_text(sample_export(), encoding="utf-8")

        assert reader.find_export() == nested / "export.xml"
        assert reader._export_file == nested / "export.xml"

        outcome = await reader.read(Timeframe.TODAY)
        assert outcome.ok
        assert outcome.summary.steps == 6500

    @pytest.mark.asyncio
    async def test_invalid_entries_are_skipped(self, reader, write_export):
        write_export(export_document(
            export_record("HKQuantityTypeIdentifierStepCount", "lots", TODAY_8AM),
            export_record("HKQuantityTypeIdentifierStepCount", 300, TODAY_8AM),
            '  <Record type="HKQuantityTypeIdentifierStepCount" value="50" startDate="yesterday" endDate="today"/>',
        ))

        outcome = await reader.read(Timeframe.TODAY)

        assert outcome.ok
        assert outcome.summary.steps == 300

    @pytest.mark.asyncio
    async def test_non_finite_values_are_skipped(self, reader, write_export):
        write_export(export_document(
            export_record("HKQuantityTypeIdentifierStepCount", "NaN", TODAY_8AM),
            export_record("HKQuantityTypeIdentifierStepCount", 300, TODAY_8AM),
            export_record("HKQuantityTypeIdentifierHeartRate", "inf", TODAY_8AM),
            export_record("HKQuantityTypeIdentifierActiveEnergyBurned", "1e400", TODAY_8AM),
        ))

        outcome = await reader.read(Timeframe.TODAY)

        assert outcome.ok
        assert outcome.summary.steps == 300
        assert outcome.summary.heart_rate.average == 80
        assert outcome.summary.active_calories == 0

    @pytest.mark.asyncio
    async def test_overflowing_total_is_malformed(self, reader, write_export):
        write_export(export_document(
            export_record("HKQuantityTypeIdentifierStepCount", "1e308", TODAY_8AM),
            export_record("HKQuantityTypeIdentifierStepCount", "1e308", TODAY_8AM),
        ))

        outcome = await reader.read(Timeframe.TODAY)

        assert outcome.error_kind is SourceErrorKind.MALFORMED

    @pytest.mark.asyncio
    async def test_inaccessible_export_dir_is_unavailable(self, reader):
        with patch("pathlib.Path.is_file", side_effect=PermissionError("denied")):
            outcome = await reader.read(Timeframe.TODAY)

        assert outcome.error_kind is SourceErrorKind.UNAVAILABLE


class TestIterExportEntries:
    """Tests for the streaming parser."""

    def test_yields_top_level_entries_only(self, write_export):
        path = write_export(sample_export())
        entries = list(iter_export_entries(path))

        records = [e for e in entries if isinstance(e, RawRecord)]
        workouts = [e for e in entries if isinstance(e, RawWorkout)]
        assert len(records) == 10
        assert len(workouts) == 3
        assert workouts[0].activity_type == "HKWorkoutActivityTypeRunning"
        assert workouts[0].total_energy_burned == 320.0

    def test_unknown_types_map_to_other(self, write_export):
        path = write_export(export_document(
            export_record("HKQuantityTypeIdentifierBodyMass", 75.9, TODAY_8AM),
        ))
        (record,) = list(iter_export_entries(path))
        assert record.kind is RecordKind.OTHER

    def test_sleep_category_value_becomes_zero(self, write_export):
        path = write_export(export_document(
            export_record(
                "HKCategoryTypeIdentifierSleepAnalysis",
                "HKCategoryValueSleepAnalysisInBed",
                TODAY_8AM - timedelta(hours=1),
                TODAY_8AM,
            ),
        ))
        (record,) = list(iter_export_entries(path))
        assert record.kind is RecordKind.SLEEP_ANALYSIS
        assert record.value == 0.0
        assert record.duration == timedelta(hours=1)

    def test_past_deadline_raises_timeout(self, write_export):
        path = write_export(sample_export())
        with pytest.raises(SourceTimeoutError):
            list(iter_export_entries(path, deadline=0))

    def test_syntax_error_raises_malformed(self, write_export):
        path = write_export("<HealthData><Record></HealthData>")
        with pytest.raises(SourceMalformedError):
            list(iter_export_entries(path))


class TestParseExportDatetime:
    """Tests for parse_export_datetime."""

    def test_apple_format(self):
        parsed = parse_export_datetime("2025-07-18 08:00:00 -0700")
        assert parsed == datetime(2025, 7, 18, 15, 0, tzinfo=UTC)

    def test_iso_with_z(self):
        assert parse_export_datetime("2025-07-18T08:00:00Z") == TODAY_8AM

    def test_naive_is_made_aware(self):
        assert parse_export_datetime("2025-07-18 08:00:00").tzinfo is not None

    def test_missing(self):
        with pytest.raises(ValueError):
            parse_export_datetime(None)
