"""
Shared test fixtures and configuration.
"""

import json
import os
from datetime import datetime, timedelta, timezone

import pytest

# Set test environment variables before importing app modules
os.environ.setdefault("LOG_FILE_ENABLED", "false")
os.environ.setdefault("HEALTH_EXPORT_DIR", "/tmp/healthbridge_test_missing_export")
os.environ.setdefault("LIVE_SYNC_PATH", "/tmp/healthbridge_test_missing_export/live_sync.json")

from healthbridge.sources import SourceConfig  # noqa: E402

FIXED_NOW = datetime(2025, 7, 18, 15, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return FIXED_NOW


@pytest.fixture
def clock(now):
    return lambda: now


@pytest.fixture
def source_config(tmp_path):
    return SourceConfig(
        health_export_dir=tmp_path / "export",
        live_sync_path=tmp_path / "live_sync.json",
        max_export_bytes=1024 * 1024,
        parse_timeout_seconds=5.0,
    )


def export_record(type_id, value, start, end=None):
    """Render one <Record> line in Apple Health export format."""
    end = end or start
    fmt = "%Y-%m-%d %H:%M:%S %z"
    return (
        f'  <Record type="{type_id}" sourceName="Watch" unit="count" value="{value}" '
        f'startDate="{start.strftime(fmt)}" endDate="{end.strftime(fmt)}"/>'
    )


def export_workout(start, end=None, activity="HKWorkoutActivityTypeRunning"):
    end = end or start + timedelta(minutes=30)
    fmt = "%Y-%m-%d %H:%M:%S %z"
    return (
        f'  <Workout workoutActivityType="{activity}" duration="30" totalDistance="4.2" '
        f'totalEnergyBurned="320" startDate="{start.strftime(fmt)}" endDate="{end.strftime(fmt)}">\n'
        f'    <MetadataEntry key="HKIndoorWorkout" value="0"/>\n'
        f'  </Workout>'
    )


def export_document(*entries):
    body = "\n".join(entries)
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<HealthData locale="en_US">\n'
        '  <ExportDate value="2025-07-18 15:00:00 +0000"/>\n'
        f'{body}\n'
        '</HealthData>\n'
    )


@pytest.fixture
def write_export(source_config):
    """Write export.xml into the configured export directory."""
    def _write(content):
        export_dir = source_config.health_export_dir
        export_dir.mkdir(parents=True, exist_ok=True)
        path = export_dir / "export.xml"
        path.write_text(content, encoding="utf-8")
        return path
    return _write


@pytest.fixture
def write_snapshot(source_config):
    """Write the live-sync JSON snapshot."""
    def _write(data):
        path = source_config.live_sync_path
        path.write_text(data if isinstance(data, str) else json.dumps(data), encoding="utf-8")
        return path
    return _write
