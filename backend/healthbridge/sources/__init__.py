"""Sources module - readers for the live-sync snapshot, the XML export and synthetic data."""

from .base import HealthSource, SourceConfig
from .live_sync import LiveSyncReader
from .xml_export import XmlExportReader
from .synthetic import SyntheticGenerator, derive_seed, generate_synthetic_summary

__all__ = [
    'HealthSource', 'SourceConfig', 'LiveSyncReader', 'XmlExportReader',
    'SyntheticGenerator', 'derive_seed', 'generate_synthetic_summary',
]
