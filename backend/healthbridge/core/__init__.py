"""Core module - time windows, metric extraction, error taxonomy and rendering."""

from .errors import (
    InvalidTimeframeError,
    SourceError,
    SourceErrorKind,
    SourceMalformedError,
    SourceNotFoundError,
    SourceOutcome,
    SourceTimeoutError,
    SourceTooLargeError,
    SourceUnavailableError,
    parse_timeframe,
)
from .extractor import extract_metrics
from .time_window import resolve_time_window

__all__ = [
    'InvalidTimeframeError', 'SourceError', 'SourceErrorKind', 'SourceMalformedError',
    'SourceNotFoundError', 'SourceOutcome', 'SourceTimeoutError', 'SourceTooLargeError',
    'SourceUnavailableError', 'parse_timeframe', 'extract_metrics', 'resolve_time_window',
]
