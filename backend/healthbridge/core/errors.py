"""
Error taxonomy and tagged source outcomes.

Readers never raise to the resolver; they return a SourceOutcome that either
carries a HealthSummary or the kind of failure that stopped them.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..models import HealthSummary, Timeframe


class InvalidTimeframeError(ValueError):
    """Raised when a request names a timeframe outside today/week/month."""

    def __init__(self, value: object):
        self.value = value
        allowed = ", ".join(t.value for t in Timeframe)
        super().__init__(f"Invalid timeframe: {value!r}. Expected one of: {allowed}")


def parse_timeframe(value: object) -> Timeframe:
    """Validate a timeframe token before any source is touched."""
    if isinstance(value, Timeframe):
        return value
    try:
        return Timeframe(value)
    except ValueError:
        raise InvalidTimeframeError(value) from None


class SourceErrorKind(str, Enum):
    UNAVAILABLE = "unavailable"
    NOT_FOUND = "not_found"
    MALFORMED = "malformed"
    TOO_LARGE = "too_large"
    TIMEOUT = "timeout"


class SourceError(Exception):
    """Base class for failures of a single data source."""
    kind: SourceErrorKind = SourceErrorKind.UNAVAILABLE


class SourceUnavailableError(SourceError):
    kind = SourceErrorKind.UNAVAILABLE


class SourceNotFoundError(SourceError):
    kind = SourceErrorKind.NOT_FOUND


class SourceMalformedError(SourceError):
    kind = SourceErrorKind.MALFORMED


class SourceTooLargeError(SourceError):
    kind = SourceErrorKind.TOO_LARGE


class SourceTimeoutError(SourceError):
    kind = SourceErrorKind.TIMEOUT


@dataclass(frozen=True)
class SourceOutcome:
    """Result of asking one source for a summary."""
    source: str
    summary: Optional[HealthSummary] = None
    error_kind: Optional[SourceErrorKind] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.summary is not None

    @staticmethod
    def success(source: str, summary: HealthSummary) -> "SourceOutcome":
        return SourceOutcome(source=source, summary=summary)

    @staticmethod
    def failure(source: str, error: SourceError) -> "SourceOutcome":
        return SourceOutcome(source=source, error_kind=error.kind, message=str(error))
