"""HealthBridge - Apple Watch health summaries with source fallback."""

__version__ = "1.0.0"
