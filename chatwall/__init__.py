"""chatwall: deduplicated multi-column chat overlay for live streams."""

__version__ = "0.1.0"
