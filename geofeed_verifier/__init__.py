"""Verify geofeed bulk-correction files against a MaxMind City database."""

__version__ = "2.2.1"
