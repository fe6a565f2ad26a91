"""Error taxonomy for a verification run.

Every failure inside the pipeline is one of these. None of them is
recovered from: the first one raised ends the run without a report.
"""
from __future__ import annotations

from typing import Optional


class GeofeedVerifierError(Exception):
    """Base class for all verifier errors."""


class ConfigurationError(GeofeedVerifierError):
    """Required inputs are missing, unreadable or of the wrong kind."""


class MalformedRecordError(GeofeedVerifierError):
    def __init__(self, line_number: int, line: str, reason: str) -> None:
        self.line_number = line_number
        self.line = line
        self.reason = reason
        super().__init__(f"line {line_number}: {reason}: {line!r}")


class InvalidNetworkError(GeofeedVerifierError):
    def __init__(self, value: str, line_number: Optional[int] = None) -> None:
        self.value = value
        self.line_number = line_number
        where = f"line {line_number}: " if line_number else ""
        super().__init__(f"{where}unable to parse network {value!r}")


class LookupMissError(GeofeedVerifierError):
    def __init__(self, network: str) -> None:
        self.network = network
        super().__init__(f"no record found for {network}")
