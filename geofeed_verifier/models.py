# geofeed_verifier/models.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True)
class CorrectionRecord:
    network: str                # "a.b.c.d/len" once normalized, raw field before
    country_code: str           # ISO-3166-1 alpha-2
    region_code: str            # "US-NY" or, in lax mode, "NY"
    city_name: str
    postal_code: str            # carried along, never compared
    asn: Optional[int] = None   # only in the 6-column format
    line_number: int = 0


@dataclass(frozen=True)
class LookupResult:
    country_code: str
    region_code: str            # bare subdivision code, e.g. "NY"
    city_name: str              # English name, "" when the database has none
    asn: Optional[int] = None


@dataclass(frozen=True)
class FieldDiff:
    name: str
    current: str
    suggested: str


@dataclass(frozen=True)
class DiffOutcome:
    network: str
    current: Dict[str, str]
    suggested: Dict[str, str]
    fields: Tuple[FieldDiff, ...] = ()
    report: str = ""
    current_asn: Optional[int] = None   # from the City/Enterprise record, informational

    @property
    def has_difference(self) -> bool:
        return bool(self.fields)


@dataclass
class AggregateCounts:
    total: int = 0
    differences: int = 0


@dataclass
class VerificationReport:
    counts: AggregateCounts
    diff_lines: List[str] = field(default_factory=list)
    asn_counts: List[Tuple[int, int]] = field(default_factory=list)
    outcomes: List[Tuple[CorrectionRecord, DiffOutcome]] = field(default_factory=list)
