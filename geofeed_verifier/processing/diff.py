# geofeed_verifier/processing/diff.py
from __future__ import annotations

from typing import Dict, Tuple

from geofeed_verifier.models import CorrectionRecord, DiffOutcome, FieldDiff, LookupResult
from geofeed_verifier.processing.normalize import authoritative_region, same_code
from geofeed_verifier.utils.logging import get_logger

log = get_logger(__name__)

# Report order; also the order FieldDiff entries are produced in.
COMPARED_FIELDS: Tuple[str, ...] = ("country", "region", "city")


class DiffEngine:
    """
    Compare a correction against the database's current mapping.

    Country, region and city are compared case-insensitively. A
    database record with no English city name compares as "", so any
    correction that names a city counts as a discrepancy.
    """

    def __init__(self, lax_mode: bool = False) -> None:
        self.lax_mode = lax_mode

    def compare(self, record: CorrectionRecord, result: LookupResult) -> DiffOutcome:
        current: Dict[str, str] = {
            "country": result.country_code,
            "region": authoritative_region(
                result.country_code,
                result.region_code,
                record.region_code,
                self.lax_mode,
            ),
            "city": result.city_name,
        }
        suggested: Dict[str, str] = {
            "country": record.country_code,
            "region": record.region_code,
            "city": record.city_name,
        }

        fields = tuple(
            FieldDiff(name, current[name], suggested[name])
            for name in COMPARED_FIELDS
            if not same_code(current[name], suggested[name])
        )
        if not fields:
            return DiffOutcome(
                network=record.network,
                current=current,
                suggested=suggested,
                current_asn=result.asn,
            )

        if not result.city_name and record.city_name:
            log.warning("%s: database has no English city name", record.network)

        return DiffOutcome(
            network=record.network,
            current=current,
            suggested=suggested,
            fields=fields,
            report=render_difference(record.network, current, suggested),
            current_asn=result.asn,
        )


def render_difference(network: str, current: Dict[str, str], suggested: Dict[str, str]) -> str:
    """Render the multi-line discrepancy block for one network."""
    lines = [f"Found a potential improvement: '{network}'"]
    for name in COMPARED_FIELDS:
        lines.append(
            f"\t\tcurrent {name}: '{current[name]}'\t\tsuggested {name}: '{suggested[name]}'"
        )
    return "\n".join(lines)
