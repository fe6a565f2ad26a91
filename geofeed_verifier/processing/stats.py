# geofeed_verifier/processing/stats.py
from __future__ import annotations

from collections import Counter
from typing import List, Optional, Tuple

from geofeed_verifier.models import AggregateCounts, CorrectionRecord, DiffOutcome
from geofeed_verifier.utils.logging import get_logger

log = get_logger(__name__)


class AggregationCollector:
    """
    Running totals for one verification run.

    Every observed record counts toward ``total``. Only discrepancies
    count toward ``differences`` and, when an ASN is known, toward that
    ASN's bucket; agreeing records never appear in the ASN mapping.
    """

    def __init__(self) -> None:
        self.counts = AggregateCounts()
        self.asn_counts: Counter = Counter()

    def observe(
            self,
            record: CorrectionRecord,
            outcome: DiffOutcome,
            asn: Optional[int] = None,
    ) -> None:
        self.counts.total += 1
        if not outcome.has_difference:
            return
        self.counts.differences += 1
        log.debug("Line %d (%s) differs; ASN %s", record.line_number, record.network, asn)
        if asn:
            self.asn_counts[asn] += 1

    def finalize(self) -> Tuple[AggregateCounts, List[Tuple[int, int]]]:
        """Return the counts and (asn, count) pairs, largest count first."""
        ranked = sorted(self.asn_counts.items(), key=lambda kv: (-kv[1], kv[0]))
        return AggregateCounts(self.counts.total, self.counts.differences), ranked
