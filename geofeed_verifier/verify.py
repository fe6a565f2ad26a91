# geofeed_verifier/verify.py
"""
The verification pipeline.

Each record goes Parse -> Normalize -> Lookup -> Diff -> Aggregate, one
at a time and in file order. The first error of any kind stops the run;
there is no partial report.
"""
from __future__ import annotations

import dataclasses
from contextlib import ExitStack
from typing import Iterable, Optional

from geofeed_verifier.config import VerifierConfig
from geofeed_verifier.datasources.geofeed_csv import GeofeedCsvSource
from geofeed_verifier.datasources.mmdb import AsnLookupPort, GeoLookupPort, MmdbAsnLookup, MmdbGeoLookup
from geofeed_verifier.models import CorrectionRecord, VerificationReport
from geofeed_verifier.processing.diff import DiffEngine
from geofeed_verifier.processing.normalize import normalize_network
from geofeed_verifier.processing.stats import AggregationCollector
from geofeed_verifier.utils.logging import get_logger

log = get_logger(__name__)


def process_geofeed(
        records: Iterable[CorrectionRecord],
        lookup: GeoLookupPort,
        asn_lookup: Optional[AsnLookupPort] = None,
        lax_mode: bool = False,
) -> VerificationReport:
    """
    Verify parsed correction records against a lookup source.

    Parameters
    ----------
    records : iterable of CorrectionRecord
        Raw records as produced by the geofeed parser.
    lookup : GeoLookupPort
        The authoritative location source.
    asn_lookup : AsnLookupPort, optional
        When given, discrepancies are also counted per ASN.
    lax_mode : bool
        Accept bare region codes ("NY") as well as "US-NY".
    """
    engine = DiffEngine(lax_mode=lax_mode)
    collector = AggregationCollector()
    report = VerificationReport(counts=collector.counts)

    for record in records:
        network = normalize_network(record.network, record.line_number)
        record = dataclasses.replace(record, network=str(network))

        result = lookup.lookup(network)
        outcome = engine.compare(record, result)

        asn = None
        if asn_lookup is not None and outcome.has_difference:
            asn = asn_lookup.lookup_asn(network)

        collector.observe(record, outcome, asn=asn)
        if outcome.has_difference:
            report.diff_lines.append(outcome.report)
            report.outcomes.append((record, outcome))

    report.counts, report.asn_counts = collector.finalize()
    log.info(
        "Processed %d corrections, %d differ from the database",
        report.counts.total,
        report.counts.differences,
    )
    return report


def verify_geofeed(config: VerifierConfig) -> VerificationReport:
    """
    Open the geofeed and databases named by config and verify the file.

    Every handle is released before returning, on success or failure.
    """
    config.validate()

    with ExitStack() as stack:
        source = stack.enter_context(GeofeedCsvSource(config.geofeed_path, asn_column=config.asn_column))
        lookup = stack.enter_context(MmdbGeoLookup(config.db_path))
        asn_lookup = None
        if config.isp_path is not None:
            asn_lookup = stack.enter_context(MmdbAsnLookup(config.isp_path))

        return process_geofeed(source, lookup, asn_lookup=asn_lookup, lax_mode=config.lax_mode)
