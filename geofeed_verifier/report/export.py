# geofeed_verifier/report/export.py

from __future__ import annotations
from pathlib import Path
from typing import Union

import pandas as pd

from geofeed_verifier.models import VerificationReport
from geofeed_verifier.utils.logging import get_logger

log = get_logger(__name__)


PathLike = Union[str, Path]

CSV_COLUMNS = [
    "network",
    "line",
    "current_country",
    "suggested_country",
    "current_region",
    "suggested_region",
    "current_city",
    "suggested_city",
    "differing_fields",
    "feed_asn",
    "current_asn",
]


def summary_line(report: VerificationReport) -> str:
    return (
        f"Out of {report.counts.total} potential corrections, "
        f"{report.counts.differences} may be different than our current mappings"
    )


def render_text(report: VerificationReport) -> str:
    """
    Render the human-readable report printed to stdout.

    Discrepancy blocks first (blank-line separated), then the summary,
    then one line per ASN with at least one discrepancy.
    """
    parts = []
    if report.diff_lines:
        parts.append("\n\n".join(report.diff_lines))
    parts.append(summary_line(report))

    text = "\n\n".join(parts) + "\n"
    if report.asn_counts:
        text += "\n" + "".join(f"ASN: {asn}, count: {count}\n" for asn, count in report.asn_counts)
    return text


def report_to_dataframe(report: VerificationReport) -> pd.DataFrame:
    """One row per discrepant correction, in file order."""
    rows = []
    for record, outcome in report.outcomes:
        rows.append({
            "network": outcome.network,
            "line": record.line_number,
            "current_country": outcome.current["country"],
            "suggested_country": outcome.suggested["country"],
            "current_region": outcome.current["region"],
            "suggested_region": outcome.suggested["region"],
            "current_city": outcome.current["city"],
            "suggested_city": outcome.suggested["city"],
            "differing_fields": ";".join(f.name for f in outcome.fields),
            "feed_asn": record.asn,
            "current_asn": outcome.current_asn,
        })

    df = pd.DataFrame(rows, columns=CSV_COLUMNS)
    for col in ("feed_asn", "current_asn"):
        df[col] = df[col].astype("Int64")
    return df


def save_csv(report: VerificationReport, path: PathLike) -> None:
    """
    Write every discrepancy to a CSV file.

    Parameters
    ----------
    report : VerificationReport
        Result of a completed run.
    path : str | Path
        Output path; parent directories are created.
    """
    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)

    df = report_to_dataframe(report)
    df.to_csv(out_path, index=False)
    log.info("Wrote %d discrepancies to %s", len(df), out_path)
