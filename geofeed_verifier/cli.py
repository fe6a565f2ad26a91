from __future__ import annotations

import sys
from enum import Enum
from pathlib import Path
from typing import Optional

import typer

from geofeed_verifier import __version__
from geofeed_verifier.config import ENV_PREFIX, VerifierConfig
from geofeed_verifier.datasources.mmdb import DEFAULT_CITY_DB
from geofeed_verifier.errors import ConfigurationError, GeofeedVerifierError
from geofeed_verifier.report.export import render_text, save_csv
from geofeed_verifier.utils.logging import configure_logging, get_logger
from geofeed_verifier.verify import verify_geofeed

app = typer.Typer(
    help="Verify a geofeed bulk-correction file against a MaxMind City database.",
    add_completion=False,
)

log = get_logger(__name__)


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"geofeed-verifier {__version__}")
        raise typer.Exit()


@app.command()
def verify(
        ctx: typer.Context,
        gf: Optional[Path] = typer.Option(
            None,
            "--gf",
            envvar=f"{ENV_PREFIX}GEOFEED",
            help="Path to local geofeed file to verify.",
        ),
        db: Optional[Path] = typer.Option(
            DEFAULT_CITY_DB,
            "--db",
            envvar=f"{ENV_PREFIX}DB",
            help="Path to MMDB file to compare geofeed file against.",
        ),
        isp: Optional[Path] = typer.Option(
            None,
            "--isp",
            envvar=f"{ENV_PREFIX}ISP",
            help="Path to ISP (or ASN) MMDB file; enables per-ASN counts (optional).",
        ),
        lax: bool = typer.Option(
            False,
            "--lax",
            envvar=f"{ENV_PREFIX}LAX",
            help="Enable lax mode: geofeed's region code may be provided without country code prefix.",
        ),
        asn_column: bool = typer.Option(
            False,
            "--asn-column",
            help="Geofeed rows carry a sixth ASN column.",
        ),
        report_csv: Optional[Path] = typer.Option(
            None,
            "--report-csv",
            help="Also write every discrepancy to this CSV file.",
        ),
        log_level: LogLevel = typer.Option(
            LogLevel.WARNING,
            "--log-level",
            help="Logging level for messages on stderr.",
        ),
        version: bool = typer.Option(
            False,
            "--version",
            "-V",
            callback=_version_callback,
            is_eager=True,
            help="Display version and exit.",
        ),
):
    """
    Report which corrections in a geofeed differ from the database.

    Example:

        geofeed-verifier --gf corrections.csv --db GeoIP2-City.mmdb --isp GeoIP2-ISP.mmdb --lax
    """
    configure_logging(log_level.value)

    config = VerifierConfig(
        geofeed_path=gf,
        db_path=db,
        isp_path=isp,
        lax_mode=lax,
        asn_column=asn_column,
    )

    log.info("Verifying %s against %s (lax=%s)", gf, db, lax)

    try:
        report = verify_geofeed(config)
    except ConfigurationError as e:
        typer.echo(ctx.get_usage(), err=True)
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=2)
    except GeofeedVerifierError as e:
        typer.echo(f"unable to process geofeed {gf}: {e}", err=True)
        raise typer.Exit(code=1)

    typer.echo(render_text(report), nl=False)

    if report_csv is not None:
        try:
            save_csv(report, report_csv.expanduser().resolve())
        except OSError as e:
            typer.echo(f"unable to write report {report_csv}: {e}", err=True)
            raise typer.Exit(code=1)


def main() -> None:
    """Entry point for console_scripts."""
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Interrupted by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
