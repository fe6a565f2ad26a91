# geofeed_verifier/datasources/geofeed_csv.py
from __future__ import annotations

import csv
from pathlib import Path
from typing import BinaryIO, Iterable, Iterator, List, Optional

from geofeed_verifier.errors import ConfigurationError, MalformedRecordError
from geofeed_verifier.models import CorrectionRecord
from geofeed_verifier.utils.logging import get_logger

log = get_logger(__name__)

COMMENT_PREFIX = "#"
BOM = "\ufeff"
BASE_FIELDS = 5     # network, country, region, city, postal
EXTENDED_FIELDS = 6  # ... plus asn


def is_comment_or_blank(line: str) -> bool:
    s = line.strip()
    return not s or s.startswith(COMMENT_PREFIX)


def parse_geofeed_line(line: str, line_number: int) -> List[str]:
    """Split one geofeed line into fields, trimming leading whitespace."""
    reader = csv.reader([line], skipinitialspace=True)
    try:
        return next(reader, [])
    except csv.Error as e:
        raise MalformedRecordError(line_number, line, str(e)) from e


def _parse_asn(value: str, line_number: int, line: str) -> Optional[int]:
    value = value.strip()
    if not value:
        return None
    if value.upper().startswith("AS"):
        value = value[2:]
    try:
        asn = int(value)
    except ValueError as e:
        raise MalformedRecordError(line_number, line, f"invalid ASN {value!r}") from e
    if asn < 0:
        raise MalformedRecordError(line_number, line, f"invalid ASN {value!r}")
    return asn


def decode_lines(raw_lines: Iterable[bytes]) -> Iterator[str]:
    """
    Decode a geofeed read in binary mode, one line at a time.

    Undecodable bytes raise MalformedRecordError naming the line, and a
    leading UTF-8 BOM is dropped.
    """
    for line_number, raw in enumerate(raw_lines, start=1):
        try:
            line = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedRecordError(
                line_number,
                raw.decode("utf-8", errors="replace").rstrip("\r\n"),
                f"invalid UTF-8 ({e.reason})",
            ) from e
        if line_number == 1 and line.startswith(BOM):
            line = line[len(BOM):]
        yield line


def iter_records(lines: Iterable[str], asn_column: bool = False) -> Iterator[CorrectionRecord]:
    """
    Lazily turn geofeed lines into CorrectionRecord objects, in file order.

    Comment lines and blank lines are skipped. Any row with the wrong
    number of fields raises MalformedRecordError; nothing is skipped
    silently.
    """
    expected = EXTENDED_FIELDS if asn_column else BASE_FIELDS

    for line_number, line in enumerate(lines, start=1):
        line = line.rstrip("\r\n")
        if is_comment_or_blank(line):
            continue

        fields = parse_geofeed_line(line, line_number)
        if len(fields) != expected:
            raise MalformedRecordError(
                line_number,
                line,
                f"expected {expected} fields, found {len(fields)}",
            )

        yield CorrectionRecord(
            network=fields[0].lstrip(),
            country_code=fields[1].lstrip(),
            region_code=fields[2].lstrip(),
            city_name=fields[3].lstrip(),
            postal_code=fields[4].lstrip(),
            asn=_parse_asn(fields[5], line_number, line) if asn_column else None,
            line_number=line_number,
        )


class GeofeedCsvSource:
    """
    A geofeed file on disk.

    Use as a context manager; the file handle is released on exit
    even when iteration stops on an error.
    """

    def __init__(self, path: Path, asn_column: bool = False) -> None:
        self.path = Path(path)
        self.asn_column = asn_column
        self._fh: Optional[BinaryIO] = None

    def __enter__(self) -> "GeofeedCsvSource":
        try:
            self._fh = self.path.open("rb")
        except OSError as e:
            raise ConfigurationError(f"unable to open geofeed {self.path}: {e}") from e
        log.info("Reading geofeed %s (asn_column=%s)", self.path, self.asn_column)
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        if self._fh is not None:
            self._fh.close()
            self._fh = None

    def __iter__(self) -> Iterator[CorrectionRecord]:
        if self._fh is None:
            raise RuntimeError("GeofeedCsvSource must be opened before iterating")
        return iter_records(decode_lines(self._fh), asn_column=self.asn_column)
