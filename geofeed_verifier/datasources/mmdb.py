# geofeed_verifier/datasources/mmdb.py
"""
Lookup capabilities backed by MaxMind databases.

The pipeline only sees the two protocols below. ``MmdbGeoLookup`` and
``MmdbAsnLookup`` adapt ``geoip2.database.Reader`` to them; tests use
plain in-memory doubles instead.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Protocol

import geoip2.database
import geoip2.errors
import maxminddb

from geofeed_verifier.errors import ConfigurationError, InvalidNetworkError, LookupMissError
from geofeed_verifier.models import LookupResult
from geofeed_verifier.processing.normalize import Network
from geofeed_verifier.utils.logging import get_logger

log = get_logger(__name__)

DEFAULT_CITY_DB = Path("/usr/local/share/GeoIP/GeoIP2-City.mmdb")


class GeoLookupPort(Protocol):
    def lookup(self, network: Network) -> LookupResult:
        """Return the authoritative record or raise LookupMissError."""
        ...


class AsnLookupPort(Protocol):
    def lookup_asn(self, network: Network) -> Optional[int]:
        """Return the autonomous system number, or None when unknown."""
        ...


def _open_reader(path: Path, label: str) -> Any:
    try:
        return geoip2.database.Reader(str(path))
    except (OSError, maxminddb.InvalidDatabaseError) as e:
        raise ConfigurationError(f"unable to open {label} database {path}: {e}") from e


class _MmdbReaderMixin:
    _reader: Any
    path: Path

    @property
    def database_type(self) -> str:
        return self._reader.metadata().database_type

    def close(self) -> None:
        if self._reader is not None:
            self._reader.close()
            self._reader = None

    def __exit__(self, *exc_info) -> None:
        self.close()


class MmdbGeoLookup(_MmdbReaderMixin):
    """GeoLookupPort over a GeoIP2/GeoLite2 City or Enterprise database."""

    def __init__(self, path: Path = DEFAULT_CITY_DB, reader: Any = None) -> None:
        self.path = Path(path)
        self._reader = reader if reader is not None else _open_reader(self.path, "City")

        db_type = self.database_type
        if "Enterprise" in db_type:
            self._query = self._reader.enterprise
        elif "City" in db_type:
            self._query = self._reader.city
        else:
            self.close()
            raise ConfigurationError(
                f"{self.path} is a {db_type} database; a City or Enterprise database is required"
            )
        log.info("Using %s database %s", db_type, self.path)

    def __enter__(self) -> "MmdbGeoLookup":
        return self

    def lookup(self, network: Network) -> LookupResult:
        ip = str(network.network_address)
        try:
            record = self._query(ip)
        except geoip2.errors.AddressNotFoundError as e:
            raise LookupMissError(str(network)) from e
        except ValueError as e:
            raise InvalidNetworkError(str(network)) from e

        subdivision = ""
        if record.subdivisions:
            subdivision = record.subdivisions[0].iso_code or ""

        result = LookupResult(
            country_code=record.country.iso_code or "",
            region_code=subdivision,
            city_name=record.city.names.get("en", ""),
            asn=getattr(record.traits, "autonomous_system_number", None),
        )
        log.debug("Lookup %s -> %s", network, result)
        return result


class MmdbAsnLookup(_MmdbReaderMixin):
    """AsnLookupPort over a GeoIP2-ISP or GeoLite2/GeoIP2-ASN database."""

    def __init__(self, path: Path, reader: Any = None) -> None:
        self.path = Path(path)
        self._reader = reader if reader is not None else _open_reader(self.path, "ISP")

        db_type = self.database_type
        if "ISP" in db_type:
            self._query = self._reader.isp
        elif "ASN" in db_type:
            self._query = self._reader.asn
        else:
            self.close()
            raise ConfigurationError(
                f"{self.path} is a {db_type} database; an ISP or ASN database is required"
            )
        log.info("Using %s database %s for ASN attribution", db_type, self.path)

    def __enter__(self) -> "MmdbAsnLookup":
        return self

    def lookup_asn(self, network: Network) -> Optional[int]:
        try:
            record = self._query(str(network.network_address))
        except geoip2.errors.AddressNotFoundError:
            log.debug("No ASN data for %s", network)
            return None
        except ValueError as e:
            raise InvalidNetworkError(str(network)) from e
        return record.autonomous_system_number or None
