"""Shared fixtures: in-memory lookup doubles and geofeed file helpers."""

from pathlib import Path
from typing import Dict, Optional

import pytest

from geofeed_verifier.errors import LookupMissError
from geofeed_verifier.models import LookupResult


class StaticLookup:
    """GeoLookupPort double keyed by canonical network string."""

    def __init__(self, results: Dict[str, LookupResult], default: Optional[LookupResult] = None):
        self.results = results
        self.default = default
        self.queries = []
        self.closed = False

    def lookup(self, network):
        self.queries.append(str(network))
        if str(network) in self.results:
            return self.results[str(network)]
        if self.default is not None:
            return self.default
        raise LookupMissError(str(network))

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.closed = True


class StaticAsnLookup:
    """AsnLookupPort double; unknown networks have no ASN."""

    def __init__(self, asns: Dict[str, int]):
        self.asns = asns
        self.closed = False

    def lookup_asn(self, network):
        return self.asns.get(str(network))

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.closed = True


@pytest.fixture
def la_result():
    return LookupResult(country_code="US", region_code="CA", city_name="Los Angeles")


@pytest.fixture
def ny_result():
    return LookupResult(country_code="US", region_code="NY", city_name="New York")


@pytest.fixture
def write_geofeed(tmp_path):
    """Write lines to a geofeed file under tmp_path and return its path."""

    def _write(*lines: str, name: str = "geofeed.csv") -> Path:
        path = tmp_path / name
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return _write
