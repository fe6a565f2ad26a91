"""Tests for the end-to-end verification pipeline."""

import pytest

from conftest import StaticAsnLookup, StaticLookup
from geofeed_verifier import verify as verify_module
from geofeed_verifier.config import VerifierConfig
from geofeed_verifier.datasources.geofeed_csv import iter_records
from geofeed_verifier.errors import (
    ConfigurationError,
    InvalidNetworkError,
    LookupMissError,
    MalformedRecordError,
)
from geofeed_verifier.verify import process_geofeed, verify_geofeed

LA_ROW = "192.0.2.0/24,US,US-CA,Los Angeles,90001"


class TestProcessGeofeed:
    def test_matching_row_has_no_difference(self, la_result):
        lookup = StaticLookup({"192.0.2.0/24": la_result})
        report = process_geofeed(iter_records([LA_ROW]), lookup)
        assert (report.counts.total, report.counts.differences) == (1, 0)
        assert report.diff_lines == []

    def test_differing_row_is_reported(self, ny_result):
        lookup = StaticLookup({"192.0.2.0/24": ny_result})
        report = process_geofeed(iter_records([LA_ROW]), lookup)
        assert (report.counts.total, report.counts.differences) == (1, 1)
        (block,) = report.diff_lines
        assert "current region: 'US-NY'\t\tsuggested region: 'US-CA'" in block
        assert "current city: 'New York'\t\tsuggested city: 'Los Angeles'" in block

    def test_lax_mode_bare_region(self, la_result):
        row = "192.0.2.0/24,US,CA,Los Angeles,90001"
        lax = process_geofeed(iter_records([row]), StaticLookup({}, default=la_result), lax_mode=True)
        strict = process_geofeed(iter_records([row]), StaticLookup({}, default=la_result), lax_mode=False)
        assert lax.counts.differences == 0
        assert strict.counts.differences == 1

    def test_bare_addresses_are_looked_up_as_hosts(self, la_result):
        lookup = StaticLookup({}, default=la_result)
        rows = ["192.0.2.1,US,US-CA,Los Angeles,90001", "2001:db8::1,US,US-CA,Los Angeles,90001"]
        process_geofeed(iter_records(rows), lookup)
        assert lookup.queries == ["192.0.2.1/32", "2001:db8::1/128"]

    def test_outcomes_carry_canonical_network(self, ny_result):
        lookup = StaticLookup({}, default=ny_result)
        report = process_geofeed(iter_records(["192.0.2.9/24,US,US-CA,Los Angeles,90001"]), lookup)
        record, outcome = report.outcomes[0]
        assert record.network == outcome.network == "192.0.2.0/24"
        assert record.line_number == 1

    def test_asn_attribution(self, la_result, ny_result):
        lookup = StaticLookup({
            "192.0.2.0/24": ny_result,
            "198.51.100.0/24": ny_result,
            "203.0.113.0/24": la_result,
            "192.0.2.128/25": ny_result,
        })
        asn_lookup = StaticAsnLookup({
            "192.0.2.0/24": 64500,
            "198.51.100.0/24": 64501,
            "203.0.113.0/24": 64501,
            "192.0.2.128/25": 64501,
        })
        rows = [
            "192.0.2.0/24,US,US-CA,Los Angeles,90001",
            "198.51.100.0/24,US,US-CA,Los Angeles,90001",
            "203.0.113.0/24,US,US-CA,Los Angeles,90001",
            "192.0.2.128/25,US,US-CA,Los Angeles,90001",
        ]
        report = process_geofeed(iter_records(rows), lookup, asn_lookup=asn_lookup)
        assert (report.counts.total, report.counts.differences) == (4, 3)
        assert report.asn_counts == [(64501, 2), (64500, 1)]

    def test_differences_without_asn_source(self, ny_result):
        report = process_geofeed(iter_records([LA_ROW]), StaticLookup({}, default=ny_result))
        assert report.counts.differences == 1
        assert report.asn_counts == []

    def test_lookup_miss_aborts(self, la_result):
        lookup = StaticLookup({"192.0.2.0/24": la_result})
        rows = [LA_ROW, "198.51.100.0/24,US,US-CA,Los Angeles,90001"]
        with pytest.raises(LookupMissError) as exc:
            process_geofeed(iter_records(rows), lookup)
        assert exc.value.network == "198.51.100.0/24"

    def test_invalid_network_aborts(self, la_result):
        rows = [LA_ROW, "not-a-network,US,US-CA,Los Angeles,90001"]
        with pytest.raises(InvalidNetworkError) as exc:
            process_geofeed(iter_records(rows), StaticLookup({}, default=la_result))
        assert exc.value.line_number == 2

    def test_malformed_row_aborts(self, la_result):
        rows = [LA_ROW, "198.51.100.0/24,US,US-NY,New York"]
        with pytest.raises(MalformedRecordError) as exc:
            process_geofeed(iter_records(rows), StaticLookup({}, default=la_result))
        assert exc.value.line_number == 2

    def test_empty_feed(self):
        report = process_geofeed(iter_records(["# nothing here", ""]), StaticLookup({}))
        assert (report.counts.total, report.counts.differences) == (0, 0)

    def test_differences_match_outcomes(self, la_result, ny_result):
        results = {f"10.0.{i}.0/24": (ny_result if i % 3 else la_result) for i in range(10)}
        rows = [f"10.0.{i}.0/24,US,US-CA,Los Angeles,90001" for i in range(10)]
        report = process_geofeed(iter_records(rows), StaticLookup(results))
        assert report.counts.differences == len(report.outcomes) == len(report.diff_lines)
        assert report.counts.differences <= report.counts.total == 10


class TestVerifyGeofeed:
    @pytest.fixture
    def databases(self, tmp_path):
        db = tmp_path / "City.mmdb"
        isp = tmp_path / "ISP.mmdb"
        db.write_bytes(b"")
        isp.write_bytes(b"")
        return db, isp

    def test_opens_and_releases_resources(self, monkeypatch, write_geofeed, databases, ny_result):
        db, isp = databases
        lookup = StaticLookup({}, default=ny_result)
        asn_lookup = StaticAsnLookup({"192.0.2.0/24": 64500})
        monkeypatch.setattr(verify_module, "MmdbGeoLookup", lambda path: lookup)
        monkeypatch.setattr(verify_module, "MmdbAsnLookup", lambda path: asn_lookup)

        config = VerifierConfig(geofeed_path=write_geofeed(LA_ROW), db_path=db, isp_path=isp)
        report = verify_geofeed(config)

        assert report.counts.differences == 1
        assert report.asn_counts == [(64500, 1)]
        assert lookup.closed and asn_lookup.closed

    def test_releases_resources_on_error(self, monkeypatch, write_geofeed, databases):
        db, _ = databases
        lookup = StaticLookup({})
        monkeypatch.setattr(verify_module, "MmdbGeoLookup", lambda path: lookup)

        config = VerifierConfig(geofeed_path=write_geofeed(LA_ROW), db_path=db)
        with pytest.raises(LookupMissError):
            verify_geofeed(config)
        assert lookup.closed

    def test_configuration_checked_first(self, tmp_path):
        config = VerifierConfig(geofeed_path=tmp_path / "missing.csv", db_path=tmp_path / "missing.mmdb")
        with pytest.raises(ConfigurationError):
            verify_geofeed(config)

    def test_extended_format(self, monkeypatch, write_geofeed, databases, la_result):
        db, _ = databases
        monkeypatch.setattr(verify_module, "MmdbGeoLookup", lambda path: StaticLookup({}, default=la_result))
        config = VerifierConfig(
            geofeed_path=write_geofeed(LA_ROW + ",64500"),
            db_path=db,
            asn_column=True,
        )
        assert verify_geofeed(config).counts.total == 1

