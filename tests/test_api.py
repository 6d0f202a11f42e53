"""Tests for the Flask API blueprint with injected catalog and VIES fakes."""
from unittest.mock import MagicMock

import pytest

from conftest import FakeFetcher
from euvat.app import create_app
from euvat.application.rate_catalog import RateCatalog
from euvat.application.vat_number_service import VatNumberService
from euvat.core.errors import MalformedResponse, ServiceUnavailable
from euvat.domain.models import ViesResponse


@pytest.fixture()
def vies():
    vies = MagicMock()
    vies.check_vat.return_value = ViesResponse(
        country_code="NL", vat_number="123456789B01", request_date="2024-01-01+01:00", valid=False,
    )
    return vies


@pytest.fixture()
def client(catalog, vies):
    app = create_app(catalog=catalog, numbers=VatNumberService(vies=vies))
    app.config["TESTING"] = True
    return app.test_client()


def client_for(fetcher, clock):
    app = create_app(catalog=RateCatalog(fetcher, clock=clock), numbers=VatNumberService(vies=MagicMock()))
    return app.test_client()


class TestRates:
    def test_current_standard_rate(self, client):
        resp = client.get("/api/rates/NL")
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["country_code"] == "NL"
        assert data["name"] == "Netherlands"
        assert data["level"] == "standard"
        assert data["as_of"] == "2020-01-01"
        assert data["rate"] == 21

    def test_rate_on_date_and_level(self, client):
        data = client.get("/api/rates/nl?date=2015-06-01&level=reduced").get_json()
        assert data["rate"] == 6
        assert data["as_of"] == "2015-06-01"

    def test_unknown_country(self, client):
        resp = client.get("/api/rates/US")
        assert resp.status_code == 404
        assert "unknown country code" in resp.get_json()["error"]

    def test_unknown_level(self, client):
        resp = client.get("/api/rates/NL?level=parking")
        assert resp.status_code == 404

    def test_no_active_period(self, client):
        resp = client.get("/api/rates/NL?date=1999-01-01")
        assert resp.status_code == 404
        assert "no rate period" in resp.get_json()["error"]

    def test_bad_date(self, client):
        resp = client.get("/api/rates/NL?date=yesterday")
        assert resp.status_code == 400

    def test_periods_sorted(self, client):
        data = client.get("/api/rates/RO/periods").get_json()
        froms = [p["effective_from"] for p in data["periods"]]
        assert froms == ["0001-01-01", "2017-01-01"]
        assert data["periods"][1]["rates"]["super_reduced"] == 5

    def test_all_rates(self, client):
        data = client.get("/api/rates?date=2005-01-01").get_json()
        by_code = {c["country_code"]: c for c in data["countries"]}
        assert by_code["NL"]["rates"] == {"standard": 19}
        assert by_code["RO"]["rates"] == {"standard": 24, "reduced": 9}
        assert data["populated_at"] is not None

    def test_all_rates_country_without_active_period(self, client):
        data = client.get("/api/rates?date=1999-01-01").get_json()
        by_code = {c["country_code"]: c for c in data["countries"]}
        assert by_code["NL"]["rates"] is None


class TestFeedErrors:
    def test_service_unavailable_is_503(self, clock):
        client = client_for(FakeFetcher(errors=[ServiceUnavailable("down")]), clock)
        resp = client.get("/api/rates/NL")
        assert resp.status_code == 503

    def test_malformed_is_502(self, clock):
        client = client_for(FakeFetcher(errors=[MalformedResponse("bad json")]), clock)
        resp = client.get("/api/rates/NL")
        assert resp.status_code == 502

    def test_retry_after_failure_succeeds(self, clock):
        client = client_for(FakeFetcher(errors=[ServiceUnavailable("down")]), clock)
        assert client.get("/api/rates/NL").status_code == 503
        assert client.get("/api/rates/NL").status_code == 200


class TestVatNumbers:
    def test_format_only(self, client, vies):
        data = client.get("/api/vat/NL123456789B01").get_json()
        assert data == {"number": "NL123456789B01", "format_valid": True}
        vies.check_vat.assert_not_called()

    def test_existence(self, client, vies):
        data = client.get("/api/vat/NL123456789B01?check=existence").get_json()
        assert data["format_valid"] is True
        assert data["valid"] is False
        vies.check_vat.assert_called_once()

    def test_vies_down_is_503(self, client, vies):
        vies.check_vat.side_effect = ServiceUnavailable("MS_UNAVAILABLE")
        resp = client.get("/api/vat/NL123456789B01?check=existence")
        assert resp.status_code == 503
