"""
Tests for the manual quote script.
"""
import argparse
import importlib.util
import json
from pathlib import Path

import httpx
import pytest

from carrier_rates.modules.shipping.registry import build_carrier_registry

from conftest import make_settings

SCRIPT = Path(__file__).parent.parent / "scripts" / "quote_rates.py"


@pytest.fixture(scope="module")
def quote_rates():
    script_spec = importlib.util.spec_from_file_location("quote_rates", SCRIPT)
    module = importlib.util.module_from_spec(script_spec)
    script_spec.loader.exec_module(module)
    return module


class TestArgumentParsing:

    def test_parse_address(self, quote_rates):
        address = quote_rates.parse_address("30301:us")
        assert address.postal_code == "30301"
        assert address.country_code == "US"

    def test_parse_address_with_colon_in_postal(self, quote_rates):
        assert quote_rates.parse_address("SW1A 1AA:GB").postal_code == "SW1A 1AA"

    @pytest.mark.parametrize("value", ["30301", ":US", "30301:USA"])
    def test_parse_address_rejects(self, quote_rates, value):
        with pytest.raises(argparse.ArgumentTypeError):
            quote_rates.parse_address(value)

    def test_parse_parcel(self, quote_rates):
        parcel = quote_rates.parse_parcel("10x20.5x30:2.25")
        assert (parcel.length_cm, parcel.width_cm, parcel.height_cm, parcel.weight_kg) == (10, 20.5, 30, 2.25)

    @pytest.mark.parametrize("value", ["10x20x30", "10x20:2", "axbxc:1", "10x20x0:1"])
    def test_parse_parcel_rejects(self, quote_rates, value):
        with pytest.raises(argparse.ArgumentTypeError):
            quote_rates.parse_parcel(value)


class TestMain:

    @pytest.fixture
    def wired(self, quote_rates, monkeypatch, fake_ups):
        monkeypatch.setattr(quote_rates, "get_settings", lambda: make_settings())
        monkeypatch.setattr(
            quote_rates,
            "build_carrier_registry",
            lambda settings: build_carrier_registry(settings, http_client=fake_ups.client()),
        )
        return fake_ups

    def test_prints_quotes(self, quote_rates, wired, capsys):
        code = quote_rates.main(["--from", "30301:US", "--to", "10001:US", "--parcel", "10x20x30:2"])

        assert code == 0
        quotes = json.loads(capsys.readouterr().out)
        assert quotes[0]["serviceName"] == "UPS Ground"
        assert quotes[0]["totalCharge"] == {"currency": "USD", "amount": "12.34"}

    def test_prints_error_body(self, quote_rates, wired, capsys):
        wired.rating_script.append(httpx.Response(503, text="Service Unavailable"))
        code = quote_rates.main(["--from", "30301:US", "--to", "10001:US", "--parcel", "10x20x30:2"])

        assert code == 1
        body = json.loads(capsys.readouterr().out)
        assert body["error"]["code"] == "CARRIER_UPSTREAM_5XX"

    def test_unknown_carrier_prints_error(self, quote_rates, wired, capsys):
        code = quote_rates.main([
            "--carrier", "fedex", "--from", "30301:US", "--to", "10001:US", "--parcel", "10x20x30:2",
        ])

        assert code == 1
        body = json.loads(capsys.readouterr().out)
        assert body["error"]["code"] == "CARRIER_NOT_REGISTERED"
        assert body["error"]["details"] == {"carrier": "fedex"}
        assert wired.token_requests == []
