"""
Pytest configuration and fixtures for carrier-rates tests.

The UPS token and rating endpoints are faked with httpx.MockTransport; no
test touches the network.
"""
import json
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, List, Optional, Union

import httpx
import pytest
import pytest_asyncio

from carrier_rates.core.config import Settings
from carrier_rates.modules.shipping.carriers.base import Address, Parcel, RateRequest

TOKEN_URL = "https://wwwcie.ups.com/security/v1/oauth/token"
RATING_URL = "https://wwwcie.ups.com/api/rating/v2403/Rate"

Scripted = Union[httpx.Response, Exception, Callable[[httpx.Request], Any]]


def make_settings(**overrides) -> Settings:
    values = {
        "ENVIRONMENT": "test",
        "UPS_CLIENT_ID": "test-client-id",
        "UPS_CLIENT_SECRET": "test-client-secret",
        "UPS_OAUTH_TOKEN_URL": TOKEN_URL,
        "UPS_RATING_URL": RATING_URL,
        "UPS_HTTP_TIMEOUT_MS": 1000,
        "UPS_TOKEN_SKEW_SECONDS": 30,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def rated_shipment(
    code: str = "03",
    description: str = "",
    amount: str = "12.34",
    currency: str = "USD",
    arrival: Optional[str] = "2026-02-15",
) -> dict:
    shipment = {
        "Service": {"Code": code, "Description": description},
        "TotalCharges": {"CurrencyCode": currency, "MonetaryValue": amount},
    }
    if arrival:
        shipment["TimeInTransit"] = {"EstimatedArrival": {"Date": arrival}}
    return shipment


def rating_body(rated: Any) -> dict:
    return {"RateResponse": {"Response": {"ResponseStatus": {"Code": "1"}}, "RatedShipment": rated}}


class FakeClock:
    """Deterministic clock for token expiry tests."""

    def __init__(self, start: Optional[datetime] = None):
        self.now = start or datetime(2026, 2, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class FakeUPS:
    """
    Scripted UPS endpoints.

    Queue responses (httpx.Response, an exception to raise, or a callable
    taking the request) on token_script / rating_script. When a queue is
    empty the endpoint answers with a valid default.
    """

    def __init__(self, expires_in: Any = 3600):
        self.expires_in = expires_in
        self.token_script: List[Scripted] = []
        self.rating_script: List[Scripted] = []
        self.token_requests: List[httpx.Request] = []
        self.rating_requests: List[httpx.Request] = []

    def _play(self, script: List[Scripted], request: httpx.Request, default: Callable[[], httpx.Response]):
        if not script:
            return default()
        step = script.pop(0)
        if isinstance(step, Exception):
            raise step
        if callable(step):
            return step(request)
        return step

    def _default_token(self) -> httpx.Response:
        return httpx.Response(200, json={
            "access_token": f"token-{len(self.token_requests)}",
            "token_type": "Bearer",
            "expires_in": self.expires_in,
        })

    def _default_rating(self) -> httpx.Response:
        return httpx.Response(200, json=rating_body([rated_shipment()]))

    def handler(self, request: httpx.Request):
        url = str(request.url)
        if url == TOKEN_URL:
            self.token_requests.append(request)
            return self._play(self.token_script, request, self._default_token)
        if url == RATING_URL:
            self.rating_requests.append(request)
            return self._play(self.rating_script, request, self._default_rating)
        return httpx.Response(404, text="unknown endpoint")

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    def rating_json(self, index: int = 0) -> dict:
        return json.loads(self.rating_requests[index].content)

    def bearer(self, index: int) -> str:
        return self.rating_requests[index].headers["Authorization"]


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_ups() -> FakeUPS:
    return FakeUPS()


@pytest_asyncio.fixture
async def http_client(fake_ups):
    client = fake_ups.client()
    yield client
    await client.aclose()


@pytest.fixture
def sample_request() -> RateRequest:
    """One 10x20x30 cm, 2 kg parcel from Atlanta to New York."""
    return RateRequest(
        origin=Address(postal_code="30301", country_code="US"),
        destination=Address(postal_code="10001", country_code="US"),
        parcels=[Parcel(length_cm=10, width_cm=20, height_cm=30, weight_kg=2)],
    )
