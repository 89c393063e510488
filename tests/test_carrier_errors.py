"""
Tests for carrier error classification.
"""
import asyncio
import json

import httpx
import pytest

from carrier_rates.core.exceptions import CarrierErrorKind, RatingPayloadError
from carrier_rates.services.carrier_errors import (
    bad_response,
    classify_auth_error,
    classify_rating_error,
)

REQUEST = httpx.Request("POST", "https://wwwcie.ups.com/api/rating/v2403/Rate")


def status_error(status: int, **kwargs) -> httpx.HTTPStatusError:
    response = httpx.Response(status, request=REQUEST, **kwargs)
    return httpx.HTTPStatusError(f"HTTP {status}", request=REQUEST, response=response)


class TestAuthClassification:

    @pytest.mark.parametrize("exc", [
        httpx.ConnectTimeout("connect timed out", request=REQUEST),
        httpx.ReadTimeout("read timed out", request=REQUEST),
        asyncio.TimeoutError(),
    ])
    def test_timeouts(self, exc):
        error = classify_auth_error(exc, "ups")
        assert error.kind is CarrierErrorKind.AUTH_TIMEOUT
        assert error.http_status == 504
        assert error.carrier == "ups"

    def test_http_error_carries_status_and_body(self):
        error = classify_auth_error(status_error(403, json={"error": "invalid_client"}), "ups")

        assert error.kind is CarrierErrorKind.AUTH_FAILED
        assert error.http_status == 502
        assert error.error_details.upstream_status == 403
        assert error.error_details.raw == {"error": "invalid_client"}

    def test_http_error_body_redacted(self):
        error = classify_auth_error(
            status_error(400, json={"access_token": "leaked", "client_secret": "oops"}),
            "ups",
        )
        assert error.error_details.raw == {"access_token": "[REDACTED]", "client_secret": "[REDACTED]"}

    def test_connect_error_is_unexpected(self):
        error = classify_auth_error(httpx.ConnectError("refused", request=REQUEST), "ups")
        assert error.kind is CarrierErrorKind.UNEXPECTED
        assert error.http_status == 502

    def test_non_json_token_body_is_bad_response(self):
        error = classify_auth_error(json.JSONDecodeError("Expecting value", "<html>", 0), "ups")
        assert error.kind is CarrierErrorKind.BAD_RESPONSE


class TestRatingClassification:

    @pytest.mark.parametrize("exc", [
        httpx.ConnectTimeout("connect timed out", request=REQUEST),
        httpx.ReadTimeout("read timed out", request=REQUEST),
        httpx.PoolTimeout("pool timed out", request=REQUEST),
        asyncio.TimeoutError(),
    ])
    def test_timeouts(self, exc):
        error = classify_rating_error(exc, "ups")
        assert error.kind is CarrierErrorKind.RATE_TIMEOUT
        assert error.http_status == 504

    @pytest.mark.parametrize("status", [400, 403, 404, 429])
    def test_4xx(self, status):
        error = classify_rating_error(status_error(status, json={}), "ups")
        assert error.kind is CarrierErrorKind.UPSTREAM_4XX
        assert error.http_status == 502
        assert error.error_details.upstream_status == status

    @pytest.mark.parametrize("status", [500, 502, 503, 504])
    def test_5xx(self, status):
        error = classify_rating_error(status_error(status, text="Service Unavailable"), "ups")
        assert error.kind is CarrierErrorKind.UPSTREAM_5XX
        assert error.http_status == 502
        assert error.error_details.raw == "Service Unavailable"

    def test_ups_error_message_extracted(self):
        body = {"response": {"errors": [{"code": "111210", "message": "The requested service is unavailable"}]}}
        error = classify_rating_error(status_error(400, json=body), "ups")

        assert error.error_details.upstream_message == "The requested service is unavailable"
        assert error.details["upstreamMessage"] == "The requested service is unavailable"

    def test_redirect_status_is_rate_failed(self):
        error = classify_rating_error(status_error(302), "ups")
        assert error.kind is CarrierErrorKind.RATE_FAILED

    def test_connection_error_is_rate_failed(self):
        error = classify_rating_error(httpx.ConnectError("refused", request=REQUEST), "ups")
        assert error.kind is CarrierErrorKind.RATE_FAILED
        assert "ConnectError" in error.error_details.raw

    def test_malformed_body_is_bad_response(self):
        error = classify_rating_error(RatingPayloadError("missing RateResponse"), "ups")
        assert error.kind is CarrierErrorKind.BAD_RESPONSE
        assert error.http_status == 502

    def test_non_httpx_failure_is_unexpected(self):
        error = classify_rating_error(RuntimeError("boom"), "ups")
        assert error.kind is CarrierErrorKind.UNEXPECTED
        assert error.http_status == 502

    def test_debug_context_in_details(self):
        error = classify_rating_error(status_error(500), "ups", debug={"attempt": 2})
        assert error.details["_debug"] == {"attempt": 2}


def test_bad_response_helper():
    error = bad_response("ups", "no envelope", raw={"foo": "bar"})

    assert error.kind is CarrierErrorKind.BAD_RESPONSE
    assert error.to_response_body() == {
        "error": {
            "code": "CARRIER_BAD_RESPONSE",
            "message": "no envelope",
            "details": {"carrier": "ups", "raw": {"foo": "bar"}},
        }
    }
