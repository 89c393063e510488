"""
Carrier error classification

Stateless mapping from transport/HTTP outcomes to the closed CarrierError
taxonomy. Callers never see raw httpx exceptions.

| Condition                                  | Kind                  | Status |
|--------------------------------------------|-----------------------|--------|
| timeout on auth call                       | CARRIER_AUTH_TIMEOUT  | 504    |
| non-2xx from auth endpoint                 | CARRIER_AUTH_FAILED   | 502    |
| timeout on rating call                     | CARRIER_RATE_TIMEOUT  | 504    |
| rating body not JSON / missing envelope    | CARRIER_BAD_RESPONSE  | 502    |
| rating HTTP 4xx (401 is retried upstream)  | CARRIER_UPSTREAM_4XX  | 502    |
| rating HTTP 5xx                            | CARRIER_UPSTREAM_5XX  | 502    |
| non-httpx failure                          | CARRIER_UNEXPECTED    | 502    |
| any other rating failure                   | CARRIER_RATE_FAILED   | 502    |
"""
import asyncio
import json
import logging
from typing import Any, Dict, Optional

import httpx

from carrier_rates.core.exceptions import (
    CarrierError,
    CarrierErrorDetails,
    CarrierErrorKind,
    RatingPayloadError,
)
from carrier_rates.core.utils import redact_secrets, truncate

logger = logging.getLogger(__name__)

TIMEOUT_ERRORS = (httpx.TimeoutException, asyncio.TimeoutError)
MALFORMED_BODY_ERRORS = (json.JSONDecodeError, UnicodeDecodeError, RatingPayloadError)

GATEWAY_TIMEOUT = 504
BAD_GATEWAY = 502


def upstream_body(response: httpx.Response) -> Any:
    """Decoded JSON body if possible, otherwise trimmed text. Credentials masked."""
    try:
        return redact_secrets(response.json())
    except ValueError:
        return truncate(response.text)


def upstream_message(body: Any) -> Optional[str]:
    """Pull the first UPS error message out of an error body."""
    if not isinstance(body, dict) or not isinstance(body.get("response"), dict):
        return None
    errors = body["response"].get("errors")
    if isinstance(errors, list) and errors and isinstance(errors[0], dict):
        message = errors[0].get("message")
        return str(message) if message else None
    return None


def _error(
    kind: CarrierErrorKind,
    message: str,
    status: int,
    carrier: str,
    upstream_status: Optional[int] = None,
    raw: Any = None,
    debug: Optional[Dict[str, Any]] = None,
) -> CarrierError:
    return CarrierError(
        kind,
        message,
        status,
        CarrierErrorDetails(
            carrier=carrier,
            upstream_status=upstream_status,
            upstream_message=upstream_message(raw),
            raw=raw,
            debug=debug or {},
        ),
    )


def bad_response(
    carrier: str,
    message: str,
    raw: Any = None,
    debug: Optional[Dict[str, Any]] = None,
) -> CarrierError:
    """CARRIER_BAD_RESPONSE for payloads that cannot be interpreted."""
    return _error(CarrierErrorKind.BAD_RESPONSE, message, BAD_GATEWAY, carrier, raw=raw, debug=debug)


def classify_auth_error(
    exc: BaseException,
    carrier: str,
    debug: Optional[Dict[str, Any]] = None,
) -> CarrierError:
    """Classify a failure of the OAuth token call."""
    if isinstance(exc, TIMEOUT_ERRORS):
        return _error(
            CarrierErrorKind.AUTH_TIMEOUT,
            f"{carrier.upper()} auth request timed out",
            GATEWAY_TIMEOUT,
            carrier,
            debug=debug,
        )

    if isinstance(exc, httpx.HTTPStatusError):
        return _error(
            CarrierErrorKind.AUTH_FAILED,
            f"{carrier.upper()} auth failed",
            BAD_GATEWAY,
            carrier,
            upstream_status=exc.response.status_code,
            raw=upstream_body(exc.response),
            debug=debug,
        )

    if isinstance(exc, MALFORMED_BODY_ERRORS):
        return bad_response(carrier, f"{carrier.upper()} auth returned an unexpected payload", debug=debug)

    return _error(
        CarrierErrorKind.UNEXPECTED,
        f"Unexpected {carrier.upper()} auth error",
        BAD_GATEWAY,
        carrier,
        raw=f"{type(exc).__name__}: {exc}",
        debug=debug,
    )


def classify_rating_error(
    exc: BaseException,
    carrier: str,
    debug: Optional[Dict[str, Any]] = None,
) -> CarrierError:
    """Classify a failure of the rating call (after any 401 retry decision)."""
    if isinstance(exc, TIMEOUT_ERRORS):
        return _error(
            CarrierErrorKind.RATE_TIMEOUT,
            f"{carrier.upper()} rating request timed out",
            GATEWAY_TIMEOUT,
            carrier,
            debug=debug,
        )

    if isinstance(exc, MALFORMED_BODY_ERRORS):
        return bad_response(
            carrier,
            f"{carrier.upper()} rating returned a malformed payload: {exc}",
            debug=debug,
        )

    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        body = upstream_body(exc.response)
        if 400 <= status < 500:
            return _error(
                CarrierErrorKind.UPSTREAM_4XX,
                f"{carrier.upper()} rejected the rating request",
                BAD_GATEWAY,
                carrier,
                upstream_status=status,
                raw=body,
                debug=debug,
            )
        if 500 <= status < 600:
            return _error(
                CarrierErrorKind.UPSTREAM_5XX,
                f"{carrier.upper()} rating service error",
                BAD_GATEWAY,
                carrier,
                upstream_status=status,
                raw=body,
                debug=debug,
            )
        return _error(
            CarrierErrorKind.RATE_FAILED,
            f"{carrier.upper()} rating request failed",
            BAD_GATEWAY,
            carrier,
            upstream_status=status,
            raw=body,
            debug=debug,
        )

    if isinstance(exc, httpx.HTTPError):
        return _error(
            CarrierErrorKind.RATE_FAILED,
            f"{carrier.upper()} rating request failed",
            BAD_GATEWAY,
            carrier,
            raw=f"{type(exc).__name__}: {exc}",
            debug=debug,
        )

    return _error(
        CarrierErrorKind.UNEXPECTED,
        f"Unexpected {carrier.upper()} rating error",
        BAD_GATEWAY,
        carrier,
        raw=f"{type(exc).__name__}: {exc}",
        debug=debug,
    )
