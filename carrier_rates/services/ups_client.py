"""
UPS Rating API client

Orchestrates one rate quote:

    IDLE -> TOKEN_ACQUIRED -> REQUESTED -> NORMALIZED
                                        -> RETRYING (401) -> NORMALIZED | FAILED
                                        -> FAILED

- At most two rating calls per request (original + one retry after a 401)
- At most two token acquisitions (cached/fresh, then forced refresh on 401)
- Every other failure is classified and returned immediately; no backoff

All outbound calls are bounded by UPS_HTTP_TIMEOUT_MS. Cancelling the
calling task aborts the in-flight request; CancelledError is never
classified.
"""
import asyncio
import logging
import uuid
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

import httpx

from carrier_rates.core.config import Settings
from carrier_rates.core.exceptions import CarrierError, CarrierResult, RatingPayloadError
from carrier_rates.core.utils import redact_secrets, truncate, utcnow
from carrier_rates.models.carrier import CarrierCode
from carrier_rates.modules.shipping.carriers.base import RateProvider, RateQuote, RateRequest
from carrier_rates.services.carrier_errors import bad_response, classify_rating_error
from carrier_rates.services.ups_auth import Clock, UPSTokenCache
from carrier_rates.services.ups_payload import build_rating_payload, normalize_rating_response

logger = logging.getLogger(__name__)

TRANSACTION_SOURCE = "carrier-rates"


class RatingState(str, Enum):
    IDLE = "idle"
    TOKEN_ACQUIRED = "token_acquired"
    REQUESTED = "requested"
    NORMALIZED = "normalized"
    RETRYING = "retrying"
    FAILED = "failed"


QuoteResult = CarrierResult[List[RateQuote]]


class UPSRatingClient(RateProvider):
    """
    UPS rate quoting with OAuth 2.0 token caching and a single 401 retry.

    Usage:
        async with UPSRatingClient(settings) as client:
            result = await client.get_rates(request)
    """

    def __init__(
        self,
        settings: Settings,
        http_client: Optional[httpx.AsyncClient] = None,
        token_cache: Optional[UPSTokenCache] = None,
        clock: Clock = utcnow,
    ):
        self._rating_url = settings.UPS_RATING_URL
        self._account_number = settings.UPS_ACCOUNT_NUMBER or None
        self._timeout = settings.http_timeout_seconds

        self._http_client = http_client
        self._owns_client = http_client is None
        self._tokens = token_cache or UPSTokenCache(
            settings,
            http_client=http_client,
            clock=clock,
            carrier=self.carrier,
        )

    @property
    def carrier(self) -> str:
        return CarrierCode.UPS.value

    @property
    def token_cache(self) -> UPSTokenCache:
        return self._tokens

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=self._timeout,
                headers={"Content-Type": "application/json"},
            )
        return self._http_client

    async def close(self):
        """Close HTTP clients created by this instance."""
        if self._http_client and self._owns_client:
            await self._http_client.aclose()
            self._http_client = None
        await self._tokens.close()

    # ==================== Rating ====================

    async def get_rates(self, request: RateRequest) -> QuoteResult:
        """
        Get shipping rates for a request.

        Returns:
            CarrierResult with the quotes (empty when UPS matched no service)
            or the classified CarrierError
        """
        token_result = await self._tokens.get_token()
        if not token_result.ok:
            return CarrierResult.failure(token_result.error)

        payload = build_rating_payload(
            request,
            shipper_number=self._account_number,
            customer_context=f"Rating {len(request.parcels)} parcel(s)",
        )

        state, result = await self._send(payload, token_result.value, attempt=1)
        if state is not RatingState.RETRYING:
            return result

        logger.warning(f"{self.carrier.upper()} rating returned 401; refreshing token and retrying once")
        refreshed = await self._tokens.force_refresh()
        if not refreshed.ok:
            return CarrierResult.failure(refreshed.error)

        # Same payload, new token, no further retry
        state, result = await self._send(payload, refreshed.value, attempt=2)
        logger.debug(f"{self.carrier.upper()} rating retry finished in state {state.value}")
        return result

    async def _send(
        self,
        payload: Dict[str, Any],
        token: str,
        attempt: int,
    ) -> Tuple[RatingState, Optional[QuoteResult]]:
        """
        POST the rating payload once and interpret the outcome.

        Returns (RETRYING, None) for a 401 on the first attempt; otherwise a
        terminal state with its result.
        """
        client = await self._get_http_client()
        debug = {"operation": "rating", "attempt": attempt}
        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
            "transId": uuid.uuid4().hex,
            "transactionSrc": TRANSACTION_SOURCE,
        }

        try:
            response = await asyncio.wait_for(
                client.post(self._rating_url, json=payload, headers=headers, timeout=self._timeout),
                timeout=self._timeout,
            )
        except Exception as e:
            return self._failed(classify_rating_error(e, self.carrier, debug=debug))

        logger.debug(f"{self.carrier.upper()} rating POST (attempt {attempt}) -> {response.status_code}")

        if response.status_code == 401 and attempt == 1:
            return RatingState.RETRYING, None

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            return self._failed(classify_rating_error(e, self.carrier, debug=debug))

        try:
            data = response.json()
        except ValueError:
            return self._failed(bad_response(
                self.carrier,
                f"{self.carrier.upper()} rating returned non-JSON / malformed JSON",
                raw=truncate(response.text),
                debug=debug,
            ))

        try:
            quotes = normalize_rating_response(data, self.carrier)
        except RatingPayloadError as e:
            return self._failed(bad_response(
                self.carrier,
                f"{self.carrier.upper()} rating returned unexpected payload shape ({e})",
                raw=redact_secrets(data),
                debug=debug,
            ))

        logger.info(f"{self.carrier.upper()} rating returned {len(quotes)} quote(s)")
        return RatingState.NORMALIZED, CarrierResult.success(quotes)

    def _failed(self, error: CarrierError) -> Tuple[RatingState, QuoteResult]:
        logger.error(
            f"{self.carrier.upper()} rating failed: {error.code} "
            f"(upstream status={error.error_details.upstream_status})"
        )
        return RatingState.FAILED, CarrierResult.failure(error)
