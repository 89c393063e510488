"""
UPS OAuth token cache

Owns the client-credentials token lifecycle:
- get_token: cached token while it has more than `skew` seconds left
- force_refresh: unconditional acquisition (used after a 401)

No lock guards the cache. Two callers racing past an expired token may both
acquire; each write replaces the whole CachedToken and the last one wins.
The cost is at most one extra token call, never a corrupted token.
"""
import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Optional

import httpx

from carrier_rates.core.config import Settings
from carrier_rates.core.exceptions import CarrierResult
from carrier_rates.core.utils import redact_secrets, utcnow
from carrier_rates.models.carrier import CarrierCode
from carrier_rates.services.carrier_errors import bad_response, classify_auth_error

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

# Anything longer is not a real token lifetime
MAX_TOKEN_LIFETIME_SECONDS = 365 * 24 * 60 * 60


@dataclass(frozen=True)
class CachedToken:
    """Bearer token and its absolute expiry. Replaced, never mutated."""
    token: str
    expires_at: datetime

    def is_fresh(self, now: datetime, skew: timedelta) -> bool:
        return self.expires_at - now > skew


def _parse_expires_in(value: Any) -> Optional[int]:
    # UPS sends expires_in as a string ("14399"); the RFC says integer
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        seconds = value
    elif isinstance(value, str) and value.strip().isdecimal():
        seconds = int(value.strip())
    else:
        return None
    if seconds <= 0 or seconds > MAX_TOKEN_LIFETIME_SECONDS:
        return None
    return seconds


class UPSTokenCache:
    """
    OAuth 2.0 client-credentials token provider with expiry-aware caching.

    Usage:
        cache = UPSTokenCache(settings)
        result = await cache.get_token()
        if result.ok:
            headers = {"Authorization": f"Bearer {result.value}"}
    """

    def __init__(
        self,
        settings: Settings,
        http_client: Optional[httpx.AsyncClient] = None,
        clock: Clock = utcnow,
        carrier: str = CarrierCode.UPS.value,
    ):
        self.carrier = carrier
        self._token_url = settings.UPS_OAUTH_TOKEN_URL
        self._auth = httpx.BasicAuth(settings.UPS_CLIENT_ID, settings.UPS_CLIENT_SECRET)
        self._timeout = settings.http_timeout_seconds
        self._skew = timedelta(seconds=settings.UPS_TOKEN_SKEW_SECONDS)
        self._clock = clock

        self._http_client = http_client
        self._owns_client = http_client is None
        self._cached: Optional[CachedToken] = None

    @property
    def cached_token(self) -> Optional[CachedToken]:
        return self._cached

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self._timeout)
        return self._http_client

    async def close(self):
        """Close HTTP client if this cache created it."""
        if self._http_client and self._owns_client:
            await self._http_client.aclose()
            self._http_client = None

    async def get_token(self) -> CarrierResult[str]:
        """Return a usable bearer token, acquiring one if the cache is stale."""
        cached = self._cached
        if cached is not None and cached.is_fresh(self._clock(), self._skew):
            return CarrierResult.success(cached.token)
        return await self._acquire()

    async def force_refresh(self) -> CarrierResult[str]:
        """Acquire a new token regardless of the cached one."""
        return await self._acquire()

    def invalidate(self) -> None:
        """Drop the cached token; the next get_token acquires a new one."""
        self._cached = None

    async def _acquire(self) -> CarrierResult[str]:
        client = await self._get_http_client()
        debug = {"operation": "oauth_token"}

        try:
            response = await asyncio.wait_for(
                client.post(
                    self._token_url,
                    data={"grant_type": "client_credentials"},
                    auth=self._auth,
                    headers={"Accept": "application/json"},
                    timeout=self._timeout,
                ),
                timeout=self._timeout,
            )
            logger.debug(f"{self.carrier.upper()} OAuth POST -> {response.status_code}")
            response.raise_for_status()
            data = response.json()
        except Exception as e:
            error = classify_auth_error(e, self.carrier, debug=debug)
            logger.error(
                f"{self.carrier.upper()} OAuth failed: {error.code} "
                f"(upstream status={error.error_details.upstream_status})"
            )
            return CarrierResult.failure(error)

        token = data.get("access_token") if isinstance(data, dict) else None
        expires_in = _parse_expires_in(data.get("expires_in")) if isinstance(data, dict) else None

        if not isinstance(token, str) or not token or expires_in is None:
            logger.error(f"{self.carrier.upper()} OAuth returned an unexpected payload")
            return CarrierResult.failure(
                bad_response(
                    self.carrier,
                    f"{self.carrier.upper()} auth returned an unexpected payload",
                    raw=redact_secrets(data),
                    debug=debug,
                )
            )

        self._cached = CachedToken(
            token=token,
            expires_at=self._clock() + timedelta(seconds=expires_in),
        )
        logger.info(f"{self.carrier.upper()} OAuth token obtained, expires in {expires_in}s")
        return CarrierResult.success(token)
