"""
Carrier Registry

Explicit mapping from carrier key to RateProvider, constructed once at
startup by build_carrier_registry(). No decorator or import-time
registration: the wiring below is the complete list of carriers.
"""
import logging
from typing import Dict, List, Optional

import httpx

from carrier_rates.core.config import Settings
from carrier_rates.core.exceptions import CarrierNotRegistered
from carrier_rates.modules.shipping.carriers.base import RateProvider
from carrier_rates.services.ups_client import UPSRatingClient

logger = logging.getLogger(__name__)


class CarrierRegistry:
    """Holds the rate providers available to the calling layer."""

    def __init__(self, providers: Optional[List[RateProvider]] = None):
        self._providers: Dict[str, RateProvider] = {}
        for provider in providers or []:
            self.register(provider)

    def register(self, provider: RateProvider) -> None:
        key = provider.carrier.lower()
        if key in self._providers:
            logger.warning(f"Replacing rate provider for carrier: {key}")
        self._providers[key] = provider
        logger.info(f"Registered carrier: {key} -> {type(provider).__name__}")

    def get(self, carrier: str) -> RateProvider:
        """
        Get the provider for a carrier key (case-insensitive).

        Raises:
            CarrierNotRegistered: unknown carrier key
        """
        provider = self._providers.get((carrier or "").lower())
        if provider is None:
            raise CarrierNotRegistered(carrier)
        return provider

    def carriers(self) -> List[str]:
        """Get list of all registered carrier keys."""
        return sorted(self._providers)

    def __contains__(self, carrier: str) -> bool:
        return (carrier or "").lower() in self._providers

    async def close(self) -> None:
        for provider in self._providers.values():
            await provider.close()


def build_carrier_registry(
    settings: Settings,
    http_client: Optional[httpx.AsyncClient] = None,
) -> CarrierRegistry:
    """
    Wire every configured carrier.

    Args:
        settings: Loaded application settings
        http_client: Optional shared httpx client (tests inject a MockTransport)
    """
    return CarrierRegistry([
        UPSRatingClient(settings, http_client=http_client),
    ])
