"""
Base Carrier Interface

- Carrier-agnostic value types shared by every carrier integration
- RateProvider: the capability each carrier client implements
- Providers are selected through an explicit CarrierRegistry built at startup
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from carrier_rates.core.exceptions import CarrierResult


# =============================================================================
# Carrier-Agnostic Data Classes
# =============================================================================

@dataclass(frozen=True)
class Address:
    """Postal address. Only postal code and country are required for rating."""
    postal_code: str
    country_code: str  # ISO-3166 alpha-2
    address_line1: Optional[str] = None
    city: Optional[str] = None
    state_province: Optional[str] = None


@dataclass(frozen=True)
class Parcel:
    """Package dimensions (centimeters) and weight (kilograms)."""
    length_cm: float
    width_cm: float
    height_cm: float
    weight_kg: float

    def __post_init__(self):
        for name in ("length_cm", "width_cm", "height_cm", "weight_kg"):
            if getattr(self, name) <= 0:
                raise ValueError(f"Parcel {name} must be > 0")


@dataclass(frozen=True)
class RateRequest:
    """Carrier-neutral request for shipping quotes."""
    origin: Address
    destination: Address
    parcels: Tuple[Parcel, ...]
    service_levels: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self):
        # Accept any sequence, store immutably
        object.__setattr__(self, "parcels", tuple(self.parcels))
        object.__setattr__(self, "service_levels", tuple(self.service_levels or ()))
        if not self.parcels:
            raise ValueError("RateRequest requires at least one parcel")


@dataclass(frozen=True)
class Money:
    """Currency amount. The amount is the exact decimal string from the carrier."""
    currency: str  # ISO-4217
    amount: str


@dataclass(frozen=True)
class RateQuote:
    """Shipping rate quote."""
    carrier: str
    service_code: str
    service_name: str
    total_charge: Money
    estimated_delivery_date: Optional[str] = None  # YYYY-MM-DD as sent by the carrier

    def to_dict(self) -> dict:
        data = {
            "carrier": self.carrier,
            "serviceCode": self.service_code,
            "serviceName": self.service_name,
            "totalCharge": {
                "currency": self.total_charge.currency,
                "amount": self.total_charge.amount,
            },
        }
        if self.estimated_delivery_date is not None:
            data["estimatedDeliveryDate"] = self.estimated_delivery_date
        return data


# =============================================================================
# Rate Provider Interface
# =============================================================================

class RateProvider(ABC):
    """
    Capability implemented by every carrier rating client.

    get_rates never raises for carrier failures; it returns a CarrierResult
    carrying either the quotes or a classified CarrierError.
    """

    @property
    @abstractmethod
    def carrier(self) -> str:
        """Return the carrier key (e.g. "ups")."""
        pass

    @abstractmethod
    async def get_rates(self, request: RateRequest) -> CarrierResult[List[RateQuote]]:
        """
        Get shipping rates from the carrier.

        Args:
            request: Validated carrier-neutral rate request

        Returns:
            CarrierResult with the quote list (possibly empty) or a CarrierError
        """
        pass

    async def close(self) -> None:
        """Release network resources held by the provider."""
        return None
