"""
Shipping Module

- Carrier-neutral rate request/quote types
- RateProvider interface implemented by each carrier client
- CarrierRegistry built explicitly at startup (see registry.py)
"""
from carrier_rates.modules.shipping.carriers import (
    Address,
    Money,
    Parcel,
    RateProvider,
    RateQuote,
    RateRequest,
)

__all__ = [
    "Address",
    "Money",
    "Parcel",
    "RateProvider",
    "RateQuote",
    "RateRequest",
]
