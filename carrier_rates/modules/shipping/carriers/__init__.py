"""
Carrier implementations share the value types and RateProvider interface
defined in base.py. Providers are wired explicitly in
carrier_rates.modules.shipping.registry.
"""
from carrier_rates.modules.shipping.carriers.base import (
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
