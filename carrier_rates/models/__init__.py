from carrier_rates.models.carrier import (
    CarrierCode,
    UPS_SERVICE_CODES,
    ups_service_name,
)

__all__ = [
    "CarrierCode",
    "UPS_SERVICE_CODES",
    "ups_service_name",
]
