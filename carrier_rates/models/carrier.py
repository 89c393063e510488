"""
Carrier reference data

Carrier identifiers and the static UPS code tables used by the payload mapper.
"""
import enum


class CarrierCode(str, enum.Enum):
    """
    Supported shipping carriers.

    Values are the lowercase keys used in quotes, error details and the
    carrier registry.
    """
    UPS = "ups"
    # Future carriers
    # FEDEX = "fedex"
    # USPS = "usps"


# UPS Service Codes
UPS_SERVICE_CODES = {
    # Domestic US
    "01": "UPS Next Day Air",
    "02": "UPS 2nd Day Air",
    "03": "UPS Ground",
    "12": "UPS 3 Day Select",
    "13": "UPS Next Day Air Saver",
    "14": "UPS Next Day Air Early",
    "59": "UPS 2nd Day Air A.M.",
    # International
    "07": "UPS Worldwide Express",
    "08": "UPS Worldwide Expedited",
    "11": "UPS Standard",
    "54": "UPS Worldwide Express Plus",
    "65": "UPS Saver",
    # Ground
    "92": "UPS SurePost Less Than 1 lb",
    "93": "UPS SurePost 1 lb or Greater",
    "94": "UPS SurePost BPM",
    "95": "UPS SurePost Media Mail",
}

UPS_DEFAULT_PACKAGE_TYPE = "02"  # Customer Supplied Package

# Metric units only; dimensions arrive in centimeters, weight in kilograms
UPS_DIMENSION_UNIT = "CM"
UPS_WEIGHT_UNIT = "KGS"


def ups_service_name(code: str) -> str:
    """Look up a UPS service name, generating a label for unknown codes."""
    return UPS_SERVICE_CODES.get(code, f"UPS Service {code}")
