"""
UPS Rating payload mapping

Pure translation between the carrier-neutral domain types and the UPS
Rating API (v2403) wire format. No I/O and no shared state.

- build_rating_payload: RateRequest -> RateRequest JSON body
- normalize_rating_response: RateResponse JSON -> List[RateQuote]

Shape problems raise RatingPayloadError; the rating client classifies them
as CARRIER_BAD_RESPONSE.
"""
from decimal import Decimal, ROUND_CEILING
from typing import Any, Dict, List, Optional, Union

from carrier_rates.core.exceptions import RatingPayloadError
from carrier_rates.models.carrier import (
    CarrierCode,
    UPS_DEFAULT_PACKAGE_TYPE,
    UPS_DIMENSION_UNIT,
    UPS_WEIGHT_UNIT,
    ups_service_name,
)
from carrier_rates.modules.shipping.carriers.base import (
    Address,
    Money,
    Parcel,
    RateQuote,
    RateRequest,
)

Number = Union[int, float, Decimal]


def _ceil_whole(value: Number) -> str:
    """Round a dimension up to the next whole unit (carriers bill whole units)."""
    return str(Decimal(str(value)).to_integral_value(rounding=ROUND_CEILING))


def _plain_number(value: Number) -> str:
    """Render a number without rounding and without a trailing '.0'."""
    d = Decimal(str(value))
    if d == d.to_integral_value():
        return str(int(d))
    return format(d.normalize(), "f")


def _address_block(address: Address) -> Dict[str, Any]:
    block: Dict[str, Any] = {
        "PostalCode": address.postal_code,
        "CountryCode": address.country_code,
    }
    if address.address_line1:
        block["AddressLine"] = [address.address_line1]
    if address.city:
        block["City"] = address.city
    if address.state_province:
        block["StateProvinceCode"] = address.state_province[:5]  # UPS limit
    return {"Address": block}


def _package_entry(parcel: Parcel) -> Dict[str, Any]:
    return {
        "PackagingType": {"Code": UPS_DEFAULT_PACKAGE_TYPE},
        "Dimensions": {
            "UnitOfMeasurement": {"Code": UPS_DIMENSION_UNIT},
            "Length": _ceil_whole(parcel.length_cm),
            "Width": _ceil_whole(parcel.width_cm),
            "Height": _ceil_whole(parcel.height_cm),
        },
        "PackageWeight": {
            "UnitOfMeasurement": {"Code": UPS_WEIGHT_UNIT},
            "Weight": _plain_number(parcel.weight_kg),
        },
    }


def build_rating_payload(
    request: RateRequest,
    shipper_number: Optional[str] = None,
    customer_context: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Build the UPS RateRequest body for a domain request.

    Always requests "Shop" rates (every available service). Filtering by
    requested service level is left to the caller.

    Args:
        request: Validated domain request
        shipper_number: Optional UPS account number for negotiated rates
        customer_context: Optional echo string for UPS transaction logs

    Returns:
        JSON-serializable dict
    """
    shipper = _address_block(request.origin)
    if shipper_number:
        shipper["ShipperNumber"] = shipper_number

    return {
        "RateRequest": {
            "Request": {
                "RequestOption": "Shop",
                "TransactionReference": {
                    "CustomerContext": customer_context or "Rating",
                },
            },
            "Shipment": {
                "Shipper": shipper,
                "ShipTo": _address_block(request.destination),
                # Ship-from mirrors origin; UPS distinguishes it from shipper
                "ShipFrom": _address_block(request.origin),
                "Package": [_package_entry(p) for p in request.parcels],
            },
        }
    }


# =============================================================================
# Response normalization
# =============================================================================

def _rated_shipments(payload: Any) -> List[Dict[str, Any]]:
    """Extract RatedShipment entries as a list, whatever shape UPS sent."""
    if not isinstance(payload, dict):
        raise RatingPayloadError("Rating response is not a JSON object")

    rate_response = payload.get("RateResponse")
    if not isinstance(rate_response, dict):
        raise RatingPayloadError("Rating response is missing RateResponse")

    rated = rate_response.get("RatedShipment")
    if rated is None:
        return []
    # UPS sends a bare object when exactly one service matched
    if isinstance(rated, dict):
        return [rated]
    if isinstance(rated, list):
        return rated

    raise RatingPayloadError(
        f"RatedShipment has unexpected type {type(rated).__name__}"
    )


def _estimated_arrival_date(shipment: Dict[str, Any]) -> Optional[str]:
    time_in_transit = shipment.get("TimeInTransit")
    if not isinstance(time_in_transit, dict):
        return None

    arrival = time_in_transit.get("EstimatedArrival")
    if not isinstance(arrival, dict):
        summary = time_in_transit.get("ServiceSummary")
        arrival = summary.get("EstimatedArrival") if isinstance(summary, dict) else None
    if not isinstance(arrival, dict):
        return None

    # v2403 nests the date under Arrival; older responses put it inline
    nested = arrival.get("Arrival")
    if isinstance(nested, dict) and nested.get("Date"):
        return nested["Date"]
    return arrival.get("Date") or None


def _required(mapping: Any, key: str, context: str) -> Any:
    if not isinstance(mapping, dict) or mapping.get(key) in (None, ""):
        raise RatingPayloadError(f"RatedShipment entry missing {context}.{key}")
    return mapping[key]


def _to_quote(shipment: Any, carrier: str) -> RateQuote:
    if not isinstance(shipment, dict):
        raise RatingPayloadError("RatedShipment entry is not an object")

    service = shipment.get("Service")
    total = shipment.get("TotalCharges")

    code = str(_required(service, "Code", "Service"))
    currency = str(_required(total, "CurrencyCode", "TotalCharges"))
    amount = str(_required(total, "MonetaryValue", "TotalCharges"))

    description = str(service.get("Description") or "").strip()

    return RateQuote(
        carrier=carrier,
        service_code=code,
        service_name=description or ups_service_name(code),
        total_charge=Money(currency=currency, amount=amount),
        estimated_delivery_date=_estimated_arrival_date(shipment),
    )


def normalize_rating_response(
    payload: Any,
    carrier: str = CarrierCode.UPS.value,
) -> List[RateQuote]:
    """
    Convert a UPS rating response into quotes.

    An absent or empty RatedShipment is a legitimate "no matches" result and
    yields an empty list. A missing RateResponse envelope, or malformed
    entries, raise RatingPayloadError.
    """
    return [_to_quote(s, carrier) for s in _rated_shipments(payload)]
