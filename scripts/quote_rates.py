"""
Manual rate quote diagnostic

Requests quotes from a configured carrier using the settings in .env and
prints them as JSON. Exits 1 when the carrier returns a classified error.

Run: python scripts/quote_rates.py --from 30301:US --to 10001:US --parcel 10x20x30:2 [--carrier ups]
"""
import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from carrier_rates.core.config import get_settings
from carrier_rates.core.exceptions import CarrierNotRegistered
from carrier_rates.modules.shipping.carriers.base import Address, Parcel, RateRequest
from carrier_rates.modules.shipping.registry import build_carrier_registry

logger = logging.getLogger(__name__)


def parse_address(value: str) -> Address:
    """POSTAL:CC -> Address"""
    postal_code, sep, country_code = value.rpartition(":")
    if not sep or not postal_code or len(country_code) != 2:
        raise argparse.ArgumentTypeError(f"Expected POSTAL:CC, got {value!r}")
    return Address(postal_code=postal_code, country_code=country_code.upper())


def parse_parcel(value: str) -> Parcel:
    """LxWxH:KG (centimeters, kilograms) -> Parcel"""
    try:
        dims, weight = value.split(":")
        length, width, height = (float(d) for d in dims.lower().split("x"))
        return Parcel(length_cm=length, width_cm=width, height_cm=height, weight_kg=float(weight))
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"Expected LxWxH:KG, got {value!r} ({e})")


async def run(carrier: str, request: RateRequest) -> int:
    settings = get_settings()
    logging.getLogger().setLevel(settings.LOG_LEVEL)

    registry = build_carrier_registry(settings)
    try:
        provider = registry.get(carrier)
        result = await provider.get_rates(request)
    except CarrierNotRegistered as e:
        logger.error(f"Unknown carrier {carrier!r}; available: {', '.join(registry.carriers())}")
        print(json.dumps({"error": e.to_dict()}, indent=2))
        return 1
    finally:
        await registry.close()

    if result.ok:
        print(json.dumps([q.to_dict() for q in result.value], indent=2))
        return 0

    print(json.dumps(result.error.to_response_body(), indent=2, default=str))
    return 1


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Request shipping rate quotes from a carrier")
    parser.add_argument("--carrier", default="ups", help="Carrier key (default: ups)")
    parser.add_argument("--from", dest="origin", type=parse_address, required=True, help="Origin POSTAL:CC")
    parser.add_argument("--to", dest="destination", type=parse_address, required=True, help="Destination POSTAL:CC")
    parser.add_argument("--parcel", type=parse_parcel, action="append", required=True,
                        help="Parcel LxWxH:KG in cm/kg (repeatable)")
    args = parser.parse_args(argv)

    request = RateRequest(origin=args.origin, destination=args.destination, parcels=args.parcel)
    return asyncio.run(run(args.carrier, request))


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )
    sys.exit(main())
