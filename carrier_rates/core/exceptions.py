"""
Carrier Rates Exception Hierarchy

Structured exception classes for the carrier integration core.
All errors include code, message, and details for audit trail and debugging.

Exception Hierarchy:
    ShippingBaseError
    ├── CarrierError            (closed taxonomy, see CarrierErrorKind)
    └── CarrierNotRegistered
    RatingPayloadError (ValueError) - mapper shape failures, never surfaced raw

Carrier failures are normally carried inside a CarrierResult rather than
raised. CarrierResult.unwrap() raises the CarrierError for callers that
prefer exceptions (e.g. the HTTP response layer).
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ShippingBaseError(Exception):
    """
    Base exception for all carrier-rates custom errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code for programmatic handling
        details: Additional context for debugging/audit
    """

    default_code: str = "SHIPPING_ERROR"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


# =============================================================================
# CARRIER ERRORS
# =============================================================================

class CarrierErrorKind(str, Enum):
    """Closed set of carrier failure kinds."""
    AUTH_FAILED = "CARRIER_AUTH_FAILED"
    AUTH_TIMEOUT = "CARRIER_AUTH_TIMEOUT"
    RATE_TIMEOUT = "CARRIER_RATE_TIMEOUT"
    RATE_FAILED = "CARRIER_RATE_FAILED"
    BAD_RESPONSE = "CARRIER_BAD_RESPONSE"
    UPSTREAM_4XX = "CARRIER_UPSTREAM_4XX"
    UPSTREAM_5XX = "CARRIER_UPSTREAM_5XX"
    UNEXPECTED = "CARRIER_UNEXPECTED"


@dataclass(frozen=True)
class CarrierErrorDetails:
    """Diagnostic detail bag. Never holds credentials."""
    carrier: str
    upstream_status: Optional[int] = None
    upstream_message: Optional[str] = None
    raw: Any = None
    debug: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"carrier": self.carrier}
        if self.upstream_status is not None:
            data["upstreamStatus"] = self.upstream_status
        if self.upstream_message:
            data["upstreamMessage"] = self.upstream_message
        if self.raw is not None:
            data["raw"] = self.raw
        if self.debug:
            data["_debug"] = dict(self.debug)
        return data


class CarrierError(ShippingBaseError):
    """
    Classified carrier failure.

    The kind, status and details are fixed at construction and exposed
    read-only.
    """

    default_code = CarrierErrorKind.UNEXPECTED.value

    def __init__(
        self,
        kind: CarrierErrorKind,
        message: str,
        http_status: int,
        details: CarrierErrorDetails,
    ):
        self._kind = kind
        self._http_status = http_status
        self._error_details = details
        super().__init__(message, code=kind.value, details=details.to_dict())

    @property
    def kind(self) -> CarrierErrorKind:
        return self._kind

    @property
    def http_status(self) -> int:
        return self._http_status

    @property
    def carrier(self) -> str:
        return self._error_details.carrier

    @property
    def error_details(self) -> CarrierErrorDetails:
        return self._error_details

    def to_response_body(self) -> Dict[str, Any]:
        """Body shape surfaced by the HTTP response layer."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self._error_details.to_dict(),
            }
        }

    def __repr__(self) -> str:
        return (
            f"CarrierError(kind={self._kind.value!r}, status={self._http_status}, "
            f"carrier={self.carrier!r}, message={self.message!r})"
        )


class CarrierNotRegistered(ShippingBaseError):
    """No rate provider registered under the requested carrier key."""
    default_code = "CARRIER_NOT_REGISTERED"

    def __init__(self, carrier: str):
        super().__init__(
            f"No rate provider registered for carrier: {carrier}",
            details={"carrier": carrier},
        )


class RatingPayloadError(ValueError):
    """Carrier payload does not have the structure the mapper requires."""


# =============================================================================
# RESULT TYPE
# =============================================================================

@dataclass(frozen=True)
class CarrierResult(Generic[T]):
    """
    Outcome of a carrier operation: either a value or a CarrierError.

    Usage:
        result = await client.get_rates(request)
        if result.ok:
            quotes = result.value
        else:
            body = result.error.to_response_body()
    """
    value: Optional[T] = None
    error: Optional[CarrierError] = None

    @classmethod
    def success(cls, value: T) -> "CarrierResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: CarrierError) -> "CarrierResult[T]":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the value or raise the carried CarrierError."""
        if self.error is not None:
            raise self.error
        return self.value
