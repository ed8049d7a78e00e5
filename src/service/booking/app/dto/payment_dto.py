"""Payment and top-up DTOs"""

from decimal import Decimal
from enum import StrEnum
from typing import Any, Mapping, Optional

import attrs

from src.service.booking.domain.entity.booking_entity import Booking


class GatewayPaymentStatus(StrEnum):
    PENDING = 'pending'
    SUCCEEDED = 'succeeded'
    FAILED = 'failed'
    REFUNDED = 'refunded'


@attrs.define(frozen=True)
class GatewayPaymentResult:
    """What the payment gateway reports back for one request"""

    success: bool
    payment_id: Optional[str] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    checkout_url: Optional[str] = None


@attrs.define(frozen=True)
class GatewayPayment:
    """A payment as the gateway recorded it; the source of truth for what was paid"""

    payment_id: str
    status: GatewayPaymentStatus
    amount: Decimal
    currency: str
    metadata: Mapping[str, Any] = attrs.field(factory=dict)


@attrs.define(frozen=True)
class PaymentResult:
    """Outcome of ProcessPayment; a failure leaves the booking untouched"""

    success: bool
    booking: Optional[Booking] = None
    payment_id: Optional[str] = None
    error: Optional[str] = None
    error_code: Optional[str] = None


@attrs.define(frozen=True)
class TopUpResult:
    success: bool
    booking_id: str
    hours: Decimal
    amount: Decimal
    currency: str
    payment_id: Optional[str] = None
    checkout_url: Optional[str] = None
    error: Optional[str] = None
