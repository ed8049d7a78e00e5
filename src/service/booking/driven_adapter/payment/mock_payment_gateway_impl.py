"""Mock payment gateway: settles card payments instantly, top-ups via checkout"""

from decimal import Decimal
from typing import Any, Mapping, Optional

from uuid_utils import uuid7

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import PaymentGatewayError
from src.platform.logging.loguru_io import Logger
from src.service.booking.app.dto.payment_dto import (
    GatewayPayment,
    GatewayPaymentResult,
    GatewayPaymentStatus,
)
from src.service.booking.app.interface.i_payment_gateway import IPaymentGateway


DECLINED_METHODS = frozenset({'card_declined', 'insufficient_funds'})
CHECKOUT_PURPOSES = frozenset({'top_up'})


class MockPaymentGatewayImpl(IPaymentGateway):
    def __init__(self, *, available: bool = True) -> None:
        self.available = available
        self.payments: dict[str, dict[str, Any]] = {}

    def _ensure_available(self) -> None:
        if not self.available:
            raise PaymentGatewayError('Payment provider is unavailable', error_code='unavailable')

    @Logger.io
    async def process_payment(
        self,
        *,
        amount: Decimal,
        currency: str,
        method: str,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> GatewayPaymentResult:
        self._ensure_available()
        if method in DECLINED_METHODS:
            return GatewayPaymentResult(
                success=False,
                error='Your payment was declined. Please try another payment method.',
                error_code=method,
            )

        payment_id = f'pay_{uuid7().hex}'
        metadata = dict(metadata or {})
        via_checkout = metadata.get('purpose') in CHECKOUT_PURPOSES
        self.payments[payment_id] = {
            'amount': amount,
            'currency': currency,
            'method': method,
            'metadata': metadata,
            'status': GatewayPaymentStatus.PENDING if via_checkout else GatewayPaymentStatus.SUCCEEDED,
        }
        return GatewayPaymentResult(
            success=True,
            payment_id=payment_id,
            checkout_url=f'{settings.CHECKOUT_BASE_URL}/{payment_id}' if via_checkout else None,
        )

    def complete_checkout(self, payment_id: str, *, succeeded: bool = True) -> None:
        """Simulate the provider's webhook for a checkout payment"""
        self.payments[payment_id]['status'] = (
            GatewayPaymentStatus.SUCCEEDED if succeeded else GatewayPaymentStatus.FAILED
        )

    @Logger.io
    async def refund_payment(
        self, *, payment_id: str, amount: Optional[Decimal] = None
    ) -> GatewayPaymentResult:
        self._ensure_available()
        payment = self.payments.get(payment_id)
        if payment is None or payment['status'] is not GatewayPaymentStatus.SUCCEEDED:
            return GatewayPaymentResult(
                success=False, payment_id=payment_id, error='Payment cannot be refunded'
            )
        payment['status'] = GatewayPaymentStatus.REFUNDED
        return GatewayPaymentResult(success=True, payment_id=payment_id)

    @Logger.io
    async def get_payment_status(self, *, payment_id: str) -> GatewayPaymentStatus:
        return (await self.get_payment(payment_id=payment_id)).status

    @Logger.io
    async def get_payment(self, *, payment_id: str) -> GatewayPayment:
        self._ensure_available()
        payment = self.payments.get(payment_id)
        if payment is None:
            raise PaymentGatewayError(f'Unknown payment {payment_id}', error_code='not_found')
        return GatewayPayment(
            payment_id=payment_id,
            status=payment['status'],
            amount=payment['amount'],
            currency=payment['currency'],
            metadata=dict(payment['metadata']),
        )
