from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any, Mapping, Optional

from src.service.booking.app.dto.payment_dto import (
    GatewayPayment,
    GatewayPaymentResult,
    GatewayPaymentStatus,
)


class IPaymentGateway(ABC):
    """
    External payment provider.

    Only success/failure matters to the booking engine; checkout pages,
    webhooks and card handling live behind this port.
    """

    @abstractmethod
    async def process_payment(
        self,
        *,
        amount: Decimal,
        currency: str,
        method: str,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> GatewayPaymentResult:
        """
        Charge (or open a checkout for) an amount

        Returns:
            Structured result; transport failures may raise PaymentGatewayError
        """
        pass

    @abstractmethod
    async def refund_payment(
        self, *, payment_id: str, amount: Optional[Decimal] = None
    ) -> GatewayPaymentResult:
        pass

    @abstractmethod
    async def get_payment_status(self, *, payment_id: str) -> GatewayPaymentStatus:
        pass

    @abstractmethod
    async def get_payment(self, *, payment_id: str) -> GatewayPayment:
        """
        Look up a payment with the amount and metadata it was opened with

        Raises:
            PaymentGatewayError: Payment unknown to the provider
        """
        pass
