from decimal import Decimal
from typing import Optional, Self

from dependency_injector.wiring import Provide, inject
from opentelemetry import trace

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.exception.exceptions import PaymentGatewayError
from src.platform.logging.loguru_io import Logger
from src.service.booking.app.dto.payment_dto import PaymentResult
from src.service.booking.app.interface.i_booking_repo import IBookingRepo
from src.service.booking.app.interface.i_child_lock import IChildLock
from src.service.booking.app.interface.i_payment_gateway import IPaymentGateway
from src.service.booking.app.mapper.booking_store import BookingStore


class ProcessPaymentUseCase:
    """
    Take a payment against a booking.

    Flow:
    1. Dry-run Booking.apply_payment: amount must be > 0 and within the
       outstanding balance, booking not cancelled or refunded
    2. Charge through the gateway
    3. Declined or unreachable gateway -> PaymentResult(success=False),
       booking untouched
    4. Success -> paid amount and payment status updated and persisted

    Confirmation stays a separate step (ConfirmBookingUseCase).
    """

    def __init__(
        self,
        *,
        booking_repo: IBookingRepo,
        payment_gateway: IPaymentGateway,
        child_lock: IChildLock,
    ) -> None:
        self.store = BookingStore(booking_repo)
        self.payment_gateway = payment_gateway
        self.child_lock = child_lock
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        booking_repo: IBookingRepo = Provide[Container.booking_repo],
        payment_gateway: IPaymentGateway = Provide[Container.payment_gateway],
        child_lock: IChildLock = Provide[Container.child_lock],
    ) -> Self:
        return cls(
            booking_repo=booking_repo,
            payment_gateway=payment_gateway,
            child_lock=child_lock,
        )

    @Logger.io
    async def process_payment(
        self,
        *,
        booking_id: str,
        amount: Decimal,
        method: str,
        currency: Optional[str] = None,
    ) -> PaymentResult:
        currency = currency or settings.DEFAULT_CURRENCY
        with self.tracer.start_as_current_span(
            'use_case.process_payment',
            attributes={'booking.id': str(booking_id), 'payment.method': method},
        ):
            booking = await self.store.get(booking_id)
            async with self.child_lock.hold(booking.child_keys):
                booking = await self.store.get(booking_id)
                paid = booking.apply_payment(amount=Decimal(str(amount)))

                try:
                    result = await self.payment_gateway.process_payment(
                        amount=paid.paid_amount.amount - booking.paid_amount.amount,
                        currency=currency,
                        method=method,
                        metadata={
                            'purpose': 'booking',
                            'booking_id': str(booking.id),
                            'reference': str(booking.reference),
                        },
                    )
                except PaymentGatewayError as e:
                    Logger.base.warning(f'💳 [PAYMENT] {booking.reference} gateway error: {e.message}')
                    return PaymentResult(
                        success=False, booking=booking, error=e.message, error_code=e.error_code
                    )

                if not result.success:
                    Logger.base.warning(
                        f'💳 [PAYMENT] {booking.reference} declined: {result.error_code} {result.error}'
                    )
                    return PaymentResult(
                        success=False,
                        booking=booking,
                        payment_id=result.payment_id,
                        error=result.error or 'Payment failed',
                        error_code=result.error_code,
                    )

                saved = await self.store.save(paid)

            Logger.base.info(
                f'💳 [PAYMENT] {saved.reference} paid {paid.paid_amount - booking.paid_amount} '
                f'{currency} -> {saved.payment_status.value}, outstanding {saved.outstanding_amount}'
            )
            return PaymentResult(success=True, booking=saved, payment_id=result.payment_id)
