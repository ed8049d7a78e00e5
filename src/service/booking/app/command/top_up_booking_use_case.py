from datetime import date
from decimal import Decimal
from typing import Optional, Self

from dependency_injector.wiring import Provide, inject
from opentelemetry import trace

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.exception.exceptions import (
    InvalidStateError,
    PaymentGatewayError,
    ValidationError,
)
from src.platform.logging.loguru_io import Logger
from src.service.booking.app.dto.payment_dto import TopUpResult
from src.service.booking.app.interface.i_booking_repo import IBookingRepo
from src.service.booking.app.interface.i_payment_gateway import IPaymentGateway
from src.service.booking.app.mapper.booking_store import BookingStore
from src.service.booking.domain.enum.booking_status import BookingStatus
from src.service.booking.domain.enum.payment_status import PaymentStatus
from src.service.booking.domain.pricing_calculator import top_up_price
from src.service.booking.domain.value_object.quantity import Hours


class TopUpBookingUseCase:
    """
    Open a checkout for extra hours on a confirmed, fully paid package.

    The booking is never changed here; hours are only added by
    CompleteTopUpUseCase once the gateway reports the payment as succeeded.
    """

    def __init__(self, *, booking_repo: IBookingRepo, payment_gateway: IPaymentGateway) -> None:
        self.store = BookingStore(booking_repo)
        self.payment_gateway = payment_gateway
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        booking_repo: IBookingRepo = Provide[Container.booking_repo],
        payment_gateway: IPaymentGateway = Provide[Container.payment_gateway],
    ) -> Self:
        return cls(booking_repo=booking_repo, payment_gateway=payment_gateway)

    @Logger.io
    async def top_up(
        self,
        *,
        booking_id: str,
        hours: Decimal,
        method: str = 'card',
        currency: Optional[str] = None,
        today: Optional[date] = None,
    ) -> TopUpResult:
        today = today or date.today()
        currency = currency or settings.DEFAULT_CURRENCY

        with self.tracer.start_as_current_span(
            'use_case.top_up_booking',
            attributes={'booking.id': str(booking_id), 'top_up.hours': str(hours)},
        ):
            booking = await self.store.get(booking_id)
            if not (
                booking.status is BookingStatus.CONFIRMED
                and booking.payment_status is PaymentStatus.PAID
            ):
                raise InvalidStateError(
                    'Top-ups are only available for confirmed, fully paid bookings'
                )
            if booking.is_expired(today):
                raise InvalidStateError('Cannot top up an expired package')

            extra = Hours(hours)
            if extra.is_zero or extra.value > settings.TOP_UP_MAX_HOURS:
                raise ValidationError(
                    f'Top-up hours must be between 0 and {settings.TOP_UP_MAX_HOURS}',
                    field='hours',
                )

            amount = top_up_price(
                hours=extra, package_price=booking.total_price, package_hours=booking.total_hours
            )
            try:
                result = await self.payment_gateway.process_payment(
                    amount=amount.amount,
                    currency=currency,
                    method=method,
                    metadata={
                        'purpose': 'top_up',
                        'booking_id': str(booking.id),
                        'reference': str(booking.reference),
                        'hours': str(extra.value),
                        'amount': str(amount.amount),
                    },
                )
            except PaymentGatewayError as e:
                Logger.base.warning(f'💳 [TOP-UP] {booking.reference} gateway error: {e.message}')
                return TopUpResult(
                    success=False,
                    booking_id=str(booking.id),
                    hours=extra.value,
                    amount=amount.amount,
                    currency=currency,
                    error=e.message,
                )

            Logger.base.info(
                f'➕ [TOP-UP] {booking.reference}: {extra} for {amount} {currency} '
                f'(success={result.success})'
            )
            return TopUpResult(
                success=result.success,
                booking_id=str(booking.id),
                hours=extra.value,
                amount=amount.amount,
                currency=currency,
                payment_id=result.payment_id,
                checkout_url=result.checkout_url,
                error=result.error,
            )
