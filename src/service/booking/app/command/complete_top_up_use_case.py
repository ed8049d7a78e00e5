from typing import Self

from dependency_injector.wiring import Provide, inject
from opentelemetry import trace

from src.platform.config.di import Container
from src.platform.exception.exceptions import InvalidStateError
from src.platform.logging.loguru_io import Logger
from src.service.booking.app.dto.payment_dto import GatewayPaymentStatus
from src.service.booking.app.interface.i_booking_repo import IBookingRepo
from src.service.booking.app.interface.i_child_lock import IChildLock
from src.service.booking.app.interface.i_payment_gateway import IPaymentGateway
from src.service.booking.app.mapper.booking_store import BookingStore
from src.service.booking.domain.entity.booking_entity import Booking
from src.service.booking.domain.value_object.quantity import Hours, Money


class CompleteTopUpUseCase:
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
            booking_repo=booking_repo, payment_gateway=payment_gateway, child_lock=child_lock
        )

    @Logger.io
    async def complete_top_up(self, *, booking_id: str, payment_id: str) -> Booking:
        """
        Credit a top-up once its checkout has been paid.

        Hours and amount come from the payment the gateway recorded when the
        checkout was opened, never from the caller. A payment id that was
        already credited returns the booking unchanged, so repeated webhook
        deliveries are harmless.

        Raises:
            InvalidStateError: Gateway does not report the payment as succeeded,
                the payment is not a top-up for this booking, or the booking is
                no longer confirmed and fully paid
            PaymentGatewayError: Payment unknown to the gateway
        """
        with self.tracer.start_as_current_span(
            'use_case.complete_top_up',
            attributes={'booking.id': str(booking_id), 'payment.id': payment_id},
        ):
            payment = await self.payment_gateway.get_payment(payment_id=payment_id)
            if payment.status is not GatewayPaymentStatus.SUCCEEDED:
                raise InvalidStateError(
                    f'Top-up payment {payment_id} has not succeeded (status: {payment.status.value})'
                )
            if (
                payment.metadata.get('purpose') != 'top_up'
                or payment.metadata.get('booking_id') != str(booking_id)
            ):
                raise InvalidStateError(
                    f'Payment {payment_id} is not a top-up for booking {booking_id}'
                )
            hours = Hours(payment.metadata.get('hours', 0))
            amount = Money(payment.amount)

            booking = await self.store.get(booking_id)
            async with self.child_lock.hold(booking.child_keys):
                booking = await self.store.get(booking_id)
                if payment_id in booking.applied_top_up_payment_ids:
                    Logger.base.info(
                        f'🔁 [TOP-UP] {booking.reference} already credited for {payment_id}'
                    )
                    return booking
                saved = await self.store.save(
                    booking.apply_top_up(hours=hours, amount=amount, payment_id=payment_id)
                )

            Logger.base.info(
                f'➕ [TOP-UP] {saved.reference} credited {hours} for {amount}: '
                f'total {saved.total_hours}, remaining {saved.remaining_hours}'
            )
            return saved
