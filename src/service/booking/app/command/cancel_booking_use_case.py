from functools import partial
from typing import Self

from dependency_injector.wiring import Provide, inject
from opentelemetry import trace

from src.platform.config.di import Container
from src.platform.exception.exceptions import ValidationError
from src.platform.logging.loguru_io import Logger
from src.platform.task.background_task import BackgroundTaskDispatcher
from src.service.booking.app.interface.i_booking_repo import IBookingRepo
from src.service.booking.app.interface.i_child_lock import IChildLock
from src.service.booking.app.interface.i_notification_service import INotificationService
from src.service.booking.app.mapper.booking_mapper import BookingMapper
from src.service.booking.app.mapper.booking_store import BookingStore
from src.service.booking.domain.entity.booking_entity import Booking


class CancelBookingUseCase:
    """
    Cancel a whole booking.

    Flow:
    1. Reject a blank reason before touching anything
    2. Dry-run Booking.cancel so state errors surface before the write
    3. IBookingRepo.cancel applies status, refund marker and session
       cancellations as one atomic write
    4. Cancellation e-mail is fire-and-forget
    """

    def __init__(
        self,
        *,
        booking_repo: IBookingRepo,
        child_lock: IChildLock,
        notification_service: INotificationService,
        background_task_dispatcher: BackgroundTaskDispatcher,
    ) -> None:
        self.booking_repo = booking_repo
        self.store = BookingStore(booking_repo)
        self.child_lock = child_lock
        self.notification_service = notification_service
        self.dispatcher = background_task_dispatcher
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        booking_repo: IBookingRepo = Provide[Container.booking_repo],
        child_lock: IChildLock = Provide[Container.child_lock],
        notification_service: INotificationService = Provide[Container.notification_service],
        background_task_dispatcher: BackgroundTaskDispatcher = Provide[
            Container.background_task_dispatcher
        ],
    ) -> Self:
        return cls(
            booking_repo=booking_repo,
            child_lock=child_lock,
            notification_service=notification_service,
            background_task_dispatcher=background_task_dispatcher,
        )

    @Logger.io
    async def cancel_booking(self, *, booking_id: str, reason: str) -> Booking:
        if not reason or not reason.strip():
            raise ValidationError('A cancellation reason is required', field='reason')
        reason = reason.strip()

        with self.tracer.start_as_current_span(
            'use_case.cancel_booking', attributes={'booking.id': str(booking_id)}
        ):
            booking = await self.store.get(booking_id)
            async with self.child_lock.hold(booking.child_keys):
                booking = await self.store.get(booking_id)
                booking.cancel(reason=reason)
                record = await self.booking_repo.cancel(booking_id=str(booking.id), reason=reason)
                cancelled = BookingMapper.to_domain(record)

            Logger.base.info(
                f'🚫 [CANCEL-BOOKING] {cancelled.reference} cancelled '
                f'(payment: {cancelled.payment_status.value}): {reason}'
            )
            self.dispatcher.dispatch(
                partial(
                    self.notification_service.send_booking_cancellation,
                    booking=cancelled,
                    reason=reason,
                ),
                name=f'cancellation-email:{cancelled.reference}',
            )
            return cancelled
