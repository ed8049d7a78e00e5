from functools import partial
from typing import Self

from dependency_injector.wiring import Provide, inject
from opentelemetry import trace

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.platform.task.background_task import BackgroundTaskDispatcher
from src.service.booking.app.interface.i_booking_repo import IBookingRepo
from src.service.booking.app.interface.i_child_lock import IChildLock
from src.service.booking.app.interface.i_notification_service import INotificationService
from src.service.booking.app.mapper.booking_store import BookingStore
from src.service.booking.domain.entity.booking_entity import Booking


class ConfirmBookingUseCase:
    def __init__(
        self,
        *,
        booking_repo: IBookingRepo,
        child_lock: IChildLock,
        notification_service: INotificationService,
        background_task_dispatcher: BackgroundTaskDispatcher,
    ) -> None:
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
    async def confirm_booking(self, *, booking_id: str) -> Booking:
        """
        Confirm a fully paid booking, then e-mail the parent in the background.

        Raises:
            NotFoundError: Booking missing or deleted
            InvalidStateError: Cancelled, already confirmed, or not fully paid
        """
        with self.tracer.start_as_current_span(
            'use_case.confirm_booking', attributes={'booking.id': str(booking_id)}
        ):
            booking = await self.store.get(booking_id)
            async with self.child_lock.hold(booking.child_keys):
                # A cancel or payment may have landed while waiting for the lock
                booking = await self.store.get(booking_id)
                confirmed = await self.store.save(booking.confirm())

            Logger.base.info(f'✅ [CONFIRM-BOOKING] {confirmed.reference} confirmed')
            self.dispatcher.dispatch(
                partial(self.notification_service.send_booking_confirmation, booking=confirmed),
                name=f'confirmation-email:{confirmed.reference}',
            )
            return confirmed
