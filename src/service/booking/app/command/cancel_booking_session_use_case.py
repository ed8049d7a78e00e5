from typing import Self

from dependency_injector.wiring import Provide, inject
from opentelemetry import trace

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.booking.app.interface.i_booking_repo import IBookingRepo
from src.service.booking.app.interface.i_child_lock import IChildLock
from src.service.booking.app.mapper.booking_store import BookingStore
from src.service.booking.domain.entity.booking_entity import Booking


class CancelBookingSessionUseCase:
    """Cancel one open session; its hours go back to the package"""

    def __init__(self, *, booking_repo: IBookingRepo, child_lock: IChildLock) -> None:
        self.store = BookingStore(booking_repo)
        self.child_lock = child_lock
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        booking_repo: IBookingRepo = Provide[Container.booking_repo],
        child_lock: IChildLock = Provide[Container.child_lock],
    ) -> Self:
        return cls(booking_repo=booking_repo, child_lock=child_lock)

    @Logger.io
    async def cancel_session(
        self, *, booking_id: str, schedule_id: str, reason: str
    ) -> Booking:
        with self.tracer.start_as_current_span(
            'use_case.cancel_booking_session',
            attributes={'booking.id': str(booking_id), 'session.id': str(schedule_id)},
        ):
            booking = await self.store.get(booking_id)
            async with self.child_lock.hold(booking.child_keys):
                booking = await self.store.get(booking_id)
                saved = await self.store.save(
                    booking.cancel_schedule(schedule_id=schedule_id, reason=reason)
                )

            Logger.base.info(
                f'🚫 [CANCEL-SESSION] {saved.reference} session {schedule_id}: '
                f'remaining {saved.remaining_hours}'
            )
            return saved
