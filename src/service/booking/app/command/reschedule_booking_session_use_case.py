from datetime import date, datetime, time
from typing import Optional, Self

from dependency_injector.wiring import Provide, inject
from opentelemetry import trace

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.booking.app.interface.i_booking_repo import IBookingRepo
from src.service.booking.app.interface.i_child_lock import IChildLock
from src.service.booking.app.mapper.booking_store import BookingStore
from src.service.booking.domain.booking_validator import check_availability, collect_booked_calendar
from src.service.booking.domain.entity.booking_entity import Booking
from src.service.booking.domain.package_constraint import PackageConstraints
from src.service.booking.domain.value_object.time_slot import TimeSlot


class RescheduleBookingSessionUseCase:
    def __init__(
        self,
        *,
        booking_repo: IBookingRepo,
        child_lock: IChildLock,
        package_constraints: PackageConstraints,
    ) -> None:
        self.store = BookingStore(booking_repo)
        self.child_lock = child_lock
        self.package_constraints = package_constraints
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        booking_repo: IBookingRepo = Provide[Container.booking_repo],
        child_lock: IChildLock = Provide[Container.child_lock],
        package_constraints: PackageConstraints = Provide[Container.package_constraints],
    ) -> Self:
        return cls(
            booking_repo=booking_repo,
            child_lock=child_lock,
            package_constraints=package_constraints,
        )

    @Logger.io
    async def reschedule_session(
        self,
        *,
        booking_id: str,
        schedule_id: str,
        date: date,
        start_time: time,
        end_time: time,
        reason: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Booking:
        """
        Move an open session to a new slot.

        The session being moved is left out of the clash check, so shifting
        it within its own time window is allowed. The first original date and
        start time are kept across repeated moves.
        """
        now = now or datetime.now()
        slot = TimeSlot(date=date, start_time=start_time, end_time=end_time)

        with self.tracer.start_as_current_span(
            'use_case.reschedule_booking_session',
            attributes={'booking.id': str(booking_id), 'session.id': str(schedule_id)},
        ):
            booking = await self.store.get(booking_id)
            async with self.child_lock.hold(booking.child_keys):
                booking = await self.store.get(booking_id)
                current = booking.find_schedule(schedule_id)
                self.package_constraints.check_expiry(slot, booking.package_expires_at)
                self.package_constraints.check_notice(slot, now=now)

                existing = await self.store.for_parent(booking.parent_guardian.email)
                calendar = collect_booked_calendar(
                    existing, booking.child_keys, exclude_schedule_id=current.id
                )
                check_availability(
                    [slot], calendar.dates, calendar.time_slots
                ).raise_if_unavailable()

                saved = await self.store.save(
                    booking.reschedule_schedule(
                        schedule_id=current.id,
                        date=date,
                        start_time=start_time,
                        end_time=end_time,
                        reason=reason,
                        today=now.date(),
                    )
                )

            Logger.base.info(
                f'🔁 [RESCHEDULE] {saved.reference} session {current.id}: '
                f'{current.date} {current.start_time:%H:%M} -> {date} {start_time:%H:%M}'
            )
            return saved
