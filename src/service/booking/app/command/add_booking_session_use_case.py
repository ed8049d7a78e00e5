from datetime import datetime
from typing import Optional, Self

from dependency_injector.wiring import Provide, inject
from opentelemetry import trace

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.booking.app.dto.booking_result_dto import BookingResult
from src.service.booking.app.dto.booking_wire_dto import SessionRequest
from src.service.booking.app.interface.i_booking_repo import IBookingRepo
from src.service.booking.app.interface.i_child_lock import IChildLock
from src.service.booking.app.mapper.booking_mapper import BookingMapper
from src.service.booking.app.mapper.booking_store import BookingStore
from src.service.booking.domain.booking_validator import (
    check_availability,
    check_mode_compatibility,
    collect_booked_calendar,
)
from src.service.booking.domain.package_constraint import PackageConstraints


class AddBookingSessionUseCase:
    """
    Schedule one more session against a package's remaining hours.

    Flow:
    1. Lock the booking's children and reload the booking
    2. Package rules: not expired, notice period, hours remaining
    3. No clash with any session already booked for these children
    4. Booking.add_schedule and persist (draft -> pending on first session)
    """

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
    async def add_session(
        self,
        *,
        booking_id: str,
        session: SessionRequest,
        now: Optional[datetime] = None,
    ) -> BookingResult:
        now = now or datetime.now()
        schedule = BookingMapper.new_schedule_from(session)
        mode = check_mode_compatibility(session.mode_key)
        warnings = [mode.warning] if mode.warning else []

        with self.tracer.start_as_current_span(
            'use_case.add_booking_session',
            attributes={'booking.id': str(booking_id), 'session.date': session.date.isoformat()},
        ):
            booking = await self.store.get(booking_id)
            async with self.child_lock.hold(booking.child_keys):
                booking = await self.store.get(booking_id)
                self.package_constraints.check(
                    schedule.time_slot,
                    now=now,
                    package_expires_at=booking.package_expires_at,
                    session_hours=schedule.duration,
                    remaining_hours=booking.remaining_hours,
                )

                existing = await self.store.for_parent(booking.parent_guardian.email)
                calendar = collect_booked_calendar(existing, booking.child_keys)
                check_availability(
                    [schedule.time_slot], calendar.dates, calendar.time_slots
                ).raise_if_unavailable()

                saved = await self.store.save(
                    booking.add_schedule(schedule=schedule, today=now.date())
                )

            for warning in warnings:
                Logger.base.warning(f'⚠️ [ADD-SESSION] {warning}')
            Logger.base.info(
                f'📅 [ADD-SESSION] {saved.reference} +{schedule.duration} on {schedule.date}, '
                f'remaining {saved.remaining_hours}'
            )
            return BookingResult(booking=saved, warnings=warnings)
