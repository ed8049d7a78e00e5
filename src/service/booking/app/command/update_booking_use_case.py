from datetime import datetime
from typing import Optional, Self

from dependency_injector.wiring import Provide, inject
from opentelemetry import trace

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.booking.app.dto.booking_result_dto import BookingResult
from src.service.booking.app.dto.booking_wire_dto import UpdateBookingRequest
from src.service.booking.app.interface.i_booking_repo import IBookingRepo
from src.service.booking.app.interface.i_child_lock import IChildLock
from src.service.booking.app.mapper.booking_mapper import BookingMapper
from src.service.booking.app.mapper.booking_store import BookingStore
from src.service.booking.domain.booking_factory import BookingFactory
from src.service.booking.domain.booking_validator import validate_booking
from src.service.booking.domain.package_constraint import PackageConstraints
from src.service.booking.domain.value_object.quantity import Money


class UpdateBookingUseCase:
    """
    Edit participants, sessions, price basis or notes of an existing booking.

    Flow:
    1. Load the booking (NotFoundError when missing or deleted)
    2. New `schedules` replace the open sessions only; completed, no-show
       and cancelled sessions stay as history
    3. Re-run duplicate / availability checks against the parent's other bookings
    4. Reprice when a package base price is supplied
    5. Persist through Booking.revise (ledger and payment invariants re-checked)
    """

    def __init__(
        self,
        *,
        booking_repo: IBookingRepo,
        child_lock: IChildLock,
        booking_factory: BookingFactory,
        package_constraints: PackageConstraints,
    ) -> None:
        self.store = BookingStore(booking_repo)
        self.child_lock = child_lock
        self.booking_factory = booking_factory
        self.package_constraints = package_constraints
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        booking_repo: IBookingRepo = Provide[Container.booking_repo],
        child_lock: IChildLock = Provide[Container.child_lock],
        booking_factory: BookingFactory = Provide[Container.booking_factory],
        package_constraints: PackageConstraints = Provide[Container.package_constraints],
    ) -> Self:
        return cls(
            booking_repo=booking_repo,
            child_lock=child_lock,
            booking_factory=booking_factory,
            package_constraints=package_constraints,
        )

    @Logger.io
    async def update_booking(
        self,
        *,
        booking_id: str,
        request: UpdateBookingRequest,
        now: Optional[datetime] = None,
    ) -> BookingResult:
        now = now or datetime.now()
        with self.tracer.start_as_current_span(
            'use_case.update_booking', attributes={'booking.id': str(booking_id)}
        ):
            current = await self.store.get(booking_id)
            participants = (
                BookingMapper.participants_from(request.participants)
                if request.participants is not None
                else current.participants
            )
            fresh = (
                [BookingMapper.new_schedule_from(s) for s in request.schedules]
                if request.schedules is not None
                else []
            )
            lock_keys = {*current.child_keys, *(p.child_key for p in participants)}

            async with self.child_lock.hold(sorted(lock_keys)):
                booking = await self.store.get(booking_id)
                schedules = None
                if request.schedules is not None:
                    schedules = [s for s in booking.schedules if not s.status.is_open] + fresh

                existing = await self.store.for_parent(booking.parent_guardian.email)
                validation = validate_booking(
                    participants=participants,
                    proposed_slots=[s.time_slot for s in fresh if s.time_slot is not None],
                    existing_bookings=existing,
                    today=now.date(),
                    exclude_booking_id=booking.id,
                )
                validation.raise_for_errors()
                for schedule in fresh:
                    self.package_constraints.check_expiry(
                        schedule.time_slot, booking.package_expires_at
                    )
                    self.package_constraints.check_notice(schedule.time_slot, now=now)

                quote = self.booking_factory.reprice(
                    booking,
                    participants=participants,
                    schedules=schedules if schedules is not None else booking.schedules,
                    package_base_price=(
                        Money(request.package_base_price)
                        if request.package_base_price is not None
                        else None
                    ),
                    today=now.date(),
                )
                revised = booking.revise(
                    participants=participants if request.participants is not None else None,
                    schedules=schedules,
                    total_price=quote.final_price if quote else None,
                    discount_amount=quote.discount.amount if quote else None,
                    discount_reason=quote.discount.reason if quote else None,
                    notes=request.notes,
                )
                saved = await self.store.save(revised)

            Logger.base.info(
                f'✏️ [UPDATE-BOOKING] {saved.reference}: {len(saved.schedules)} sessions, '
                f'{saved.booked_hours}/{saved.total_hours} booked'
            )
            return BookingResult(booking=saved, warnings=validation.warnings)
