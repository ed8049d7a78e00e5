from datetime import datetime
from typing import Optional, Self

from dependency_injector.wiring import Provide, inject
from opentelemetry import trace

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.exception.exceptions import ConflictError
from src.platform.logging.loguru_io import Logger
from src.service.booking.app.dto.booking_result_dto import BookingResult
from src.service.booking.app.dto.booking_wire_dto import CreateBookingRequest
from src.service.booking.app.interface.i_booking_repo import IBookingRepo
from src.service.booking.app.interface.i_child_lock import IChildLock
from src.service.booking.app.mapper.booking_mapper import BookingMapper
from src.service.booking.app.mapper.booking_store import BookingStore
from src.service.booking.domain.booking_factory import BookingFactory
from src.service.booking.domain.booking_validator import validate_booking
from src.service.booking.domain.package_constraint import PackageConstraints
from src.service.booking.domain.value_object.booking_reference import BookingReference
from src.service.booking.domain.value_object.quantity import Hours, Money


class CreateBookingUseCase:
    """
    Create a new package booking.

    Flow:
    1. Normalize the request into domain objects (fails fast on bad input)
    2. Lock every child on the booking
    3. Read the parent's bookings and validate against that snapshot:
       - one active package per child (DuplicatePackageError)
       - no clashing sessions (SchedulingConflictError)
       - unsupported modes only warn
    4. Check notice period / expiry for every proposed session
    5. Price, build and persist with a unique reference
    """

    def __init__(
        self,
        *,
        booking_repo: IBookingRepo,
        child_lock: IChildLock,
        booking_factory: BookingFactory,
        package_constraints: PackageConstraints,
    ) -> None:
        self.booking_repo = booking_repo
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

    async def _unique_reference(
        self, *, postcode: Optional[str], package_slug: Optional[str]
    ) -> BookingReference:
        for _ in range(settings.REFERENCE_MAX_ATTEMPTS):
            reference = BookingReference.generate(
                prefix=settings.BOOKING_REFERENCE_PREFIX,
                postcode=postcode,
                package_slug=package_slug,
            )
            if not await self.booking_repo.reference_exists(reference=str(reference)):
                return reference
        raise ConflictError('Could not generate a unique booking reference, please try again')

    @Logger.io
    async def create_booking(
        self, *, request: CreateBookingRequest, now: Optional[datetime] = None
    ) -> BookingResult:
        now = now or datetime.now()
        today = now.date()

        guardian = BookingMapper.guardian_from(request.parent_guardian)
        guardian.validate()
        participants = BookingMapper.participants_from(request.participants)
        schedules = [BookingMapper.new_schedule_from(s) for s in request.schedules]
        slots = [s.time_slot for s in schedules if s.time_slot is not None]

        with self.tracer.start_as_current_span(
            'use_case.create_booking',
            attributes={
                'booking.parent_email': guardian.email,
                'booking.participants': len(participants),
                'booking.sessions': len(schedules),
            },
        ):
            async with self.child_lock.hold([p.child_key for p in participants]):
                existing = await self.store.for_parent(guardian.email)
                validation = validate_booking(
                    participants=participants,
                    proposed_slots=slots,
                    existing_bookings=existing,
                    today=today,
                    mode_key=request.mode_key,
                    package_modes=request.package_modes,
                )
                validation.raise_for_errors()
                for warning in validation.warnings:
                    Logger.base.warning(f'⚠️ [CREATE-BOOKING] {warning}')

                for slot in slots:
                    self.package_constraints.check_expiry(slot, request.package_expires_at)
                    self.package_constraints.check_notice(slot, now=now)

                reference = await self._unique_reference(
                    postcode=guardian.postcode, package_slug=request.package_slug
                )
                booking = self.booking_factory.build(
                    reference=reference,
                    parent_guardian=guardian,
                    participants=participants,
                    schedules=schedules,
                    total_hours=Hours(request.total_hours),
                    today=today,
                    package_base_price=(
                        Money(request.package_base_price)
                        if request.package_base_price is not None
                        else None
                    ),
                    package_id=request.package_id,
                    package_slug=request.package_slug,
                    package_name=request.package_name,
                    mode_key=validation.mode.suggested_mode,
                    start_date=request.start_date,
                    package_expires_at=request.package_expires_at,
                    notes=request.notes,
                )
                saved = await self.store.add(booking)

            Logger.base.info(
                f'📝 [CREATE-BOOKING] {saved.reference} for {guardian.email}: '
                f'{saved.total_hours} / {saved.total_price} {settings.DEFAULT_CURRENCY}'
            )
            return BookingResult(booking=saved, warnings=validation.warnings)
