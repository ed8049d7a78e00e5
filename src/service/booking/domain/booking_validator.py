"""
Scheduling Conflict & Duplicate-Package Validator

Pure checks over a snapshot supplied by the caller. Nothing here reads
storage, so two concurrent requests can both pass against a stale snapshot:
callers must hold the per-child lock across check and write.

Rules:
- one active package per child, whatever the package type
- no second session on a date the child already has booked
- no overlapping [start, end) windows on the same date
- only the sessions mode is live; other modes warn but do not block
"""

from collections.abc import Collection, Iterable, Sequence
from datetime import date, time
from typing import Optional

import attrs

from src.platform.exception.exceptions import DuplicatePackageError, SchedulingConflictError
from src.service.booking.domain.entity.booking_entity import Booking
from src.service.booking.domain.enum.booking_mode import BookingMode
from src.service.booking.domain.enum.booking_status import BookingStatus
from src.service.booking.domain.value_object.participant import Participant
from src.service.booking.domain.value_object.time_slot import TimeSlot


def display_date(day: date) -> str:
    """1 January 2099"""
    return f'{day.day} {day:%B %Y}'


@attrs.define(frozen=True)
class SessionConflict:
    date: date
    start_time: time
    end_time: time
    reason: str

    def __str__(self) -> str:
        return f'{self.date.isoformat()} {self.start_time:%H:%M}-{self.end_time:%H:%M}: {self.reason}'


@attrs.define(frozen=True)
class DuplicatePackageCheck:
    is_duplicate: bool
    conflicting_bookings: tuple[Booking, ...] = ()
    message: Optional[str] = None
    expires_on: Optional[str] = None

    @property
    def conflicting_references(self) -> list[str]:
        return [str(b.reference) for b in self.conflicting_bookings]

    def raise_if_duplicate(self) -> None:
        if self.is_duplicate:
            raise DuplicatePackageError(
                self.message or 'This child already has an active package',
                conflicting_references=self.conflicting_references,
                expires_on=self.expires_on,
            )


@attrs.define(frozen=True)
class AvailabilityCheck:
    is_available: bool
    conflicts: tuple[SessionConflict, ...] = ()

    @property
    def message(self) -> Optional[str]:
        if self.is_available:
            return None
        lines = '; '.join(str(c) for c in self.conflicts)
        return f'Some sessions cannot be booked: {lines}'

    def raise_if_unavailable(self) -> None:
        if not self.is_available:
            raise SchedulingConflictError(self.message or '', conflicts=self.conflicts)


@attrs.define(frozen=True)
class ModeCompatibilityCheck:
    is_compatible: bool
    suggested_mode: Optional[str] = None
    warning: Optional[str] = None


@attrs.define(frozen=True)
class BookedCalendar:
    dates: frozenset[date] = frozenset()
    time_slots: tuple[TimeSlot, ...] = ()


@attrs.define(frozen=True)
class ValidationIssue:
    code: str
    message: str


@attrs.define(frozen=True)
class BookingValidationResult:
    duplicate: DuplicatePackageCheck
    availability: AvailabilityCheck
    mode: ModeCompatibilityCheck

    @property
    def errors(self) -> list[ValidationIssue]:
        issues = []
        if self.duplicate.is_duplicate:
            issues.append(ValidationIssue('duplicate_package', self.duplicate.message or ''))
        issues.extend(
            ValidationIssue('scheduling_conflict', str(c)) for c in self.availability.conflicts
        )
        return issues

    @property
    def warnings(self) -> list[str]:
        return [self.mode.warning] if self.mode.warning else []

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def raise_for_errors(self) -> None:
        self.duplicate.raise_if_duplicate()
        self.availability.raise_if_unavailable()


def _duplicate_message(booking: Booking) -> str:
    package_name = booking.package_name or booking.package_slug or str(booking.reference)
    if booking.package_expires_at:
        expiry = f'The current package expires on {display_date(booking.package_expires_at)}.'
    else:
        expiry = 'The current package has no expiry date.'
    return (
        f'This child already has an active package ({package_name}). '
        'According to our policy, each child can only have one active package at a time. '
        f'{expiry} '
        'Please complete or cancel the existing package, or wait until it expires '
        'before booking a new package.'
    )


def check_duplicate_package(
    participants: Sequence[Participant],
    existing_bookings: Iterable[Booking],
    *,
    today: date,
    exclude_booking_id: Optional[str] = None,
) -> DuplicatePackageCheck:
    existing = [
        b for b in existing_bookings if exclude_booking_id is None or b.id != exclude_booking_id
    ]
    conflicting: dict[str, Booking] = {}
    for participant in participants:
        for booking in existing:
            if booking.covers_child(participant.child_key) and booking.is_active(today):
                conflicting.setdefault(str(booking.id), booking)

    if not conflicting:
        return DuplicatePackageCheck(is_duplicate=False)

    first = next(iter(conflicting.values()))
    return DuplicatePackageCheck(
        is_duplicate=True,
        conflicting_bookings=tuple(conflicting.values()),
        message=_duplicate_message(first),
        expires_on=display_date(first.package_expires_at) if first.package_expires_at else None,
    )


def check_availability(
    schedules: Sequence[TimeSlot],
    booked_dates: Collection[date],
    booked_time_slots: Sequence[TimeSlot],
) -> AvailabilityCheck:
    conflicts: list[SessionConflict] = []
    accepted: list[TimeSlot] = []

    for slot in schedules:
        reason = None
        clash = next((s for s in booked_time_slots if slot.overlaps(s)), None)
        if clash is not None:
            reason = f'overlaps an existing session ({clash.start_time:%H:%M}-{clash.end_time:%H:%M})'
        elif slot.date in booked_dates:
            reason = f'a session is already booked on {display_date(slot.date)}'
        elif any(slot.overlaps(other) for other in accepted):
            reason = 'overlaps another session in this request'
        elif any(slot.date == other.date for other in accepted):
            reason = f'another session in this request is already on {display_date(slot.date)}'

        if reason is None:
            accepted.append(slot)
        else:
            conflicts.append(
                SessionConflict(
                    date=slot.date, start_time=slot.start_time, end_time=slot.end_time, reason=reason
                )
            )

    return AvailabilityCheck(is_available=not conflicts, conflicts=tuple(conflicts))


def collect_booked_calendar(
    existing_bookings: Iterable[Booking],
    child_keys: Collection[str],
    *,
    exclude_schedule_id: Optional[str] = None,
) -> BookedCalendar:
    """Dates and windows already taken by the given children"""
    dates: set[date] = set()
    slots: list[TimeSlot] = []
    for booking in existing_bookings:
        if booking.status is BookingStatus.CANCELLED or booking.is_deleted:
            continue
        if not any(booking.covers_child(key) for key in child_keys):
            continue
        for schedule in booking.schedules:
            if not schedule.status.consumes_hours:
                continue
            if exclude_schedule_id is not None and str(schedule.id) == str(exclude_schedule_id):
                continue
            dates.add(schedule.date)
            if (slot := schedule.time_slot) is not None:
                slots.append(slot)
    return BookedCalendar(dates=frozenset(dates), time_slots=tuple(slots))


def check_mode_compatibility(
    mode_key: Optional[str], package_modes: Optional[Collection[str]] = None
) -> ModeCompatibilityCheck:
    fallback = BookingMode.SESSIONS.value
    if not mode_key:
        return ModeCompatibilityCheck(is_compatible=True, suggested_mode=fallback)

    try:
        mode = BookingMode(mode_key)
    except ValueError:
        return ModeCompatibilityCheck(
            is_compatible=False,
            suggested_mode=fallback,
            warning=f'Unknown booking mode "{mode_key}". Sessions will be used instead.',
        )

    if not mode.is_enabled:
        return ModeCompatibilityCheck(
            is_compatible=False,
            suggested_mode=fallback,
            warning=f'{mode.display_name} bookings are not available yet. '
            'Please book this package as Sessions instead.',
        )

    if package_modes is not None and mode.value not in package_modes:
        return ModeCompatibilityCheck(
            is_compatible=False,
            suggested_mode=fallback,
            warning=f'This package is not offered as {mode.display_name}. '
            'Sessions will be used instead.',
        )

    return ModeCompatibilityCheck(is_compatible=True, suggested_mode=mode.value)


def validate_booking(
    *,
    participants: Sequence[Participant],
    proposed_slots: Sequence[TimeSlot],
    existing_bookings: Sequence[Booking],
    today: date,
    mode_key: Optional[str] = None,
    package_modes: Optional[Collection[str]] = None,
    calendar: Optional[BookedCalendar] = None,
    exclude_booking_id: Optional[str] = None,
) -> BookingValidationResult:
    """Run every check; only duplicates and conflicts make the result invalid"""
    if calendar is None:
        others = [b for b in existing_bookings if b.id != exclude_booking_id]
        calendar = collect_booked_calendar(others, [p.child_key for p in participants])
    return BookingValidationResult(
        duplicate=check_duplicate_package(
            participants, existing_bookings, today=today, exclude_booking_id=exclude_booking_id
        ),
        availability=check_availability(proposed_slots, calendar.dates, calendar.time_slots),
        mode=check_mode_compatibility(mode_key, package_modes),
    )
