"""
Builders shared by the booking unit tests

Every date is pinned around NOW (a Monday morning) so notice-period rules
are deterministic.
"""

from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any, List, Optional

from src.service.booking.app.dto.booking_wire_dto import (
    CreateBookingRequest,
    ParentGuardianRecord,
    ParticipantRecord,
    SessionRequest,
)
from src.service.booking.domain.entity.booking_entity import Booking
from src.service.booking.domain.entity.booking_schedule_entity import BookingSchedule
from src.service.booking.domain.value_object.booking_reference import BookingReference
from src.service.booking.domain.value_object.parent_guardian import ParentGuardian
from src.service.booking.domain.value_object.participant import Participant
from src.service.booking.domain.value_object.quantity import Hours, Money


NOW = datetime(2030, 6, 3, 9, 0)
TODAY = NOW.date()
NEXT_WEEK = TODAY + timedelta(days=7)
FAR_EXPIRY = date(2099, 1, 1)

PARENT_EMAIL = 'jane.doe@example.com'
CHILD_ID = 'child-001'
OTHER_CHILD_ID = 'child-002'


def make_guardian(email: str = PARENT_EMAIL) -> ParentGuardian:
    return ParentGuardian(
        first_name='Jane', last_name='Doe', email=email, postcode='SW1A 1AA'
    )


def make_participant(child_id: str = CHILD_ID, first_name: str = 'Tom') -> Participant:
    return Participant(
        first_name=first_name, last_name='Doe', date_of_birth=date(2020, 4, 2), child_id=child_id
    )


def make_schedule(
    day: date = NEXT_WEEK, start: time = time(10, 0), end: time = time(12, 0)
) -> BookingSchedule:
    return BookingSchedule.create(date=day, start_time=start, end_time=end)


def make_booking(
    *,
    total_hours: str = '10',
    total_price: str = '100',
    schedules: Optional[List[BookingSchedule]] = None,
    participants: Optional[List[Participant]] = None,
    package_expires_at: Optional[date] = FAR_EXPIRY,
    package_name: str = 'Ten Hour Package',
    email: str = PARENT_EMAIL,
) -> Booking:
    return Booking.create(
        reference=BookingReference('CAMS-SW1A1AA-THP-004211'),
        parent_guardian=make_guardian(email),
        participants=participants or [make_participant()],
        total_hours=Hours(total_hours),
        total_price=Money(total_price),
        schedules=schedules or [],
        package_name=package_name,
        package_slug='ten-hour-package',
        package_expires_at=package_expires_at,
    )


def make_paid_confirmed_booking(**kwargs: Any) -> Booking:
    booking = make_booking(**kwargs)
    return booking.apply_payment(amount=booking.total_price.amount).confirm()


def session_request(
    day: date = NEXT_WEEK, start: str = '10:00', end: str = '12:00', **extra: Any
) -> SessionRequest:
    return SessionRequest.model_validate(
        {'date': day.isoformat(), 'startTime': start, 'endTime': end, **extra}
    )


def create_request(
    *,
    child_id: str = CHILD_ID,
    total_hours: float = 10,
    package_base_price: Optional[float] = 300,
    sessions: Optional[List[SessionRequest]] = None,
    mode_key: Optional[str] = None,
    package_expires_at: Optional[date] = FAR_EXPIRY,
) -> CreateBookingRequest:
    return CreateBookingRequest(
        parent_guardian=ParentGuardianRecord(
            first_name='Jane', last_name='Doe', email=PARENT_EMAIL, postcode='SW1A 1AA'
        ),
        participants=[
            ParticipantRecord(
                first_name='Tom', last_name='Doe', date_of_birth=date(2020, 4, 2), child_id=child_id
            )
        ],
        schedules=sessions if sessions is not None else [session_request()],
        total_hours=total_hours,
        package_base_price=package_base_price,
        package_slug='ten-hour-package',
        package_name='Ten Hour Package',
        mode_key=mode_key,
        package_expires_at=package_expires_at,
    )


def decimal(value: str) -> Decimal:
    return Decimal(value)
