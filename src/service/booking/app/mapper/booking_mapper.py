"""
Booking Mapper

Aggregate <-> wire record. Inbound records go through
Booking.reconstitute, so a stored non-positive total is repaired on read;
outbound records always carry freshly derived ledger and balance fields.
"""

from enum import StrEnum
from typing import List, TypeVar

from uuid_utils import uuid7

from src.platform.exception.exceptions import ValidationError
from src.service.booking.app.dto.booking_wire_dto import (
    BookingRecord,
    ParentGuardianRecord,
    ParticipantRecord,
    ScheduleActivityRecord,
    ScheduleRecord,
    SessionRequest,
)
from src.service.booking.domain.entity.booking_entity import Booking
from src.service.booking.domain.entity.booking_schedule_entity import BookingSchedule
from src.service.booking.domain.enum.booking_mode import BookingMode
from src.service.booking.domain.enum.booking_status import BookingStatus
from src.service.booking.domain.enum.payment_status import PaymentStatus
from src.service.booking.domain.enum.session_status import SessionStatus
from src.service.booking.domain.value_object.booking_reference import BookingReference
from src.service.booking.domain.value_object.parent_guardian import ParentGuardian
from src.service.booking.domain.value_object.participant import Participant
from src.service.booking.domain.value_object.quantity import Hours, Money
from src.service.booking.domain.value_object.schedule_activity import ScheduleActivity


_E = TypeVar('_E', bound=StrEnum)


def _enum(enum_cls: type[_E], value: str, field: str) -> _E:
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError(f'Unknown {field}: {value!r}', field=field)


def _opaque_id(value: str, field: str) -> str:
    # Backends hand out integer keys as well as uuids; both are kept verbatim
    if not value.strip():
        raise ValidationError(f'Missing {field}', field=field)
    return value.strip()


class BookingMapper:
    # ------------------------------------------------------------------
    # Wire -> domain
    # ------------------------------------------------------------------

    @staticmethod
    def guardian_from(record: ParentGuardianRecord) -> ParentGuardian:
        return ParentGuardian(
            first_name=record.first_name.strip(),
            last_name=record.last_name.strip(),
            email=record.email.strip().lower(),
            phone=record.phone,
            address=record.address,
            postcode=record.postcode,
            county=record.county,
            emergency_contact=record.emergency_contact,
        )

    @staticmethod
    def participants_from(records: List[ParticipantRecord]) -> List[Participant]:
        return [
            Participant(
                first_name=r.first_name.strip(),
                last_name=r.last_name.strip(),
                date_of_birth=r.date_of_birth,
                child_id=r.child_id,
                medical_info=r.medical_info,
                special_needs=r.special_needs,
            )
            for r in records
        ]

    @staticmethod
    def activities_from(records: List[ScheduleActivityRecord]) -> List[ScheduleActivity]:
        return [
            ScheduleActivity(
                name=r.name,
                activity_id=r.activity_id,
                duration_hours=Hours(r.duration_hours) if r.duration_hours is not None else None,
            )
            for r in records
        ]

    @classmethod
    def new_schedule_from(cls, request: SessionRequest) -> BookingSchedule:
        return BookingSchedule.create(
            date=request.date,
            start_time=request.start_time,
            end_time=request.end_time,
            trainer_id=request.trainer_id,
            activities=cls.activities_from(request.activities),
            itinerary_notes=request.itinerary_notes,
            location=request.location,
            mode_key=request.mode_key or BookingMode.SESSIONS.value,
        )

    @classmethod
    def schedule_from(cls, record: ScheduleRecord) -> BookingSchedule:
        return BookingSchedule(
            id=_opaque_id(record.id, 'schedule id') if record.id else str(uuid7()),
            date=record.date,
            start_time=record.start_time,
            end_time=record.end_time,
            status=_enum(SessionStatus, record.status, 'session status'),
            trainer_id=record.trainer_id,
            activities=cls.activities_from(record.activities),
            itinerary_notes=list(record.itinerary_notes),
            location=record.location,
            mode_key=record.mode_key,
            original_date=record.original_date,
            original_start_time=record.original_start_time,
            rescheduled_at=record.rescheduled_at,
            reschedule_reason=record.reschedule_reason,
            cancellation_reason=record.cancellation_reason,
            cancelled_at=record.cancelled_at,
            completed_at=record.completed_at,
        )

    @classmethod
    def to_domain(cls, record: BookingRecord) -> Booking:
        return Booking.reconstitute(
            total_hours=Hours(max(record.total_hours, 0)),
            schedules=[cls.schedule_from(s) for s in record.schedules],
            id=_opaque_id(record.id, 'booking id'),
            reference=BookingReference.parse(record.reference),
            parent_guardian=cls.guardian_from(record.parent_guardian),
            participants=cls.participants_from(record.participants),
            total_price=Money(record.total_price),
            status=_enum(BookingStatus, record.status, 'booking status'),
            payment_status=_enum(PaymentStatus, record.payment_status, 'payment status'),
            paid_amount=Money(record.paid_amount),
            discount_amount=Money(record.discount_amount),
            discount_reason=record.discount_reason,
            recorded_booked_hours=Hours(record.booked_hours),
            recorded_used_hours=Hours(record.used_hours),
            applied_top_up_payment_ids=list(record.applied_top_up_payment_ids),
            package_id=record.package_id,
            package_slug=record.package_slug,
            package_name=record.package_name,
            mode_key=record.mode_key or BookingMode.SESSIONS.value,
            start_date=record.start_date,
            package_expires_at=record.package_expires_at,
            notes=record.notes,
            created_at=record.created_at,
            updated_at=record.updated_at,
            cancelled_at=record.cancelled_at,
            cancellation_reason=record.cancellation_reason,
            deleted_at=record.deleted_at,
        )

    # ------------------------------------------------------------------
    # Domain -> wire
    # ------------------------------------------------------------------

    @staticmethod
    def schedule_to_record(schedule: BookingSchedule) -> ScheduleRecord:
        return ScheduleRecord(
            id=str(schedule.id),
            date=schedule.date,
            start_time=schedule.start_time,
            end_time=schedule.end_time,
            status=schedule.status.value,
            trainer_id=schedule.trainer_id,
            activities=[
                ScheduleActivityRecord(
                    name=a.name,
                    activity_id=a.activity_id,
                    duration_hours=(
                        float(a.duration_hours) if a.duration_hours is not None else None
                    ),
                )
                for a in schedule.activities
            ],
            itinerary_notes=list(schedule.itinerary_notes),
            location=schedule.location,
            mode_key=schedule.mode_key,
            original_date=schedule.original_date,
            original_start_time=schedule.original_start_time,
            rescheduled_at=schedule.rescheduled_at,
            reschedule_reason=schedule.reschedule_reason,
            cancellation_reason=schedule.cancellation_reason,
            cancelled_at=schedule.cancelled_at,
            completed_at=schedule.completed_at,
        )

    @classmethod
    def to_record(cls, booking: Booking) -> BookingRecord:
        guardian = booking.parent_guardian
        ledger = booking.ledger
        return BookingRecord(
            id=str(booking.id),
            reference=str(booking.reference),
            status=booking.status.value,
            payment_status=booking.payment_status.value,
            parent_guardian=ParentGuardianRecord(
                first_name=guardian.first_name,
                last_name=guardian.last_name,
                email=guardian.email,
                phone=guardian.phone,
                address=guardian.address,
                postcode=guardian.postcode,
                county=guardian.county,
                emergency_contact=guardian.emergency_contact,
            ),
            participants=[
                ParticipantRecord(
                    first_name=p.first_name,
                    last_name=p.last_name,
                    date_of_birth=p.date_of_birth,
                    child_id=p.child_id,
                    medical_info=p.medical_info,
                    special_needs=p.special_needs,
                )
                for p in booking.participants
            ],
            schedules=[cls.schedule_to_record(s) for s in booking.schedules],
            total_hours=float(ledger.total),
            booked_hours=float(ledger.booked),
            used_hours=float(ledger.used),
            remaining_hours=float(ledger.remaining),
            total_price=float(booking.total_price),
            paid_amount=float(booking.paid_amount),
            outstanding_amount=float(booking.outstanding_amount),
            discount_amount=float(booking.discount_amount),
            discount_reason=booking.discount_reason,
            applied_top_up_payment_ids=list(booking.applied_top_up_payment_ids),
            package_id=booking.package_id,
            package_slug=booking.package_slug,
            package_name=booking.package_name,
            mode_key=booking.mode_key,
            start_date=booking.start_date,
            package_expires_at=booking.package_expires_at,
            notes=booking.notes,
            created_at=booking.created_at,
            updated_at=booking.updated_at,
            cancelled_at=booking.cancelled_at,
            cancellation_reason=booking.cancellation_reason,
            deleted_at=booking.deleted_at,
        )
