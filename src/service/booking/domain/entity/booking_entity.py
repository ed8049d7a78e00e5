from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Any, List, Optional

import attrs
from uuid_utils import uuid7

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import InvalidStateError, NotFoundError, ValidationError
from src.platform.logging.loguru_io import Logger
from src.service.booking.domain.entity.booking_schedule_entity import BookingSchedule
from src.service.booking.domain.enum.booking_mode import BookingMode
from src.service.booking.domain.enum.booking_status import BookingStatus
from src.service.booking.domain.enum.payment_status import PaymentStatus
from src.service.booking.domain.hours_ledger import HoursLedger, reconcile_total_hours
from src.service.booking.domain.value_object.booking_reference import BookingReference
from src.service.booking.domain.value_object.parent_guardian import ParentGuardian
from src.service.booking.domain.value_object.participant import Participant
from src.service.booking.domain.value_object.quantity import Hours, Money, to_decimal


@attrs.define
class Booking:
    id: str
    reference: BookingReference
    parent_guardian: ParentGuardian
    participants: List[Participant]
    total_hours: Hours
    total_price: Money
    status: BookingStatus = BookingStatus.DRAFT
    payment_status: PaymentStatus = PaymentStatus.PENDING
    paid_amount: Money = attrs.field(factory=Money.zero)
    discount_amount: Money = attrs.field(factory=Money.zero)
    discount_reason: Optional[str] = None
    schedules: List[BookingSchedule] = attrs.field(factory=list)
    # Only consulted while the booking has no schedules
    recorded_booked_hours: Hours = attrs.field(factory=Hours.zero)
    recorded_used_hours: Hours = attrs.field(factory=Hours.zero)
    # Gateway payment ids already credited by apply_top_up
    applied_top_up_payment_ids: List[str] = attrs.field(factory=list)
    package_id: Optional[str] = None
    package_slug: Optional[str] = None
    package_name: Optional[str] = None
    mode_key: str = BookingMode.SESSIONS.value
    start_date: Optional[date] = None
    package_expires_at: Optional[date] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = None
    deleted_at: Optional[datetime] = None

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    @Logger.io
    def create(
        cls,
        *,
        reference: BookingReference,
        parent_guardian: ParentGuardian,
        participants: List[Participant],
        total_hours: Hours,
        total_price: Money,
        discount_amount: Optional[Money] = None,
        discount_reason: Optional[str] = None,
        schedules: Optional[List[BookingSchedule]] = None,
        package_id: Optional[str] = None,
        package_slug: Optional[str] = None,
        package_name: Optional[str] = None,
        mode_key: str = BookingMode.SESSIONS.value,
        start_date: Optional[date] = None,
        package_expires_at: Optional[date] = None,
        notes: Optional[str] = None,
    ) -> 'Booking':
        schedules = list(schedules or [])

        parent_guardian.validate()
        if not participants:
            raise ValidationError('At least one participant is required', field='participants')
        for participant in participants:
            participant.validate()

        if total_hours.is_zero:
            if schedules:
                raise ValidationError(
                    'Total hours must be greater than zero when sessions are booked',
                    field='total_hours',
                )
            # Pay first, book later: real hours are assigned on confirmation
            total_hours = Hours(settings.PAY_FIRST_PLACEHOLDER_HOURS)

        if total_price.is_zero:
            raise ValidationError('Booking price must be greater than zero', field='total_price')

        ledger = HoursLedger.of(
            total_hours=total_hours,
            schedules=schedules,
            recorded_booked=Hours.zero(),
            recorded_used=Hours.zero(),
        )
        if ledger.booked > ledger.total:
            raise ValidationError(
                f'Scheduled sessions ({ledger.booked}) exceed purchased hours ({ledger.total})',
                field='schedules',
            )

        now = datetime.now(timezone.utc)
        return cls(
            id=str(uuid7()),
            reference=reference,
            parent_guardian=parent_guardian,
            participants=list(participants),
            total_hours=total_hours,
            total_price=total_price,
            discount_amount=discount_amount or Money.zero(),
            discount_reason=discount_reason,
            status=BookingStatus.PENDING if schedules else BookingStatus.DRAFT,
            payment_status=PaymentStatus.PENDING,
            schedules=schedules,
            package_id=package_id,
            package_slug=package_slug,
            package_name=package_name,
            mode_key=mode_key,
            start_date=start_date,
            package_expires_at=package_expires_at,
            notes=notes,
            created_at=now,
            updated_at=now,
        )

    @classmethod
    def reconstitute(
        cls,
        *,
        total_hours: Hours,
        schedules: List[BookingSchedule],
        **fields: Any,
    ) -> 'Booking':
        """
        Rehydrate a stored booking

        Business rules are not re-checked (stored data may predate them), but
        a non-positive total is repaired the same way every time.
        """
        total_hours = reconcile_total_hours(
            total_hours, schedules, placeholder=Hours(settings.PAY_FIRST_PLACEHOLDER_HOURS)
        )
        return cls(total_hours=total_hours, schedules=list(schedules), **fields)

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------

    @property
    def ledger(self) -> HoursLedger:
        return HoursLedger.of(
            total_hours=self.total_hours,
            schedules=self.schedules,
            recorded_booked=self.recorded_booked_hours,
            recorded_used=self.recorded_used_hours,
        )

    @property
    def booked_hours(self) -> Hours:
        return self.ledger.booked

    @property
    def used_hours(self) -> Hours:
        return self.ledger.used

    @property
    def remaining_hours(self) -> Hours:
        return self.ledger.remaining

    @property
    def outstanding_amount(self) -> Money:
        return self.total_price.minus_capped(self.paid_amount)

    @property
    def child_keys(self) -> list[str]:
        return [p.child_key for p in self.participants]

    def covers_child(self, child_key: str) -> bool:
        return child_key in self.child_keys

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def is_expired(self, today: date) -> bool:
        return self.package_expires_at is not None and self.package_expires_at <= today

    def is_active(self, today: date) -> bool:
        """Counts towards the one-active-package-per-child rule"""
        return (
            self.status.holds_package
            and self.payment_status is not PaymentStatus.REFUNDED
            and not self.is_deleted
            and not self.is_expired(today)
        )

    @property
    def can_be_confirmed(self) -> bool:
        return self.status.can_be_confirmed and self.payment_status is PaymentStatus.PAID

    @property
    def is_fully_completed(self) -> bool:
        live = [s for s in self.schedules if s.status.consumes_hours]
        return (
            bool(live)
            and all(s.status.is_used for s in live)
            and self.remaining_hours.is_zero
        )

    def find_schedule(self, schedule_id: str) -> BookingSchedule:
        for schedule in self.schedules:
            if str(schedule.id) == str(schedule_id):
                return schedule
        raise NotFoundError(f'Session {schedule_id} not found on booking {self.reference}')

    # ------------------------------------------------------------------
    # Status transitions
    # ------------------------------------------------------------------

    def _touch(self, **changes: Any) -> 'Booking':
        return attrs.evolve(self, updated_at=datetime.now(timezone.utc), **changes)

    def _ensure_not_cancelled(self, action: str) -> None:
        if self.status is BookingStatus.CANCELLED:
            raise InvalidStateError(f'Cannot {action} a cancelled booking')

    @Logger.io
    def confirm(self) -> 'Booking':
        self._ensure_not_cancelled('confirm')
        if self.status is BookingStatus.CONFIRMED:
            raise InvalidStateError('Booking is already confirmed')
        if not self.can_be_confirmed:
            raise InvalidStateError(
                f'Booking cannot be confirmed until payment is complete '
                f'(payment status: {self.payment_status.value})'
            )
        return self._touch(status=BookingStatus.CONFIRMED)

    @Logger.io
    def cancel(self, *, reason: str) -> 'Booking':
        """
        Cancel the booking

        Schedules are left as they are; tearing them down is up to the caller.

        Raises:
            ValidationError: Blank reason
            InvalidStateError: Already cancelled or fully completed
        """
        if not reason or not reason.strip():
            raise ValidationError('A cancellation reason is required', field='reason')
        if self.status is BookingStatus.CANCELLED:
            raise InvalidStateError('Booking is already cancelled')
        if self.is_fully_completed:
            raise InvalidStateError('Cannot cancel a booking whose sessions are all completed')

        now = datetime.now(timezone.utc)
        return attrs.evolve(
            self,
            status=BookingStatus.CANCELLED,
            cancelled_at=now,
            cancellation_reason=reason.strip(),
            updated_at=now,
        )

    @Logger.io
    def soft_delete(self) -> 'Booking':
        if self.is_deleted:
            raise InvalidStateError('Booking is already deleted')
        return self._touch(deleted_at=datetime.now(timezone.utc))

    # ------------------------------------------------------------------
    # Money
    # ------------------------------------------------------------------

    def _with_payment(self, *, paid_amount: Money, total_price: Optional[Money] = None) -> 'Booking':
        total_price = total_price or self.total_price
        new_status = PaymentStatus.derive(
            paid_amount=paid_amount.amount, total_price=total_price.amount
        )
        if not self.payment_status.can_transition_to(new_status):
            raise ValidationError(
                f'Payment status cannot go from {self.payment_status.value} to {new_status.value}',
                field='payment_status',
            )
        return self._touch(
            paid_amount=paid_amount, total_price=total_price, payment_status=new_status
        )

    @Logger.io
    def apply_payment(self, *, amount: Decimal) -> 'Booking':
        """
        Record a cleared payment

        Raises:
            ValidationError: amount <= 0 or larger than the outstanding balance
            InvalidStateError: Booking is cancelled or refunded
        """
        self._ensure_not_cancelled('pay for')
        if self.payment_status is PaymentStatus.REFUNDED:
            raise InvalidStateError('Cannot pay for a refunded booking')
        # Compared after rounding to pence, so sub-penny amounts are rejected too
        if to_decimal(amount) <= 0:
            raise ValidationError('Payment amount must be greater than zero', field='amount')
        payment = Money(amount)
        if payment > self.outstanding_amount:
            raise ValidationError(
                f'Payment amount {payment} exceeds the outstanding balance {self.outstanding_amount}',
                field='amount',
            )
        return self._with_payment(paid_amount=self.paid_amount + payment)

    @Logger.io
    def refund(self) -> 'Booking':
        if self.payment_status is PaymentStatus.REFUNDED:
            raise InvalidStateError('Booking is already refunded')
        if self.paid_amount.is_zero:
            raise InvalidStateError('Nothing has been paid on this booking')
        return self._touch(paid_amount=Money.zero(), payment_status=PaymentStatus.REFUNDED)

    @Logger.io
    def apply_top_up(self, *, hours: Hours, amount: Money, payment_id: str) -> 'Booking':
        """Add hours bought (and already paid) on top of a confirmed package, once per payment"""
        if payment_id in self.applied_top_up_payment_ids:
            raise InvalidStateError(f'Top-up payment {payment_id} has already been applied')
        if not (
            self.status is BookingStatus.CONFIRMED and self.payment_status is PaymentStatus.PAID
        ):
            raise InvalidStateError('Only confirmed, fully paid bookings can be topped up')
        if hours.is_zero:
            raise ValidationError('Top-up hours must be greater than zero', field='hours')
        topped_up = self._with_payment(
            paid_amount=self.paid_amount + amount,
            total_price=self.total_price + amount,
        )._with_total_hours(self.total_hours + hours)
        return attrs.evolve(
            topped_up,
            applied_top_up_payment_ids=[*self.applied_top_up_payment_ids, payment_id],
        )

    def _with_total_hours(self, total_hours: Hours) -> 'Booking':
        if total_hours < self.booked_hours:
            raise ValidationError(
                f'Total hours ({total_hours}) cannot be less than booked hours ({self.booked_hours})',
                field='total_hours',
            )
        return self._touch(total_hours=total_hours)

    @Logger.io
    def revise(
        self,
        *,
        participants: Optional[List[Participant]] = None,
        schedules: Optional[List[BookingSchedule]] = None,
        total_price: Optional[Money] = None,
        discount_amount: Optional[Money] = None,
        discount_reason: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> 'Booking':
        """Apply an edit from the update flow; unspecified fields are kept"""
        self._ensure_not_cancelled('update')
        changes: dict[str, Any] = {}

        if participants is not None:
            if not participants:
                raise ValidationError('At least one participant is required', field='participants')
            for participant in participants:
                participant.validate()
            changes['participants'] = list(participants)

        if schedules is not None:
            ledger = HoursLedger.of(
                total_hours=self.total_hours,
                schedules=schedules,
                recorded_booked=self.recorded_booked_hours,
                recorded_used=self.recorded_used_hours,
            )
            if ledger.booked > ledger.total:
                raise ValidationError(
                    f'Scheduled sessions ({ledger.booked}) exceed purchased hours ({ledger.total})',
                    field='schedules',
                )
            changes['schedules'] = list(schedules)
            if schedules and self.status is BookingStatus.DRAFT:
                changes['status'] = BookingStatus.PENDING

        if notes is not None:
            changes['notes'] = notes

        revised = self._touch(**changes)
        if total_price is None:
            return revised

        if total_price.is_zero:
            raise ValidationError('Booking price must be greater than zero', field='total_price')
        if total_price < self.paid_amount:
            raise ValidationError(
                f'New price {total_price} is below the amount already paid {self.paid_amount}',
                field='total_price',
            )
        revised = attrs.evolve(
            revised,
            discount_amount=discount_amount or Money.zero(),
            discount_reason=discount_reason,
        )
        return revised._with_payment(paid_amount=self.paid_amount, total_price=total_price)

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    def _ensure_can_schedule(self, today: date) -> None:
        self._ensure_not_cancelled('schedule sessions on')
        if self.is_deleted:
            raise InvalidStateError('Cannot schedule sessions on a deleted booking')
        if self.payment_status is PaymentStatus.REFUNDED:
            raise InvalidStateError('Cannot schedule sessions on a refunded booking')
        if self.is_expired(today):
            raise InvalidStateError(
                f'This package expired on {self.package_expires_at:%B} '
                f'{self.package_expires_at.day}, {self.package_expires_at.year}'
            )

    def _replace_schedule(self, updated: BookingSchedule) -> 'Booking':
        schedules = [updated if s.id == updated.id else s for s in self.schedules]
        return self._touch(schedules=schedules)

    @Logger.io
    def add_schedule(self, *, schedule: BookingSchedule, today: date) -> 'Booking':
        self._ensure_can_schedule(today)
        if schedule.duration > self.remaining_hours:
            raise ValidationError(
                f'Session needs {schedule.duration} but only {self.remaining_hours} remain '
                f'on this package',
                field='schedules',
            )
        status = BookingStatus.PENDING if self.status is BookingStatus.DRAFT else self.status
        return self._touch(schedules=[*self.schedules, schedule], status=status)

    @Logger.io
    def reschedule_schedule(
        self,
        *,
        schedule_id: str,
        date: date,
        start_time: time,
        end_time: time,
        reason: Optional[str],
        today: date,
    ) -> 'Booking':
        self._ensure_can_schedule(today)
        current = self.find_schedule(schedule_id)
        moved = current.reschedule(date=date, start_time=start_time, end_time=end_time, reason=reason)
        available = self.remaining_hours + current.duration
        if moved.duration > available:
            raise ValidationError(
                f'Session needs {moved.duration} but only {available} remain on this package',
                field='schedules',
            )
        return self._replace_schedule(moved)

    @Logger.io
    def cancel_schedule(self, *, schedule_id: str, reason: str) -> 'Booking':
        self._ensure_not_cancelled('change sessions on')
        return self._replace_schedule(self.find_schedule(schedule_id).cancel(reason=reason))

    @Logger.io
    def complete_schedule(self, *, schedule_id: str) -> 'Booking':
        self._ensure_not_cancelled('change sessions on')
        return self._replace_schedule(self.find_schedule(schedule_id).complete())

    @Logger.io
    def mark_schedule_no_show(self, *, schedule_id: str) -> 'Booking':
        self._ensure_not_cancelled('change sessions on')
        return self._replace_schedule(self.find_schedule(schedule_id).mark_no_show())

    @Logger.io
    def cancel_open_schedules(self, *, reason: str) -> 'Booking':
        """Cancel every session still on the calendar; used when the whole booking goes"""
        schedules = [s.cancel(reason=reason) if s.status.is_open else s for s in self.schedules]
        return self._touch(schedules=schedules)
