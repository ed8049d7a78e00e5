"""
Hours Ledger

The ledger (total / booked / used / remaining hours) is derived from the
booking's schedules every time it is read; stored values are only a fallback
for bookings that have no schedules yet.
"""

from collections.abc import Sequence

import attrs

from src.service.booking.domain.entity.booking_schedule_entity import BookingSchedule
from src.service.booking.domain.value_object.quantity import Hours


def booked_hours_of(schedules: Sequence[BookingSchedule]) -> Hours:
    return sum(
        (s.duration for s in schedules if s.status.consumes_hours),
        Hours.zero(),
    )


def used_hours_of(schedules: Sequence[BookingSchedule]) -> Hours:
    return sum((s.duration for s in schedules if s.status.is_used), Hours.zero())


def reconcile_total_hours(
    total_hours: Hours, schedules: Sequence[BookingSchedule], *, placeholder: Hours
) -> Hours:
    """
    Repair a non-positive total read from storage

    - positive total: returned as is (so reconciling twice changes nothing)
    - schedules present: sum of their durations
    - no schedules, or schedules adding up to zero: the pay-first placeholder,
      which keeps the booking valid until real hours are assigned
    """
    if total_hours.value > 0:
        return total_hours
    recomputed = booked_hours_of(schedules) if schedules else Hours.zero()
    return recomputed if recomputed.value > 0 else placeholder


@attrs.define(frozen=True)
class HoursLedger:
    total: Hours
    booked: Hours
    used: Hours

    @property
    def remaining(self) -> Hours:
        return self.total.minus_capped(self.booked)

    @classmethod
    def of(
        cls,
        *,
        total_hours: Hours,
        schedules: Sequence[BookingSchedule],
        recorded_booked: Hours,
        recorded_used: Hours,
    ) -> 'HoursLedger':
        if schedules:
            return cls(
                total=total_hours,
                booked=booked_hours_of(schedules),
                used=used_hours_of(schedules),
            )
        return cls(total=total_hours, booked=recorded_booked, used=recorded_used)
