"""
Package constraints for a single session

- nothing after the package expiry date
- nothing in the past
- no same-day sessions; tomorrow only until the evening cutoff; otherwise a
  minimum notice period
- never more hours than the package has left
"""

from datetime import date, datetime, timedelta
from typing import Optional

import attrs

from src.platform.config.core_setting import Settings, settings
from src.platform.exception.exceptions import ValidationError
from src.service.booking.domain.value_object.quantity import Hours
from src.service.booking.domain.value_object.time_slot import TimeSlot


def _us_date(day: date) -> str:
    # "June 1, 2025", the format used on expiry notices
    return f'{day:%B} {day.day}, {day.year}'


@attrs.define(frozen=True)
class PackageConstraints:
    same_day_allowed: bool = False
    next_day_cutoff_hour: int = 18
    min_advance_hours: int = 24

    @classmethod
    def from_settings(cls, config: Settings = settings) -> 'PackageConstraints':
        return cls(
            same_day_allowed=config.SAME_DAY_BOOKING_ALLOWED,
            next_day_cutoff_hour=config.NEXT_DAY_CUTOFF_HOUR,
            min_advance_hours=config.MIN_ADVANCE_HOURS,
        )

    def check_expiry(self, slot: TimeSlot, package_expires_at: Optional[date]) -> None:
        if package_expires_at is not None and slot.date > package_expires_at:
            raise ValidationError(
                f'This package expires on {_us_date(package_expires_at)}. '
                'You cannot book sessions after this date.',
                field='date',
            )

    def check_notice(self, slot: TimeSlot, *, now: datetime) -> None:
        today = now.date()
        if slot.date < today or slot.start_at <= now:
            raise ValidationError('Cannot book sessions in the past', field='date')

        if slot.date == today:
            if not self.same_day_allowed:
                raise ValidationError(
                    'Same-day bookings are not available. Please choose a later date.',
                    field='date',
                )
            return

        if slot.date == today + timedelta(days=1):
            if now.hour >= self.next_day_cutoff_hour:
                raise ValidationError(
                    f'Bookings for tomorrow close at {self.next_day_cutoff_hour:02d}:00 today. '
                    'Please choose a later date.',
                    field='date',
                )
            return

        if slot.start_at - now < timedelta(hours=self.min_advance_hours):
            raise ValidationError(
                f'Sessions must be booked at least {self.min_advance_hours} hours in advance',
                field='date',
            )

    def check_hours(self, session_hours: Hours, remaining_hours: Hours) -> None:
        if session_hours > remaining_hours:
            raise ValidationError(
                f'This session needs {session_hours} but only {remaining_hours} '
                'remain on the package',
                field='hours',
            )

    def check(
        self,
        slot: TimeSlot,
        *,
        now: datetime,
        package_expires_at: Optional[date],
        session_hours: Hours,
        remaining_hours: Hours,
    ) -> None:
        self.check_expiry(slot, package_expires_at)
        self.check_notice(slot, now=now)
        self.check_hours(session_hours, remaining_hours)
