from datetime import date, datetime, time

import attrs

from src.platform.exception.exceptions import ValidationError
from src.service.booking.domain.value_object.quantity import Hours


@attrs.define(frozen=True)
class TimeSlot:
    """A session window in local civil time; intervals are half-open [start, end)"""

    date: date
    start_time: time
    end_time: time

    def __attrs_post_init__(self) -> None:
        if self.end_time <= self.start_time:
            raise ValidationError(
                f'End time must be after start time on {self.date.isoformat()} '
                f'({self.start_time:%H:%M}-{self.end_time:%H:%M})',
                field='end_time',
            )

    @property
    def start_at(self) -> datetime:
        return datetime.combine(self.date, self.start_time)

    @property
    def end_at(self) -> datetime:
        return datetime.combine(self.date, self.end_time)

    @property
    def duration(self) -> Hours:
        return Hours.from_minutes((self.end_at - self.start_at).total_seconds() / 60)

    def overlaps(self, other: 'TimeSlot') -> bool:
        return (
            self.date == other.date
            and self.start_time < other.end_time
            and self.end_time > other.start_time
        )

    def __str__(self) -> str:
        return f'{self.date.isoformat()} {self.start_time:%H:%M}-{self.end_time:%H:%M}'
