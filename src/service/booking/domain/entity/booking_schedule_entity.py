from datetime import date, datetime, time, timezone
from typing import List, Optional

import attrs
from uuid_utils import uuid7

from src.platform.exception.exceptions import InvalidStateError, ValidationError
from src.service.booking.domain.enum.session_status import SessionStatus
from src.service.booking.domain.value_object.quantity import Hours
from src.service.booking.domain.value_object.schedule_activity import ScheduleActivity
from src.service.booking.domain.value_object.time_slot import TimeSlot


@attrs.define
class BookingSchedule:
    """One session on a booking's calendar, owned by the Booking aggregate"""

    id: str
    date: date
    start_time: time
    end_time: time
    status: SessionStatus = SessionStatus.SCHEDULED
    trainer_id: Optional[str] = None
    activities: List[ScheduleActivity] = attrs.field(factory=list)
    itinerary_notes: List[str] = attrs.field(factory=list)
    location: Optional[str] = None
    mode_key: Optional[str] = None
    original_date: Optional[date] = None
    original_start_time: Optional[time] = None
    rescheduled_at: Optional[datetime] = None
    reschedule_reason: Optional[str] = None
    cancellation_reason: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @classmethod
    def create(
        cls,
        *,
        date: date,
        start_time: time,
        end_time: time,
        trainer_id: Optional[str] = None,
        activities: Optional[List[ScheduleActivity]] = None,
        itinerary_notes: Optional[List[str]] = None,
        location: Optional[str] = None,
        mode_key: Optional[str] = None,
    ) -> 'BookingSchedule':
        TimeSlot(date=date, start_time=start_time, end_time=end_time)  # validates the window
        return cls(
            id=str(uuid7()),
            date=date,
            start_time=start_time,
            end_time=end_time,
            trainer_id=trainer_id,
            activities=list(activities or []),
            itinerary_notes=[note for note in (itinerary_notes or []) if note.strip()],
            location=location,
            mode_key=mode_key,
        )

    @property
    def elapsed_hours(self) -> Hours:
        start = datetime.combine(self.date, self.start_time)
        end = datetime.combine(self.date, self.end_time)
        return Hours.from_minutes((end - start).total_seconds() / 60)

    @property
    def duration(self) -> Hours:
        """Declared activity durations when any exist, otherwise wall-clock time"""
        declared = [a.duration_hours for a in self.activities if a.duration_hours is not None]
        if declared:
            return sum(declared, Hours.zero())
        return self.elapsed_hours

    @property
    def time_slot(self) -> Optional[TimeSlot]:
        if self.end_time <= self.start_time:
            return None
        return TimeSlot(date=self.date, start_time=self.start_time, end_time=self.end_time)

    def _ensure_open(self, action: str) -> None:
        if not self.status.is_open:
            raise InvalidStateError(
                f'Cannot {action} a {self.status.value} session on {self.date.isoformat()}'
            )

    def complete(self) -> 'BookingSchedule':
        self._ensure_open('complete')
        return attrs.evolve(
            self, status=SessionStatus.COMPLETED, completed_at=datetime.now(timezone.utc)
        )

    def mark_no_show(self) -> 'BookingSchedule':
        self._ensure_open('mark as no-show')
        return attrs.evolve(self, status=SessionStatus.NO_SHOW)

    def cancel(self, *, reason: str) -> 'BookingSchedule':
        if not reason or not reason.strip():
            raise ValidationError('A cancellation reason is required', field='reason')
        self._ensure_open('cancel')
        return attrs.evolve(
            self,
            status=SessionStatus.CANCELLED,
            cancellation_reason=reason.strip(),
            cancelled_at=datetime.now(timezone.utc),
        )

    def reschedule(
        self, *, date: date, start_time: time, end_time: time, reason: Optional[str] = None
    ) -> 'BookingSchedule':
        self._ensure_open('reschedule')
        TimeSlot(date=date, start_time=start_time, end_time=end_time)
        return attrs.evolve(
            self,
            date=date,
            start_time=start_time,
            end_time=end_time,
            status=SessionStatus.RESCHEDULED,
            # Keep the first slot when a session moves more than once
            original_date=self.original_date or self.date,
            original_start_time=self.original_start_time or self.start_time,
            rescheduled_at=datetime.now(timezone.utc),
            reschedule_reason=reason,
        )
