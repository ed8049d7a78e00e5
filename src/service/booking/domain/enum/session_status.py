from enum import StrEnum


class SessionStatus(StrEnum):
    SCHEDULED = 'scheduled'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'
    NO_SHOW = 'no_show'
    RESCHEDULED = 'rescheduled'

    @property
    def is_open(self) -> bool:
        """Session still sits on the calendar and can change"""
        return self in (SessionStatus.SCHEDULED, SessionStatus.RESCHEDULED)

    @property
    def consumes_hours(self) -> bool:
        return self is not SessionStatus.CANCELLED

    @property
    def is_used(self) -> bool:
        return self in (SessionStatus.COMPLETED, SessionStatus.NO_SHOW)
