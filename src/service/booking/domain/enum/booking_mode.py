"""
Scheduling modes

Only SESSIONS is live. The rest are planned and are accepted with a warning
pointing back at SESSIONS.
"""

from enum import StrEnum


class BookingMode(StrEnum):
    SESSIONS = 'sessions'
    SCHOOL_RUN = 'school-run'
    HOSPITAL_APPOINTMENT = 'hospital-appointment'
    EXAM_SUPPORT = 'exam-support'
    RESPITE = 'respite'
    CLUB = 'club'

    @property
    def display_name(self) -> str:
        return self.value.replace('-', ' ').title()

    @classmethod
    def enabled(cls) -> tuple['BookingMode', ...]:
        return (cls.SESSIONS,)

    @property
    def is_enabled(self) -> bool:
        return self in BookingMode.enabled()
