"""Booking Domain Value Objects"""

from src.service.booking.domain.value_object.booking_reference import BookingReference
from src.service.booking.domain.value_object.parent_guardian import ParentGuardian
from src.service.booking.domain.value_object.participant import Participant
from src.service.booking.domain.value_object.quantity import Hours, Money
from src.service.booking.domain.value_object.schedule_activity import ScheduleActivity
from src.service.booking.domain.value_object.time_slot import TimeSlot

__all__ = [
    'BookingReference',
    'Hours',
    'Money',
    'ParentGuardian',
    'Participant',
    'ScheduleActivity',
    'TimeSlot',
]
