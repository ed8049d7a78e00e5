"""
Wire Modules Configuration

Modules whose `depends()` classmethods resolve collaborators from the
container. Shared between production and test environments.
"""

from types import ModuleType

from src.service.booking.app.command import (
    add_booking_session_use_case,
    cancel_booking_session_use_case,
    cancel_booking_use_case,
    complete_booking_session_use_case,
    complete_top_up_use_case,
    confirm_booking_use_case,
    create_booking_use_case,
    process_payment_use_case,
    reschedule_booking_session_use_case,
    top_up_booking_use_case,
    update_booking_use_case,
)
from src.service.booking.app.query import get_booking_use_case, list_parent_bookings_use_case


WIRE_MODULES: list[ModuleType] = [
    create_booking_use_case,
    update_booking_use_case,
    confirm_booking_use_case,
    cancel_booking_use_case,
    process_payment_use_case,
    top_up_booking_use_case,
    complete_top_up_use_case,
    add_booking_session_use_case,
    reschedule_booking_session_use_case,
    cancel_booking_session_use_case,
    complete_booking_session_use_case,
    get_booking_use_case,
    list_parent_bookings_use_case,
]
