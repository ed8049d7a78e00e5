"""Booking Domain Enums"""

from src.service.booking.domain.enum.booking_mode import BookingMode
from src.service.booking.domain.enum.booking_status import BookingStatus
from src.service.booking.domain.enum.payment_status import PaymentStatus
from src.service.booking.domain.enum.session_status import SessionStatus

__all__ = ['BookingMode', 'BookingStatus', 'PaymentStatus', 'SessionStatus']
