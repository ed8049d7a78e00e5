"""Booking application ports"""

from src.service.booking.app.interface.i_booking_repo import IBookingRepo
from src.service.booking.app.interface.i_child_lock import IChildLock
from src.service.booking.app.interface.i_notification_service import INotificationService
from src.service.booking.app.interface.i_payment_gateway import IPaymentGateway

__all__ = ['IBookingRepo', 'IChildLock', 'INotificationService', 'IPaymentGateway']
