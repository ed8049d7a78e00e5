"""Mock notification service: records e-mails instead of sending them"""

from datetime import datetime, timezone
from typing import Any, List

from src.platform.logging.loguru_io import Logger
from src.service.booking.app.interface.i_notification_service import INotificationService
from src.service.booking.domain.entity.booking_entity import Booking
from src.service.booking.domain.enum.payment_status import PaymentStatus


class MockNotificationServiceImpl(INotificationService):
    def __init__(self, *, debug: bool = False) -> None:
        self.debug = debug
        self.sent_emails: List[dict[str, Any]] = []  # Inspected by tests

    @Logger.io
    async def send_email(self, *, to: str, subject: str, body: str) -> bool:
        self.sent_emails.append(
            {'to': to, 'subject': subject, 'body': body, 'sent_at': datetime.now(timezone.utc)}
        )
        if self.debug:
            Logger.base.info(f'📧 [MAIL] To: {to} | Subject: {subject}\n{body}')
        return True

    async def send_booking_confirmation(self, *, booking: Booking) -> bool:
        guardian = booking.parent_guardian
        sessions = '\n'.join(
            f'  - {s.date:%A %d %B %Y} {s.start_time:%H:%M}-{s.end_time:%H:%M}'
            for s in booking.schedules
            if s.status.is_open
        )
        body = (
            f'Dear {guardian.full_name},\n\n'
            f'Your booking {booking.reference} is confirmed.\n'
            f'Package: {booking.package_name or booking.package_slug or "Custom package"}\n'
            f'Hours: {booking.total_hours} ({booking.remaining_hours} still to book)\n'
            f'Paid: {booking.paid_amount}\n'
        )
        if sessions:
            body += f'\nUpcoming sessions:\n{sessions}\n'
        return await self.send_email(
            to=guardian.email, subject=f'Booking confirmed - {booking.reference}', body=body
        )

    async def send_booking_cancellation(self, *, booking: Booking, reason: str) -> bool:
        guardian = booking.parent_guardian
        body = (
            f'Dear {guardian.full_name},\n\n'
            f'Your booking {booking.reference} has been cancelled.\n'
            f'Reason: {reason}\n'
        )
        if booking.payment_status is PaymentStatus.REFUNDED:
            body += 'Any payment made will be refunded to the original payment method.\n'
        return await self.send_email(
            to=guardian.email, subject=f'Booking cancelled - {booking.reference}', body=body
        )
