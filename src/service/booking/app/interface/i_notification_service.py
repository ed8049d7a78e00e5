from abc import ABC, abstractmethod

from src.service.booking.domain.entity.booking_entity import Booking


class INotificationService(ABC):
    """
    Outbound e-mail.

    Callers dispatch these fire-and-forget: a failure must never change
    booking state.
    """

    @abstractmethod
    async def send_email(self, *, to: str, subject: str, body: str) -> bool:
        pass

    @abstractmethod
    async def send_booking_confirmation(self, *, booking: Booking) -> bool:
        pass

    @abstractmethod
    async def send_booking_cancellation(self, *, booking: Booking, reason: str) -> bool:
        pass
