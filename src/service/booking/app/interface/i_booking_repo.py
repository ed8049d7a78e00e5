"""
Booking Repository Interface

Persistence speaks the wire shape (BookingRecord); mapping to the aggregate
happens in BookingMapper.
"""

from abc import ABC, abstractmethod
from typing import List

from src.service.booking.app.dto.booking_wire_dto import BookingRecord


class IBookingRepo(ABC):
    """
    Repository interface for bookings.

    Implementations must keep `cancel` atomic: status, reason, timestamp,
    refund marking and session teardown are written together or not at all.
    """

    @abstractmethod
    async def find_by_id(self, *, booking_id: str) -> BookingRecord | None:
        pass

    @abstractmethod
    async def find_by_reference(self, *, reference: str) -> BookingRecord | None:
        pass

    @abstractmethod
    async def find_by_parent(self, *, email: str) -> List[BookingRecord]:
        """
        All bookings (any status, deleted included) of one parent/guardian

        Args:
            email: Parent/guardian email, matched case-insensitively
        """
        pass

    @abstractmethod
    async def create(self, *, record: BookingRecord) -> BookingRecord:
        pass

    @abstractmethod
    async def update(self, *, record: BookingRecord) -> BookingRecord:
        pass

    @abstractmethod
    async def cancel(self, *, booking_id: str, reason: str) -> BookingRecord:
        """
        Cancel a booking in one atomic write

        Sets status/reason/timestamp, marks a paid booking refunded and
        cancels every open session.

        Returns:
            The cancelled booking
        """
        pass

    @abstractmethod
    async def delete(self, *, booking_id: str) -> None:
        """Soft delete"""
        pass

    @abstractmethod
    async def reference_exists(self, *, reference: str) -> bool:
        pass
