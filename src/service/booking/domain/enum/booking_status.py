from enum import StrEnum


class BookingStatus(StrEnum):
    DRAFT = 'draft'
    PENDING = 'pending'
    CONFIRMED = 'confirmed'
    CANCELLED = 'cancelled'

    @property
    def is_terminal(self) -> bool:
        return self is BookingStatus.CANCELLED

    @property
    def can_be_confirmed(self) -> bool:
        return self in (BookingStatus.DRAFT, BookingStatus.PENDING)

    @property
    def holds_package(self) -> bool:
        """Statuses that count towards the one-active-package-per-child rule"""
        return self in (BookingStatus.DRAFT, BookingStatus.PENDING, BookingStatus.CONFIRMED)
