from datetime import date
from typing import List, Optional, Self

from dependency_injector.wiring import Provide, inject

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.booking.app.interface.i_booking_repo import IBookingRepo
from src.service.booking.app.mapper.booking_store import BookingStore
from src.service.booking.domain.entity.booking_entity import Booking


class ListParentBookingsUseCase:
    def __init__(self, *, booking_repo: IBookingRepo) -> None:
        self.store = BookingStore(booking_repo)

    @classmethod
    @inject
    def depends(cls, booking_repo: IBookingRepo = Provide[Container.booking_repo]) -> Self:
        return cls(booking_repo=booking_repo)

    @Logger.io
    async def list_bookings(
        self,
        *,
        email: str,
        active_only: bool = False,
        include_deleted: bool = False,
        today: Optional[date] = None,
    ) -> List[Booking]:
        """
        A parent's bookings, newest first

        `active_only` keeps bookings that still hold a package (not cancelled,
        refunded, deleted or expired) and implies `include_deleted=False`.
        """
        today = today or date.today()
        bookings = await self.store.for_parent(email.strip().lower())
        if not include_deleted or active_only:
            bookings = [b for b in bookings if not b.is_deleted]
        if active_only:
            bookings = [b for b in bookings if b.is_active(today)]
        return sorted(
            bookings,
            key=lambda b: (b.created_at is not None, b.created_at),
            reverse=True,
        )
