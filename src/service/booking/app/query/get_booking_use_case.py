from typing import Self

from dependency_injector.wiring import Provide, inject

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.booking.app.interface.i_booking_repo import IBookingRepo
from src.service.booking.app.mapper.booking_store import BookingStore
from src.service.booking.domain.entity.booking_entity import Booking


class GetBookingUseCase:
    def __init__(self, *, booking_repo: IBookingRepo) -> None:
        self.store = BookingStore(booking_repo)

    @classmethod
    @inject
    def depends(cls, booking_repo: IBookingRepo = Provide[Container.booking_repo]) -> Self:
        return cls(booking_repo=booking_repo)

    @Logger.io
    async def get_booking(self, *, booking_id: str) -> Booking:
        return await self.store.get(booking_id)

    @Logger.io
    async def get_booking_by_reference(self, *, reference: str) -> Booking:
        return await self.store.get_by_reference(reference.strip().upper())
