from typing import List


from src.platform.exception.exceptions import NotFoundError
from src.service.booking.app.interface.i_booking_repo import IBookingRepo
from src.service.booking.app.mapper.booking_mapper import BookingMapper
from src.service.booking.domain.entity.booking_entity import Booking


class BookingStore:
    """IBookingRepo seen through BookingMapper: aggregates in, aggregates out"""

    def __init__(self, repo: IBookingRepo) -> None:
        self.repo = repo

    async def get(self, booking_id: str) -> Booking:
        record = await self.repo.find_by_id(booking_id=str(booking_id))
        if record is None or record.deleted_at is not None:
            raise NotFoundError('Booking not found')
        return BookingMapper.to_domain(record)

    async def get_by_reference(self, reference: str) -> Booking:
        record = await self.repo.find_by_reference(reference=reference)
        if record is None or record.deleted_at is not None:
            raise NotFoundError(f'Booking {reference} not found')
        return BookingMapper.to_domain(record)

    async def for_parent(self, email: str) -> List[Booking]:
        records = await self.repo.find_by_parent(email=email)
        return [BookingMapper.to_domain(r) for r in records]

    async def add(self, booking: Booking) -> Booking:
        record = await self.repo.create(record=BookingMapper.to_record(booking))
        return BookingMapper.to_domain(record)

    async def save(self, booking: Booking) -> Booking:
        record = await self.repo.update(record=BookingMapper.to_record(booking))
        return BookingMapper.to_domain(record)
