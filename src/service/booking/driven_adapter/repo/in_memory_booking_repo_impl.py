"""
In-memory booking repository

Stores bookings as camelCase JSON documents, exactly what a remote booking
API would hold. A single anyio lock makes each write, `cancel` included,
atomic with respect to other writes.
"""

from typing import Any, List

import anyio

from src.platform.exception.exceptions import ConflictError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.booking.app.dto.booking_wire_dto import BookingRecord
from src.service.booking.app.interface.i_booking_repo import IBookingRepo
from src.service.booking.app.mapper.booking_mapper import BookingMapper


class InMemoryBookingRepoImpl(IBookingRepo):
    def __init__(self) -> None:
        self._documents: dict[str, dict[str, Any]] = {}
        self._write_lock = anyio.Lock()

    @staticmethod
    def _load(document: dict[str, Any]) -> BookingRecord:
        return BookingRecord.model_validate(document)

    def _get_document(self, booking_id: str) -> dict[str, Any]:
        document = self._documents.get(booking_id)
        if document is None:
            raise NotFoundError(f'Booking {booking_id} not found')
        return document

    @Logger.io
    async def find_by_id(self, *, booking_id: str) -> BookingRecord | None:
        document = self._documents.get(booking_id)
        return self._load(document) if document else None

    @Logger.io
    async def find_by_reference(self, *, reference: str) -> BookingRecord | None:
        wanted = reference.strip().upper()
        for document in self._documents.values():
            if document['reference'] == wanted:
                return self._load(document)
        return None

    @Logger.io
    async def find_by_parent(self, *, email: str) -> List[BookingRecord]:
        wanted = email.strip().lower()
        return [
            self._load(document)
            for document in self._documents.values()
            if (document.get('parentGuardian') or {}).get('email', '').lower() == wanted
        ]

    @Logger.io
    async def create(self, *, record: BookingRecord) -> BookingRecord:
        async with self._write_lock:
            if record.id in self._documents:
                raise ConflictError(f'Booking {record.id} already exists')
            if any(d['reference'] == record.reference for d in self._documents.values()):
                raise ConflictError(f'Booking reference {record.reference} already exists')
            self._documents[record.id] = record.to_wire()
            Logger.base.info(f'📝 [REPO] Created booking {record.reference}')
            return self._load(self._documents[record.id])

    @Logger.io
    async def update(self, *, record: BookingRecord) -> BookingRecord:
        async with self._write_lock:
            self._get_document(record.id)
            self._documents[record.id] = record.to_wire()
            return self._load(self._documents[record.id])

    @Logger.io
    async def cancel(self, *, booking_id: str, reason: str) -> BookingRecord:
        async with self._write_lock:
            booking = BookingMapper.to_domain(self._load(self._get_document(booking_id)))
            # Every step is validated before anything is stored
            booking = booking.cancel(reason=reason)
            if not booking.paid_amount.is_zero:
                booking = booking.refund()
            booking = booking.cancel_open_schedules(reason=reason)
            record = BookingMapper.to_record(booking)
            self._documents[booking_id] = record.to_wire()
            Logger.base.info(f'🚫 [REPO] Cancelled booking {record.reference}: {reason}')
            return self._load(self._documents[booking_id])

    @Logger.io
    async def delete(self, *, booking_id: str) -> None:
        async with self._write_lock:
            booking = BookingMapper.to_domain(self._load(self._get_document(booking_id)))
            self._documents[booking_id] = BookingMapper.to_record(booking.soft_delete()).to_wire()

    @Logger.io
    async def reference_exists(self, *, reference: str) -> bool:
        return any(d['reference'] == reference for d in self._documents.values())
