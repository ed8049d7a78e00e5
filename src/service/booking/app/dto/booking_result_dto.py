from typing import List

import attrs

from src.service.booking.domain.entity.booking_entity import Booking


@attrs.define(frozen=True)
class BookingResult:
    """A persisted booking plus any non-blocking warnings raised on the way"""

    booking: Booking
    warnings: List[str] = attrs.field(factory=list)
