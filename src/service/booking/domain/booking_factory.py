from datetime import date
from typing import List, Optional

from src.service.booking.domain.entity.booking_entity import Booking
from src.service.booking.domain.entity.booking_schedule_entity import BookingSchedule
from src.service.booking.domain.enum.booking_mode import BookingMode
from src.service.booking.domain.pricing_calculator import DiscountPolicy, PriceQuote, quote_price
from src.service.booking.domain.value_object.booking_reference import BookingReference
from src.service.booking.domain.value_object.parent_guardian import ParentGuardian
from src.service.booking.domain.value_object.participant import Participant
from src.service.booking.domain.value_object.quantity import Hours, Money


class BookingFactory:
    """Prices a booking request and hands it to Booking.create"""

    def __init__(
        self, *, policy: Optional[DiscountPolicy] = None, hourly_rate: Optional[Money] = None
    ) -> None:
        self.policy = policy
        self.hourly_rate = hourly_rate

    @staticmethod
    def _start_date(start_date: Optional[date], schedules: List[BookingSchedule]) -> Optional[date]:
        if start_date is not None:
            return start_date
        return min((s.date for s in schedules), default=None)

    def quote(
        self,
        *,
        hours: Hours,
        participant_count: int,
        start_date: Optional[date],
        today: date,
        package_base_price: Optional[Money],
    ) -> PriceQuote:
        return quote_price(
            hours=hours,
            participant_count=participant_count,
            start_date=start_date,
            today=today,
            package_base_price=package_base_price,
            hourly_rate=self.hourly_rate,
            policy=self.policy,
        )

    def build(
        self,
        *,
        reference: BookingReference,
        parent_guardian: ParentGuardian,
        participants: List[Participant],
        schedules: List[BookingSchedule],
        total_hours: Hours,
        today: date,
        package_base_price: Optional[Money] = None,
        package_id: Optional[str] = None,
        package_slug: Optional[str] = None,
        package_name: Optional[str] = None,
        mode_key: Optional[str] = None,
        start_date: Optional[date] = None,
        package_expires_at: Optional[date] = None,
        notes: Optional[str] = None,
    ) -> Booking:
        start_date = self._start_date(start_date, schedules)
        quote = self.quote(
            hours=total_hours,
            participant_count=len(participants),
            start_date=start_date,
            today=today,
            package_base_price=package_base_price,
        )
        return Booking.create(
            reference=reference,
            parent_guardian=parent_guardian,
            participants=participants,
            total_hours=total_hours,
            total_price=quote.final_price,
            discount_amount=quote.discount.amount,
            discount_reason=quote.discount.reason,
            schedules=schedules,
            package_id=package_id,
            package_slug=package_slug,
            package_name=package_name,
            mode_key=mode_key or BookingMode.SESSIONS.value,
            start_date=start_date,
            package_expires_at=package_expires_at,
            notes=notes,
        )

    def reprice(
        self,
        booking: Booking,
        *,
        participants: List[Participant],
        schedules: List[BookingSchedule],
        package_base_price: Optional[Money],
        today: date,
    ) -> Optional[PriceQuote]:
        """New quote for an edited booking, or None to keep the stored price"""
        if package_base_price is None:
            return None
        return self.quote(
            hours=booking.total_hours,
            participant_count=len(participants),
            start_date=self._start_date(booking.start_date, schedules),
            today=today,
            package_base_price=package_base_price,
        )
