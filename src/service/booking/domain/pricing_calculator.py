"""
Pricing & Discount Calculator

Pure functions: hours, participants and lead time in, a price quote out.
Discounts are additive percentages, capped by the policy maximum and never
more than the base price.
"""

from collections.abc import Mapping
from datetime import date
from decimal import Decimal
from typing import Optional

import attrs

from src.platform.config.core_setting import Settings, settings
from src.platform.exception.exceptions import ValidationError
from src.service.booking.domain.value_object.quantity import Hours, Money


@attrs.define(frozen=True)
class DiscountPolicy:
    volume_tiers: Mapping[int, Decimal]
    early_booking_days: int
    early_booking_percent: Decimal
    multi_child_percent: Decimal
    max_percent: Decimal

    @classmethod
    def from_settings(cls, config: Settings = settings) -> 'DiscountPolicy':
        return cls(
            volume_tiers=dict(config.VOLUME_DISCOUNT_TIERS),
            early_booking_days=config.EARLY_BOOKING_DAYS,
            early_booking_percent=config.EARLY_BOOKING_DISCOUNT_PERCENT,
            multi_child_percent=config.MULTI_CHILD_DISCOUNT_PERCENT,
            max_percent=config.MAX_DISCOUNT_PERCENT,
        )


@attrs.define(frozen=True)
class Discount:
    amount: Money
    percent: Decimal
    reasons: tuple[str, ...] = ()

    @property
    def reason(self) -> Optional[str]:
        return ', '.join(self.reasons) or None


@attrs.define(frozen=True)
class PriceQuote:
    base_price: Money
    discount: Discount

    @property
    def final_price(self) -> Money:
        return self.base_price.minus_capped(self.discount.amount)


def days_until(start_date: Optional[date], today: date) -> int:
    if start_date is None:
        return 0
    return (start_date - today).days


def calculate_base_price(
    *, hours: Hours, hourly_rate: Money, package_base_price: Optional[Money] = None
) -> Money:
    if package_base_price is not None:
        return package_base_price
    return hourly_rate.times(hours.value)


def calculate_discount(
    *,
    base_price: Money,
    total_hours: Hours,
    participant_count: int,
    days_until_start: int,
    policy: DiscountPolicy,
) -> Discount:
    percent = Decimal('0')
    reasons: list[str] = []

    reached = [tier for tier in policy.volume_tiers if total_hours.value >= tier]
    if reached:
        tier = max(reached)
        percent += policy.volume_tiers[tier]
        reasons.append(f'{tier}+ hours')

    if policy.early_booking_days and days_until_start >= policy.early_booking_days:
        percent += policy.early_booking_percent
        reasons.append(f'booked {policy.early_booking_days}+ days ahead')

    if participant_count >= 2:
        percent += policy.multi_child_percent
        reasons.append(f'{participant_count} children')

    percent = min(percent, policy.max_percent, Decimal('100'))
    amount = min(base_price.percent(percent), base_price)
    return Discount(amount=amount, percent=percent, reasons=tuple(reasons))


def quote_price(
    *,
    hours: Hours,
    participant_count: int,
    start_date: Optional[date],
    today: date,
    package_base_price: Optional[Money] = None,
    hourly_rate: Optional[Money] = None,
    policy: Optional[DiscountPolicy] = None,
) -> PriceQuote:
    if participant_count < 1:
        raise ValidationError('At least one participant is required', field='participants')
    base_price = calculate_base_price(
        hours=hours,
        hourly_rate=hourly_rate or Money(settings.HOURLY_RATE),
        package_base_price=package_base_price,
    )
    discount = calculate_discount(
        base_price=base_price,
        total_hours=hours,
        participant_count=participant_count,
        days_until_start=days_until(start_date, today),
        policy=policy or DiscountPolicy.from_settings(),
    )
    return PriceQuote(base_price=base_price, discount=discount)


def top_up_price(
    *, hours: Hours, package_price: Money, package_hours: Hours, hourly_rate: Optional[Money] = None
) -> Money:
    """Extra hours are charged at the package's own hourly rate"""
    if package_hours.value <= settings.PAY_FIRST_PLACEHOLDER_HOURS:
        rate = (hourly_rate or Money(settings.HOURLY_RATE)).amount
        return Money(hours.value * rate)
    return Money(hours.value * package_price.amount / package_hours.value)
