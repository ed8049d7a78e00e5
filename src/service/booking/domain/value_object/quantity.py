"""
Money and Hours

Both are non-negative decimals kept at two places (half-up), which is also
how they travel on the wire.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Self

import attrs

from src.platform.exception.exceptions import ValidationError


TWO_PLACES = Decimal('0.01')


def to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, float):
        # str() first so 0.1 stays 0.1 instead of its binary expansion
        number = Decimal(str(value))
    else:
        try:
            number = Decimal(value)
        except (InvalidOperation, TypeError, ValueError):
            raise ValidationError(f'Not a number: {value!r}')
    if not number.is_finite():
        raise ValidationError(f'Not a finite number: {value!r}')
    return number.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def _non_negative(instance: Any, attribute: attrs.Attribute, value: Decimal) -> None:
    if value < 0:
        raise ValidationError(
            f'{type(instance).__name__} cannot be negative: {value}', field=attribute.name
        )


@attrs.define(frozen=True, order=True)
class Money:
    amount: Decimal = attrs.field(converter=to_decimal, validator=_non_negative)

    @classmethod
    def zero(cls) -> Self:
        return cls(Decimal('0'))

    def __add__(self, other: 'Money') -> 'Money':
        return Money(self.amount + other.amount)

    def __sub__(self, other: 'Money') -> 'Money':
        return Money(self.amount - other.amount)

    def minus_capped(self, other: 'Money') -> 'Money':
        return Money(max(Decimal('0'), self.amount - other.amount))

    def percent(self, pct: Decimal) -> 'Money':
        return Money(self.amount * pct / Decimal('100'))

    def times(self, factor: Decimal) -> 'Money':
        return Money(self.amount * factor)

    @property
    def is_zero(self) -> bool:
        return self.amount == 0

    def __float__(self) -> float:
        return float(self.amount)

    def __str__(self) -> str:
        return f'{self.amount:.2f}'


@attrs.define(frozen=True, order=True)
class Hours:
    value: Decimal = attrs.field(converter=to_decimal, validator=_non_negative)

    @classmethod
    def zero(cls) -> Self:
        return cls(Decimal('0'))

    @classmethod
    def from_minutes(cls, minutes: int | float) -> Self:
        return cls(max(Decimal('0'), Decimal(str(minutes)) / Decimal('60')))

    def __add__(self, other: 'Hours') -> 'Hours':
        return Hours(self.value + other.value)

    def __sub__(self, other: 'Hours') -> 'Hours':
        return Hours(self.value - other.value)

    def minus_capped(self, other: 'Hours') -> 'Hours':
        """Subtract, flooring at zero"""
        return Hours(max(Decimal('0'), self.value - other.value))

    @property
    def is_zero(self) -> bool:
        return self.value == 0

    def __float__(self) -> float:
        return float(self.value)

    def __str__(self) -> str:
        return f'{self.value.normalize():f}h'
