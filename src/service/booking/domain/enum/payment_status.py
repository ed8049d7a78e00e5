from decimal import Decimal
from enum import StrEnum


class PaymentStatus(StrEnum):
    PENDING = 'pending'
    PARTIAL = 'partial'
    PAID = 'paid'
    REFUNDED = 'refunded'

    @classmethod
    def derive(cls, *, paid_amount: Decimal, total_price: Decimal) -> 'PaymentStatus':
        """Payment status follows the paid/total ratio, never set by hand"""
        if paid_amount <= 0:
            return cls.PENDING
        if paid_amount < total_price:
            return cls.PARTIAL
        return cls.PAID

    def can_transition_to(self, new_status: 'PaymentStatus') -> bool:
        # pending -> partial -> paid, or anything -> refunded (terminal)
        if self is PaymentStatus.REFUNDED:
            return False
        if new_status is PaymentStatus.REFUNDED:
            return True
        order = (PaymentStatus.PENDING, PaymentStatus.PARTIAL, PaymentStatus.PAID)
        return order.index(new_status) >= order.index(self)
