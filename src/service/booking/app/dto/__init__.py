"""Application layer DTOs"""

from src.service.booking.app.dto.booking_result_dto import BookingResult
from src.service.booking.app.dto.payment_dto import (
    GatewayPaymentResult,
    GatewayPaymentStatus,
    PaymentResult,
    TopUpResult,
)

__all__ = [
    'BookingResult',
    'GatewayPaymentResult',
    'GatewayPaymentStatus',
    'PaymentResult',
    'TopUpResult',
]
