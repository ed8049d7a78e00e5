"""
Unit tests for ProcessPayment, TopUp and CompleteTopUp

Test Coverage:
1. Partial and full payments move the payment status forward
2. Declined or unavailable gateway: failure result, booking untouched
3. Over-payment is rejected before the gateway is charged
4. Top-up gating, bounds and checkout flow
"""

from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from src.platform.exception.exceptions import InvalidStateError, ValidationError
from src.service.booking.app.command.process_payment_use_case import ProcessPaymentUseCase
from src.service.booking.domain.enum.booking_status import BookingStatus
from src.service.booking.domain.enum.payment_status import PaymentStatus
from src.service.booking.domain.value_object.quantity import Hours, Money
from src.service.booking.driven_adapter.payment.mock_payment_gateway_impl import (
    MockPaymentGatewayImpl,
)
from test.service.booking.fixtures import NOW, TODAY, create_request


@pytest_asyncio.fixture
async def booking(create_use_case):
    result = await create_use_case.create_booking(request=create_request(), now=NOW)
    return result.booking


@pytest_asyncio.fixture
async def confirmed_booking(booking, store):
    paid = booking.apply_payment(amount=booking.total_price.amount)
    return await store.save(paid.confirm())


class TestProcessPayment:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_partial_then_full_payment(self, payment_use_case, store, booking) -> None:
        """
        Given: a 300 booking with nothing paid
        When: 100 and then 200 are paid
        Then: payment status goes partial then paid; confirmation is left to the caller
        """
        # Act
        first = await payment_use_case.process_payment(
            booking_id=booking.id, amount=Decimal('100'), method='card'
        )
        second = await payment_use_case.process_payment(
            booking_id=booking.id, amount=Decimal('200'), method='card'
        )

        # Assert
        assert first.success is True
        assert first.payment_id.startswith('pay_')
        assert first.booking.payment_status is PaymentStatus.PARTIAL
        assert first.booking.outstanding_amount == Money('200')
        assert second.booking.payment_status is PaymentStatus.PAID
        stored = await store.get(booking.id)
        assert stored.paid_amount == Money('300')
        assert stored.status is BookingStatus.PENDING

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_declined_card_leaves_booking_untouched(
        self, payment_use_case, store, booking
    ) -> None:
        result = await payment_use_case.process_payment(
            booking_id=booking.id, amount=Decimal('100'), method='card_declined'
        )

        assert result.success is False
        assert result.error_code == 'card_declined'
        assert 'declined' in result.error
        assert (await store.get(booking.id)).paid_amount.is_zero

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_unavailable_gateway_is_a_failure_result(
        self, booking_repo, child_lock, store, booking
    ) -> None:
        # Arrange
        use_case = ProcessPaymentUseCase(
            booking_repo=booking_repo,
            payment_gateway=MockPaymentGatewayImpl(available=False),
            child_lock=child_lock,
        )

        # Act
        result = await use_case.process_payment(
            booking_id=booking.id, amount=Decimal('100'), method='card'
        )

        # Assert
        assert result.success is False
        assert result.error_code == 'unavailable'
        assert (await store.get(booking.id)).payment_status is PaymentStatus.PENDING

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_over_payment_is_rejected_before_charging(
        self, payment_use_case, booking
    ) -> None:
        # Arrange
        payment_use_case.payment_gateway = AsyncMock()

        # Act
        with pytest.raises(ValidationError, match='exceeds the outstanding balance'):
            await payment_use_case.process_payment(
                booking_id=booking.id, amount=Decimal('300.01'), method='card'
            )

        # Assert
        payment_use_case.payment_gateway.process_payment.assert_not_awaited()

    @pytest.mark.unit
    @pytest.mark.asyncio
    @pytest.mark.parametrize('amount', [Decimal('0'), Decimal('-5'), Decimal('0.004')])
    async def test_non_positive_amount_is_rejected(
        self, payment_use_case, booking, amount: Decimal
    ) -> None:
        with pytest.raises(ValidationError, match='greater than zero'):
            await payment_use_case.process_payment(
                booking_id=booking.id, amount=amount, method='card'
            )

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_cancelled_booking_cannot_be_paid(
        self, payment_use_case, cancel_use_case, booking
    ) -> None:
        await cancel_use_case.cancel_booking(booking_id=booking.id, reason='changed plans')

        with pytest.raises(InvalidStateError):
            await payment_use_case.process_payment(
                booking_id=booking.id, amount=Decimal('10'), method='card'
            )


class TestTopUp:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_opens_checkout_without_touching_booking(
        self, top_up_use_case, store, confirmed_booking
    ) -> None:
        """
        Given: a confirmed, paid 10h package priced at 300
        When: 5 extra hours are requested
        Then: a checkout at the package rate is opened and the booking is unchanged
        """
        # Act
        result = await top_up_use_case.top_up(
            booking_id=confirmed_booking.id, hours=Decimal('5'), today=TODAY
        )

        # Assert
        assert result.success is True
        assert result.amount == Decimal('150.00')
        assert result.currency == 'GBP'
        assert result.checkout_url.endswith(result.payment_id)
        stored = await store.get(confirmed_booking.id)
        assert stored.total_hours == Hours('10')
        assert stored.total_price == Money('300')

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_unpaid_booking_cannot_be_topped_up(self, top_up_use_case, booking) -> None:
        with pytest.raises(InvalidStateError, match='confirmed, fully paid'):
            await top_up_use_case.top_up(booking_id=booking.id, hours=Decimal('5'), today=TODAY)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_expired_package_cannot_be_topped_up(
        self, top_up_use_case, confirmed_booking
    ) -> None:
        with pytest.raises(InvalidStateError, match='expired'):
            await top_up_use_case.top_up(
                booking_id=confirmed_booking.id, hours=Decimal('5'), today=date(2099, 1, 1)
            )

    @pytest.mark.unit
    @pytest.mark.asyncio
    @pytest.mark.parametrize('hours', [Decimal('0'), Decimal('100.5')])
    async def test_hours_out_of_bounds(
        self, top_up_use_case, confirmed_booking, hours: Decimal
    ) -> None:
        with pytest.raises(ValidationError, match='Top-up hours must be between'):
            await top_up_use_case.top_up(
                booking_id=confirmed_booking.id, hours=hours, today=TODAY
            )

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_declined_top_up(self, top_up_use_case, confirmed_booking) -> None:
        result = await top_up_use_case.top_up(
            booking_id=confirmed_booking.id,
            hours=Decimal('2'),
            method='insufficient_funds',
            today=TODAY,
        )

        assert result.success is False
        assert result.checkout_url is None


class TestCompleteTopUp:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_hours_are_credited_only_after_checkout_is_paid(
        self,
        top_up_use_case,
        complete_top_up_use_case,
        payment_gateway,
        store,
        confirmed_booking,
    ) -> None:
        # Arrange
        checkout = await top_up_use_case.top_up(
            booking_id=confirmed_booking.id, hours=Decimal('5'), today=TODAY
        )

        # Act: the webhook has not arrived yet
        with pytest.raises(InvalidStateError, match='has not succeeded'):
            await complete_top_up_use_case.complete_top_up(
                booking_id=confirmed_booking.id, payment_id=checkout.payment_id
            )
        payment_gateway.complete_checkout(checkout.payment_id)
        topped_up = await complete_top_up_use_case.complete_top_up(
            booking_id=confirmed_booking.id, payment_id=checkout.payment_id
        )

        # Assert
        assert topped_up.total_hours == Hours('15')
        assert topped_up.remaining_hours == Hours('13')
        assert topped_up.total_price == Money('450')
        assert topped_up.paid_amount == Money('450')
        assert topped_up.payment_status is PaymentStatus.PAID
        assert (await store.get(confirmed_booking.id)).total_hours == Hours('15')

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_repeated_webhook_credits_once(
        self,
        top_up_use_case,
        complete_top_up_use_case,
        payment_gateway,
        store,
        confirmed_booking,
    ) -> None:
        """
        Given: a paid 5h top-up checkout
        When: completion is delivered three times
        Then: the hours and amount are credited once
        """
        # Arrange
        checkout = await top_up_use_case.top_up(
            booking_id=confirmed_booking.id, hours=Decimal('5'), today=TODAY
        )
        payment_gateway.complete_checkout(checkout.payment_id)

        # Act
        for _ in range(3):
            await complete_top_up_use_case.complete_top_up(
                booking_id=confirmed_booking.id, payment_id=checkout.payment_id
            )

        # Assert
        stored = await store.get(confirmed_booking.id)
        assert stored.total_hours == Hours('15')
        assert stored.paid_amount == Money('450')
        assert stored.applied_top_up_payment_ids == [checkout.payment_id]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_credit_comes_from_gateway_record(
        self, complete_top_up_use_case, payment_gateway, store, confirmed_booking
    ) -> None:
        # Arrange: a £1 checkout that claims 2 hours
        payment = await payment_gateway.process_payment(
            amount=Decimal('1.00'),
            currency='GBP',
            method='card',
            metadata={'purpose': 'top_up', 'booking_id': confirmed_booking.id, 'hours': '2'},
        )
        payment_gateway.complete_checkout(payment.payment_id)

        # Act
        topped_up = await complete_top_up_use_case.complete_top_up(
            booking_id=confirmed_booking.id, payment_id=payment.payment_id
        )

        # Assert
        assert topped_up.total_hours == Hours('12')
        assert topped_up.total_price == Money('301')
        assert topped_up.paid_amount == Money('301')

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_payment_for_another_booking_is_rejected(
        self,
        create_use_case,
        top_up_use_case,
        complete_top_up_use_case,
        payment_gateway,
        store,
        confirmed_booking,
    ) -> None:
        # Arrange
        sibling = await create_use_case.create_booking(
            request=create_request(child_id='child-002'), now=NOW
        )
        checkout = await top_up_use_case.top_up(
            booking_id=confirmed_booking.id, hours=Decimal('5'), today=TODAY
        )
        payment_gateway.complete_checkout(checkout.payment_id)

        # Act & Assert
        with pytest.raises(InvalidStateError, match='is not a top-up for booking'):
            await complete_top_up_use_case.complete_top_up(
                booking_id=sibling.booking.id, payment_id=checkout.payment_id
            )
        assert (await store.get(sibling.booking.id)).total_hours == Hours('10')

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_booking_payment_cannot_be_redeemed_as_top_up(
        self, payment_use_case, complete_top_up_use_case, booking
    ) -> None:
        result = await payment_use_case.process_payment(
            booking_id=booking.id, amount=Decimal('300'), method='card'
        )

        with pytest.raises(InvalidStateError, match='is not a top-up'):
            await complete_top_up_use_case.complete_top_up(
                booking_id=booking.id, payment_id=result.payment_id
            )

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_failed_checkout_is_not_credited(
        self, top_up_use_case, complete_top_up_use_case, payment_gateway, confirmed_booking
    ) -> None:
        checkout = await top_up_use_case.top_up(
            booking_id=confirmed_booking.id, hours=Decimal('5'), today=TODAY
        )
        payment_gateway.complete_checkout(checkout.payment_id, succeeded=False)

        with pytest.raises(InvalidStateError, match='status: failed'):
            await complete_top_up_use_case.complete_top_up(
                booking_id=confirmed_booking.id, payment_id=checkout.payment_id
            )
