"""
Unit tests for the update / confirm / cancel use cases

Notifications go through the background dispatcher: tests drain it before
looking at sent e-mails, and a failing notifier must never fail the use case.
"""

from datetime import time, timedelta
from decimal import Decimal
from unittest.mock import AsyncMock

import anyio
import pytest
import pytest_asyncio

from src.platform.exception.exceptions import (
    DuplicatePackageError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from src.service.booking.app.dto.booking_wire_dto import ParticipantRecord, UpdateBookingRequest
from src.service.booking.domain.enum.booking_status import BookingStatus
from src.service.booking.domain.enum.payment_status import PaymentStatus
from src.service.booking.domain.enum.session_status import SessionStatus
from src.service.booking.domain.value_object.quantity import Hours, Money
from test.service.booking.fixtures import (
    NEXT_WEEK,
    NOW,
    OTHER_CHILD_ID,
    create_request,
    make_schedule,
    session_request,
)


@pytest_asyncio.fixture
async def booking(create_use_case):
    result = await create_use_case.create_booking(request=create_request(), now=NOW)
    return result.booking


@pytest_asyncio.fixture
async def paid_booking(booking, store):
    return await store.save(booking.apply_payment(amount=booking.total_price.amount))


class TestUpdateBooking:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_new_sessions_replace_open_ones_and_keep_history(
        self, update_use_case, store, booking
    ) -> None:
        """
        Given: a booking with one completed session and one open session
        When: the schedules are replaced with a single new session
        Then: the completed session stays, the open one is replaced
        """
        # Arrange
        first = booking.schedules[0]
        extra = booking.add_schedule(
            schedule=make_schedule(NEXT_WEEK + timedelta(days=1), time(10, 0), time(11, 0)),
            today=NOW.date(),
        )
        await store.save(extra.complete_schedule(schedule_id=first.id))

        # Act
        result = await update_use_case.update_booking(
            booking_id=booking.id,
            request=UpdateBookingRequest(
                schedules=[session_request(NEXT_WEEK + timedelta(days=4), '13:00', '16:00')]
            ),
            now=NOW,
        )

        # Assert
        updated = result.booking
        assert [s.status for s in updated.schedules] == [
            SessionStatus.COMPLETED,
            SessionStatus.SCHEDULED,
        ]
        assert updated.schedules[0].id == first.id
        assert updated.booked_hours == Hours('5')
        assert updated.used_hours == Hours('2')
        assert updated.remaining_hours == Hours('5')

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_reprices_when_base_price_supplied(self, update_use_case, booking) -> None:
        result = await update_use_case.update_booking(
            booking_id=booking.id,
            request=UpdateBookingRequest(
                participants=[
                    ParticipantRecord(first_name='Tom', last_name='Doe', child_id='child-001'),
                    ParticipantRecord(first_name='Amy', last_name='Doe', child_id=OTHER_CHILD_ID),
                ],
                package_base_price=300,
            ),
            now=NOW,
        )

        assert result.booking.total_price == Money('270')
        assert result.booking.discount_reason == '2 children'

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_keeps_price_without_base_price(self, update_use_case, booking) -> None:
        result = await update_use_case.update_booking(
            booking_id=booking.id, request=UpdateBookingRequest(notes='Bring a towel'), now=NOW
        )

        assert result.booking.total_price == booking.total_price
        assert result.booking.notes == 'Bring a towel'

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_adding_a_child_with_own_package_is_rejected(
        self, update_use_case, create_use_case, booking
    ) -> None:
        await create_use_case.create_booking(
            request=create_request(child_id=OTHER_CHILD_ID), now=NOW
        )

        with pytest.raises(DuplicatePackageError):
            await update_use_case.update_booking(
                booking_id=booking.id,
                request=UpdateBookingRequest(
                    participants=[
                        ParticipantRecord(first_name='Tom', child_id='child-001'),
                        ParticipantRecord(first_name='Amy', child_id=OTHER_CHILD_ID),
                    ]
                ),
                now=NOW,
            )

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_missing_booking_is_not_found(self, update_use_case) -> None:
        with pytest.raises(NotFoundError):
            await update_use_case.update_booking(
                booking_id='0190f5d6-8c7a-7b6e-9a1d-3f2e4c5b6a70',
                request=UpdateBookingRequest(notes='x'),
                now=NOW,
            )


class TestConfirmBooking:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_confirms_paid_booking_and_emails_parent(
        self, confirm_use_case, dispatcher, notification_service, paid_booking
    ) -> None:
        # Act
        confirmed = await confirm_use_case.confirm_booking(booking_id=paid_booking.id)
        await dispatcher.drain()

        # Assert
        assert confirmed.status is BookingStatus.CONFIRMED
        assert len(notification_service.sent_emails) == 1
        email = notification_service.sent_emails[0]
        assert email['to'] == 'jane.doe@example.com'
        assert email['subject'] == f'Booking confirmed - {confirmed.reference}'

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_unpaid_booking_cannot_be_confirmed(
        self, confirm_use_case, store, notification_service, booking
    ) -> None:
        with pytest.raises(InvalidStateError):
            await confirm_use_case.confirm_booking(booking_id=booking.id)

        assert (await store.get(booking.id)).status is BookingStatus.PENDING
        assert notification_service.sent_emails == []

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_notification_failure_does_not_fail_confirmation(
        self, confirm_use_case, dispatcher, paid_booking
    ) -> None:
        """
        Given: a notifier that raises
        Then: the booking is still confirmed and the error is swallowed
        """
        # Arrange
        failing = AsyncMock(side_effect=ConnectionError('smtp down'))
        confirm_use_case.notification_service.send_booking_confirmation = failing

        # Act
        confirmed = await confirm_use_case.confirm_booking(booking_id=paid_booking.id)
        await dispatcher.drain()

        # Assert
        assert confirmed.status is BookingStatus.CONFIRMED
        failing.assert_awaited_once()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_cancel_landing_before_confirm_is_not_overwritten(
        self, confirm_use_case, booking_repo, child_lock, store, paid_booking
    ) -> None:
        """
        Given: a confirm waiting on the child's lock
        When: the booking is cancelled before the lock is released
        Then: the confirm sees the cancellation and the booking stays cancelled and refunded
        """

        async def confirm() -> None:
            with pytest.raises(InvalidStateError, match='cancelled'):
                await confirm_use_case.confirm_booking(booking_id=paid_booking.id)

        # Act
        async with anyio.create_task_group() as tg:
            async with child_lock.hold(paid_booking.child_keys):
                tg.start_soon(confirm)
                await anyio.wait_all_tasks_blocked()
                await booking_repo.cancel(booking_id=paid_booking.id, reason='parent request')

        # Assert
        stored = await store.get(paid_booking.id)
        assert stored.status is BookingStatus.CANCELLED
        assert stored.payment_status is PaymentStatus.REFUNDED
        assert stored.paid_amount.is_zero


class TestCancelBooking:
    @pytest.mark.unit
    @pytest.mark.asyncio
    @pytest.mark.parametrize('reason', ['', '   '])
    async def test_blank_reason_is_rejected_before_any_write(
        self, cancel_use_case, store, booking, reason: str
    ) -> None:
        with pytest.raises(ValidationError, match='reason is required'):
            await cancel_use_case.cancel_booking(booking_id=booking.id, reason=reason)

        assert (await store.get(booking.id)).status is BookingStatus.PENDING

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_cancel_paid_booking_refunds_and_clears_calendar(
        self, cancel_use_case, dispatcher, notification_service, paid_booking
    ) -> None:
        """
        Given: a fully paid booking with an open session
        When: it is cancelled
        Then: status, refund and session teardown land together and the parent is told
        """
        # Act
        cancelled = await cancel_use_case.cancel_booking(
            booking_id=paid_booking.id, reason='parent request'
        )
        await dispatcher.drain()

        # Assert
        assert cancelled.status is BookingStatus.CANCELLED
        assert cancelled.cancellation_reason == 'parent request'
        assert cancelled.payment_status is PaymentStatus.REFUNDED
        assert cancelled.paid_amount.is_zero
        assert [s.status for s in cancelled.schedules] == [SessionStatus.CANCELLED]
        assert cancelled.remaining_hours == Hours('10')
        body = notification_service.sent_emails[0]['body']
        assert 'Reason: parent request' in body
        assert 'refunded' in body

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_cancelled_child_can_book_again(
        self, cancel_use_case, create_use_case, booking
    ) -> None:
        await cancel_use_case.cancel_booking(booking_id=booking.id, reason='changed plans')

        result = await create_use_case.create_booking(request=create_request(), now=NOW)

        assert result.booking.id != booking.id

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_cancel_twice_is_rejected(self, cancel_use_case, booking) -> None:
        await cancel_use_case.cancel_booking(booking_id=booking.id, reason='changed plans')

        with pytest.raises(InvalidStateError, match='already cancelled'):
            await cancel_use_case.cancel_booking(booking_id=booking.id, reason='again')

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_partial_payment_is_refunded_too(self, cancel_use_case, store, booking) -> None:
        await store.save(booking.apply_payment(amount=Decimal('50')))

        cancelled = await cancel_use_case.cancel_booking(booking_id=booking.id, reason='moving')

        assert cancelled.payment_status is PaymentStatus.REFUNDED
