"""
Booking test fixtures

Use cases are built by hand on top of the in-memory adapters, the same
adapters the DI container hands out by default.
"""

import pytest

from src.platform.task.background_task import BackgroundTaskDispatcher
from src.service.booking.app.command.add_booking_session_use_case import AddBookingSessionUseCase
from src.service.booking.app.command.cancel_booking_session_use_case import (
    CancelBookingSessionUseCase,
)
from src.service.booking.app.command.cancel_booking_use_case import CancelBookingUseCase
from src.service.booking.app.command.complete_booking_session_use_case import (
    CompleteBookingSessionUseCase,
)
from src.service.booking.app.command.complete_top_up_use_case import CompleteTopUpUseCase
from src.service.booking.app.command.confirm_booking_use_case import ConfirmBookingUseCase
from src.service.booking.app.command.create_booking_use_case import CreateBookingUseCase
from src.service.booking.app.command.process_payment_use_case import ProcessPaymentUseCase
from src.service.booking.app.command.reschedule_booking_session_use_case import (
    RescheduleBookingSessionUseCase,
)
from src.service.booking.app.command.top_up_booking_use_case import TopUpBookingUseCase
from src.service.booking.app.command.update_booking_use_case import UpdateBookingUseCase
from src.service.booking.app.mapper.booking_store import BookingStore
from src.service.booking.domain.booking_factory import BookingFactory
from src.service.booking.domain.package_constraint import PackageConstraints
from src.service.booking.domain.pricing_calculator import DiscountPolicy
from src.service.booking.driven_adapter.notification.mock_notification_service_impl import (
    MockNotificationServiceImpl,
)
from src.service.booking.driven_adapter.payment.mock_payment_gateway_impl import (
    MockPaymentGatewayImpl,
)
from src.service.booking.driven_adapter.repo.in_memory_booking_repo_impl import (
    InMemoryBookingRepoImpl,
)
from src.service.booking.driven_adapter.state.child_lock_impl import ChildLockImpl


@pytest.fixture
def booking_repo() -> InMemoryBookingRepoImpl:
    return InMemoryBookingRepoImpl()


@pytest.fixture
def store(booking_repo: InMemoryBookingRepoImpl) -> BookingStore:
    return BookingStore(booking_repo)


@pytest.fixture
def payment_gateway() -> MockPaymentGatewayImpl:
    return MockPaymentGatewayImpl()


@pytest.fixture
def notification_service() -> MockNotificationServiceImpl:
    return MockNotificationServiceImpl()


@pytest.fixture
def child_lock() -> ChildLockImpl:
    return ChildLockImpl()


@pytest.fixture
def dispatcher() -> BackgroundTaskDispatcher:
    return BackgroundTaskDispatcher()


@pytest.fixture
def package_constraints() -> PackageConstraints:
    return PackageConstraints(same_day_allowed=False, next_day_cutoff_hour=18, min_advance_hours=24)


@pytest.fixture
def booking_factory() -> BookingFactory:
    return BookingFactory(policy=DiscountPolicy.from_settings())


@pytest.fixture
def create_use_case(
    booking_repo, child_lock, booking_factory, package_constraints
) -> CreateBookingUseCase:
    return CreateBookingUseCase(
        booking_repo=booking_repo,
        child_lock=child_lock,
        booking_factory=booking_factory,
        package_constraints=package_constraints,
    )


@pytest.fixture
def update_use_case(
    booking_repo, child_lock, booking_factory, package_constraints
) -> UpdateBookingUseCase:
    return UpdateBookingUseCase(
        booking_repo=booking_repo,
        child_lock=child_lock,
        booking_factory=booking_factory,
        package_constraints=package_constraints,
    )


@pytest.fixture
def confirm_use_case(
    booking_repo, child_lock, notification_service, dispatcher
) -> ConfirmBookingUseCase:
    return ConfirmBookingUseCase(
        booking_repo=booking_repo,
        child_lock=child_lock,
        notification_service=notification_service,
        background_task_dispatcher=dispatcher,
    )


@pytest.fixture
def cancel_use_case(
    booking_repo, child_lock, notification_service, dispatcher
) -> CancelBookingUseCase:
    return CancelBookingUseCase(
        booking_repo=booking_repo,
        child_lock=child_lock,
        notification_service=notification_service,
        background_task_dispatcher=dispatcher,
    )


@pytest.fixture
def payment_use_case(booking_repo, payment_gateway, child_lock) -> ProcessPaymentUseCase:
    return ProcessPaymentUseCase(
        booking_repo=booking_repo, payment_gateway=payment_gateway, child_lock=child_lock
    )


@pytest.fixture
def top_up_use_case(booking_repo, payment_gateway) -> TopUpBookingUseCase:
    return TopUpBookingUseCase(booking_repo=booking_repo, payment_gateway=payment_gateway)


@pytest.fixture
def complete_top_up_use_case(booking_repo, payment_gateway, child_lock) -> CompleteTopUpUseCase:
    return CompleteTopUpUseCase(
        booking_repo=booking_repo, payment_gateway=payment_gateway, child_lock=child_lock
    )


@pytest.fixture
def add_session_use_case(booking_repo, child_lock, package_constraints) -> AddBookingSessionUseCase:
    return AddBookingSessionUseCase(
        booking_repo=booking_repo, child_lock=child_lock, package_constraints=package_constraints
    )


@pytest.fixture
def reschedule_use_case(
    booking_repo, child_lock, package_constraints
) -> RescheduleBookingSessionUseCase:
    return RescheduleBookingSessionUseCase(
        booking_repo=booking_repo, child_lock=child_lock, package_constraints=package_constraints
    )


@pytest.fixture
def cancel_session_use_case(booking_repo, child_lock) -> CancelBookingSessionUseCase:
    return CancelBookingSessionUseCase(booking_repo=booking_repo, child_lock=child_lock)


@pytest.fixture
def complete_session_use_case(booking_repo, child_lock) -> CompleteBookingSessionUseCase:
    return CompleteBookingSessionUseCase(booking_repo=booking_repo, child_lock=child_lock)
