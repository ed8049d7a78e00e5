"""
https://python-dependency-injector.ets-labs.org/index.html
"""

from dependency_injector import containers, providers

from src.platform.config.core_setting import Settings
from src.platform.task.background_task import BackgroundTaskDispatcher
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


class Container(containers.DeclarativeContainer):
    # Configuration
    config_service = providers.Singleton(Settings)

    # Background task group (override with a running anyio task group)
    # Used for fire-and-forget notification dispatch
    task_group = providers.Object(None)
    background_task_dispatcher = providers.Singleton(
        BackgroundTaskDispatcher, task_group=task_group
    )

    # Booking policy
    discount_policy = providers.Singleton(DiscountPolicy.from_settings, config=config_service)
    package_constraints = providers.Singleton(
        PackageConstraints.from_settings, config=config_service
    )
    booking_factory = providers.Singleton(BookingFactory, policy=discount_policy)

    # Driven adapters
    booking_repo = providers.Singleton(InMemoryBookingRepoImpl)
    payment_gateway = providers.Singleton(MockPaymentGatewayImpl)
    notification_service = providers.Singleton(
        MockNotificationServiceImpl, debug=config_service.provided.DEBUG
    )
    child_lock = providers.Singleton(ChildLockImpl)


container = Container()


def setup() -> None:
    from src.platform.config.wire_modules import WIRE_MODULES

    container.config_service()
    container.wire(modules=WIRE_MODULES)


def cleanup() -> None:
    container.unwire()
    container.reset_singletons()
