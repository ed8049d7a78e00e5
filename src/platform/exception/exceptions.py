from collections.abc import Sequence
from typing import Any


class CustomBaseError(Exception):
    """Base class for all custom exceptions - controls logging behavior in @Logger.io"""

    def __init__(self, message: str, status_code: int) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class DomainError(CustomBaseError):
    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message, status_code)


class ValidationError(DomainError):
    """Malformed or rule-breaking input, raised before anything is mutated"""

    def __init__(self, message: str, *, field: str | None = None) -> None:
        self.field = field
        super().__init__(message, 400)


class InvalidStateError(DomainError):
    """Operation is not allowed from the current booking/session state"""

    def __init__(self, message: str) -> None:
        super().__init__(message, 409)


class NotFoundError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 404)


class ConflictError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 409)


class DuplicatePackageError(ConflictError):
    """A child already holds an active package"""

    def __init__(
        self,
        message: str,
        *,
        conflicting_references: Sequence[str] = (),
        expires_on: str | None = None,
    ) -> None:
        self.conflicting_references = list(conflicting_references)
        self.expires_on = expires_on
        super().__init__(message)


class SchedulingConflictError(ConflictError):
    """One or more proposed sessions collide with the child's calendar"""

    def __init__(self, message: str, *, conflicts: Sequence[Any] = ()) -> None:
        self.conflicts = list(conflicts)
        super().__init__(message)


class PaymentGatewayError(CustomBaseError):
    def __init__(self, message: str, *, error_code: str | None = None) -> None:
        self.error_code = error_code
        super().__init__(message, 502)
