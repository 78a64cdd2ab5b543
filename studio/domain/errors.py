"""Domain error codes for the studio module."""

from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_CLASS_ID = "INVALID_CLASS_ID"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    CLASS_NOT_FOUND = "CLASS_NOT_FOUND"
    PARTICIPANT_NOT_FOUND = "PARTICIPANT_NOT_FOUND"
    NO_CURRENT_TICKET = "NO_CURRENT_TICKET"
    CONSUMPTION_ENTRY_NOT_FOUND = "CONSUMPTION_ENTRY_NOT_FOUND"
    STORE_ERROR = "STORE_ERROR"
    CONCURRENT_UPDATE = "CONCURRENT_UPDATE"


class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    def __init__(self, code: ErrorCode, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class ValidationError(DomainError):
    """Raised when a stored record is missing a field or has the wrong type."""

    def __init__(self, record: str, record_id: str, field: str) -> None:
        super().__init__(
            code=ErrorCode.VALIDATION_ERROR,
            message=f'{record} {record_id} is missing or has invalid "{field}"',
        )
        self.record = record
        self.record_id = record_id
        self.field = field


class InvalidClassIdError(DomainError):
    """Raised when a class ID is not a YYYYMMDDHHmm token."""

    def __init__(self, class_id: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_CLASS_ID,
            message="Invalid class ID format",
        )
        self.class_id = class_id


class UserNotFoundError(DomainError):
    def __init__(self, user_id: str) -> None:
        super().__init__(code=ErrorCode.USER_NOT_FOUND, message="User not found")
        self.user_id = user_id


class ClassNotFoundError(DomainError):
    def __init__(self, class_id: str) -> None:
        super().__init__(code=ErrorCode.CLASS_NOT_FOUND, message="Class not found")
        self.class_id = class_id


class ParticipantNotFoundError(DomainError):
    """Raised when a user is not on the participant list of a class."""

    def __init__(self, class_id: str, user_id: str) -> None:
        super().__init__(
            code=ErrorCode.PARTICIPANT_NOT_FOUND,
            message="Participant not found in class",
        )
        self.class_id = class_id
        self.user_id = user_id


class NoCurrentTicketError(DomainError):
    """Raised when none of the user's orders can pay for the class."""

    def __init__(self, user_id: str, class_id: str) -> None:
        super().__init__(
            code=ErrorCode.NO_CURRENT_TICKET,
            message=f"User {user_id} has no current ticket for class {class_id}",
        )
        self.user_id = user_id
        self.class_id = class_id


class ConsumptionEntryNotFoundError(DomainError):
    """Raised when the selected order has no entry for the class."""

    def __init__(self, order_id: str, class_id: str) -> None:
        super().__init__(
            code=ErrorCode.CONSUMPTION_ENTRY_NOT_FOUND,
            message=f"Order {order_id} has not been used for class {class_id}",
        )
        self.order_id = order_id
        self.class_id = class_id


class StoreError(DomainError):
    """Raised when a persistence call fails.

    ``operation`` names the failing store call and ``record_id`` the order,
    user, class or participant it was writing.
    """

    def __init__(
        self,
        operation: str,
        record_id: str,
        reason: str = "",
        code: ErrorCode = ErrorCode.STORE_ERROR,
    ) -> None:
        message = f"{operation} failed for {record_id}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(code=code, message=message)
        self.operation = operation
        self.record_id = record_id


class ConcurrentUpdateError(StoreError):
    """Raised when an order changed since it was read."""

    def __init__(self, operation: str, order_id: str, expected: int, actual: int) -> None:
        super().__init__(
            operation=operation,
            record_id=order_id,
            reason=f"expected version {expected}, found {actual}",
            code=ErrorCode.CONCURRENT_UPDATE,
        )
        self.expected_version = expected
        self.actual_version = actual
