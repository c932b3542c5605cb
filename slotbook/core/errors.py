"""Domain errors raised by the scheduling core and mapped to HTTP in main."""

from enum import Enum


class ErrorCode(Enum):
    INVALID_INPUT = "INVALID_INPUT"
    INVALID_STATUS_TRANSITION = "INVALID_STATUS_TRANSITION"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"


class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode = ErrorCode.INVALID_INPUT

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class InvalidInputError(DomainError):
    code = ErrorCode.INVALID_INPUT

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class InvalidStatusTransitionError(InvalidInputError):
    code = ErrorCode.INVALID_STATUS_TRANSITION

    def __init__(self, current: str, target: str) -> None:
        super().__init__(
            f"Cannot change booking status from {current} to {target}",
            field="status",
        )
        self.current = current
        self.target = target


class NotFoundError(DomainError):
    code = ErrorCode.NOT_FOUND

    def __init__(self, entity: str, entity_id: object = None) -> None:
        super().__init__(f"{entity} not found")
        self.entity = entity
        self.entity_id = entity_id


class ConflictError(DomainError):
    """Raised when the requested interval overlaps a non-cancelled booking."""

    code = ErrorCode.CONFLICT

    def __init__(self, message: str = "This time slot is already booked") -> None:
        super().__init__(message)


class UnauthorizedError(DomainError):
    code = ErrorCode.UNAUTHORIZED

    def __init__(self, message: str = "Missing or invalid authorization header") -> None:
        super().__init__(message)


class ForbiddenError(DomainError):
    code = ErrorCode.FORBIDDEN

    def __init__(self, message: str = "Not authorized to perform this action") -> None:
        super().__init__(message)
