"""Domain error codes for purchase intake and queue allocation."""

from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    MISSING_REFERENCE = "MISSING_REFERENCE"
    EMPTY_REQUEST = "EMPTY_REQUEST"
    WINDOW_CLOSED = "WINDOW_CLOSED"
    QUANTITY_OUT_OF_BOUNDS = "QUANTITY_OUT_OF_BOUNDS"
    NOT_FOUND = "NOT_FOUND"
    ALREADY_ALLOCATED = "ALREADY_ALLOCATED"
    STORAGE_FAILURE = "STORAGE_FAILURE"


class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class ValidationError(DomainError):
    """A purchase request broke an intake rule. Never retried."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class MissingReferenceError(ValidationError):
    code = ErrorCode.MISSING_REFERENCE


class EmptyRequestError(ValidationError):
    code = ErrorCode.EMPTY_REQUEST

    def __init__(self) -> None:
        super().__init__("purchase request must contain at least one item", field="items")


class WindowClosedError(ValidationError):
    code = ErrorCode.WINDOW_CLOSED


class QuantityOutOfBoundsError(ValidationError):
    code = ErrorCode.QUANTITY_OUT_OF_BOUNDS


class NotFoundError(DomainError):
    code = ErrorCode.NOT_FOUND


class PurchaseRequestNotFoundError(NotFoundError):
    """Raised when a purchase request id does not exist."""

    def __init__(self, purchase_request_id: int) -> None:
        super().__init__(f"purchase request {purchase_request_id} does not exist")
        self.purchase_request_id = purchase_request_id


class SalesRoundNotFoundError(NotFoundError):
    """Raised when a sales round id does not exist."""

    def __init__(self, sales_round_id: int) -> None:
        super().__init__(f"sales round {sales_round_id} does not exist")
        self.sales_round_id = sales_round_id


class AlreadyAllocatedError(DomainError):
    """Raised when queue numbers were already drawn for a sales round."""

    code = ErrorCode.ALREADY_ALLOCATED

    def __init__(self, sales_round_id: int) -> None:
        super().__init__(f"queue numbers for sales round {sales_round_id} were already allocated")
        self.sales_round_id = sales_round_id


class StorageFailureError(DomainError):
    """The store could not complete a read or write. Nothing was committed."""

    code = ErrorCode.STORAGE_FAILURE
