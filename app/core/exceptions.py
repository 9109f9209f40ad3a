from typing import Any, Dict, Optional

class AppException(Exception):
    def __init__(
        self,
        message: str,
        status_code: int = 400,
        error_code: str = "BUSINESS_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details
        super().__init__(self.message)

class ValidationError(AppException):
    """Malformed input: missing fields, inverted date ranges, non-positive day counts."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=422,
            error_code="VALIDATION_ERROR",
            details=details
        )

class NotFoundError(AppException):
    def __init__(self, entity: str, entity_id: Any):
        super().__init__(
            message=f"{entity} {entity_id} not found",
            status_code=404,
            error_code="NOT_FOUND",
            details={"entity": entity, "id": entity_id}
        )

class DuplicateHolidayError(AppException):
    def __init__(self, name: str, date: Any):
        super().__init__(
            message=f"A holiday named '{name}' already exists on {date}",
            status_code=409,
            error_code="DUPLICATE_HOLIDAY",
            details={"name": name, "date": str(date)}
        )

class InvalidTransitionError(AppException):
    def __init__(self, request_id: int, current_status: str, new_status: str):
        super().__init__(
            message=f"Leave request {request_id} is already {current_status} and cannot become {new_status}",
            status_code=409,
            error_code="INVALID_TRANSITION",
            details={"request_id": request_id, "current_status": current_status, "new_status": new_status}
        )

class InsufficientBalanceError(AppException):
    """Only raised when the balance floor is enforced (see settings.leave.enforce_balance_floor)."""
    def __init__(self, user_id: int, balance: int, requested: int):
        super().__init__(
            message=f"Insufficient vacation balance. Requested: {requested}, Remaining: {balance}",
            status_code=400,
            error_code="INSUFFICIENT_BALANCE",
            details={"user_id": user_id, "balance": balance, "requested": requested}
        )

class BulkImportAbortedError(AppException):
    def __init__(self, message: str, imported: int, skipped: int, failed_index: int):
        super().__init__(
            message=message,
            status_code=400,
            error_code="BULK_IMPORT_ABORTED",
            details={"imported": imported, "skipped": skipped, "failed_index": failed_index}
        )

class AuthenticationError(AppException):
    def __init__(self, message: str = "Could not validate credentials"):
        super().__init__(
            message=message,
            status_code=401,
            error_code="AUTH_FAILED"
        )

class AccessDeniedError(AppException):
    """Custom permission error. Named AccessDeniedError to avoid shadowing Python's built-in PermissionError."""
    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(
            message=message,
            status_code=403,
            error_code="PERMISSION_DENIED"
        )
