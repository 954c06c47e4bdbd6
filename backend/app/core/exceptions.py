class AppError(Exception):
    """Base class for all application exceptions."""
    code = "app_error"

    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class InvalidRangeError(AppError):
    """Raised for malformed times or an interval whose start is not before its end."""
    code = "invalid_range"

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=422, details=details)


class ValidationFailedError(AppError):
    """Raised when a write request carries invalid or incomplete data."""
    code = "validation_failed"

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=422, details=details)


class DuplicateSlotError(AppError):
    """Raised when a slot with the same day, start and end already exists."""
    code = "duplicate_slot"

    def __init__(self, message: str = "A time slot with the same day and time already exists", details: dict = None):
        super().__init__(message, status_code=409, details=details)


class OverlappingSlotError(AppError):
    """Raised when a slot definition intersects another slot on the same day."""
    code = "overlapping_slot"

    def __init__(self, message: str = "This time slot overlaps with an existing slot", details: dict = None):
        super().__init__(message, status_code=409, details=details)


class ResourceInUseError(AppError):
    """Raised when a hard delete is blocked by bookings that still reference the entity."""
    code = "resource_in_use"

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=409, details=details)


class ResourceNotFoundError(AppError):
    """Raised when a requested resource is not found."""
    code = "not_found"

    def __init__(self, resource_type: str, resource_id):
        super().__init__(
            f"{resource_type} with id {resource_id} not found",
            status_code=404,
            details={"resource_type": resource_type, "resource_id": str(resource_id)},
        )


class BookingConflictError(AppError):
    """Raised when a resource is already booked for the same slot and academic period."""
    code = "booking_conflict"

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=409, details=details)


class BookingStateError(AppError):
    """Raised for lifecycle transitions a booking does not allow."""
    code = "invalid_state"

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=409, details=details)


class ResourceUnavailableError(AppError):
    """Raised when a classroom or slot exists but cannot take bookings."""
    code = "resource_unavailable"

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=409, details=details)


class StoreUnavailableError(AppError):
    """Raised when the backing store fails; callers should retry."""
    code = "store_unavailable"

    def __init__(self, message: str = "Temporary storage failure, please try again"):
        super().__init__(message, status_code=503)
