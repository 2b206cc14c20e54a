class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

class ConflictError(AppError):
    """Raised when a session overlaps one or more sessions on the same day."""
    def __init__(self, conflicting_ids: list[str], day_of_week: int | None = None):
        self.conflicting_ids = list(conflicting_ids)
        details = {"conflicting_ids": self.conflicting_ids}
        if day_of_week is not None:
            details["day_of_week"] = day_of_week
        super().__init__(
            f"Session overlaps {len(self.conflicting_ids)} existing session(s)",
            status_code=409,
            details=details,
        )

class DuplicateSessionError(AppError):
    """Raised when a loaded session reuses an id that is already stored."""
    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(
            f"Session id {session_id} is already in use",
            status_code=409,
            details={"session_id": session_id},
        )

class InvalidIntervalError(AppError):
    """Raised when a session does not start strictly before it ends."""
    def __init__(self, start_time: str, end_time: str):
        self.start_time = start_time
        self.end_time = end_time
        super().__init__(
            f"Start time {start_time} must be before end time {end_time}",
            status_code=422,
            details={"start_time": start_time, "end_time": end_time},
        )

class NotFoundError(AppError):
    """Raised when a requested resource is not found."""
    def __init__(self, resource_type: str, resource_id: str):
        self.resource_id = resource_id
        super().__init__(
            f"{resource_type} with id {resource_id} not found",
            status_code=404,
            details={"resource_type": resource_type, "resource_id": resource_id},
        )

class ConfigurationError(AppError):
    """Raised when system configuration is invalid."""
    def __init__(self, message: str):
        super().__init__(message, status_code=500)
