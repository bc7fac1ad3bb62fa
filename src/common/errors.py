"""Error taxonomy shared by the gateways and the HTTP layer.

Each error carries the HTTP status it maps to. The message is safe to show
to users; ``details`` holds internal context that is only exposed in
development mode.
"""

from typing import Optional

class BlogError(Exception):
    """Base class for failures surfaced to API clients."""
    status_code = 500
    title = "Unexpected Failure"

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

class ValidationError(BlogError):
    """Bad or missing fields, or a malformed identifier."""
    status_code = 400
    title = "Validation Error"

    def __init__(self, message: str, field: Optional[str] = None, details: Optional[str] = None):
        super().__init__(message, details)
        self.field = field

class NotFoundError(BlogError):
    status_code = 404
    title = "Not Found"

class ConflictError(BlogError):
    status_code = 409
    title = "Conflict"

class StorageExhaustedError(BlogError):
    status_code = 507
    title = "Storage Full"

class PersistenceError(BlogError):
    """Database or filesystem failure that is not the caller's fault."""
    status_code = 500
    title = "Persistence Failure"
