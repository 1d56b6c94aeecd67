"""
Error taxonomy for the Shortlink Platform.

Every failure an allocation or resolution can surface is one of these classes.
The HTTP layer maps them to status codes in a single exception handler, so
business code raises them without knowing about transport details.

    ShortlinkError
    ├── ValidationError       bad input; never touches the store
    ├── ConflictError         custom alias already taken
    ├── AllocationExhausted   retry budget spent on generated-code collisions
    ├── NotFoundError         resolve/lookup on an unknown code
    └── BackendError          any other store failure (connectivity, throttling, ...)
"""

from typing import Optional


class ShortlinkError(Exception):
    """Base class for all errors raised by the allocation and resolution flows."""

    def __init__(self, message: Optional[str] = None):
        # Subclass docstrings double as the default client-facing message.
        self.message = message or (type(self).__doc__ or "").strip()
        super().__init__(self.message)


class ValidationError(ShortlinkError, ValueError):
    """Invalid request input."""


class ConflictError(ShortlinkError):
    """This custom alias is already taken. Please choose another."""


class AllocationExhausted(ShortlinkError):
    """Failed to generate a unique short code. Please try again."""


class NotFoundError(ShortlinkError):
    """URL not found"""


class BackendError(ShortlinkError):
    """Internal Server Error"""
