"""
Shared exceptions for the GuestWatch service.
"""

from .errors import (
    ConflictError,
    DispatchSubmissionError,
    GuestWatchError,
    InvalidReferenceError,
    ResourceNotFoundError,
)
from .handlers import (
    general_exception_handler,
    guestwatch_exception_handler,
    register_exception_handlers,
)

__all__ = [
    'GuestWatchError',
    'ResourceNotFoundError',
    'ConflictError',
    'InvalidReferenceError',
    'DispatchSubmissionError',

    'guestwatch_exception_handler',
    'general_exception_handler',
    'register_exception_handlers',
]
