"""Error types for taskcase.

- ErrorCode: Standard error codes
- ConfigurationError: Invalid executor configuration (raised before any work)
- RetryExhaustedError: Throwing retry variant gave up
- OperationCancelled: Cooperative cancellation with partial results
"""

from .errors import (
    ConfigurationError,
    ErrorCode,
    OperationCancelled,
    RetryExhaustedError,
    TaskcaseError,
    require_positive,
)

__all__ = [
    "ErrorCode",
    "TaskcaseError",
    "ConfigurationError",
    "RetryExhaustedError",
    "OperationCancelled",
    "require_positive",
]
