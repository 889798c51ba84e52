"""
Error taxonomy for the reference store.

Hierarchy:
    ReferenceManagerError
    ├── NotFoundError - id does not exist at the expected scope
    ├── VersionConflictError - optimistic version check failed
    ├── ValidationFailure - structurally invalid request
    │   └── PositionValidationError - malformed position mapping
    └── ConstraintViolationError - unexpected store-level rejection

``retryable`` tells callers whether re-fetching the current state and
re-applying the change can succeed without correcting the request.
"""

from enum import Enum


class ReferenceManagerError(Exception):
    """Base exception for all reference store errors."""

    retryable = False


class NotFoundError(ReferenceManagerError):
    """The referenced category or reference does not exist."""


class VersionConflictError(ReferenceManagerError):
    """
    The category version supplied by the caller is not the stored one.

    Raised both for stale versions and for ids that do not exist at all:
    the version predicate is the single check, so the two cases are not
    told apart. Callers should re-fetch the category and retry.
    """

    retryable = True

    def __init__(self, category_id: int, version: int):
        self.category_id = category_id
        self.version = version
        super().__init__(
            f"Category {category_id} not found or version {version} is out of date"
        )


class ValidationFailure(ReferenceManagerError):
    """The request is structurally invalid for the current state."""


class PositionErrorReason(str, Enum):
    """Distinct ways a position mapping can be malformed."""

    WRONG_COUNT = "wrong_count"
    MISSING_ID = "missing_id"
    UNKNOWN_ID = "unknown_id"
    DUPLICATE_POSITION = "duplicate_position"
    INVALID_POSITION = "invalid_position"


class PositionValidationError(ValidationFailure):
    """A position mapping is not a bijection onto 0..n-1."""

    def __init__(self, reason: PositionErrorReason, message: str):
        self.reason = reason
        super().__init__(message)


class ConstraintViolationError(ReferenceManagerError):
    """The store rejected a statement (e.g. a uniqueness or foreign key constraint)."""
