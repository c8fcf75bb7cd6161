"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.
Each error carries the offending values as attributes, so callers can render
a precise message ("Only 3 units available") instead of a generic failure.
"""

from __future__ import annotations


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """Malformed input: non-positive quantity, missing reason, and so on."""


class SameBranch(ValidationError):
    """A transfer names the same branch as source and destination."""

    def __init__(self, branch_id: str) -> None:
        super().__init__(
            f"Source and destination branches must be different (both '{branch_id}')"
        )
        self.branch_id = branch_id


class InsufficientAvailable(DomainException):
    """The requested quantity exceeds what is available to claim."""

    def __init__(
        self, product_id: str, branch_id: str, requested: int, available: int
    ) -> None:
        super().__init__(
            f"Only {available} units of product '{product_id}' available "
            f"at branch '{branch_id}' (requested {requested})"
        )
        self.product_id = product_id
        self.branch_id = branch_id
        self.requested = requested
        self.available = available


class InvariantViolation(DomainException):
    """An operation would leave a stock record out of bounds."""

    def __init__(
        self,
        message: str,
        attempted: int | None = None,
        available: int | None = None,
    ) -> None:
        super().__init__(message)
        self.attempted = attempted
        self.available = available


class InvalidTransition(DomainException):
    """A transfer status change is not permitted from the current status."""

    def __init__(self, transfer_id: str, current: str, requested: str) -> None:
        super().__init__(
            f"Cannot move transfer {transfer_id} from {current} to {requested}"
        )
        self.transfer_id = transfer_id
        self.current = current
        self.requested = requested


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


NotFound = EntityNotFoundError


class Conflict(DomainException):
    """Optimistic-lock retries were exhausted on a stock record."""

    def __init__(self, product_id: str, branch_id: str, attempts: int) -> None:
        super().__init__(
            f"Stock record for product '{product_id}' at branch '{branch_id}' "
            f"was modified concurrently; gave up after {attempts} attempts"
        )
        self.product_id = product_id
        self.branch_id = branch_id
        self.attempts = attempts


class TransferConflict(Conflict):
    """A transfer kept changing underneath a status update."""

    def __init__(self, transfer_id: str, attempts: int) -> None:
        DomainException.__init__(
            self,
            f"Transfer {transfer_id} was modified concurrently; "
            f"gave up after {attempts} attempts",
        )
        self.transfer_id = transfer_id
        self.attempts = attempts
