"""Value Objects shared across the domain.

Value Objects are immutable and compared by value, not identity.
They encapsulate validation so invalid values can never exist.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Generic, TypeVar

from stockledger.domain.exceptions import ValidationError

T = TypeVar("T")


@dataclass(frozen=True)
class Money:
    """Non-negative monetary amount.

    Uses Decimal to avoid floating-point rounding errors.  The ledger is
    single-currency, so no currency code is carried.
    """

    amount: Decimal

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise ValidationError(
                f"Money amount must be a Decimal, got {type(self.amount).__name__}"
            )
        if self.amount < Decimal("0"):
            raise ValidationError(
                f"Money amount cannot be negative, got {self.amount}"
            )

    def __mul__(self, factor: int) -> Money:
        if not isinstance(factor, int):
            raise TypeError(f"Can only multiply Money by int, got {type(factor).__name__}")
        return Money(self.amount * factor)

    def __str__(self) -> str:
        return f"{self.amount:.2f}"

    @staticmethod
    def zero() -> Money:
        return Money(Decimal("0.00"))

    @staticmethod
    def of(amount: str | float | int | Decimal) -> Money:
        """Convenient factory that coerces to Decimal safely."""
        try:
            return Money(Decimal(str(amount)))
        except (InvalidOperation, ValueError) as exc:
            raise ValidationError(f"Invalid money amount: {amount!r}") from exc


@dataclass(frozen=True)
class Quantity:
    """A positive integer quantity."""

    value: int

    def __post_init__(self) -> None:
        # bool is an int subclass; True is not a quantity
        if not isinstance(self.value, int) or isinstance(self.value, bool):
            raise ValidationError(
                f"Quantity must be an integer, got {type(self.value).__name__}"
            )
        if self.value <= 0:
            raise ValidationError(f"Quantity must be positive, got {self.value}")

    def __str__(self) -> str:
        return str(self.value)


class ReferenceType(Enum):
    SALES_ORDER = "SalesOrder"
    SERVICE_ORDER = "ServiceOrder"
    STOCK_TRANSFER = "StockTransfer"


@dataclass(frozen=True)
class Reference:
    """Points a movement back at the entity that caused it."""

    type: ReferenceType
    id: str

    def __post_init__(self) -> None:
        if not self.id or not str(self.id).strip():
            raise ValidationError("Reference id is required")

    def __str__(self) -> str:
        return f"{self.type.value}:{self.id}"

    @staticmethod
    def parse(raw: str) -> Reference:
        """Parse ``'SalesOrder:123'`` into a Reference."""
        if ":" not in raw:
            raise ValidationError(
                f"Invalid reference '{raw}'. Expected 'Type:Id'."
            )
        kind, ref_id = raw.split(":", 1)
        try:
            ref_type = ReferenceType(kind.strip())
        except ValueError as exc:
            allowed = ", ".join(t.value for t in ReferenceType)
            raise ValidationError(
                f"Unknown reference type '{kind}' (expected one of {allowed})"
            ) from exc
        return Reference(ref_type, ref_id.strip())


DEFAULT_PAGE_LIMIT = 20
MAX_PAGE_LIMIT = 100


def check_paging(page: int, limit: int, max_limit: int = MAX_PAGE_LIMIT) -> int:
    """Validate page arguments and return the effective (capped) limit."""
    if page < 1:
        raise ValidationError(f"Page must be at least 1, got {page}")
    if limit < 1:
        raise ValidationError(f"Limit must be at least 1, got {limit}")
    return min(limit, max_limit)


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of a listing, plus enough to render a pager."""

    items: list[T]
    page: int
    limit: int
    total: int

    @property
    def pages(self) -> int:
        return max(1, -(-self.total // self.limit))

    @property
    def has_next(self) -> bool:
        return self.page < self.pages

    @staticmethod
    def slice(items: list[T], page: int, limit: int) -> Page[T]:
        start = (page - 1) * limit
        return Page(items=items[start:start + limit], page=page, limit=limit, total=len(items))
