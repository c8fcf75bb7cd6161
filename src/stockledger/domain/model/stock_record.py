"""StockRecord aggregate — quantity on hand for one product at one branch.

There is exactly one StockRecord per (product, branch) pair.  It knows how
many units are physically on hand and how many of those are claimed by
open orders or pending transfers.  Records are never deleted; a record at
zero quantity stays around as the anchor of its movement history.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import datetime, timezone

from stockledger.domain.exceptions import InvariantViolation, ValidationError
from stockledger.domain.model.value_objects import Money

DEFAULT_REORDER_POINT = 10
DEFAULT_REORDER_QUANTITY = 50
MAX_LOCATION_LENGTH = 100


class StockStatus:
    IN_STOCK = "in-stock"
    LOW_STOCK = "low-stock"
    OUT_OF_STOCK = "out-of-stock"


@dataclass
class StockRecord:
    """Aggregate root for branch stock.

    Invariants:
    - ``quantity`` is never negative
    - ``0 <= reserved_quantity <= quantity``

    Calling code never assigns these fields directly; every change goes
    through ``StockRecordStore.mutate`` which calls ``check_invariants``
    before anything is written.
    """

    id: str
    product_id: str
    branch_id: str
    quantity: int = 0
    reserved_quantity: int = 0
    reorder_point: int = DEFAULT_REORDER_POINT
    reorder_quantity: int = DEFAULT_REORDER_QUANTITY
    cost_price: Money = field(default_factory=Money.zero)
    selling_price: Money = field(default_factory=Money.zero)
    supplier_ref: str | None = None
    location: str | None = None
    last_restocked_at: datetime | None = None
    last_restocked_by: str | None = None
    version: int = 0
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def key(self) -> tuple[str, str]:
        return (self.product_id, self.branch_id)

    @property
    def available(self) -> int:
        return self.quantity - self.reserved_quantity

    @property
    def is_low_stock(self) -> bool:
        return self.available <= self.reorder_point

    @property
    def stock_status(self) -> str:
        if self.quantity == 0:
            return StockStatus.OUT_OF_STOCK
        if self.is_low_stock:
            return StockStatus.LOW_STOCK
        return StockStatus.IN_STOCK

    def copy(self) -> StockRecord:
        return dataclasses.replace(self)

    def check_invariants(self) -> None:
        """Raise InvariantViolation if this state must not be persisted."""
        if self.quantity < 0:
            raise InvariantViolation(
                f"Quantity of product '{self.product_id}' at branch "
                f"'{self.branch_id}' cannot go below zero (would be {self.quantity})",
                attempted=self.quantity,
            )
        if self.reserved_quantity < 0:
            raise InvariantViolation(
                f"Reserved quantity of product '{self.product_id}' at branch "
                f"'{self.branch_id}' cannot go below zero "
                f"(would be {self.reserved_quantity})",
                attempted=self.reserved_quantity,
            )
        if self.reserved_quantity > self.quantity:
            raise InvariantViolation(
                f"Reserved quantity {self.reserved_quantity} would exceed quantity "
                f"{self.quantity} for product '{self.product_id}' at branch "
                f"'{self.branch_id}'",
                attempted=self.reserved_quantity,
                available=self.quantity,
            )
        if self.reorder_point < 0 or self.reorder_quantity < 0:
            raise InvariantViolation("Reorder thresholds cannot be negative")

    def apply_settings(
        self,
        reorder_point: int | None = None,
        reorder_quantity: int | None = None,
        location: str | None = None,
        supplier_ref: str | None = None,
    ) -> None:
        """Update advisory, non-quantity fields when a value is supplied."""
        if reorder_point is not None:
            if reorder_point < 0:
                raise ValidationError("Reorder point cannot be negative")
            self.reorder_point = reorder_point
        if reorder_quantity is not None:
            if reorder_quantity < 0:
                raise ValidationError("Reorder quantity cannot be negative")
            self.reorder_quantity = reorder_quantity
        if location is not None:
            if len(location) > MAX_LOCATION_LENGTH:
                raise ValidationError(
                    f"Location cannot exceed {MAX_LOCATION_LENGTH} characters"
                )
            self.location = location.strip() or None
        if supplier_ref is not None:
            self.supplier_ref = supplier_ref or None


@dataclass(frozen=True)
class ProductStock:
    """One product across every branch that holds a record for it."""

    product_id: str
    records: list[StockRecord]

    @property
    def total_quantity(self) -> int:
        return sum(r.quantity for r in self.records)

    @property
    def total_reserved(self) -> int:
        return sum(r.reserved_quantity for r in self.records)

    @property
    def total_available(self) -> int:
        return sum(r.available for r in self.records)
