"""Movement — one immutable entry in the stock audit trail.

A Movement carries its own before/after snapshot, so any single entry can
be checked without replaying the history that led up to it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from stockledger.domain.exceptions import ValidationError
from stockledger.domain.model.value_objects import Reference

MAX_REASON_LENGTH = 200
MAX_NOTES_LENGTH = 500


class MovementType(Enum):
    RESTOCK = "restock"
    ADJUSTMENT_ADD = "adjustment_add"
    ADJUSTMENT_REMOVE = "adjustment_remove"
    SALE = "sale"
    SALE_CANCEL = "sale_cancel"
    SERVICE_USE = "service_use"
    TRANSFER_OUT = "transfer_out"
    TRANSFER_IN = "transfer_in"
    INITIAL = "initial"

    @property
    def is_adjustment(self) -> bool:
        return self in (MovementType.ADJUSTMENT_ADD, MovementType.ADJUSTMENT_REMOVE)


@dataclass(frozen=True)
class MovementDraft:
    """What a caller knows about a movement before the write happens.

    The quantities are filled in by the store from the record it actually
    wrote, never from what the caller expected.
    """

    type: MovementType
    performed_by: str
    reason: str | None = None
    reference: Reference | None = None
    supplier_ref: str | None = None
    notes: str | None = None

    def __post_init__(self) -> None:
        if not self.performed_by:
            raise ValidationError("performed_by is required for every movement")
        if self.type.is_adjustment and not (self.reason and self.reason.strip()):
            raise ValidationError("Reason for adjustment is required")
        if self.reason is not None and len(self.reason) > MAX_REASON_LENGTH:
            raise ValidationError(f"Reason cannot exceed {MAX_REASON_LENGTH} characters")
        if self.notes is not None and len(self.notes) > MAX_NOTES_LENGTH:
            raise ValidationError(f"Notes cannot exceed {MAX_NOTES_LENGTH} characters")


@dataclass(frozen=True)
class Movement:
    movement_id: str
    stock_record_id: str
    product_id: str
    branch_id: str
    type: MovementType
    quantity_delta: int
    quantity_before: int
    quantity_after: int
    performed_by: str
    reason: str | None = None
    reference: Reference | None = None
    supplier_ref: str | None = None
    notes: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        if self.quantity_after - self.quantity_before != self.quantity_delta:
            raise ValidationError(
                f"Movement {self.movement_id} does not balance: "
                f"{self.quantity_before} + {self.quantity_delta} != {self.quantity_after}"
            )

    @property
    def quantity_display(self) -> str:
        return f"+{self.quantity_delta}" if self.quantity_delta > 0 else str(self.quantity_delta)


def format_movement_id(year: int, sequence: int) -> str:
    return f"SM-{year}-{sequence:06d}"
