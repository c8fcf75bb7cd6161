"""Domain service: Adjustment Service.

Operator-initiated quantity changes that are not tied to an order or a
transfer: restocking from a supplier and manual corrections (damaged,
lost, found, counted).  Adjustments never touch ``reserved_quantity``;
a correction that would leave fewer units on hand than are reserved is
rejected so outstanding reservations cannot be silently invalidated.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

from stockledger.domain.exceptions import InvariantViolation, ValidationError
from stockledger.domain.model.movement import MovementDraft, MovementType
from stockledger.domain.model.stock_record import StockRecord
from stockledger.domain.model.value_objects import Money, Quantity
from stockledger.domain.service.stock_store import Mutation, StockRecordStore


class AdjustmentService:

    def __init__(self, store: StockRecordStore) -> None:
        self._store = store

    def restock(
        self,
        product_id: str,
        branch_id: str,
        qty: int,
        performed_by: str,
        cost_price: Money | str | Decimal | None = None,
        selling_price: Money | str | Decimal | None = None,
        supplier_ref: str | None = None,
        location: str | None = None,
        reorder_point: int | None = None,
        reorder_quantity: int | None = None,
        notes: str | None = None,
    ) -> Mutation:
        """Add received units, creating the stock record on first restock.

        Pricing and threshold fields are only updated when supplied.
        """
        quantity = Quantity(qty).value
        cost = _as_money(cost_price)
        selling = _as_money(selling_price)
        draft = MovementDraft(
            type=MovementType.RESTOCK,
            performed_by=performed_by,
            supplier_ref=supplier_ref or None,
            notes=notes or None,
        )

        def apply(record: StockRecord) -> StockRecord:
            record.quantity += quantity
            if cost is not None:
                record.cost_price = cost
            if selling is not None:
                record.selling_price = selling
            record.apply_settings(
                reorder_point=reorder_point,
                reorder_quantity=reorder_quantity,
                location=location,
                supplier_ref=supplier_ref,
            )
            record.last_restocked_at = datetime.now(timezone.utc)
            record.last_restocked_by = performed_by
            return record

        return self._store.mutate(product_id, branch_id, apply, movement=draft, create=True)

    def adjust(
        self,
        product_id: str,
        branch_id: str,
        delta: int,
        reason: str,
        performed_by: str,
        notes: str | None = None,
    ) -> Mutation:
        """Apply a signed manual correction to on-hand quantity."""
        if not isinstance(delta, int) or isinstance(delta, bool):
            raise ValidationError(f"Adjustment must be a whole number, got {delta!r}")
        if delta == 0:
            raise ValidationError("Adjustment cannot be zero")
        if not reason or not reason.strip():
            raise ValidationError("Reason for adjustment is required")

        draft = MovementDraft(
            type=MovementType.ADJUSTMENT_ADD if delta > 0 else MovementType.ADJUSTMENT_REMOVE,
            performed_by=performed_by,
            reason=reason.strip(),
            notes=notes or None,
        )

        def apply(record: StockRecord) -> StockRecord:
            new_quantity = record.quantity + delta
            if new_quantity < 0:
                raise InvariantViolation(
                    f"Cannot remove {-delta} units of product '{product_id}' at "
                    f"branch '{branch_id}': only {record.quantity} on hand",
                    attempted=delta,
                    available=record.quantity,
                )
            if new_quantity < record.reserved_quantity:
                raise InvariantViolation(
                    f"Cannot remove {-delta} units of product '{product_id}' at "
                    f"branch '{branch_id}': {record.reserved_quantity} are reserved, "
                    f"only {record.available} available",
                    attempted=delta,
                    available=record.available,
                )
            record.quantity = new_quantity
            return record

        return self._store.mutate(product_id, branch_id, apply, movement=draft)

    def update_thresholds(
        self,
        product_id: str,
        branch_id: str,
        reorder_point: int | None = None,
        reorder_quantity: int | None = None,
        location: str | None = None,
    ) -> StockRecord:
        """Change advisory settings; quantities are untouched and no movement is written."""
        if reorder_point is None and reorder_quantity is None and location is None:
            raise ValidationError("Nothing to update")

        def apply(record: StockRecord) -> StockRecord:
            record.apply_settings(
                reorder_point=reorder_point,
                reorder_quantity=reorder_quantity,
                location=location,
            )
            return record

        return self._store.mutate(product_id, branch_id, apply).record


def _as_money(value: Money | str | Decimal | None) -> Money | None:
    if value is None or isinstance(value, Money):
        return value
    return Money.of(value)
