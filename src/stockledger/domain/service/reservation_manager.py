"""Domain service: Reservation Manager.

A reservation is a claim on stock for an order that has not been
fulfilled yet.  It raises ``reserved_quantity`` without touching physical
``quantity`` and therefore emits no movement.  ``commit`` is the only path
by which a reservation turns into a permanent deduction.

The availability check runs inside the store's locked mutation, never as
a separate read, so two callers can never both claim the last unit.
"""

from __future__ import annotations

from stockledger.domain.exceptions import (
    InsufficientAvailable,
    InvariantViolation,
    ValidationError,
)
from stockledger.domain.model.movement import MovementDraft, MovementType
from stockledger.domain.model.stock_record import StockRecord
from stockledger.domain.model.value_objects import Quantity, Reference, ReferenceType
from stockledger.domain.service.stock_store import Mutation, StockRecordStore

_CONSUMPTION_TYPES = {
    ReferenceType.SALES_ORDER: MovementType.SALE,
    ReferenceType.SERVICE_ORDER: MovementType.SERVICE_USE,
}


class ReservationManager:

    def __init__(self, store: StockRecordStore) -> None:
        self._store = store

    def reserve(self, product_id: str, branch_id: str, qty: int) -> StockRecord:
        """Claim ``qty`` units of available stock."""
        quantity = Quantity(qty).value

        def apply(record: StockRecord) -> StockRecord:
            if quantity > record.available:
                raise InsufficientAvailable(
                    product_id, branch_id, requested=quantity, available=record.available
                )
            record.reserved_quantity += quantity
            return record

        return self._store.mutate(product_id, branch_id, apply).record

    def release(self, product_id: str, branch_id: str, qty: int) -> StockRecord:
        """Give back a claim, e.g. when an order is cancelled before fulfillment."""
        quantity = Quantity(qty).value

        def apply(record: StockRecord) -> StockRecord:
            if quantity > record.reserved_quantity:
                raise InvariantViolation(
                    f"Cannot release {quantity} units of product '{product_id}' "
                    f"at branch '{branch_id}': only {record.reserved_quantity} "
                    f"currently reserved",
                    attempted=quantity,
                    available=record.reserved_quantity,
                )
            record.reserved_quantity -= quantity
            return record

        return self._store.mutate(product_id, branch_id, apply).record

    def commit(
        self,
        product_id: str,
        branch_id: str,
        qty: int,
        reference: Reference,
        performed_by: str,
    ) -> Mutation:
        """Turn reserved units into a permanent deduction.

        Decrements both ``quantity`` and ``reserved_quantity`` and records a
        ``sale`` or ``service_use`` movement depending on the order type.
        """
        quantity = Quantity(qty).value
        draft = MovementDraft(
            type=self._consumption_type(reference),
            performed_by=performed_by,
            reference=reference,
        )

        def apply(record: StockRecord) -> StockRecord:
            if quantity > record.reserved_quantity:
                raise InvariantViolation(
                    f"Cannot commit {quantity} units of product '{product_id}' "
                    f"at branch '{branch_id}': only {record.reserved_quantity} "
                    f"currently reserved",
                    attempted=quantity,
                    available=record.reserved_quantity,
                )
            record.reserved_quantity -= quantity
            record.quantity -= quantity
            return record

        return self._store.mutate(product_id, branch_id, apply, movement=draft)

    def reverse(
        self,
        product_id: str,
        branch_id: str,
        qty: int,
        reference: Reference,
        performed_by: str,
        reason: str | None = None,
    ) -> Mutation:
        """Put units from a committed order back on the shelf (``sale_cancel``).

        The ledger keeps no per-order totals, so the caller must make sure
        ``qty`` does not exceed what ``reference`` actually committed.
        """
        quantity = Quantity(qty).value
        self._consumption_type(reference)
        draft = MovementDraft(
            type=MovementType.SALE_CANCEL,
            performed_by=performed_by,
            reference=reference,
            reason=reason,
        )

        def apply(record: StockRecord) -> StockRecord:
            record.quantity += quantity
            return record

        return self._store.mutate(product_id, branch_id, apply, movement=draft)

    @staticmethod
    def _consumption_type(reference: Reference) -> MovementType:
        try:
            return _CONSUMPTION_TYPES[reference.type]
        except KeyError:
            raise ValidationError(
                f"Stock can only be consumed by a sales or service order, "
                f"not {reference.type.value}"
            ) from None
