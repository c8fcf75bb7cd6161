"""Domain service: Movement Ledger.

Write-once audit trail of every quantity change.  The ledger never
computes stock levels itself; it records deltas together with the
before/after snapshot taken from the record that was actually written.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone

from stockledger.domain.exceptions import ValidationError
from stockledger.domain.model.movement import (
    Movement,
    MovementDraft,
    MovementType,
    format_movement_id,
)
from stockledger.domain.model.stock_record import StockRecord
from stockledger.domain.model.value_objects import (
    DEFAULT_PAGE_LIMIT,
    MAX_PAGE_LIMIT,
    Page,
    check_paging,
)
from stockledger.domain.repository.movement_repository import MovementRepository

logger = logging.getLogger(__name__)


class MovementLedger:

    def __init__(
        self,
        movement_repo: MovementRepository,
        max_page_limit: int = MAX_PAGE_LIMIT,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._movement_repo = movement_repo
        self._max_page_limit = max_page_limit
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def append(
        self, draft: MovementDraft, before: StockRecord, after: StockRecord
    ) -> Movement:
        """Record the change from ``before`` to ``after`` as one movement."""
        if before.id != after.id:
            raise ValidationError("A movement must describe a single stock record")
        delta = after.quantity - before.quantity
        if delta == 0:
            raise ValidationError(
                f"A {draft.type.value} movement must change the quantity"
            )

        created_at = self._clock()
        movement = Movement(
            movement_id=format_movement_id(
                created_at.year, self._movement_repo.next_sequence(created_at.year)
            ),
            stock_record_id=after.id,
            product_id=after.product_id,
            branch_id=after.branch_id,
            type=draft.type,
            quantity_delta=delta,
            quantity_before=before.quantity,
            quantity_after=after.quantity,
            performed_by=draft.performed_by,
            reason=draft.reason,
            reference=draft.reference,
            supplier_ref=draft.supplier_ref,
            notes=draft.notes,
            created_at=created_at,
        )
        self._movement_repo.append(movement)
        logger.info(
            "Movement %s: %s %s on product=%s branch=%s (%d -> %d)",
            movement.movement_id,
            movement.type.value,
            movement.quantity_display,
            movement.product_id,
            movement.branch_id,
            movement.quantity_before,
            movement.quantity_after,
        )
        return movement

    # --- Queries --------------------------------------------------------------

    def list_by_stock(
        self, stock_record_id: str, page: int = 1, limit: int = DEFAULT_PAGE_LIMIT
    ) -> Page[Movement]:
        limit = check_paging(page, limit, self._max_page_limit)
        return Page.slice(self._movement_repo.list_by_stock(stock_record_id), page, limit)

    def list_by_product(
        self, product_id: str, page: int = 1, limit: int = DEFAULT_PAGE_LIMIT
    ) -> Page[Movement]:
        return self.search(product_id=product_id, page=page, limit=limit)

    def list_by_branch(
        self, branch_id: str, page: int = 1, limit: int = DEFAULT_PAGE_LIMIT
    ) -> Page[Movement]:
        return self.search(branch_id=branch_id, page=page, limit=limit)

    def search(
        self,
        type: MovementType | None = None,
        branch_id: str | None = None,
        product_id: str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
        page: int = 1,
        limit: int = DEFAULT_PAGE_LIMIT,
    ) -> Page[Movement]:
        """Filtered listing in append order.  ``start``/``end`` are inclusive."""
        limit = check_paging(page, limit, self._max_page_limit)
        if start is not None and end is not None and start > end:
            raise ValidationError("Start date must not be after end date")

        matches = [
            m
            for m in self._movement_repo.list_all()
            if (type is None or m.type == type)
            and (branch_id is None or m.branch_id == branch_id)
            and (product_id is None or m.product_id == product_id)
            and (start is None or m.created_at >= start)
            and (end is None or m.created_at <= end)
        ]
        return Page.slice(matches, page, limit)

    def balance(self, stock_record_id: str) -> int:
        """Sum of deltas for a record; equals its quantity when the books balance."""
        return sum(m.quantity_delta for m in self._movement_repo.list_by_stock(stock_record_id))
