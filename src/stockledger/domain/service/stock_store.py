"""Domain service: Stock Record Store.

``mutate`` is the single choke point through which every stock change
flows.  It combines two layers of protection:

  1. an in-process lock per (product, branch), so concurrent callers in
     the same process queue up instead of colliding;
  2. an optimistic version check in the repository, so a writer working
     from a stale read (another process, another store instance) is
     detected and retried with fresh state.

Invariants are checked on the proposed state *before* anything is
written, so a rejected mutation leaves no trace.  When the caller passes a
MovementDraft, the movement is appended inside the same critical section,
keeping the ledger balanced against the record at all times.  If the
movement cannot be recorded, the record is written back to its previous
state before the error propagates.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone

from stockledger.domain.exceptions import (
    Conflict,
    EntityNotFoundError,
    InvariantViolation,
)
from stockledger.domain.model.movement import Movement, MovementDraft
from stockledger.domain.model.stock_record import ProductStock, StockRecord
from stockledger.domain.repository.stock_record_repository import StockRecordRepository
from stockledger.domain.service.locks import KeyedLocks
from stockledger.domain.service.movement_ledger import MovementLedger

logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 3

StockFn = Callable[[StockRecord], StockRecord]


@dataclass(frozen=True)
class Mutation:
    """Result of a successful ``mutate``: the written record and its movement."""

    record: StockRecord
    movement: Movement | None = None


class StockRecordStore:

    def __init__(
        self,
        stock_repo: StockRecordRepository,
        ledger: MovementLedger,
        max_retries: int = DEFAULT_MAX_RETRIES,
    ) -> None:
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        self._stock_repo = stock_repo
        self._ledger = ledger
        self._max_retries = max_retries
        self._locks = KeyedLocks()

    # --- Reads ----------------------------------------------------------------

    def get(self, product_id: str, branch_id: str) -> StockRecord:
        record = self._stock_repo.get(product_id, branch_id)
        if record is None:
            raise EntityNotFoundError(
                f"No stock record for product '{product_id}' at branch '{branch_id}'"
            )
        return record

    def get_by_id(self, stock_record_id: str) -> StockRecord:
        record = self._stock_repo.get_by_id(stock_record_id)
        if record is None:
            raise EntityNotFoundError(f"Stock record '{stock_record_id}' not found")
        return record

    def get_or_create(self, product_id: str, branch_id: str) -> StockRecord:
        """Return the record, creating an empty one on first touch."""
        record = self._stock_repo.get(product_id, branch_id)
        if record is not None:
            return record

        fresh = StockRecord(
            id=uuid.uuid4().hex, product_id=product_id, branch_id=branch_id
        )
        if self._stock_repo.add(fresh):
            logger.info(
                "Created stock record %s for product=%s branch=%s",
                fresh.id, product_id, branch_id,
            )
            return fresh
        # Lost the race to another creator; theirs is the record.
        return self.get(product_id, branch_id)

    def list(self, branch_id: str | None = None) -> list[StockRecord]:
        return self._stock_repo.list_all(branch_id)

    def product_stock(self, product_id: str) -> ProductStock:
        """Every branch's record for one product, ordered by branch."""
        records = sorted(
            (r for r in self._stock_repo.list_all() if r.product_id == product_id),
            key=lambda r: r.branch_id,
        )
        if not records:
            raise EntityNotFoundError(f"No stock recorded for product '{product_id}'")
        return ProductStock(product_id=product_id, records=records)

    # --- The mutation choke point ---------------------------------------------

    def mutate(
        self,
        product_id: str,
        branch_id: str,
        fn: StockFn,
        movement: MovementDraft | None = None,
        create: bool = False,
    ) -> Mutation:
        """Apply ``fn`` to the current record and persist the result.

        ``fn`` receives a private copy of the current record and returns the
        proposed new state.  Exceptions raised by ``fn`` (business errors)
        propagate immediately; only version conflicts are retried.

        Raises:
            EntityNotFoundError: no record exists and ``create`` is False.
            InvariantViolation: the proposed state is out of bounds.
            Conflict: the version check failed ``max_retries`` times.
        """
        with self._locks.for_key((product_id, branch_id)):
            for attempt in range(1, self._max_retries + 1):
                if create:
                    current = self.get_or_create(product_id, branch_id)
                else:
                    current = self.get(product_id, branch_id)

                proposed = fn(current.copy())
                self._check_identity(current, proposed)
                proposed.check_invariants()
                if movement is not None and proposed.quantity == current.quantity:
                    raise InvariantViolation(
                        f"A {movement.type.value} movement must change the quantity"
                    )
                proposed.version = current.version + 1
                proposed.updated_at = datetime.now(timezone.utc)

                if not self._stock_repo.save_if_version(proposed, current.version):
                    logger.warning(
                        "Version conflict on stock record %s (attempt %d of %d)",
                        current.id, attempt, self._max_retries,
                    )
                    continue

                entry = None
                if movement is not None:
                    try:
                        entry = self._ledger.append(movement, current, proposed)
                    except Exception:
                        self._roll_back(current, proposed)
                        raise
                return Mutation(record=proposed, movement=entry)

        logger.error(
            "Giving up on product=%s branch=%s after %d conflicting attempts",
            product_id, branch_id, self._max_retries,
        )
        raise Conflict(product_id, branch_id, self._max_retries)

    def _roll_back(self, current: StockRecord, written: StockRecord) -> None:
        """Put back the state from before a write whose movement was not recorded."""
        restored = current.copy()
        restored.version = written.version + 1
        restored.updated_at = datetime.now(timezone.utc)
        if self._stock_repo.save_if_version(restored, written.version):
            logger.warning(
                "Rolled back stock record %s after failing to record its movement",
                current.id,
            )
        else:
            logger.error(
                "Could not roll back stock record %s; it changed after the failed write",
                current.id,
            )

    @staticmethod
    def _check_identity(current: StockRecord, proposed: StockRecord) -> None:
        if (proposed.id, proposed.product_id, proposed.branch_id) != (
            current.id, current.product_id, current.branch_id,
        ):
            raise InvariantViolation("A stock mutation cannot change record identity")
