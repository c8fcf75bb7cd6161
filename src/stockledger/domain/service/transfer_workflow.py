"""Domain service: Transfer Workflow.

Moves units of a product from one branch to another through an explicit
status machine::

    pending ──ship──> in-transit ──complete──> completed
       │                  │
       └──cancel──┐  ┌──cancel──┘
                  v  v
               cancelled

Stock effects per transition:

- create:   reserve ``quantity`` at the source (no movement)
- ship:     release the reservation and debit the source (``transfer_out``)
- complete: credit the destination (``transfer_in``), creating its record
- cancel:   from pending, release the reservation (no movement);
            from in-transit, credit the source back (``adjustment_add``)

The stored status is the commit point of every transition.  It is written
with a version check, so when several workers race on one transfer only
one of them moves it on; the others undo whatever stock effect they had
already applied and get InvalidTransition.

- ship debits the source first and then claims the new status.  A lost
  claim credits the units and the reservation back to the source.
- complete and cancel claim the status first and then apply their stock
  effect.  If that fails the transfer is put back to its previous status.
  Their target states are terminal, so nobody else can have moved the
  transfer in between.

Every transition touches at most one stock record, so no two record locks
are ever held together.  Between ship and complete the units belong to
neither branch; they are in flight.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from stockledger.domain.exceptions import (
    DomainException,
    EntityNotFoundError,
    InsufficientAvailable,
    InvalidTransition,
    TransferConflict,
)
from stockledger.domain.model.movement import MovementDraft, MovementType
from stockledger.domain.model.stock_record import StockRecord
from stockledger.domain.model.transfer import (
    StockTransfer,
    TransferStatus,
    format_transfer_id,
)
from stockledger.domain.model.value_objects import (
    DEFAULT_PAGE_LIMIT,
    MAX_PAGE_LIMIT,
    Page,
    Reference,
    ReferenceType,
    check_paging,
)
from stockledger.domain.repository.transfer_repository import TransferRepository
from stockledger.domain.service.locks import KeyedLocks
from stockledger.domain.service.reservation_manager import ReservationManager
from stockledger.domain.service.stock_store import DEFAULT_MAX_RETRIES, StockRecordStore

logger = logging.getLogger(__name__)

CANCELLED_IN_TRANSIT_REASON = "transfer cancelled"
SHIPMENT_ROLLED_BACK_REASON = "transfer shipment rolled back"


class TransferWorkflow:

    def __init__(
        self,
        transfer_repo: TransferRepository,
        store: StockRecordStore,
        reservations: ReservationManager,
        max_page_limit: int = MAX_PAGE_LIMIT,
        max_retries: int = DEFAULT_MAX_RETRIES,
    ) -> None:
        self._transfer_repo = transfer_repo
        self._store = store
        self._reservations = reservations
        self._max_page_limit = max_page_limit
        self._max_retries = max_retries
        self._locks = KeyedLocks()

    # --- Transitions ----------------------------------------------------------

    def create(
        self,
        product_id: str,
        from_branch_id: str,
        to_branch_id: str,
        qty: int,
        requested_by: str,
        notes: str | None = None,
    ) -> StockTransfer:
        """Open a pending transfer and earmark its quantity at the source."""
        transfer = StockTransfer.create(
            transfer_id="",
            product_id=product_id,
            from_branch_id=from_branch_id,
            to_branch_id=to_branch_id,
            quantity=qty,
            requested_by=requested_by,
            notes=notes,
        )

        try:
            self._reservations.reserve(product_id, from_branch_id, transfer.quantity)
        except EntityNotFoundError:
            # A branch that never held the product has nothing available.
            raise InsufficientAvailable(
                product_id, from_branch_id, requested=transfer.quantity, available=0
            ) from None

        # The number is allocated only once the source reservation holds.
        try:
            year = datetime.now(timezone.utc).year
            transfer.transfer_id = format_transfer_id(
                year, self._transfer_repo.next_sequence(year)
            )
            self._transfer_repo.add(transfer)
        except Exception:
            self._reservations.release(product_id, from_branch_id, transfer.quantity)
            raise

        logger.info(
            "Transfer %s created: %d x product=%s from %s to %s",
            transfer.transfer_id, transfer.quantity, product_id, from_branch_id, to_branch_id,
        )
        return transfer

    def ship(self, transfer_id: str, actor_id: str) -> StockTransfer:
        with self._locks.for_key(transfer_id):
            transfer = self.get(transfer_id)
            transfer.ensure_can_transition_to(TransferStatus.IN_TRANSIT)

            try:
                self._debit_source(transfer, actor_id)
            except DomainException as exc:
                latest = self.get(transfer_id)
                if latest.status != transfer.status:
                    raise InvalidTransition(
                        transfer_id, latest.status.value, TransferStatus.IN_TRANSIT.value
                    ) from exc
                raise

            try:
                shipped = self._claim(transfer, TransferStatus.IN_TRANSIT, actor_id)
            except Exception:
                self._return_to_source(transfer, actor_id)
                raise

            logger.info("Transfer %s shipped by %s", transfer_id, actor_id)
            return shipped

    def complete(self, transfer_id: str, actor_id: str) -> StockTransfer:
        with self._locks.for_key(transfer_id):
            transfer = self.get(transfer_id)
            transfer.ensure_can_transition_to(TransferStatus.COMPLETED)
            completed = self._claim(transfer, TransferStatus.COMPLETED, actor_id)

            try:
                self._credit(
                    transfer,
                    transfer.to_branch_id,
                    MovementDraft(
                        type=MovementType.TRANSFER_IN,
                        performed_by=actor_id,
                        reference=self._reference(transfer),
                        notes=f"Transfer from {transfer.from_branch_id}",
                    ),
                    create=True,
                )
            except Exception:
                self._restore(completed, transfer)
                raise

            logger.info("Transfer %s completed by %s", transfer_id, actor_id)
            return completed

    def cancel(self, transfer_id: str, actor_id: str) -> StockTransfer:
        with self._locks.for_key(transfer_id):
            transfer = self.get(transfer_id)
            transfer.ensure_can_transition_to(TransferStatus.CANCELLED)
            cancelled = self._claim(transfer, TransferStatus.CANCELLED, actor_id)

            try:
                if transfer.status == TransferStatus.PENDING:
                    self._reservations.release(
                        transfer.product_id, transfer.from_branch_id, transfer.quantity
                    )
                else:
                    # The source was already debited at ship time; put the units back.
                    self._credit(
                        transfer,
                        transfer.from_branch_id,
                        MovementDraft(
                            type=MovementType.ADJUSTMENT_ADD,
                            performed_by=actor_id,
                            reason=CANCELLED_IN_TRANSIT_REASON,
                            reference=self._reference(transfer),
                        ),
                    )
            except Exception:
                self._restore(cancelled, transfer)
                raise

            logger.info(
                "Transfer %s cancelled by %s (was %s)",
                transfer_id, actor_id, transfer.status.value,
            )
            return cancelled

    # --- Queries --------------------------------------------------------------

    def get(self, transfer_id: str) -> StockTransfer:
        transfer = self._transfer_repo.get_by_id(transfer_id)
        if transfer is None:
            raise EntityNotFoundError(f"Transfer {transfer_id} not found")
        return transfer

    def list(
        self,
        branch_id: str | None = None,
        status: TransferStatus | None = None,
        page: int = 1,
        limit: int = DEFAULT_PAGE_LIMIT,
    ) -> Page[StockTransfer]:
        """Newest first; a branch matches as either source or destination."""
        limit = check_paging(page, limit, self._max_page_limit)
        matches = [
            t
            for t in self._transfer_repo.list_all()
            if (branch_id is None or t.involves_branch(branch_id))
            and (status is None or t.status == status)
        ]
        matches.sort(key=lambda t: (t.created_at, t.transfer_id), reverse=True)
        return Page.slice(matches, page, limit)

    # --- Status writes --------------------------------------------------------

    def _claim(
        self, transfer: StockTransfer, target: TransferStatus, actor_id: str
    ) -> StockTransfer:
        """Store ``target`` as the new status unless another worker moved the transfer first."""
        current = transfer
        for attempt in range(1, self._max_retries + 1):
            updated = current.copy()
            updated.apply_transition(target, actor_id)
            updated.version = current.version + 1
            if self._transfer_repo.save_if_version(updated, current.version):
                return updated

            latest = self.get(transfer.transfer_id)
            if latest.status != current.status:
                raise InvalidTransition(
                    transfer.transfer_id, latest.status.value, target.value
                )
            # Only the version moved, e.g. another worker rolled back its own claim.
            logger.warning(
                "Version conflict on transfer %s (attempt %d of %d)",
                transfer.transfer_id, attempt, self._max_retries,
            )
            current = latest

        raise TransferConflict(transfer.transfer_id, self._max_retries)

    def _restore(self, claimed: StockTransfer, previous: StockTransfer) -> None:
        """Put a claimed transfer back after its stock effect failed."""
        restored = previous.copy()
        restored.version = claimed.version + 1
        if self._transfer_repo.save_if_version(restored, claimed.version):
            logger.warning(
                "Transfer %s put back to %s after its stock update failed",
                previous.transfer_id, previous.status.value,
            )
        else:
            logger.error(
                "Could not put transfer %s back to %s; it changed after the claim",
                previous.transfer_id, previous.status.value,
            )

    # --- Stock effects --------------------------------------------------------

    def _debit_source(self, transfer: StockTransfer, actor_id: str) -> None:
        qty = transfer.quantity

        def debit(record: StockRecord) -> StockRecord:
            record.reserved_quantity -= qty
            record.quantity -= qty
            return record

        self._store.mutate(
            transfer.product_id,
            transfer.from_branch_id,
            debit,
            movement=MovementDraft(
                type=MovementType.TRANSFER_OUT,
                performed_by=actor_id,
                reference=self._reference(transfer),
                notes=f"Transfer to {transfer.to_branch_id}",
            ),
        )

    def _return_to_source(self, transfer: StockTransfer, actor_id: str) -> None:
        """Undo ``_debit_source``: the units and their reservation go back."""
        qty = transfer.quantity

        def undo(record: StockRecord) -> StockRecord:
            record.quantity += qty
            record.reserved_quantity += qty
            return record

        self._store.mutate(
            transfer.product_id,
            transfer.from_branch_id,
            undo,
            movement=MovementDraft(
                type=MovementType.ADJUSTMENT_ADD,
                performed_by=actor_id,
                reason=SHIPMENT_ROLLED_BACK_REASON,
                reference=self._reference(transfer),
            ),
        )
        logger.warning("Shipment of transfer %s rolled back", transfer.transfer_id)

    def _credit(
        self,
        transfer: StockTransfer,
        branch_id: str,
        draft: MovementDraft,
        create: bool = False,
    ) -> None:
        qty = transfer.quantity

        def credit(record: StockRecord) -> StockRecord:
            record.quantity += qty
            return record

        self._store.mutate(transfer.product_id, branch_id, credit, movement=draft, create=create)

    @staticmethod
    def _reference(transfer: StockTransfer) -> Reference:
        return Reference(ReferenceType.STOCK_TRANSFER, transfer.transfer_id)
