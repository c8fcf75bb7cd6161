"""StockTransfer aggregate — moves units of one product between branches.

The aggregate owns only the status machine.  Stock effects of each
transition (reserve, debit, credit, compensate) are coordinated by the
TransferWorkflow domain service, which calls the transition methods here
after the stock side has succeeded.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from stockledger.domain.exceptions import InvalidTransition, SameBranch, ValidationError
from stockledger.domain.model.movement import MAX_NOTES_LENGTH
from stockledger.domain.model.value_objects import Quantity


class TransferStatus(Enum):
    PENDING = "pending"
    IN_TRANSIT = "in-transit"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (TransferStatus.COMPLETED, TransferStatus.CANCELLED)


ALLOWED_TRANSITIONS: dict[TransferStatus, frozenset[TransferStatus]] = {
    TransferStatus.PENDING: frozenset({TransferStatus.IN_TRANSIT, TransferStatus.CANCELLED}),
    TransferStatus.IN_TRANSIT: frozenset({TransferStatus.COMPLETED, TransferStatus.CANCELLED}),
    TransferStatus.COMPLETED: frozenset(),
    TransferStatus.CANCELLED: frozenset(),
}


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class StockTransfer:
    """Aggregate root for inter-branch transfers.

    Use ``StockTransfer.create()`` for new transfers; the plain
    constructor exists so repositories can reconstitute stored ones.
    """

    transfer_id: str
    product_id: str
    from_branch_id: str
    to_branch_id: str
    quantity: int
    requested_by: str
    status: TransferStatus = TransferStatus.PENDING
    notes: str | None = None
    shipped_by: str | None = None
    shipped_at: datetime | None = None
    completed_by: str | None = None
    completed_at: datetime | None = None
    cancelled_by: str | None = None
    cancelled_at: datetime | None = None
    version: int = 0
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)

    # --- Factory --------------------------------------------------------------

    @staticmethod
    def create(
        transfer_id: str,
        product_id: str,
        from_branch_id: str,
        to_branch_id: str,
        quantity: int,
        requested_by: str,
        notes: str | None = None,
    ) -> StockTransfer:
        if from_branch_id == to_branch_id:
            raise SameBranch(from_branch_id)
        qty = Quantity(quantity)
        if not requested_by:
            raise ValidationError("requested_by is required")
        if notes is not None and len(notes) > MAX_NOTES_LENGTH:
            raise ValidationError(f"Notes cannot exceed {MAX_NOTES_LENGTH} characters")
        return StockTransfer(
            transfer_id=transfer_id,
            product_id=product_id,
            from_branch_id=from_branch_id,
            to_branch_id=to_branch_id,
            quantity=qty.value,
            requested_by=requested_by,
            notes=notes or None,
        )

    # --- State transitions ----------------------------------------------------

    def can_transition_to(self, target: TransferStatus) -> bool:
        return target in ALLOWED_TRANSITIONS[self.status]

    def ensure_can_transition_to(self, target: TransferStatus) -> None:
        if not self.can_transition_to(target):
            raise InvalidTransition(self.transfer_id, self.status.value, target.value)

    def apply_transition(self, target: TransferStatus, actor_id: str) -> None:
        """Move to ``target``, stamping who did it and when."""
        if target == TransferStatus.IN_TRANSIT:
            self.mark_shipped(actor_id)
        elif target == TransferStatus.COMPLETED:
            self.mark_completed(actor_id)
        elif target == TransferStatus.CANCELLED:
            self.mark_cancelled(actor_id)
        else:
            raise InvalidTransition(self.transfer_id, self.status.value, target.value)

    def mark_shipped(self, actor_id: str) -> None:
        """PENDING -> IN_TRANSIT."""
        self.ensure_can_transition_to(TransferStatus.IN_TRANSIT)
        self.status = TransferStatus.IN_TRANSIT
        self.shipped_by = actor_id
        self.shipped_at = self.updated_at = _now()

    def mark_completed(self, actor_id: str) -> None:
        """IN_TRANSIT -> COMPLETED."""
        self.ensure_can_transition_to(TransferStatus.COMPLETED)
        self.status = TransferStatus.COMPLETED
        self.completed_by = actor_id
        self.completed_at = self.updated_at = _now()

    def mark_cancelled(self, actor_id: str) -> None:
        """PENDING|IN_TRANSIT -> CANCELLED."""
        self.ensure_can_transition_to(TransferStatus.CANCELLED)
        self.status = TransferStatus.CANCELLED
        self.cancelled_by = actor_id
        self.cancelled_at = self.updated_at = _now()

    def copy(self) -> StockTransfer:
        return dataclasses.replace(self)

    def involves_branch(self, branch_id: str) -> bool:
        return branch_id in (self.from_branch_id, self.to_branch_id)


def format_transfer_id(year: int, sequence: int) -> str:
    return f"TR-{year}-{sequence:06d}"
