"""Application service: Stock Transfer use cases.

Creation and each status change are separate commands; the transfer
workflow decides what happens to stock on every transition.
"""

from __future__ import annotations

from stockledger.application.dto import TransferDTO, transfer_dto
from stockledger.domain.exceptions import ValidationError
from stockledger.domain.service.transfer_workflow import TransferWorkflow


class CreateTransferHandler:

    def __init__(self, transfers: TransferWorkflow) -> None:
        self._transfers = transfers

    def handle(
        self,
        product_id: str,
        from_branch_id: str,
        to_branch_id: str,
        quantity: int,
        requested_by: str,
        notes: str | None = None,
    ) -> TransferDTO:
        transfer = self._transfers.create(
            product_id, from_branch_id, to_branch_id, quantity, requested_by, notes=notes
        )
        return transfer_dto(transfer)


class UpdateTransferStatusHandler:
    """Maps a requested action (ship/complete/cancel) to a workflow transition."""

    ACTIONS = ("ship", "complete", "cancel")

    def __init__(self, transfers: TransferWorkflow) -> None:
        self._transfers = transfers

    def handle(self, transfer_id: str, action: str, actor_id: str) -> TransferDTO:
        if action not in self.ACTIONS:
            raise ValidationError(
                f"Unknown transfer action '{action}' (expected one of {', '.join(self.ACTIONS)})"
            )
        transition = getattr(self._transfers, action)
        return transfer_dto(transition(transfer_id, actor_id))
