"""Application service: transfer queries."""

from __future__ import annotations

from stockledger.application.dto import PageDTO, TransferDTO, transfer_dto
from stockledger.domain.exceptions import ValidationError
from stockledger.domain.model.transfer import TransferStatus
from stockledger.domain.service.transfer_workflow import TransferWorkflow


class ShowTransferHandler:

    def __init__(self, transfers: TransferWorkflow) -> None:
        self._transfers = transfers

    def handle(self, transfer_id: str) -> TransferDTO:
        return transfer_dto(self._transfers.get(transfer_id))


class ListTransfersHandler:

    def __init__(self, transfers: TransferWorkflow) -> None:
        self._transfers = transfers

    def handle(
        self,
        branch_id: str | None = None,
        status: str | None = None,
        page: int = 1,
        limit: int = 20,
    ) -> PageDTO:
        if status is not None:
            try:
                status_filter = TransferStatus(status)
            except ValueError:
                raise ValidationError(f"Unknown transfer status '{status}'") from None
        else:
            status_filter = None

        result = self._transfers.list(
            branch_id=branch_id, status=status_filter, page=page, limit=limit
        )
        return PageDTO(
            items=[transfer_dto(t) for t in result.items],
            page=result.page,
            pages=result.pages,
            total=result.total,
        )
