"""Application service: movement history queries."""

from __future__ import annotations

from datetime import datetime

from stockledger.application.dto import PageDTO, movement_dto
from stockledger.domain.exceptions import ValidationError
from stockledger.domain.model.movement import MovementType
from stockledger.domain.service.movement_ledger import MovementLedger


class ListMovementsHandler:

    def __init__(self, ledger: MovementLedger) -> None:
        self._ledger = ledger

    def handle(
        self,
        movement_type: str | None = None,
        branch_id: str | None = None,
        product_id: str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
        page: int = 1,
        limit: int = 20,
    ) -> PageDTO:
        result = self._ledger.search(
            type=self._parse_type(movement_type),
            branch_id=branch_id,
            product_id=product_id,
            start=start,
            end=end,
            page=page,
            limit=limit,
        )
        return PageDTO(
            items=[movement_dto(m) for m in result.items],
            page=result.page,
            pages=result.pages,
            total=result.total,
        )

    @staticmethod
    def _parse_type(raw: str | None) -> MovementType | None:
        if raw is None:
            return None
        try:
            return MovementType(raw)
        except ValueError:
            raise ValidationError(f"Unknown movement type '{raw}'") from None
