"""Application service: Restock use case."""

from __future__ import annotations

from stockledger.application.dto import (
    MovementDTO,
    StockRecordDTO,
    movement_dto,
    stock_record_dto,
)
from stockledger.domain.service.adjustment_service import AdjustmentService


class RestockHandler:

    def __init__(self, adjustments: AdjustmentService) -> None:
        self._adjustments = adjustments

    def handle(
        self,
        product_id: str,
        branch_id: str,
        quantity: int,
        performed_by: str,
        cost_price: str | None = None,
        selling_price: str | None = None,
        supplier_ref: str | None = None,
        location: str | None = None,
        reorder_point: int | None = None,
        reorder_quantity: int | None = None,
        notes: str | None = None,
    ) -> tuple[StockRecordDTO, MovementDTO]:
        """Receive stock at a branch (creates the record on first restock)."""
        result = self._adjustments.restock(
            product_id,
            branch_id,
            quantity,
            performed_by,
            cost_price=cost_price,
            selling_price=selling_price,
            supplier_ref=supplier_ref,
            location=location,
            reorder_point=reorder_point,
            reorder_quantity=reorder_quantity,
            notes=notes,
        )
        return stock_record_dto(result.record), movement_dto(result.movement)
