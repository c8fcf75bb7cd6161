"""Application service: Adjust Stock use case (manual correction)."""

from __future__ import annotations

from stockledger.application.dto import (
    MovementDTO,
    StockRecordDTO,
    movement_dto,
    stock_record_dto,
)
from stockledger.domain.service.adjustment_service import AdjustmentService


class AdjustStockHandler:

    def __init__(self, adjustments: AdjustmentService) -> None:
        self._adjustments = adjustments

    def handle(
        self,
        product_id: str,
        branch_id: str,
        delta: int,
        reason: str,
        performed_by: str,
        notes: str | None = None,
    ) -> tuple[StockRecordDTO, MovementDTO]:
        result = self._adjustments.adjust(
            product_id, branch_id, delta, reason, performed_by, notes=notes
        )
        return stock_record_dto(result.record), movement_dto(result.movement)


class UpdateThresholdsHandler:

    def __init__(self, adjustments: AdjustmentService) -> None:
        self._adjustments = adjustments

    def handle(
        self,
        product_id: str,
        branch_id: str,
        reorder_point: int | None = None,
        reorder_quantity: int | None = None,
        location: str | None = None,
    ) -> StockRecordDTO:
        record = self._adjustments.update_thresholds(
            product_id,
            branch_id,
            reorder_point=reorder_point,
            reorder_quantity=reorder_quantity,
            location=location,
        )
        return stock_record_dto(record)
