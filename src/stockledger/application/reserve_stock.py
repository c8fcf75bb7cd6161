"""Application services used by order collaborators.

Sales and service orders never touch stock fields; they reserve stock
when an order is placed, release it if the order is cancelled before
fulfillment, and commit it when the order completes.
"""

from __future__ import annotations

from stockledger.application.dto import (
    MovementDTO,
    StockRecordDTO,
    movement_dto,
    stock_record_dto,
)
from stockledger.domain.model.value_objects import Reference
from stockledger.domain.service.reservation_manager import ReservationManager


class ReserveStockHandler:

    def __init__(self, reservations: ReservationManager) -> None:
        self._reservations = reservations

    def handle(self, product_id: str, branch_id: str, quantity: int) -> StockRecordDTO:
        return stock_record_dto(self._reservations.reserve(product_id, branch_id, quantity))


class ReleaseStockHandler:

    def __init__(self, reservations: ReservationManager) -> None:
        self._reservations = reservations

    def handle(self, product_id: str, branch_id: str, quantity: int) -> StockRecordDTO:
        return stock_record_dto(self._reservations.release(product_id, branch_id, quantity))


class CommitStockHandler:

    def __init__(self, reservations: ReservationManager) -> None:
        self._reservations = reservations

    def handle(
        self,
        product_id: str,
        branch_id: str,
        quantity: int,
        reference: str,
        performed_by: str,
    ) -> tuple[StockRecordDTO, MovementDTO]:
        """Commit a reservation; ``reference`` is e.g. ``'SalesOrder:SO-1001'``."""
        result = self._reservations.commit(
            product_id, branch_id, quantity, Reference.parse(reference), performed_by
        )
        return stock_record_dto(result.record), movement_dto(result.movement)


class ReverseSaleHandler:

    def __init__(self, reservations: ReservationManager) -> None:
        self._reservations = reservations

    def handle(
        self,
        product_id: str,
        branch_id: str,
        quantity: int,
        reference: str,
        performed_by: str,
        reason: str | None = None,
    ) -> tuple[StockRecordDTO, MovementDTO]:
        result = self._reservations.reverse(
            product_id,
            branch_id,
            quantity,
            Reference.parse(reference),
            performed_by,
            reason=reason,
        )
        return stock_record_dto(result.record), movement_dto(result.movement)
