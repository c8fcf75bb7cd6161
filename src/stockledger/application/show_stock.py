"""Application service: stock queries (read side)."""

from __future__ import annotations

from stockledger.application.dto import (
    MovementDTO,
    PageDTO,
    ProductStockDTO,
    StockRecordDTO,
    movement_dto,
    product_stock_dto,
    stock_record_dto,
)
from stockledger.domain.service.low_stock_monitor import LowStockMonitor
from stockledger.domain.service.movement_ledger import MovementLedger
from stockledger.domain.service.stock_store import StockRecordStore


class ShowStockHandler:

    def __init__(self, store: StockRecordStore, ledger: MovementLedger) -> None:
        self._store = store
        self._ledger = ledger

    def handle(
        self, product_id: str, branch_id: str, page: int = 1, limit: int = 20
    ) -> tuple[StockRecordDTO, PageDTO]:
        """One stock record plus a page of its movement history."""
        record = self._store.get(product_id, branch_id)
        history = self._ledger.list_by_stock(record.id, page=page, limit=limit)
        movements: list[MovementDTO] = [movement_dto(m) for m in history.items]
        return stock_record_dto(record), PageDTO(
            items=movements, page=history.page, pages=history.pages, total=history.total
        )


class ListStockHandler:

    def __init__(self, store: StockRecordStore) -> None:
        self._store = store

    def handle(self, branch_id: str | None = None) -> list[StockRecordDTO]:
        records = sorted(self._store.list(branch_id), key=lambda r: (r.branch_id, r.product_id))
        return [stock_record_dto(r) for r in records]


class LowStockHandler:

    def __init__(self, monitor: LowStockMonitor) -> None:
        self._monitor = monitor

    def handle(
        self, branch_id: str | None = None, out_of_stock_only: bool = False
    ) -> list[StockRecordDTO]:
        if out_of_stock_only:
            records = self._monitor.list_out_of_stock(branch_id)
        else:
            records = self._monitor.list_low_stock(branch_id)
        return [stock_record_dto(r) for r in records]


class ProductStockHandler:
    """One product's stock at every branch, with totals."""

    def __init__(self, store: StockRecordStore) -> None:
        self._store = store

    def handle(self, product_id: str) -> ProductStockDTO:
        return product_stock_dto(self._store.product_stock(product_id))


class StockStatusHandler:

    def __init__(self, monitor: LowStockMonitor) -> None:
        self._monitor = monitor

    def handle(self, branch_id: str | None = None) -> dict[str, int]:
        """Number of records per stock status (in-stock, low-stock, out-of-stock)."""
        return self._monitor.status_counts(branch_id)
