"""Domain service: Low-Stock Monitor (read model, no side effects)."""

from __future__ import annotations

from collections import Counter

from stockledger.domain.model.stock_record import StockRecord, StockStatus
from stockledger.domain.repository.stock_record_repository import StockRecordRepository


class LowStockMonitor:

    def __init__(self, stock_repo: StockRecordRepository) -> None:
        self._stock_repo = stock_repo

    def list_low_stock(self, branch_id: str | None = None) -> list[StockRecord]:
        """Records whose available quantity is at or below the reorder point."""
        records = [r for r in self._stock_repo.list_all(branch_id) if r.is_low_stock]
        return sorted(records, key=lambda r: (r.available, r.product_id, r.branch_id))

    def list_out_of_stock(self, branch_id: str | None = None) -> list[StockRecord]:
        records = [r for r in self._stock_repo.list_all(branch_id) if r.quantity == 0]
        return sorted(records, key=lambda r: (r.product_id, r.branch_id))

    def status_counts(self, branch_id: str | None = None) -> dict[str, int]:
        counts = Counter(r.stock_status for r in self._stock_repo.list_all(branch_id))
        return {
            status: counts.get(status, 0)
            for status in (StockStatus.IN_STOCK, StockStatus.LOW_STOCK, StockStatus.OUT_OF_STOCK)
        }
