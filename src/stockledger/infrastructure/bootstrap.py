"""Composition root — wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from dataclasses import dataclass

from stockledger.config import Settings, get_settings
from stockledger.domain.repository.movement_repository import MovementRepository
from stockledger.domain.repository.stock_record_repository import StockRecordRepository
from stockledger.domain.repository.transfer_repository import TransferRepository
from stockledger.domain.service.adjustment_service import AdjustmentService
from stockledger.domain.service.low_stock_monitor import LowStockMonitor
from stockledger.domain.service.movement_ledger import MovementLedger
from stockledger.domain.service.reservation_manager import ReservationManager
from stockledger.domain.service.stock_store import StockRecordStore
from stockledger.domain.service.transfer_workflow import TransferWorkflow
from stockledger.infrastructure.persistence.json_movement_repository import (
    JsonMovementRepository,
)
from stockledger.infrastructure.persistence.json_stock_record_repository import (
    JsonStockRecordRepository,
)
from stockledger.infrastructure.persistence.json_transfer_repository import (
    JsonTransferRepository,
)


@dataclass(frozen=True)
class LedgerServices:
    """Every domain service, sharing one store and one ledger."""

    store: StockRecordStore
    ledger: MovementLedger
    reservations: ReservationManager
    adjustments: AdjustmentService
    transfers: TransferWorkflow
    monitor: LowStockMonitor


def build_services(
    stock_repo: StockRecordRepository,
    movement_repo: MovementRepository,
    transfer_repo: TransferRepository,
    max_retries: int = 3,
    max_page_limit: int = 100,
) -> LedgerServices:
    ledger = MovementLedger(movement_repo, max_page_limit=max_page_limit)
    store = StockRecordStore(stock_repo, ledger, max_retries=max_retries)
    reservations = ReservationManager(store)
    return LedgerServices(
        store=store,
        ledger=ledger,
        reservations=reservations,
        adjustments=AdjustmentService(store),
        transfers=TransferWorkflow(
            transfer_repo,
            store,
            reservations,
            max_page_limit=max_page_limit,
            max_retries=max_retries,
        ),
        monitor=LowStockMonitor(stock_repo),
    )


def stock_record_repository(settings: Settings) -> JsonStockRecordRepository:
    return JsonStockRecordRepository(settings.data_dir / "stock_records.json")


def movement_repository(settings: Settings) -> JsonMovementRepository:
    return JsonMovementRepository(settings.data_dir / "movements.json")


def transfer_repository(settings: Settings) -> JsonTransferRepository:
    return JsonTransferRepository(settings.data_dir / "transfers.json")


def services(settings: Settings | None = None) -> LedgerServices:
    settings = settings or get_settings()
    return build_services(
        stock_record_repository(settings),
        movement_repository(settings),
        transfer_repository(settings),
        max_retries=settings.max_retries,
        max_page_limit=settings.max_page_limit,
    )
