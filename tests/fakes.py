"""In-memory fake repositories for testing.

These implement the same abstract interfaces as the JSON repositories
but keep everything in a dict.  Stored objects are copied on the way in
and out, like a real store, so tests cannot mutate state behind the
store's back.
"""

from __future__ import annotations

import threading

from stockledger.domain.model.movement import Movement
from stockledger.domain.model.stock_record import StockRecord
from stockledger.domain.model.transfer import StockTransfer
from stockledger.domain.repository.movement_repository import MovementRepository
from stockledger.domain.repository.stock_record_repository import StockRecordRepository
from stockledger.domain.repository.transfer_repository import TransferRepository
from stockledger.infrastructure.bootstrap import LedgerServices, build_services


class FakeStockRecordRepository(StockRecordRepository):

    def __init__(self, records: list[StockRecord] | None = None) -> None:
        self._store: dict[tuple[str, str], StockRecord] = {}
        self._lock = threading.Lock()
        self.forced_conflicts = 0
        self.write_attempts = 0
        for record in records or []:
            self._store[record.key] = record.copy()

    def get(self, product_id: str, branch_id: str) -> StockRecord | None:
        record = self._store.get((product_id, branch_id))
        return record.copy() if record else None

    def get_by_id(self, stock_record_id: str) -> StockRecord | None:
        with self._lock:
            for record in self._store.values():
                if record.id == stock_record_id:
                    return record.copy()
        return None

    def list_all(self, branch_id: str | None = None) -> list[StockRecord]:
        with self._lock:
            return [
                r.copy()
                for r in self._store.values()
                if branch_id is None or r.branch_id == branch_id
            ]

    def add(self, record: StockRecord) -> bool:
        with self._lock:
            if record.key in self._store:
                return False
            self._store[record.key] = record.copy()
            return True

    def save_if_version(self, record: StockRecord, expected_version: int) -> bool:
        with self._lock:
            self.write_attempts += 1
            if self.forced_conflicts > 0:
                # Simulate another writer bumping the version first.
                self.forced_conflicts -= 1
                self._store[record.key].version += 1
                return False
            stored = self._store.get(record.key)
            if stored is None or stored.version != expected_version:
                return False
            self._store[record.key] = record.copy()
            return True


class FakeMovementRepository(MovementRepository):

    def __init__(self) -> None:
        self._movements: list[Movement] = []
        self._sequences: dict[int, int] = {}
        self._lock = threading.Lock()

    def next_sequence(self, year: int) -> int:
        with self._lock:
            self._sequences[year] = self._sequences.get(year, 0) + 1
            return self._sequences[year]

    def append(self, movement: Movement) -> None:
        with self._lock:
            self._movements.append(movement)

    def list_all(self) -> list[Movement]:
        return list(self._movements)

    def list_by_stock(self, stock_record_id: str) -> list[Movement]:
        return [m for m in self._movements if m.stock_record_id == stock_record_id]


class FakeTransferRepository(TransferRepository):

    def __init__(self) -> None:
        self._store: dict[str, StockTransfer] = {}
        self._sequences: dict[int, int] = {}
        self._lock = threading.Lock()

    def next_sequence(self, year: int) -> int:
        with self._lock:
            self._sequences[year] = self._sequences.get(year, 0) + 1
            return self._sequences[year]

    def get_by_id(self, transfer_id: str) -> StockTransfer | None:
        transfer = self._store.get(transfer_id)
        return transfer.copy() if transfer else None

    def list_all(self) -> list[StockTransfer]:
        with self._lock:
            return [t.copy() for t in self._store.values()]

    def add(self, transfer: StockTransfer) -> None:
        with self._lock:
            self._store[transfer.transfer_id] = transfer.copy()

    def save_if_version(self, transfer: StockTransfer, expected_version: int) -> bool:
        with self._lock:
            stored = self._store.get(transfer.transfer_id)
            if stored is None or stored.version != expected_version:
                return False
            self._store[transfer.transfer_id] = transfer.copy()
            return True


def make_services(
    records: list[StockRecord] | None = None, max_retries: int = 3
) -> tuple[LedgerServices, FakeStockRecordRepository, FakeMovementRepository]:
    """Wire every domain service over fresh fakes."""
    stock_repo = FakeStockRecordRepository(records)
    movement_repo = FakeMovementRepository()
    services = build_services(
        stock_repo, movement_repo, FakeTransferRepository(), max_retries=max_retries
    )
    return services, stock_repo, movement_repo


def make_worker_services(
    workers: int = 2, records: list[StockRecord] | None = None, max_retries: int = 3
) -> tuple[
    list[LedgerServices],
    FakeStockRecordRepository,
    FakeMovementRepository,
    FakeTransferRepository,
]:
    """Several independently wired service sets over the same fakes.

    Each set has its own in-process locks, like separate worker processes
    sharing one store, so only the repositories' version checks keep them
    apart.
    """
    stock_repo = FakeStockRecordRepository(records)
    movement_repo = FakeMovementRepository()
    transfer_repo = FakeTransferRepository()
    services = [
        build_services(stock_repo, movement_repo, transfer_repo, max_retries=max_retries)
        for _ in range(workers)
    ]
    return services, stock_repo, movement_repo, transfer_repo
