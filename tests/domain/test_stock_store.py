"""Unit tests for StockRecordStore, the single mutation choke point."""

import pytest

from stockledger.domain.exceptions import Conflict, EntityNotFoundError, InvariantViolation
from stockledger.domain.model.movement import MovementDraft, MovementType
from stockledger.domain.model.stock_record import StockRecord
from stockledger.domain.service.movement_ledger import MovementLedger
from stockledger.domain.service.stock_store import StockRecordStore
from tests.fakes import FakeMovementRepository, FakeStockRecordRepository


def _store(*records: StockRecord, max_retries: int = 3):
    stock_repo = FakeStockRecordRepository(list(records))
    movement_repo = FakeMovementRepository()
    store = StockRecordStore(stock_repo, MovementLedger(movement_repo), max_retries=max_retries)
    return store, stock_repo, movement_repo


def _add(n):
    def apply(record):
        record.quantity += n
        return record
    return apply


RESTOCK = MovementDraft(type=MovementType.RESTOCK, performed_by="u1")


class TestReads:

    def test_get_missing_raises_not_found(self):
        store, _, _ = _store()
        with pytest.raises(EntityNotFoundError, match="No stock record"):
            store.get("P1", "B1")

    def test_get_or_create_creates_empty_record(self):
        store, stock_repo, _ = _store()
        record = store.get_or_create("P1", "B1")
        assert record.quantity == 0
        assert record.reserved_quantity == 0
        assert stock_repo.get("P1", "B1").id == record.id

    def test_get_or_create_returns_existing(self):
        store, _, _ = _store(StockRecord(id="s1", product_id="P1", branch_id="B1", quantity=7))
        assert store.get_or_create("P1", "B1").id == "s1"

    def test_get_by_id(self):
        store, _, _ = _store(StockRecord(id="s1", product_id="P1", branch_id="B1"))
        assert store.get_by_id("s1").product_id == "P1"
        with pytest.raises(EntityNotFoundError):
            store.get_by_id("nope")


class TestMutate:

    def test_mutate_missing_record_raises_not_found(self):
        store, _, _ = _store()
        with pytest.raises(EntityNotFoundError):
            store.mutate("P1", "B1", _add(1))

    def test_mutate_with_create(self):
        store, _, movement_repo = _store()
        result = store.mutate("P1", "B1", _add(5), movement=RESTOCK, create=True)
        assert result.record.quantity == 5
        assert result.movement.quantity_before == 0
        assert result.movement.quantity_after == 5
        assert len(movement_repo.list_all()) == 1

    def test_mutate_bumps_version(self):
        store, stock_repo, _ = _store(StockRecord(id="s1", product_id="P1", branch_id="B1"))
        store.mutate("P1", "B1", _add(1), movement=RESTOCK)
        store.mutate("P1", "B1", _add(1), movement=RESTOCK)
        assert stock_repo.get("P1", "B1").version == 2

    def test_invariant_violation_leaves_no_trace(self):
        store, stock_repo, movement_repo = _store(
            StockRecord(id="s1", product_id="P1", branch_id="B1", quantity=3)
        )
        with pytest.raises(InvariantViolation):
            store.mutate("P1", "B1", _add(-4), movement=RESTOCK)
        assert stock_repo.get("P1", "B1").quantity == 3
        assert stock_repo.get("P1", "B1").version == 0
        assert movement_repo.list_all() == []

    def test_fn_receives_a_copy(self):
        store, stock_repo, _ = _store(
            StockRecord(id="s1", product_id="P1", branch_id="B1", quantity=3)
        )

        def sneaky(record):
            record.quantity = 100
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            store.mutate("P1", "B1", sneaky)
        assert stock_repo.get("P1", "B1").quantity == 3

    def test_identity_change_rejected(self):
        store, _, _ = _store(StockRecord(id="s1", product_id="P1", branch_id="B1"))

        def move_branch(record):
            record.branch_id = "B2"
            return record

        with pytest.raises(InvariantViolation, match="identity"):
            store.mutate("P1", "B1", move_branch)

    def test_movement_without_quantity_change_rejected(self):
        store, _, movement_repo = _store(
            StockRecord(id="s1", product_id="P1", branch_id="B1", quantity=3)
        )
        with pytest.raises(InvariantViolation, match="must change the quantity"):
            store.mutate("P1", "B1", lambda r: r, movement=RESTOCK)
        assert movement_repo.list_all() == []

    def test_mutation_without_movement_writes_no_movement(self):
        store, _, movement_repo = _store(
            StockRecord(id="s1", product_id="P1", branch_id="B1", quantity=3)
        )

        def reserve_one(record):
            record.reserved_quantity += 1
            return record

        result = store.mutate("P1", "B1", reserve_one)
        assert result.movement is None
        assert result.record.reserved_quantity == 1
        assert movement_repo.list_all() == []


class TestOptimisticRetry:

    def test_conflict_is_retried_with_fresh_state(self):
        store, stock_repo, movement_repo = _store(
            StockRecord(id="s1", product_id="P1", branch_id="B1", quantity=3)
        )
        stock_repo.forced_conflicts = 2
        result = store.mutate("P1", "B1", _add(1), movement=RESTOCK)
        assert result.record.quantity == 4
        assert stock_repo.write_attempts == 3
        assert len(movement_repo.list_all()) == 1

    def test_conflict_surfaces_after_bounded_retries(self):
        store, stock_repo, movement_repo = _store(
            StockRecord(id="s1", product_id="P1", branch_id="B1", quantity=3),
            max_retries=3,
        )
        stock_repo.forced_conflicts = 10
        with pytest.raises(Conflict) as exc_info:
            store.mutate("P1", "B1", _add(1), movement=RESTOCK)
        assert exc_info.value.attempts == 3
        assert stock_repo.write_attempts == 3
        assert stock_repo.get("P1", "B1").quantity == 3
        assert movement_repo.list_all() == []

    def test_business_errors_are_not_retried(self):
        store, stock_repo, _ = _store(
            StockRecord(id="s1", product_id="P1", branch_id="B1", quantity=3)
        )
        calls = []

        def failing(record):
            calls.append(1)
            raise InvariantViolation("no")

        with pytest.raises(InvariantViolation):
            store.mutate("P1", "B1", failing)
        assert len(calls) == 1
        assert stock_repo.write_attempts == 0

    def test_max_retries_must_be_positive(self):
        with pytest.raises(ValueError):
            _store(max_retries=0)


class TestMovementFailure:

    def test_record_is_restored_when_movement_cannot_be_written(self, monkeypatch):
        store, stock_repo, movement_repo = _store(
            StockRecord(id="s1", product_id="P1", branch_id="B1")
        )
        store.mutate("P1", "B1", _add(50), movement=RESTOCK)

        def broken_append(movement):
            raise OSError("disk full")

        monkeypatch.setattr(movement_repo, "append", broken_append)
        with pytest.raises(OSError):
            store.mutate(
                "P1", "B1", _add(-5),
                movement=MovementDraft(
                    type=MovementType.ADJUSTMENT_REMOVE, performed_by="u1", reason="damaged"
                ),
            )

        record = stock_repo.get("P1", "B1")
        assert record.quantity == 50
        assert sum(m.quantity_delta for m in movement_repo.list_all()) == 50

    def test_failed_sequence_also_rolls_back(self, monkeypatch):
        store, stock_repo, movement_repo = _store(
            StockRecord(id="s1", product_id="P1", branch_id="B1", quantity=10)
        )

        def broken_sequence(year):
            raise OSError("disk full")

        monkeypatch.setattr(movement_repo, "next_sequence", broken_sequence)
        with pytest.raises(OSError):
            store.mutate("P1", "B1", _add(5), movement=RESTOCK)

        assert stock_repo.get("P1", "B1").quantity == 10
        assert movement_repo.list_all() == []


class TestProductStock:

    def test_totals_across_branches(self):
        store, _, _ = _store(
            StockRecord(id="a", product_id="P1", branch_id="B2", quantity=20, reserved_quantity=5),
            StockRecord(id="b", product_id="P1", branch_id="B1", quantity=30),
            StockRecord(id="c", product_id="P2", branch_id="B1", quantity=7),
        )

        stock = store.product_stock("P1")

        assert [r.branch_id for r in stock.records] == ["B1", "B2"]
        assert stock.total_quantity == 50
        assert stock.total_reserved == 5
        assert stock.total_available == 45

    def test_unknown_product(self):
        store, _, _ = _store()
        with pytest.raises(EntityNotFoundError, match="No stock recorded for product 'P9'"):
            store.product_stock("P9")
