"""Unit tests for the MovementLedger domain service."""

from datetime import datetime, timedelta, timezone

import pytest

from stockledger.domain.exceptions import ValidationError
from stockledger.domain.model.movement import Movement, MovementDraft, MovementType
from stockledger.domain.model.stock_record import StockRecord
from stockledger.domain.model.value_objects import Reference, ReferenceType
from stockledger.domain.service.movement_ledger import MovementLedger
from tests.fakes import FakeMovementRepository


class _Clock:

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def _rec(quantity: int, record_id: str = "s1", branch: str = "B1", product: str = "P1"):
    return StockRecord(id=record_id, product_id=product, branch_id=branch, quantity=quantity)


@pytest.fixture
def clock():
    return _Clock(datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def ledger(clock):
    return MovementLedger(FakeMovementRepository(), clock=clock)


class TestAppend:

    def test_snapshot_and_delta(self, ledger):
        draft = MovementDraft(type=MovementType.RESTOCK, performed_by="u1", supplier_ref="SUP-1")
        movement = ledger.append(draft, _rec(10), _rec(35))
        assert movement.quantity_delta == 25
        assert movement.quantity_before == 10
        assert movement.quantity_after == 35
        assert movement.supplier_ref == "SUP-1"
        assert movement.quantity_display == "+25"

    def test_ids_are_sequential_per_year(self, ledger, clock):
        draft = MovementDraft(type=MovementType.RESTOCK, performed_by="u1")
        first = ledger.append(draft, _rec(0), _rec(1))
        second = ledger.append(draft, _rec(1), _rec(2))
        clock.now = datetime(2027, 1, 1, tzinfo=timezone.utc)
        third = ledger.append(draft, _rec(2), _rec(3))
        assert first.movement_id == "SM-2026-000001"
        assert second.movement_id == "SM-2026-000002"
        assert third.movement_id == "SM-2027-000001"

    def test_zero_delta_rejected(self, ledger):
        draft = MovementDraft(type=MovementType.RESTOCK, performed_by="u1")
        with pytest.raises(ValidationError, match="must change the quantity"):
            ledger.append(draft, _rec(5), _rec(5))

    def test_different_records_rejected(self, ledger):
        draft = MovementDraft(type=MovementType.RESTOCK, performed_by="u1")
        with pytest.raises(ValidationError, match="single stock record"):
            ledger.append(draft, _rec(5), _rec(6, record_id="s2"))


class TestDrafts:

    def test_adjustment_requires_reason(self):
        with pytest.raises(ValidationError, match="Reason for adjustment is required"):
            MovementDraft(type=MovementType.ADJUSTMENT_REMOVE, performed_by="u1", reason=" ")

    def test_actor_required(self):
        with pytest.raises(ValidationError, match="performed_by"):
            MovementDraft(type=MovementType.RESTOCK, performed_by="")

    def test_reason_length_limited(self):
        with pytest.raises(ValidationError, match="200 characters"):
            MovementDraft(type=MovementType.ADJUSTMENT_ADD, performed_by="u1", reason="r" * 201)

    def test_unbalanced_movement_cannot_exist(self):
        with pytest.raises(ValidationError, match="does not balance"):
            Movement(
                movement_id="SM-2026-000001",
                stock_record_id="s1",
                product_id="P1",
                branch_id="B1",
                type=MovementType.RESTOCK,
                quantity_delta=5,
                quantity_before=0,
                quantity_after=4,
                performed_by="u1",
            )


class TestQueries:

    def _fill(self, ledger, clock):
        restock = MovementDraft(type=MovementType.RESTOCK, performed_by="u1")
        sale = MovementDraft(
            type=MovementType.SALE,
            performed_by="u1",
            reference=Reference(ReferenceType.SALES_ORDER, "SO-1"),
        )
        ledger.append(restock, _rec(0), _rec(10))                              # day 0
        clock.advance(days=1)
        ledger.append(restock, _rec(0, "s2", "B2"), _rec(4, "s2", "B2"))       # day 1
        clock.advance(days=1)
        ledger.append(sale, _rec(10), _rec(7))                                 # day 2
        clock.advance(days=1)
        ledger.append(restock, _rec(0, "s3", "B1", "P2"), _rec(2, "s3", "B1", "P2"))  # day 3

    def test_list_by_stock_in_append_order(self, ledger, clock):
        self._fill(ledger, clock)
        page = ledger.list_by_stock("s1")
        assert [m.type for m in page.items] == [MovementType.RESTOCK, MovementType.SALE]
        assert page.total == 2

    def test_list_by_branch_and_product(self, ledger, clock):
        self._fill(ledger, clock)
        assert ledger.list_by_branch("B1").total == 3
        assert ledger.list_by_product("P1").total == 3
        assert ledger.list_by_product("P2").items[0].stock_record_id == "s3"

    def test_search_by_type(self, ledger, clock):
        self._fill(ledger, clock)
        page = ledger.search(type=MovementType.SALE)
        assert page.total == 1
        assert page.items[0].reference.id == "SO-1"

    def test_search_by_date_range_is_inclusive(self, ledger, clock):
        self._fill(ledger, clock)
        start = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)
        end = datetime(2026, 3, 3, 9, 0, tzinfo=timezone.utc)
        page = ledger.search(start=start, end=end)
        assert [m.stock_record_id for m in page.items] == ["s2", "s1"]

    def test_inverted_date_range_rejected(self, ledger):
        with pytest.raises(ValidationError, match="Start date"):
            ledger.search(
                start=datetime(2026, 3, 5, tzinfo=timezone.utc),
                end=datetime(2026, 3, 1, tzinfo=timezone.utc),
            )

    def test_paging(self, ledger, clock):
        self._fill(ledger, clock)
        page = ledger.search(page=2, limit=3)
        assert len(page.items) == 1
        assert page.pages == 2

    def test_balance(self, ledger, clock):
        self._fill(ledger, clock)
        assert ledger.balance("s1") == 7
        assert ledger.balance("missing") == 0
