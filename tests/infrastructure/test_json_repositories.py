"""Tests for the JSON-file repositories."""

from stockledger.domain.model.movement import MovementType
from stockledger.domain.model.transfer import TransferStatus
from stockledger.domain.model.value_objects import Money
from stockledger.infrastructure.bootstrap import build_services
from stockledger.infrastructure.persistence.json_movement_repository import (
    JsonMovementRepository,
)
from stockledger.infrastructure.persistence.json_stock_record_repository import (
    JsonStockRecordRepository,
)
from stockledger.infrastructure.persistence.json_transfer_repository import (
    JsonTransferRepository,
)


def _services(tmp_path):
    return build_services(
        JsonStockRecordRepository(tmp_path / "stock_records.json"),
        JsonMovementRepository(tmp_path / "movements.json"),
        JsonTransferRepository(tmp_path / "transfers.json"),
    )


class TestJsonStockRecordRepository:

    def test_creates_missing_file(self, tmp_path):
        repo = JsonStockRecordRepository(tmp_path / "nested" / "stock.json")
        assert repo.list_all() == []
        assert (tmp_path / "nested" / "stock.json").exists()

    def test_state_survives_reload(self, tmp_path):
        _services(tmp_path).adjustments.restock(
            "P1", "B1", 50, "admin", cost_price="10.50", supplier_ref="SUP-1"
        )

        record = JsonStockRecordRepository(tmp_path / "stock_records.json").get("P1", "B1")
        assert record.quantity == 50
        assert record.cost_price == Money.of("10.50")
        assert record.supplier_ref == "SUP-1"
        assert record.last_restocked_at is not None
        assert record.version == 1

    def test_add_rejects_duplicate_key(self, tmp_path):
        services = _services(tmp_path)
        services.adjustments.restock("P1", "B1", 1, "admin")
        repo = JsonStockRecordRepository(tmp_path / "stock_records.json")
        duplicate = repo.get("P1", "B1")
        duplicate.id = "other"
        assert repo.add(duplicate) is False

    def test_stale_version_is_refused(self, tmp_path):
        _services(tmp_path).adjustments.restock("P1", "B1", 1, "admin")
        repo = JsonStockRecordRepository(tmp_path / "stock_records.json")
        record = repo.get("P1", "B1")
        record.quantity = 99

        assert repo.save_if_version(record, expected_version=0) is False
        assert repo.get("P1", "B1").quantity == 1

        record.version = 2
        assert repo.save_if_version(record, expected_version=1) is True
        assert repo.get("P1", "B1").quantity == 99


class TestJsonMovementRepository:

    def test_sequences_are_per_year_and_persist(self, tmp_path):
        path = tmp_path / "movements.json"
        assert JsonMovementRepository(path).next_sequence(2026) == 1
        assert JsonMovementRepository(path).next_sequence(2026) == 2
        assert JsonMovementRepository(path).next_sequence(2027) == 1

    def test_movements_round_trip_with_reference(self, tmp_path):
        services = _services(tmp_path)
        services.adjustments.restock("P1", "B1", 10, "admin")
        transfer = services.transfers.create("P1", "B1", "B2", 4, "clerk")
        services.transfers.ship(transfer.transfer_id, "driver")

        movements = JsonMovementRepository(tmp_path / "movements.json").list_all()
        assert [m.type for m in movements] == [MovementType.RESTOCK, MovementType.TRANSFER_OUT]
        assert movements[1].reference.id == transfer.transfer_id
        assert movements[1].notes == "Transfer to B2"
        assert movements[0].movement_id != movements[1].movement_id


class TestJsonTransferRepository:

    def test_transfer_round_trip(self, tmp_path):
        services = _services(tmp_path)
        services.adjustments.restock("P1", "B1", 10, "admin")
        transfer = services.transfers.create("P1", "B1", "B2", 4, "clerk", notes="urgent")
        services.transfers.cancel(transfer.transfer_id, "manager")

        stored = JsonTransferRepository(tmp_path / "transfers.json").get_by_id(
            transfer.transfer_id
        )
        assert stored.status == TransferStatus.CANCELLED
        assert stored.cancelled_by == "manager"
        assert stored.cancelled_at is not None
        assert stored.notes == "urgent"
        assert stored.version == 1

    def test_unknown_transfer_is_none(self, tmp_path):
        assert JsonTransferRepository(tmp_path / "t.json").get_by_id("TR-2026-000001") is None

    def test_stale_status_write_is_refused_across_instances(self, tmp_path):
        path = tmp_path / "transfers.json"
        services = _services(tmp_path)
        services.adjustments.restock("P1", "B1", 10, "admin")
        transfer = services.transfers.create("P1", "B1", "B2", 4, "clerk")

        first = JsonTransferRepository(path)
        second = JsonTransferRepository(path)
        a = first.get_by_id(transfer.transfer_id)
        b = second.get_by_id(transfer.transfer_id)

        a.mark_cancelled("manager")
        a.version = 1
        assert first.save_if_version(a, 0)

        b.mark_shipped("driver")
        b.version = 1
        assert not second.save_if_version(b, 0)
        assert first.get_by_id(transfer.transfer_id).status == TransferStatus.CANCELLED

    def test_writes_leave_no_temp_file(self, tmp_path):
        path = tmp_path / "transfers.json"
        assert JsonTransferRepository(path).next_sequence(2026) == 1
        assert JsonTransferRepository(path).next_sequence(2026) == 2
        assert not (tmp_path / "transfers.json.tmp").exists()
