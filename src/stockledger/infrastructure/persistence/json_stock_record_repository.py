"""JSON-file-backed implementation of StockRecordRepository."""

from __future__ import annotations

import json
import os
import threading
from datetime import datetime
from decimal import Decimal
from pathlib import Path

from filelock import FileLock

from stockledger.domain.model.stock_record import StockRecord
from stockledger.domain.model.value_objects import Money
from stockledger.domain.repository.stock_record_repository import StockRecordRepository


class JsonStockRecordRepository(StockRecordRepository):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._lock = threading.Lock()
        file_path.parent.mkdir(parents=True, exist_ok=True)
        self._file_lock = FileLock(str(file_path) + ".lock")
        with self._lock, self._file_lock:
            self._ensure_file()

    # --- StockRecordRepository interface --------------------------------------

    def get(self, product_id: str, branch_id: str) -> StockRecord | None:
        for raw in self._load_raw():
            if raw["product_id"] == product_id and raw["branch_id"] == branch_id:
                return self._to_domain(raw)
        return None

    def get_by_id(self, stock_record_id: str) -> StockRecord | None:
        for raw in self._load_raw():
            if raw["id"] == stock_record_id:
                return self._to_domain(raw)
        return None

    def list_all(self, branch_id: str | None = None) -> list[StockRecord]:
        return [
            self._to_domain(raw)
            for raw in self._load_raw()
            if branch_id is None or raw["branch_id"] == branch_id
        ]

    def add(self, record: StockRecord) -> bool:
        with self._lock, self._file_lock:
            records = self._load_raw()
            for raw in records:
                if raw["product_id"] == record.product_id and raw["branch_id"] == record.branch_id:
                    return False
            records.append(self._to_raw(record))
            self._persist_raw(records)
            return True

    def save_if_version(self, record: StockRecord, expected_version: int) -> bool:
        with self._lock, self._file_lock:
            records = self._load_raw()
            for i, raw in enumerate(records):
                if raw["id"] == record.id:
                    if raw["version"] != expected_version:
                        return False
                    records[i] = self._to_raw(record)
                    self._persist_raw(records)
                    return True
            return False

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(record: StockRecord) -> dict:
        return {
            "id": record.id,
            "product_id": record.product_id,
            "branch_id": record.branch_id,
            "quantity": record.quantity,
            "reserved_quantity": record.reserved_quantity,
            "reorder_point": record.reorder_point,
            "reorder_quantity": record.reorder_quantity,
            "cost_price": str(record.cost_price.amount),
            "selling_price": str(record.selling_price.amount),
            "supplier_ref": record.supplier_ref,
            "location": record.location,
            "last_restocked_at": (
                record.last_restocked_at.isoformat() if record.last_restocked_at else None
            ),
            "last_restocked_by": record.last_restocked_by,
            "version": record.version,
            "created_at": record.created_at.isoformat(),
            "updated_at": record.updated_at.isoformat(),
        }

    @staticmethod
    def _to_domain(raw: dict) -> StockRecord:
        restocked_at = raw.get("last_restocked_at")
        return StockRecord(
            id=raw["id"],
            product_id=raw["product_id"],
            branch_id=raw["branch_id"],
            quantity=raw["quantity"],
            reserved_quantity=raw.get("reserved_quantity", 0),
            reorder_point=raw["reorder_point"],
            reorder_quantity=raw["reorder_quantity"],
            cost_price=Money(Decimal(raw["cost_price"])),
            selling_price=Money(Decimal(raw["selling_price"])),
            supplier_ref=raw.get("supplier_ref"),
            location=raw.get("location"),
            last_restocked_at=datetime.fromisoformat(restocked_at) if restocked_at else None,
            last_restocked_by=raw.get("last_restocked_by"),
            version=raw["version"],
            created_at=datetime.fromisoformat(raw["created_at"]),
            updated_at=datetime.fromisoformat(raw["updated_at"]),
        )

    # --- File helpers ---------------------------------------------------------

    def _load_raw(self) -> list[dict]:
        return json.loads(self._file_path.read_text(encoding="utf-8"))

    def _persist_raw(self, records: list[dict]) -> None:
        # Readers never take the lock, so replace the file in one step.
        tmp_path = self._file_path.with_name(self._file_path.name + ".tmp")
        tmp_path.write_text(json.dumps(records, indent=2) + "\n", encoding="utf-8")
        os.replace(tmp_path, self._file_path)

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text("[]", encoding="utf-8")
