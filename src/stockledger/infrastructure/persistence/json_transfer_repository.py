"""JSON-file-backed implementation of TransferRepository."""

from __future__ import annotations

import json
import os
import threading
from datetime import datetime
from pathlib import Path

from filelock import FileLock

from stockledger.domain.model.transfer import StockTransfer, TransferStatus
from stockledger.domain.repository.transfer_repository import TransferRepository

_TIMESTAMP_FIELDS = ("shipped_at", "completed_at", "cancelled_at")


class JsonTransferRepository(TransferRepository):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._lock = threading.Lock()
        file_path.parent.mkdir(parents=True, exist_ok=True)
        self._file_lock = FileLock(str(file_path) + ".lock")
        with self._lock, self._file_lock:
            self._ensure_file()

    # --- TransferRepository interface -----------------------------------------

    def next_sequence(self, year: int) -> int:
        with self._lock, self._file_lock:
            data = self._load_raw()
            sequence = data["last_sequence"].get(str(year), 0) + 1
            data["last_sequence"][str(year)] = sequence
            self._persist_raw(data)
            return sequence

    def get_by_id(self, transfer_id: str) -> StockTransfer | None:
        for raw in self._load_raw()["transfers"]:
            if raw["transfer_id"] == transfer_id:
                return self._to_domain(raw)
        return None

    def list_all(self) -> list[StockTransfer]:
        return [self._to_domain(raw) for raw in self._load_raw()["transfers"]]

    def add(self, transfer: StockTransfer) -> None:
        with self._lock, self._file_lock:
            data = self._load_raw()
            data["transfers"].append(self._to_raw(transfer))
            self._persist_raw(data)

    def save_if_version(self, transfer: StockTransfer, expected_version: int) -> bool:
        with self._lock, self._file_lock:
            data = self._load_raw()
            transfers = data["transfers"]
            for i, raw in enumerate(transfers):
                if raw["transfer_id"] == transfer.transfer_id:
                    if raw["version"] != expected_version:
                        return False
                    transfers[i] = self._to_raw(transfer)
                    self._persist_raw(data)
                    return True
            return False

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(transfer: StockTransfer) -> dict:
        raw = {
            "transfer_id": transfer.transfer_id,
            "product_id": transfer.product_id,
            "from_branch_id": transfer.from_branch_id,
            "to_branch_id": transfer.to_branch_id,
            "quantity": transfer.quantity,
            "requested_by": transfer.requested_by,
            "status": transfer.status.value,
            "notes": transfer.notes,
            "shipped_by": transfer.shipped_by,
            "completed_by": transfer.completed_by,
            "cancelled_by": transfer.cancelled_by,
            "version": transfer.version,
            "created_at": transfer.created_at.isoformat(),
            "updated_at": transfer.updated_at.isoformat(),
        }
        for name in _TIMESTAMP_FIELDS:
            value = getattr(transfer, name)
            raw[name] = value.isoformat() if value else None
        return raw

    @staticmethod
    def _to_domain(raw: dict) -> StockTransfer:
        timestamps = {
            name: datetime.fromisoformat(raw[name]) if raw.get(name) else None
            for name in _TIMESTAMP_FIELDS
        }
        return StockTransfer(
            transfer_id=raw["transfer_id"],
            product_id=raw["product_id"],
            from_branch_id=raw["from_branch_id"],
            to_branch_id=raw["to_branch_id"],
            quantity=raw["quantity"],
            requested_by=raw["requested_by"],
            status=TransferStatus(raw["status"]),
            notes=raw.get("notes"),
            shipped_by=raw.get("shipped_by"),
            completed_by=raw.get("completed_by"),
            cancelled_by=raw.get("cancelled_by"),
            version=raw.get("version", 0),
            created_at=datetime.fromisoformat(raw["created_at"]),
            updated_at=datetime.fromisoformat(raw["updated_at"]),
            **timestamps,
        )

    # --- File helpers ---------------------------------------------------------

    def _load_raw(self) -> dict:
        return json.loads(self._file_path.read_text(encoding="utf-8"))

    def _persist_raw(self, data: dict) -> None:
        # Readers never take the lock, so replace the file in one step.
        tmp_path = self._file_path.with_name(self._file_path.name + ".tmp")
        tmp_path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
        os.replace(tmp_path, self._file_path)

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._persist_raw({"last_sequence": {}, "transfers": []})
