"""JSON-file-backed implementation of MovementRepository.

The file holds the movement list plus the last issued sequence number per
year, so numbering survives restarts and never reuses an id.
"""

from __future__ import annotations

import json
import os
import threading
from datetime import datetime
from pathlib import Path

from filelock import FileLock

from stockledger.domain.model.movement import Movement, MovementType
from stockledger.domain.model.value_objects import Reference, ReferenceType
from stockledger.domain.repository.movement_repository import MovementRepository


class JsonMovementRepository(MovementRepository):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._lock = threading.Lock()
        file_path.parent.mkdir(parents=True, exist_ok=True)
        self._file_lock = FileLock(str(file_path) + ".lock")
        with self._lock, self._file_lock:
            self._ensure_file()

    # --- MovementRepository interface -----------------------------------------

    def next_sequence(self, year: int) -> int:
        with self._lock, self._file_lock:
            data = self._load_raw()
            sequence = data["last_sequence"].get(str(year), 0) + 1
            data["last_sequence"][str(year)] = sequence
            self._persist_raw(data)
            return sequence

    def append(self, movement: Movement) -> None:
        with self._lock, self._file_lock:
            data = self._load_raw()
            data["movements"].append(self._to_raw(movement))
            self._persist_raw(data)

    def list_all(self) -> list[Movement]:
        return [self._to_domain(raw) for raw in self._load_raw()["movements"]]

    def list_by_stock(self, stock_record_id: str) -> list[Movement]:
        return [
            self._to_domain(raw)
            for raw in self._load_raw()["movements"]
            if raw["stock_record_id"] == stock_record_id
        ]

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(movement: Movement) -> dict:
        return {
            "movement_id": movement.movement_id,
            "stock_record_id": movement.stock_record_id,
            "product_id": movement.product_id,
            "branch_id": movement.branch_id,
            "type": movement.type.value,
            "quantity_delta": movement.quantity_delta,
            "quantity_before": movement.quantity_before,
            "quantity_after": movement.quantity_after,
            "performed_by": movement.performed_by,
            "reason": movement.reason,
            "reference": (
                {"type": movement.reference.type.value, "id": movement.reference.id}
                if movement.reference
                else None
            ),
            "supplier_ref": movement.supplier_ref,
            "notes": movement.notes,
            "created_at": movement.created_at.isoformat(),
        }

    @staticmethod
    def _to_domain(raw: dict) -> Movement:
        ref = raw.get("reference")
        return Movement(
            movement_id=raw["movement_id"],
            stock_record_id=raw["stock_record_id"],
            product_id=raw["product_id"],
            branch_id=raw["branch_id"],
            type=MovementType(raw["type"]),
            quantity_delta=raw["quantity_delta"],
            quantity_before=raw["quantity_before"],
            quantity_after=raw["quantity_after"],
            performed_by=raw["performed_by"],
            reason=raw.get("reason"),
            reference=Reference(ReferenceType(ref["type"]), ref["id"]) if ref else None,
            supplier_ref=raw.get("supplier_ref"),
            notes=raw.get("notes"),
            created_at=datetime.fromisoformat(raw["created_at"]),
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
            self._persist_raw({"last_sequence": {}, "movements": []})
