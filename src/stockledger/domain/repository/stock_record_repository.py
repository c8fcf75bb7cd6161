"""Abstract repository for the StockRecord aggregate.

Defined in the domain layer so the domain never depends on
infrastructure.  Writes are conditional on the stored ``version`` so a
stale read can never overwrite a newer state.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from stockledger.domain.model.stock_record import StockRecord


class StockRecordRepository(ABC):

    @abstractmethod
    def get(self, product_id: str, branch_id: str) -> StockRecord | None:
        """Return the record for a (product, branch) pair, or None."""

    @abstractmethod
    def get_by_id(self, stock_record_id: str) -> StockRecord | None:
        """Return a record by its id, or None."""

    @abstractmethod
    def list_all(self, branch_id: str | None = None) -> list[StockRecord]:
        """Return every record, optionally limited to one branch."""

    @abstractmethod
    def add(self, record: StockRecord) -> bool:
        """Insert a new record.

        Returns False, without writing, if the (product, branch) pair
        already has a record.
        """

    @abstractmethod
    def save_if_version(self, record: StockRecord, expected_version: int) -> bool:
        """Replace the stored record if its version still equals
        ``expected_version``.  Returns False when another writer got there
        first.
        """
