"""Abstract repository for the StockTransfer aggregate.

Status changes are conditional on the stored ``version``, the same way
stock records are, so two workers that both read a pending transfer
cannot both move it on.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from stockledger.domain.model.transfer import StockTransfer


class TransferRepository(ABC):

    @abstractmethod
    def next_sequence(self, year: int) -> int:
        """Reserve and return the next transfer number for ``year``."""

    @abstractmethod
    def get_by_id(self, transfer_id: str) -> StockTransfer | None:
        """Return a transfer by its id, or None if not found."""

    @abstractmethod
    def list_all(self) -> list[StockTransfer]:
        """Return every transfer, oldest first."""

    @abstractmethod
    def add(self, transfer: StockTransfer) -> None:
        """Insert a newly created transfer."""

    @abstractmethod
    def save_if_version(self, transfer: StockTransfer, expected_version: int) -> bool:
        """Replace the stored transfer if its version still equals
        ``expected_version``.  Returns False when another writer got there
        first.
        """
