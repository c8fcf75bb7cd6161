"""Abstract repository for the append-only movement ledger."""

from __future__ import annotations

from abc import ABC, abstractmethod

from stockledger.domain.model.movement import Movement


class MovementRepository(ABC):

    @abstractmethod
    def next_sequence(self, year: int) -> int:
        """Reserve and return the next movement number for ``year``."""

    @abstractmethod
    def append(self, movement: Movement) -> None:
        """Persist a new movement.  Movements are never updated or deleted."""

    @abstractmethod
    def list_all(self) -> list[Movement]:
        """Return every movement in append order."""

    @abstractmethod
    def list_by_stock(self, stock_record_id: str) -> list[Movement]:
        """Return the movements of one stock record in append order."""
