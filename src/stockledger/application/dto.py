"""Data Transfer Objects — plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass

from stockledger.domain.model.movement import Movement
from stockledger.domain.model.stock_record import ProductStock, StockRecord
from stockledger.domain.model.transfer import StockTransfer

_TIME_FORMAT = "%Y-%m-%d %H:%M UTC"


@dataclass(frozen=True)
class StockRecordDTO:
    id: str
    product_id: str
    branch_id: str
    quantity: int
    reserved: int
    available: int
    reorder_point: int
    reorder_quantity: int
    cost_price: str
    selling_price: str
    status: str
    supplier_ref: str | None
    location: str | None
    last_restocked: str | None


@dataclass(frozen=True)
class ProductStockDTO:
    product_id: str
    total_quantity: int
    total_reserved: int
    total_available: int
    branches: list[StockRecordDTO]


@dataclass(frozen=True)
class MovementDTO:
    movement_id: str
    product_id: str
    branch_id: str
    type: str
    change: str  # signed, e.g. "+20"
    before: int
    after: int
    reason: str | None
    reference: str | None
    performed_by: str
    created_at: str


@dataclass(frozen=True)
class TransferDTO:
    transfer_id: str
    product_id: str
    from_branch_id: str
    to_branch_id: str
    quantity: int
    status: str
    requested_by: str
    shipped_by: str | None
    completed_by: str | None
    cancelled_by: str | None
    notes: str | None
    created_at: str


@dataclass(frozen=True)
class PageDTO:
    """Output: one page of a listing."""

    items: list
    page: int
    pages: int
    total: int


def stock_record_dto(record: StockRecord) -> StockRecordDTO:
    return StockRecordDTO(
        id=record.id,
        product_id=record.product_id,
        branch_id=record.branch_id,
        quantity=record.quantity,
        reserved=record.reserved_quantity,
        available=record.available,
        reorder_point=record.reorder_point,
        reorder_quantity=record.reorder_quantity,
        cost_price=str(record.cost_price),
        selling_price=str(record.selling_price),
        status=record.stock_status,
        supplier_ref=record.supplier_ref,
        location=record.location,
        last_restocked=(
            record.last_restocked_at.strftime(_TIME_FORMAT)
            if record.last_restocked_at
            else None
        ),
    )


def product_stock_dto(stock: ProductStock) -> ProductStockDTO:
    return ProductStockDTO(
        product_id=stock.product_id,
        total_quantity=stock.total_quantity,
        total_reserved=stock.total_reserved,
        total_available=stock.total_available,
        branches=[stock_record_dto(r) for r in stock.records],
    )


def movement_dto(movement: Movement) -> MovementDTO:
    return MovementDTO(
        movement_id=movement.movement_id,
        product_id=movement.product_id,
        branch_id=movement.branch_id,
        type=movement.type.value,
        change=movement.quantity_display,
        before=movement.quantity_before,
        after=movement.quantity_after,
        reason=movement.reason,
        reference=str(movement.reference) if movement.reference else None,
        performed_by=movement.performed_by,
        created_at=movement.created_at.strftime(_TIME_FORMAT),
    )


def transfer_dto(transfer: StockTransfer) -> TransferDTO:
    return TransferDTO(
        transfer_id=transfer.transfer_id,
        product_id=transfer.product_id,
        from_branch_id=transfer.from_branch_id,
        to_branch_id=transfer.to_branch_id,
        quantity=transfer.quantity,
        status=transfer.status.value,
        requested_by=transfer.requested_by,
        shipped_by=transfer.shipped_by,
        completed_by=transfer.completed_by,
        cancelled_by=transfer.cancelled_by,
        notes=transfer.notes,
        created_at=transfer.created_at.strftime(_TIME_FORMAT),
    )
