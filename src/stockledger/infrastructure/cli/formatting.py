"""Shared table formatting for CLI output."""

from __future__ import annotations

import click

from stockledger.application.dto import (
    MovementDTO,
    PageDTO,
    ProductStockDTO,
    StockRecordDTO,
    TransferDTO,
)
from stockledger.domain.model.stock_record import StockStatus


def echo_stock_table(records: list[StockRecordDTO]) -> None:
    click.echo(
        f"{'Product':<14} {'Branch':<10} {'Qty':>6} {'Reserved':>9} "
        f"{'Available':>10} {'Reorder':>8}  Status"
    )
    click.echo("-" * 74)
    for r in records:
        click.echo(
            f"{r.product_id:<14} {r.branch_id:<10} {r.quantity:>6} {r.reserved:>9} "
            f"{r.available:>10} {r.reorder_point:>8}  {r.status}"
        )


def echo_stock_detail(record: StockRecordDTO) -> None:
    click.echo(f"Stock {record.product_id} @ {record.branch_id}  ({record.status})")
    click.echo(f"  Quantity:   {record.quantity}")
    click.echo(f"  Reserved:   {record.reserved}")
    click.echo(f"  Available:  {record.available}")
    click.echo(f"  Reorder:    at {record.reorder_point}, order {record.reorder_quantity}")
    click.echo(f"  Cost/Sell:  {record.cost_price} / {record.selling_price}")
    if record.supplier_ref:
        click.echo(f"  Supplier:   {record.supplier_ref}")
    if record.location:
        click.echo(f"  Location:   {record.location}")
    if record.last_restocked:
        click.echo(f"  Restocked:  {record.last_restocked}")


def echo_product_stock(stock: ProductStockDTO) -> None:
    click.echo(
        f"Product {stock.product_id}: {stock.total_quantity} on hand, "
        f"{stock.total_reserved} reserved, {stock.total_available} available "
        f"across {len(stock.branches)} branch(es)"
    )
    echo_stock_table(stock.branches)


def echo_status_counts(counts: dict[str, int]) -> None:
    click.echo(
        f"In stock: {counts[StockStatus.IN_STOCK]}  "
        f"Low: {counts[StockStatus.LOW_STOCK]}  "
        f"Out: {counts[StockStatus.OUT_OF_STOCK]}"
    )


def echo_movement_table(movements: list[MovementDTO]) -> None:
    click.echo(
        f"{'Movement':<16} {'Type':<18} {'Change':>7} {'Before':>7} {'After':>7}  Reference"
    )
    click.echo("-" * 78)
    for m in movements:
        click.echo(
            f"{m.movement_id:<16} {m.type:<18} {m.change:>7} {m.before:>7} {m.after:>7}  "
            f"{m.reference or m.reason or ''}"
        )


def echo_transfer(transfer: TransferDTO) -> None:
    click.echo(f"Transfer {transfer.transfer_id}  (status={transfer.status})")
    click.echo(
        f"  {transfer.quantity} x {transfer.product_id}: "
        f"{transfer.from_branch_id} -> {transfer.to_branch_id}"
    )
    click.echo(f"  Requested by {transfer.requested_by} at {transfer.created_at}")
    if transfer.shipped_by:
        click.echo(f"  Shipped by   {transfer.shipped_by}")
    if transfer.completed_by:
        click.echo(f"  Received by  {transfer.completed_by}")
    if transfer.cancelled_by:
        click.echo(f"  Cancelled by {transfer.cancelled_by}")
    if transfer.notes:
        click.echo(f"  Notes: {transfer.notes}")


def echo_transfer_table(transfers: list[TransferDTO]) -> None:
    click.echo(f"{'Transfer':<16} {'Product':<14} {'From':<10} {'To':<10} {'Qty':>5}  Status")
    click.echo("-" * 70)
    for t in transfers:
        click.echo(
            f"{t.transfer_id:<16} {t.product_id:<14} {t.from_branch_id:<10} "
            f"{t.to_branch_id:<10} {t.quantity:>5}  {t.status}"
        )


def echo_page_footer(page: PageDTO) -> None:
    click.echo(f"Page {page.page} of {page.pages}  ({page.total} total)")
