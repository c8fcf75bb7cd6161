"""CLI commands for branch stock."""

from __future__ import annotations

import click

from stockledger.application.adjust_stock import AdjustStockHandler, UpdateThresholdsHandler
from stockledger.application.reserve_stock import (
    CommitStockHandler,
    ReleaseStockHandler,
    ReserveStockHandler,
    ReverseSaleHandler,
)
from stockledger.application.restock_stock import RestockHandler
from stockledger.application.show_stock import (
    ListStockHandler,
    LowStockHandler,
    ProductStockHandler,
    ShowStockHandler,
    StockStatusHandler,
)
from stockledger.config import Settings
from stockledger.domain.exceptions import DomainException
from stockledger.infrastructure.bootstrap import services
from stockledger.infrastructure.cli.formatting import (
    echo_movement_table,
    echo_page_footer,
    echo_product_stock,
    echo_status_counts,
    echo_stock_detail,
    echo_stock_table,
)

product_option = click.option("--product", required=True, help="Product ID.")
branch_option = click.option("--branch", required=True, help="Branch ID.")
actor_option = click.option("--actor", required=True, help="ID of the user performing the action.")


@click.command("restock")
@product_option
@branch_option
@click.option("--quantity", required=True, type=int, help="Units received.")
@actor_option
@click.option("--cost", default=None, help="Cost price (e.g. 10.00).")
@click.option("--price", default=None, help="Selling price (e.g. 15.00).")
@click.option("--supplier", default=None, help="Supplier ID.")
@click.option("--location", default=None, help="Shelf or bin location.")
@click.option("--reorder-point", type=int, default=None, help="Low-stock threshold.")
@click.option("--reorder-quantity", type=int, default=None, help="Suggested reorder size.")
@click.option("--notes", default=None, help="Free-text notes.")
@click.pass_obj
def stock_restock(
    settings: Settings,
    product: str,
    branch: str,
    quantity: int,
    actor: str,
    cost: str | None,
    price: str | None,
    supplier: str | None,
    location: str | None,
    reorder_point: int | None,
    reorder_quantity: int | None,
    notes: str | None,
) -> None:
    """Receive stock at a branch."""
    handler = RestockHandler(services(settings).adjustments)

    try:
        _, movement = handler.handle(
            product, branch, quantity, actor,
            cost_price=cost,
            selling_price=price,
            supplier_ref=supplier,
            location=location,
            reorder_point=reorder_point,
            reorder_quantity=reorder_quantity,
            notes=notes,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"Added {quantity} units of {product} at {branch} "
        f"({movement.before} -> {movement.after}, {movement.movement_id})"
    )


@click.command("adjust")
@product_option
@branch_option
@click.option("--delta", required=True, type=int, help="Signed change, e.g. -3 or 5.")
@click.option("--reason", required=True, help="Why the quantity changed (damaged, lost, ...).")
@actor_option
@click.option("--notes", default=None, help="Free-text notes.")
@click.pass_obj
def stock_adjust(
    settings: Settings,
    product: str,
    branch: str,
    delta: int,
    reason: str,
    actor: str,
    notes: str | None,
) -> None:
    """Apply a manual correction to on-hand quantity."""
    handler = AdjustStockHandler(services(settings).adjustments)

    try:
        _, movement = handler.handle(product, branch, delta, reason, actor, notes=notes)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"Adjusted {product} at {branch} by {movement.change} "
        f"({movement.before} -> {movement.after}, {movement.movement_id})"
    )


@click.command("settings")
@product_option
@branch_option
@click.option("--reorder-point", type=int, default=None, help="Low-stock threshold.")
@click.option("--reorder-quantity", type=int, default=None, help="Suggested reorder size.")
@click.option("--location", default=None, help="Shelf or bin location.")
@click.pass_obj
def stock_settings(
    settings: Settings,
    product: str,
    branch: str,
    reorder_point: int | None,
    reorder_quantity: int | None,
    location: str | None,
) -> None:
    """Change reorder thresholds or location (no quantity change)."""
    handler = UpdateThresholdsHandler(services(settings).adjustments)

    try:
        record = handler.handle(
            product, branch,
            reorder_point=reorder_point,
            reorder_quantity=reorder_quantity,
            location=location,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    echo_stock_detail(record)


@click.command("reserve")
@product_option
@branch_option
@click.option("--quantity", required=True, type=int, help="Units to reserve.")
@click.pass_obj
def stock_reserve(settings: Settings, product: str, branch: str, quantity: int) -> None:
    """Reserve available stock for an open order."""
    handler = ReserveStockHandler(services(settings).reservations)

    try:
        record = handler.handle(product, branch, quantity)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Reserved {quantity} units of {product} at {branch} ({record.available} available)")


@click.command("release")
@product_option
@branch_option
@click.option("--quantity", required=True, type=int, help="Units to release.")
@click.pass_obj
def stock_release(settings: Settings, product: str, branch: str, quantity: int) -> None:
    """Release a reservation (order cancelled before fulfillment)."""
    handler = ReleaseStockHandler(services(settings).reservations)

    try:
        record = handler.handle(product, branch, quantity)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Released {quantity} units of {product} at {branch} ({record.available} available)")


@click.command("commit")
@product_option
@branch_option
@click.option("--quantity", required=True, type=int, help="Units consumed.")
@click.option("--reference", required=True, help="Originating order, e.g. 'SalesOrder:SO-1001'.")
@actor_option
@click.pass_obj
def stock_commit(
    settings: Settings, product: str, branch: str, quantity: int, reference: str, actor: str
) -> None:
    """Turn a reservation into a sale or service deduction."""
    handler = CommitStockHandler(services(settings).reservations)

    try:
        _, movement = handler.handle(product, branch, quantity, reference, actor)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"Committed {quantity} units of {product} at {branch} as {movement.type} "
        f"({movement.movement_id})"
    )


@click.command("return")
@product_option
@branch_option
@click.option("--quantity", required=True, type=int, help="Units returned.")
@click.option("--reference", required=True, help="Originating order, e.g. 'SalesOrder:SO-1001'.")
@actor_option
@click.option("--reason", default=None, help="Why the order was reversed.")
@click.pass_obj
def stock_return(
    settings: Settings,
    product: str,
    branch: str,
    quantity: int,
    reference: str,
    actor: str,
    reason: str | None,
) -> None:
    """Return units of a cancelled, already committed order to stock."""
    handler = ReverseSaleHandler(services(settings).reservations)

    try:
        _, movement = handler.handle(
            product, branch, quantity, reference, actor, reason=reason
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"Returned {quantity} units of {product} at {branch} ({movement.movement_id})"
    )


@click.command("show")
@product_option
@branch_option
@click.option("--page", type=int, default=1, help="History page.")
@click.option("--limit", type=int, default=None, help="Movements per page.")
@click.pass_obj
def stock_show(
    settings: Settings, product: str, branch: str, page: int, limit: int | None
) -> None:
    """Show one stock record and its movement history."""
    ledger = services(settings)
    handler = ShowStockHandler(ledger.store, ledger.ledger)

    try:
        record, history = handler.handle(
            product, branch, page=page, limit=limit or settings.page_limit
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    echo_stock_detail(record)
    click.echo()
    if not history.items:
        click.echo("No movements recorded.")
        return
    echo_movement_table(history.items)
    echo_page_footer(history)


@click.command("list")
@click.option("--branch", default=None, help="Only this branch.")
@click.pass_obj
def stock_list(settings: Settings, branch: str | None) -> None:
    """List stock records."""
    records = ListStockHandler(services(settings).store).handle(branch)

    if not records:
        click.echo("No stock records found.")
        return
    echo_stock_table(records)


@click.command("product")
@product_option
@click.pass_obj
def stock_product(settings: Settings, product: str) -> None:
    """Show one product's stock across all branches."""
    handler = ProductStockHandler(services(settings).store)

    try:
        stock = handler.handle(product)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    echo_product_stock(stock)


@click.command("low")
@click.option("--branch", default=None, help="Only this branch.")
@click.pass_obj
def stock_low(settings: Settings, branch: str | None) -> None:
    """List records at or below their reorder point."""
    ledger = services(settings)
    records = LowStockHandler(ledger.monitor).handle(branch)

    if records:
        echo_stock_table(records)
    else:
        click.echo("No low-stock items.")
    echo_status_counts(StockStatusHandler(ledger.monitor).handle(branch))


@click.command("out")
@click.option("--branch", default=None, help="Only this branch.")
@click.pass_obj
def stock_out(settings: Settings, branch: str | None) -> None:
    """List records with nothing on hand."""
    records = LowStockHandler(services(settings).monitor).handle(branch, out_of_stock_only=True)

    if not records:
        click.echo("No out-of-stock items.")
        return
    echo_stock_table(records)
