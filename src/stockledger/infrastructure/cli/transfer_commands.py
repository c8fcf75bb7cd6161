"""CLI commands for inter-branch stock transfers."""

from __future__ import annotations

import click

from stockledger.application.manage_transfer import (
    CreateTransferHandler,
    UpdateTransferStatusHandler,
)
from stockledger.application.show_transfers import ListTransfersHandler, ShowTransferHandler
from stockledger.config import Settings
from stockledger.domain.exceptions import DomainException
from stockledger.infrastructure.bootstrap import services
from stockledger.infrastructure.cli.formatting import (
    echo_page_footer,
    echo_transfer,
    echo_transfer_table,
)


@click.command("create")
@click.option("--product", required=True, help="Product ID.")
@click.option("--from", "from_branch", required=True, help="Source branch ID.")
@click.option("--to", "to_branch", required=True, help="Destination branch ID.")
@click.option("--quantity", required=True, type=int, help="Units to move.")
@click.option("--actor", required=True, help="ID of the requesting user.")
@click.option("--notes", default=None, help="Free-text notes.")
@click.pass_obj
def transfer_create(
    settings: Settings,
    product: str,
    from_branch: str,
    to_branch: str,
    quantity: int,
    actor: str,
    notes: str | None,
) -> None:
    """Request a transfer (reserves stock at the source)."""
    handler = CreateTransferHandler(services(settings).transfers)

    try:
        dto = handler.handle(product, from_branch, to_branch, quantity, actor, notes=notes)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Transfer {dto.transfer_id} created  (status={dto.status})")


def _transition(settings: Settings, transfer_id: str, action: str, actor: str) -> None:
    handler = UpdateTransferStatusHandler(services(settings).transfers)

    try:
        dto = handler.handle(transfer_id, action, actor)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Transfer {dto.transfer_id} is now {dto.status}.")


@click.command("ship")
@click.option("--id", "transfer_id", required=True, help="Transfer ID.")
@click.option("--actor", required=True, help="ID of the shipping user.")
@click.pass_obj
def transfer_ship(settings: Settings, transfer_id: str, actor: str) -> None:
    """Ship a pending transfer (debits the source branch)."""
    _transition(settings, transfer_id, "ship", actor)


@click.command("complete")
@click.option("--id", "transfer_id", required=True, help="Transfer ID.")
@click.option("--actor", required=True, help="ID of the receiving user.")
@click.pass_obj
def transfer_complete(settings: Settings, transfer_id: str, actor: str) -> None:
    """Receive an in-transit transfer (credits the destination branch)."""
    _transition(settings, transfer_id, "complete", actor)


@click.command("cancel")
@click.option("--id", "transfer_id", required=True, help="Transfer ID.")
@click.option("--actor", required=True, help="ID of the cancelling user.")
@click.pass_obj
def transfer_cancel(settings: Settings, transfer_id: str, actor: str) -> None:
    """Cancel a pending or in-transit transfer (returns stock to the source)."""
    _transition(settings, transfer_id, "cancel", actor)


@click.command("show")
@click.option("--id", "transfer_id", required=True, help="Transfer ID.")
@click.pass_obj
def transfer_show(settings: Settings, transfer_id: str) -> None:
    """Show one transfer."""
    handler = ShowTransferHandler(services(settings).transfers)

    try:
        dto = handler.handle(transfer_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    echo_transfer(dto)


@click.command("list")
@click.option("--branch", default=None, help="Source or destination branch.")
@click.option(
    "--status",
    type=click.Choice(["pending", "in-transit", "completed", "cancelled"]),
    default=None,
    help="Only transfers in this status.",
)
@click.option("--page", type=int, default=1, help="Page number.")
@click.option("--limit", type=int, default=None, help="Rows per page.")
@click.pass_obj
def transfer_list(
    settings: Settings, branch: str | None, status: str | None, page: int, limit: int | None
) -> None:
    """List transfers, newest first."""
    handler = ListTransfersHandler(services(settings).transfers)

    try:
        result = handler.handle(
            branch_id=branch, status=status, page=page, limit=limit or settings.page_limit
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not result.items:
        click.echo("No transfers found.")
        return
    echo_transfer_table(result.items)
    echo_page_footer(result)
