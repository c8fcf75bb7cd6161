"""CLI commands for the movement ledger."""

from __future__ import annotations

from datetime import datetime, timezone

import click

from stockledger.application.show_movements import ListMovementsHandler
from stockledger.config import Settings
from stockledger.domain.exceptions import DomainException
from stockledger.infrastructure.bootstrap import services
from stockledger.infrastructure.cli.formatting import echo_movement_table, echo_page_footer


def _as_utc(value: datetime | None) -> datetime | None:
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


@click.command("list")
@click.option("--type", "movement_type", default=None, help="Movement type, e.g. restock.")
@click.option("--branch", default=None, help="Branch ID.")
@click.option("--product", default=None, help="Product ID.")
@click.option("--since", type=click.DateTime(), default=None, help="Start date (UTC).")
@click.option("--until", type=click.DateTime(), default=None, help="End date (UTC).")
@click.option("--page", type=int, default=1, help="Page number.")
@click.option("--limit", type=int, default=None, help="Rows per page.")
@click.pass_obj
def movement_list(
    settings: Settings,
    movement_type: str | None,
    branch: str | None,
    product: str | None,
    since: datetime | None,
    until: datetime | None,
    page: int,
    limit: int | None,
) -> None:
    """List stock movements in the order they happened."""
    handler = ListMovementsHandler(services(settings).ledger)

    try:
        result = handler.handle(
            movement_type=movement_type,
            branch_id=branch,
            product_id=product,
            start=_as_utc(since),
            end=_as_utc(until),
            page=page,
            limit=limit or settings.page_limit,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not result.items:
        click.echo("No movements found.")
        return
    echo_movement_table(result.items)
    echo_page_footer(result)
