from __future__ import annotations

from pathlib import Path

import click

from stockledger.config import get_settings
from stockledger.infrastructure.cli.movement_commands import movement_list
from stockledger.infrastructure.cli.stock_commands import (
    stock_adjust,
    stock_commit,
    stock_list,
    stock_low,
    stock_out,
    stock_product,
    stock_release,
    stock_reserve,
    stock_restock,
    stock_return,
    stock_settings,
    stock_show,
)
from stockledger.infrastructure.cli.transfer_commands import (
    transfer_cancel,
    transfer_complete,
    transfer_create,
    transfer_list,
    transfer_ship,
    transfer_show,
)
from stockledger.logging_setup import configure_logging


@click.group()
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory holding the ledger files (overrides STOCKLEDGER_DATA_DIR).",
)
@click.option("--log-level", default=None, help="Logging level, e.g. INFO or DEBUG.")
@click.pass_context
def cli(ctx: click.Context, data_dir: Path | None, log_level: str | None) -> None:
    """Stock Ledger — branch stock, movements and transfers"""
    settings = get_settings()
    if data_dir is not None:
        settings = settings.model_copy(update={"data_dir": data_dir})
    try:
        configure_logging(log_level or settings.log_level)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--log-level")
    ctx.obj = settings


@cli.group()
def stock() -> None:
    """Manage branch stock."""


@cli.group()
def transfer() -> None:
    """Manage inter-branch transfers."""


@cli.group()
def movement() -> None:
    """Browse the movement ledger."""


# Register subcommands
stock.add_command(stock_adjust)
stock.add_command(stock_commit)
stock.add_command(stock_list)
stock.add_command(stock_low)
stock.add_command(stock_out)
stock.add_command(stock_product)
stock.add_command(stock_release)
stock.add_command(stock_reserve)
stock.add_command(stock_restock)
stock.add_command(stock_return)
stock.add_command(stock_settings)
stock.add_command(stock_show)
transfer.add_command(transfer_cancel)
transfer.add_command(transfer_complete)
transfer.add_command(transfer_create)
transfer.add_command(transfer_list)
transfer.add_command(transfer_ship)
transfer.add_command(transfer_show)
movement.add_command(movement_list)
