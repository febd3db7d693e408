import logging
from pathlib import Path

import click

from salesledger.infrastructure.bootstrap import build_services
from salesledger.infrastructure.cli.order_commands import (
    order_add_item,
    order_create,
    order_list,
    order_remove_item,
    order_revenue,
    order_show,
    order_status,
)
from salesledger.infrastructure.cli.product_commands import (
    product_add,
    product_list,
    product_remove,
    product_update,
)
from salesledger.infrastructure.config import Settings


@click.group()
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory holding orders.txt and products.txt.",
)
@click.option("-v", "--verbose", is_flag=True, default=False, help="Log at INFO level.")
@click.pass_context
def cli(ctx: click.Context, data_dir: Path | None, verbose: bool) -> None:
    """Sales ledger for orders and catalog stock."""
    settings = Settings.from_env()
    if data_dir is not None:
        settings = Settings(data_dir=data_dir, log_level=settings.log_level)

    logging.basicConfig(
        level=logging.INFO if verbose else settings.log_level,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = build_services(settings)


@cli.group()
def order() -> None:
    """Manage orders."""


@cli.group()
def product() -> None:
    """Manage the product catalog."""


# Register subcommands
order.add_command(order_add_item)
order.add_command(order_create)
order.add_command(order_list)
order.add_command(order_remove_item)
order.add_command(order_revenue)
order.add_command(order_show)
order.add_command(order_status)
product.add_command(product_add)
product.add_command(product_list)
product.add_command(product_remove)
product.add_command(product_update)
