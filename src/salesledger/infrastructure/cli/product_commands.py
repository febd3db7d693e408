"""CLI commands for the product catalog.

After any catalog change the ledger's live prices are refreshed and the
orders holding the product are recalculated.
"""

from __future__ import annotations

import click

from salesledger.domain.exceptions import LedgerError
from salesledger.infrastructure.bootstrap import Services


def _resync(services: Services, *names: str) -> None:
    services.ledger.sync_prices()
    for name in names:
        services.ledger.recalculate_for_product(name)


@click.command("add")
@click.option("--name", required=True, help="Product name.")
@click.option("--price", required=True, help="Price (e.g. 15.00).")
@click.option("--stock", default=0, show_default=True, type=int, help="Units in stock.")
@click.pass_obj
def product_add(services: Services, name: str, price: str, stock: int) -> None:
    """Add a new product to the catalog."""
    try:
        view = services.catalog.add(name, price, stock)
        _resync(services, name)
    except LedgerError as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product '{view.name}' added at {view.price} (stock {view.stock})")


@click.command("list")
@click.pass_obj
def product_list(services: Services) -> None:
    """List all products in the catalog."""
    products = services.catalog.all()

    if not products:
        click.echo("No products found.")
        return

    click.echo(f"{'Name':<20} {'Price':>10} {'Stock':>8}")
    click.echo("-" * 40)
    for p in products:
        click.echo(f"{p.name:<20} {str(p.price):>10} {p.stock:>8}")


@click.command("update")
@click.option("--name", required=True, help="Current product name.")
@click.option("--new-name", default=None, help="New product name.")
@click.option("--price", required=True, help="New price (e.g. 29.99).")
@click.option("--stock", default=None, type=int, help="New stock level.")
@click.pass_obj
def product_update(
    services: Services,
    name: str,
    new_name: str | None,
    price: str,
    stock: int | None,
) -> None:
    """Rename and/or reprice a product."""
    target = new_name or name
    try:
        view = services.catalog.rename_and_reprice(name, target, price, stock)
        _resync(services, name, target)
    except LedgerError as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product '{view.name}' updated to {view.price} (stock {view.stock})")


@click.command("remove")
@click.option("--name", required=True, help="Product name.")
@click.option(
    "--cancel-orders",
    is_flag=True,
    default=False,
    help="Cancel active orders that hold the product first.",
)
@click.pass_obj
def product_remove(services: Services, name: str, cancel_orders: bool) -> None:
    """Remove a product from the catalog."""
    try:
        in_use = services.ledger.orders_using_product(name)
        if in_use and not cancel_orders:
            raise click.ClickException(
                f"Product '{name}' is used by active orders "
                f"{', '.join(f'#{i}' for i in in_use)}; pass --cancel-orders"
            )
        canceled = services.ledger.cancel_orders_using_product(name) if cancel_orders else []
        services.catalog.remove(name)
        services.ledger.sync_prices()
        services.ledger.save()
    except LedgerError as exc:
        raise click.ClickException(str(exc))

    if canceled:
        click.echo(f"Product '{name}' removed. {len(canceled)} order(s) were canceled.")
    else:
        click.echo(f"Product '{name}' removed.")
