"""CLI commands for orders."""

from __future__ import annotations

import click

from salesledger.application.dto import OrderView
from salesledger.domain.exceptions import LedgerError
from salesledger.domain.model.order import OrderStatus
from salesledger.infrastructure.bootstrap import Services


def _display_order(view: OrderView, prices: dict) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order #{view.id}  (status={view.status})")
    click.echo(f"Client:   {view.client}")
    click.echo(f"Created:  {view.created_at}")
    click.echo()
    click.echo(f"  {'Product':<20} {'Qty':>5} {'Price':>10} {'Frozen':>10}")
    click.echo(f"  {'-'*48}")
    for key, qty in view.items.items():
        live = prices.get(key)
        frozen = view.frozen_prices.get(key)
        click.echo(
            f"  {key:<20} {qty:>5} {str(live) if live else 'n/a':>10} "
            f"{str(frozen) if frozen else '-':>10}"
        )
    click.echo(f"  {'-'*48}")
    click.echo(f"  {'Order Total':<27} {str(view.total):>21}")


@click.command("create")
@click.option("--client", required=True, help="Client name.")
@click.pass_obj
def order_create(services: Services, client: str) -> None:
    """Open a new order."""
    try:
        order_id = services.ledger.create(client)
    except LedgerError as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} created  (status=new)")


@click.command("add-item")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option("--product", required=True, help="Product name.")
@click.option("--qty", required=True, type=int, help="Quantity to add.")
@click.pass_obj
def order_add_item(services: Services, order_id: int, product: str, qty: int) -> None:
    """Add units of a product to an order (reserves stock)."""
    try:
        view = services.ledger.add_item(order_id, product, qty)
    except LedgerError as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id}: added {qty} x {product}  (total={view.total})")


@click.command("remove-item")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option("--product", required=True, help="Product name.")
@click.pass_obj
def order_remove_item(services: Services, order_id: int, product: str) -> None:
    """Remove a product from an order (returns stock)."""
    try:
        view = services.ledger.remove_item(order_id, product)
    except LedgerError as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id}: removed {product}  (total={view.total})")


@click.command("status")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option(
    "--set",
    "new_status",
    required=True,
    type=click.Choice([s.value for s in OrderStatus]),
    help="New status.",
)
@click.pass_obj
def order_status(services: Services, order_id: int, new_status: str) -> None:
    """Change the status of an order."""
    try:
        view = services.ledger.set_status(order_id, new_status)
    except LedgerError as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} is now {view.status}  (total={view.total})")


@click.command("show")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to display.")
@click.pass_obj
def order_show(services: Services, order_id: int) -> None:
    """Show details of an existing order."""
    try:
        view = services.ledger.get(order_id)
    except LedgerError as exc:
        raise click.ClickException(str(exc))

    _display_order(view, services.ledger.prices())


@click.command("list")
@click.pass_obj
def order_list(services: Services) -> None:
    """List all orders."""
    views = services.ledger.all()
    if not views:
        click.echo("No orders found.")
        return

    click.echo(f"{'ID':<6} {'Client':<20} {'Status':<12} {'Total':>10}  Created")
    click.echo("-" * 70)
    for v in views:
        click.echo(
            f"{v.id:<6} {v.client:<20} {v.status:<12} {str(v.total):>10}  {v.created_at}"
        )


@click.command("revenue")
@click.pass_obj
def order_revenue(services: Services) -> None:
    """Show revenue, overall and per status."""
    click.echo(f"{'Status':<12} {'Orders':>7} {'Revenue':>12}")
    click.echo("-" * 33)
    for row in services.ledger.status_summary():
        click.echo(f"{row.status:<12} {row.count:>7} {str(row.revenue):>12}")
    click.echo("-" * 33)
    click.echo(f"{'Total':<20} {str(services.ledger.revenue()):>12}")
