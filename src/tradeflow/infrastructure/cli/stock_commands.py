"""CLI commands for stock management."""

from __future__ import annotations

import click

from tradeflow.application.dto import Actor
from tradeflow.application.set_stock import AdjustStockHandler, SetStockHandler
from tradeflow.application.show_stock import ShowStockHandler
from tradeflow.domain.exceptions import DomainException
from tradeflow.infrastructure.bootstrap import product_repository
from tradeflow.infrastructure.cli.common import actor_option


@click.command("set")
@actor_option
@click.option("--product", "product_id", required=True, help="Product ID.")
@click.option("--quantity", required=True, type=int, help="Quantity on hand.")
def stock_set(actor: Actor, product_id: str, quantity: int) -> None:
    """Overwrite the stock level of a product."""
    handler = SetStockHandler(product_repo=product_repository())

    try:
        dto = handler.handle(product_id, actor, quantity)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Stock for '{dto.name}' set to {dto.quantity}")


@click.command("adjust")
@actor_option
@click.option("--product", "product_id", required=True, help="Product ID.")
@click.option(
    "--op",
    "operation",
    required=True,
    type=click.Choice(["increase", "decrease"]),
)
@click.option("--quantity", required=True, type=int)
def stock_adjust(actor: Actor, product_id: str, operation: str, quantity: int) -> None:
    """Increase or decrease the stock of a product."""
    handler = AdjustStockHandler(product_repo=product_repository())

    try:
        dto = handler.handle(product_id, actor, operation, quantity)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Stock for '{dto.name}' is now {dto.quantity}")


@click.command("show")
@click.option("--supplier", default=None, help="Only this supplier's products.")
@click.option("--product", "product_id", default=None, help="Only this product.")
def stock_show(supplier: str | None, product_id: str | None) -> None:
    """Show current stock levels."""
    handler = ShowStockHandler(product_repo=product_repository())
    if product_id:
        try:
            lines = [handler.for_product(product_id)]
        except DomainException as exc:
            raise click.ClickException(str(exc))
    else:
        lines = handler.handle(supplier_id=supplier)

    if not lines:
        click.echo("No products found.")
        return

    click.echo(f"{'Product':<20} {'Stock':>8} {'Threshold':>10} {'Low':>5}  Last update")
    click.echo("-" * 72)
    for line in lines:
        low = "yes" if line.low_stock_alert else ""
        click.echo(
            f"{line.product_name:<20} {line.quantity:>8} {line.low_stock_threshold:>10} "
            f"{low:>5}  {line.last_stock_update or '-'}"
        )
