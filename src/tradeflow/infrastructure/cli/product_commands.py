"""CLI commands for the supplier product catalog."""

from __future__ import annotations

import click

from tradeflow.application.add_product import AddProductHandler, ListProductsHandler
from tradeflow.application.dto import Actor
from tradeflow.domain.exceptions import DomainException
from tradeflow.infrastructure.bootstrap import product_repository
from tradeflow.infrastructure.cli.common import actor_option


@click.command("add")
@actor_option
@click.option("--name", required=True, help="Product name.")
@click.option("--price", required=True, help="Selling price, e.g. '15.00'.")
@click.option("--cost", required=True, help="Production price.")
@click.option("--quantity", default=0, type=int, help="Initial stock.")
@click.option("--min-qty", default=1, type=int, help="Minimum order quantity.")
@click.option("--threshold", default=10, type=int, help="Low-stock threshold.")
def product_add(
    actor: Actor,
    name: str,
    price: str,
    cost: str,
    quantity: int,
    min_qty: int,
    threshold: int,
) -> None:
    """Add a product to a supplier's catalog."""
    handler = AddProductHandler(product_repo=product_repository())

    try:
        dto = handler.handle(
            actor,
            name=name,
            selling_price=price,
            production_price=cost,
            quantity=quantity,
            min_order_quantity=min_qty,
            low_stock_threshold=threshold,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product {dto.id} '{dto.name}' added (sku={dto.sku}, stock={dto.quantity})")


@click.command("list")
@click.option("--supplier", default=None, help="Only this supplier's products.")
def product_list(supplier: str | None) -> None:
    """List products."""
    handler = ListProductsHandler(product_repo=product_repository())
    products = handler.handle(supplier_id=supplier)

    if not products:
        click.echo("No products found.")
        return

    click.echo(
        f"{'ID':>4}  {'Name':<20} {'Supplier':<12} {'Price':>10} {'Stock':>6} {'Value':>12}"
    )
    click.echo("-" * 71)
    for p in products:
        click.echo(
            f"{p.id:>4}  {p.name:<20} {p.supplier_id:<12} {p.selling_price:>10} "
            f"{p.quantity:>6} {p.stock_value:>12}"
        )
