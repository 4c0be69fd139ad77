import click

from tradeflow.infrastructure.cli.order_commands import (
    order_assign,
    order_claim_return,
    order_create,
    order_delete,
    order_list,
    order_note,
    order_pricing,
    order_returns,
    order_show,
    order_status,
    order_timeline,
    order_transporter_status,
)
from tradeflow.infrastructure.cli.product_commands import product_add, product_list
from tradeflow.infrastructure.cli.stock_commands import stock_adjust, stock_set, stock_show
from tradeflow.infrastructure.config import get_settings
from tradeflow.infrastructure.logging_setup import configure_logging


@click.group()
def cli() -> None:
    """Tradeflow: wholesaler / supplier / transporter order lifecycle"""
    configure_logging(get_settings())


@cli.group()
def order() -> None:
    """Manage orders."""


@cli.group()
def product() -> None:
    """Manage products."""


@cli.group()
def stock() -> None:
    """Manage stock."""


@cli.command("serve")
def serve() -> None:
    """Run the HTTP API."""
    import uvicorn

    from tradeflow.infrastructure.api.app import create_app

    settings = get_settings()
    uvicorn.run(create_app(settings), host=settings.api_host, port=settings.api_port)


# Register subcommands
order.add_command(order_assign)
order.add_command(order_claim_return)
order.add_command(order_create)
order.add_command(order_delete)
order.add_command(order_list)
order.add_command(order_note)
order.add_command(order_pricing)
order.add_command(order_returns)
order.add_command(order_show)
order.add_command(order_status)
order.add_command(order_timeline)
order.add_command(order_transporter_status)
product.add_command(product_add)
product.add_command(product_list)
stock.add_command(stock_adjust)
stock.add_command(stock_set)
stock.add_command(stock_show)
