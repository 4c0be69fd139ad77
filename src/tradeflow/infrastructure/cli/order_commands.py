"""CLI commands for the Order aggregate."""

from __future__ import annotations

from datetime import datetime

import click

from tradeflow.application.add_order_note import AddOrderNoteHandler
from tradeflow.application.assign_transporter import AssignTransporterHandler
from tradeflow.application.change_order_status import ChangeOrderStatusHandler
from tradeflow.application.claim_return import ClaimReturnHandler
from tradeflow.application.create_order import CreateOrderHandler
from tradeflow.application.delete_order import DeleteOrderHandler
from tradeflow.application.dto import Actor, OrderDTO, OrderItemSpec, ShippingAddressSpec
from tradeflow.application.list_orders import ListOpenReturnsHandler, ListOrdersHandler
from tradeflow.application.order_workflow import require_role
from tradeflow.application.set_order_pricing import SetOrderPricingHandler
from tradeflow.application.show_order import ShowOrderHandler
from tradeflow.application.transporter_status import TransporterStatusHandler
from tradeflow.domain.exceptions import DomainException
from tradeflow.domain.model.status import ActorRole
from tradeflow.infrastructure.bootstrap import order_repository, product_repository
from tradeflow.infrastructure.cli.common import actor_option


def _parse_items(raw: str) -> list[OrderItemSpec]:
    """Parse '1:3,2:5' (productId:quantity) into an OrderItemSpec list."""
    specs: list[OrderItemSpec] = []
    for pair in raw.split(","):
        pair = pair.strip()
        if ":" not in pair:
            raise click.BadParameter(
                f"Invalid item format '{pair}'. Expected 'ProductId:Quantity'."
            )
        product_id, qty_str = pair.rsplit(":", 1)
        try:
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(
                f"Invalid quantity '{qty_str}' for product '{product_id}'."
            )
        specs.append(OrderItemSpec(product_id=product_id.strip(), quantity=qty))
    return specs


def _display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order #{dto.id} {dto.order_number}  (status={dto.status}, v{dto.version})")
    click.echo(f"Wholesaler: {dto.wholesaler_id}   Supplier: {dto.supplier_id}")
    click.echo(f"Ship to:    {dto.shipping_address}")
    if dto.assigned_transporter_id:
        click.echo(f"Transporter: {dto.assigned_transporter_id}")
    if dto.return_transporter_id:
        click.echo(f"Return transporter: {dto.return_transporter_id}")
    click.echo(f"Created:    {dto.created_at}")
    click.echo()
    click.echo(f"  {'Product':<20} {'Qty':>5} {'Price':>10} {'Total':>10}")
    click.echo(f"  {'-'*47}")
    for item in dto.items:
        click.echo(
            f"  {item.product_name:<20} {item.quantity:>5} {item.unit_price:>10} {item.line_total:>10}"
        )
    click.echo(f"  {'-'*47}")
    click.echo(f"  {'Total':<27} {dto.total_amount:>20}")
    click.echo(f"  {'Discounts':<27} {dto.discounts:>20}")
    click.echo(f"  {'Tax':<27} {dto.tax_amount:>20}")
    click.echo(f"  {'Final Amount':<27} {dto.final_amount:>20}")
    if dto.notes:
        click.echo()
        for note in dto.notes:
            click.echo(f"  {note}")


@click.command("create")
@actor_option
@click.option("--supplier", required=True, help="Supplier ID.")
@click.option("--items", required=True, help="Items as 'ProductId:Qty,ProductId:Qty'.")
@click.option("--street", required=True)
@click.option("--city", required=True)
@click.option("--country", required=True)
@click.option("--state", default=None)
@click.option("--postal-code", default=None)
@click.option("--notes", default="", help="Free-text order notes.")
def order_create(
    actor: Actor,
    supplier: str,
    items: str,
    street: str,
    city: str,
    country: str,
    state: str | None,
    postal_code: str | None,
    notes: str,
) -> None:
    """Place a new purchase order (reserves stock)."""
    specs = _parse_items(items)

    handler = CreateOrderHandler(
        order_repo=order_repository(),
        product_repo=product_repository(),
    )

    try:
        require_role(actor, ActorRole.WHOLESALER)
        dto = handler.handle(
            wholesaler_id=actor.id,
            supplier_id=supplier,
            item_specs=specs,
            shipping_address=ShippingAddressSpec(
                street=street, city=city, country=country,
                state=state, postal_code=postal_code,
            ),
            order_notes=notes,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{dto.id} created")
    _display_order(dto)


@click.command("show")
@actor_option
@click.option("--id", "order_id", required=True, type=int, help="Order ID to display.")
def order_show(actor: Actor, order_id: int) -> None:
    """Show details of an existing order."""
    handler = ShowOrderHandler(order_repo=order_repository())

    try:
        dto = handler.handle(order_id, actor)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


@click.command("list")
@actor_option
@click.option("--status", default=None, help="Only orders in this status.")
def order_list(actor: Actor, status: str | None) -> None:
    """List the orders the acting party is involved in."""
    handler = ListOrdersHandler(order_repo=order_repository())

    try:
        orders = handler.handle(actor, status=status)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not orders:
        click.echo("No orders found.")
        return

    click.echo(f"{'ID':>4}  {'Number':<20} {'Status':<24} {'Final':>12}")
    click.echo("-" * 64)
    for dto in orders:
        click.echo(f"{dto.id:>4}  {dto.order_number:<20} {dto.status:<24} {dto.final_amount:>12}")


@click.command("returns")
@actor_option
def order_returns(actor: Actor) -> None:
    """List return requests no transporter has claimed yet."""
    handler = ListOpenReturnsHandler(order_repo=order_repository())

    try:
        orders = handler.handle(actor)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not orders:
        click.echo("No open return requests.")
        return
    for dto in orders:
        click.echo(f"#{dto.id} {dto.order_number}  {dto.shipping_address}  ({dto.return_reason})")


@click.command("status")
@actor_option
@click.option("--id", "order_id", required=True, type=int)
@click.option("--to", "status", required=True, help="Requested status.")
@click.option("--reason", default=None)
@click.option("--transporter", default=None, help="Transporter ID (assigned_to_transporter).")
def order_status(
    actor: Actor,
    order_id: int,
    status: str,
    reason: str | None,
    transporter: str | None,
) -> None:
    """Change an order's status as its wholesaler or supplier."""
    handler = ChangeOrderStatusHandler(
        order_repo=order_repository(),
        product_repo=product_repository(),
    )

    try:
        dto = handler.handle(
            order_id, actor, status, reason=reason, transporter_id=transporter
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{dto.id} is now {dto.status}.")


@click.command("assign")
@actor_option
@click.option("--id", "order_id", required=True, type=int)
@click.option("--transporter", required=True, help="Transporter ID.")
@click.option("--notes", default=None)
@click.option("--eta", type=click.DateTime(), default=None, help="Estimated delivery date.")
def order_assign(
    actor: Actor,
    order_id: int,
    transporter: str,
    notes: str | None,
    eta: datetime | None,
) -> None:
    """Assign a ready order to a delivery transporter."""
    handler = AssignTransporterHandler(
        order_repo=order_repository(),
        product_repo=product_repository(),
    )

    try:
        dto = handler.handle(
            order_id, actor, transporter, notes=notes, estimated_delivery_date=eta
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{dto.id} assigned to transporter {dto.assigned_transporter_id}.")


@click.command("claim-return")
@actor_option
@click.option("--id", "order_id", required=True, type=int)
def order_claim_return(actor: Actor, order_id: int) -> None:
    """Claim an open return request as a transporter."""
    handler = ClaimReturnHandler(
        order_repo=order_repository(),
        product_repo=product_repository(),
    )

    try:
        dto = handler.handle(order_id, actor)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Return of order #{dto.id} accepted by {dto.return_transporter_id}.")


@click.command("transporter-status")
@actor_option
@click.option("--id", "order_id", required=True, type=int)
@click.option("--to", "status", required=True, help="Requested status.")
@click.option("--notes", default=None)
def order_transporter_status(
    actor: Actor,
    order_id: int,
    status: str,
    notes: str | None,
) -> None:
    """Advance a delivery or return trip as its transporter."""
    handler = TransporterStatusHandler(
        order_repo=order_repository(),
        product_repo=product_repository(),
    )

    try:
        dto = handler.handle(order_id, actor, status, notes=notes)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{dto.id} is now {dto.status}.")


@click.command("pricing")
@actor_option
@click.option("--id", "order_id", required=True, type=int)
@click.option("--discounts", default="0")
@click.option("--tax", default="0")
def order_pricing(actor: Actor, order_id: int, discounts: str, tax: str) -> None:
    """Set discounts and tax before production starts."""
    handler = SetOrderPricingHandler(order_repo=order_repository())

    try:
        dto = handler.handle(order_id, actor, discounts=discounts, tax_amount=tax)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{dto.id} final amount: {dto.final_amount}")


@click.command("note")
@actor_option
@click.option("--id", "order_id", required=True, type=int)
@click.option("--text", required=True)
def order_note(actor: Actor, order_id: int, text: str) -> None:
    """Append a note to an order."""
    handler = AddOrderNoteHandler(order_repo=order_repository())

    try:
        handler.handle(order_id, actor, text)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Note added to order #{order_id}.")


@click.command("delete")
@actor_option
@click.option("--id", "order_id", required=True, type=int)
def order_delete(actor: Actor, order_id: int) -> None:
    """Delete a pending order (restores its stock)."""
    handler = DeleteOrderHandler(
        order_repo=order_repository(),
        product_repo=product_repository(),
    )

    try:
        handler.handle(order_id, actor)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} deleted.")


@click.command("timeline")
@actor_option
@click.option("--id", "order_id", required=True, type=int)
def order_timeline(actor: Actor, order_id: int) -> None:
    """Show an order's status history."""
    handler = ShowOrderHandler(order_repo=order_repository())

    try:
        entries = handler.timeline(order_id, actor)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    for entry in entries:
        source = entry.from_status or "-"
        line = f"{entry.timestamp}  {source:>24} -> {entry.to_status:<24} {entry.actor_role}"
        if entry.reason:
            line += f"  ({entry.reason})"
        click.echo(line)
