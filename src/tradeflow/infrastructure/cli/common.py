"""Options and parsing shared by the CLI command modules."""

from __future__ import annotations

import click

from tradeflow.application.dto import Actor
from tradeflow.domain.exceptions import ValidationError
from tradeflow.domain.service.order_state_machine import OrderStateMachine


def parse_actor(raw: str) -> Actor:
    """Parse 'supplier:s-42' into an Actor."""
    if ":" not in raw:
        raise click.BadParameter(f"Invalid actor '{raw}'. Expected 'ROLE:ID'.")
    role, actor_id = raw.split(":", 1)
    if not actor_id.strip():
        raise click.BadParameter(f"Invalid actor '{raw}'. The ID is empty.")
    try:
        return Actor(role=OrderStateMachine.parse_role(role), id=actor_id.strip())
    except ValidationError as exc:
        raise click.BadParameter(str(exc))


def _actor_callback(ctx: click.Context, param: click.Parameter, value: str) -> Actor:
    return parse_actor(value)


actor_option = click.option(
    "--as",
    "actor",
    required=True,
    callback=_actor_callback,
    help="Acting party as 'ROLE:ID', e.g. 'wholesaler:w-1'.",
)
