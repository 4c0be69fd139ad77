"""Application service: order listings (query).

Every caller only sees the orders it is a party to: wholesalers their own
purchases, suppliers the orders placed with them, transporters the orders
they carry either way.
"""

from __future__ import annotations

from tradeflow.application.dto import Actor, OrderDTO, to_order_dto
from tradeflow.application.order_workflow import require_role
from tradeflow.domain.model.status import ActorRole
from tradeflow.domain.repository.order_repository import OrderRepository
from tradeflow.domain.service.order_state_machine import OrderStateMachine


class ListOrdersHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, actor: Actor, status: str | None = None) -> list[OrderDTO]:
        wanted = OrderStateMachine.parse_status(status) if status else None
        return [
            to_order_dto(order)
            for order in self._order_repo.list_all()
            if order.is_visible_to(actor.role, actor.id)
            and (wanted is None or order.status is wanted)
        ]


class ListOpenReturnsHandler:
    """Return requests still waiting for a transporter to claim them."""

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, actor: Actor) -> list[OrderDTO]:
        require_role(actor, ActorRole.TRANSPORTER)
        return [to_order_dto(order) for order in self._order_repo.list_open_returns()]
