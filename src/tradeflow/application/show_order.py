"""Application service: Show Order and Order Timeline use cases (query)."""

from __future__ import annotations

from tradeflow.application.dto import Actor, OrderDTO, TimelineEntryDTO, to_order_dto
from tradeflow.domain.exceptions import EntityNotFoundError
from tradeflow.domain.model.order import Order
from tradeflow.domain.repository.order_repository import OrderRepository


class ShowOrderHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, order_id: int, actor: Actor) -> OrderDTO:
        return to_order_dto(self._load(order_id, actor))

    def timeline(self, order_id: int, actor: Actor) -> list[TimelineEntryDTO]:
        """Status history of the order, oldest first."""
        order = self._load(order_id, actor)
        return [
            TimelineEntryDTO(
                timestamp=event.timestamp.isoformat(),
                from_status=event.from_status.value if event.from_status else None,
                to_status=event.to_status.value,
                actor_role=event.actor_role.value,
                actor_id=event.actor_id,
                reason=event.reason,
            )
            for event in sorted(order.events, key=lambda e: e.timestamp)
        ]

    def _load(self, order_id: int, actor: Actor) -> Order:
        order = self._order_repo.get_by_id(order_id)
        if order is None or not order.is_visible_to(actor.role, actor.id):
            raise EntityNotFoundError(f"Order #{order_id} not found")
        return order
