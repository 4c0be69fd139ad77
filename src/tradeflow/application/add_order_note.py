"""Application service: Add Order Note use case (any party of the order)."""

from __future__ import annotations

from tradeflow.application.dto import Actor, OrderDTO, to_order_dto
from tradeflow.domain.exceptions import EntityNotFoundError
from tradeflow.domain.repository.order_repository import OrderRepository


class AddOrderNoteHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, order_id: int, actor: Actor, text: str) -> OrderDTO:
        order = self._order_repo.get_by_id(order_id)
        if order is None or not order.is_visible_to(actor.role, actor.id):
            raise EntityNotFoundError(f"Order #{order_id} not found")

        order.add_note(text, actor.role)
        self._order_repo.save(order)
        return to_order_dto(order)
