"""Application service: Set Order Pricing use case (supplier).

Discounts and tax may be adjusted until production starts; the final
amount is always recomputed from them and never taken as input.
"""

from __future__ import annotations

from tradeflow.application.dto import Actor, OrderDTO, to_order_dto
from tradeflow.application.order_workflow import require_role
from tradeflow.domain.exceptions import EntityNotFoundError
from tradeflow.domain.model.status import ActorRole
from tradeflow.domain.model.value_objects import Money
from tradeflow.domain.repository.order_repository import OrderRepository


class SetOrderPricingHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(
        self,
        order_id: int,
        actor: Actor,
        discounts: str = "0",
        tax_amount: str = "0",
    ) -> OrderDTO:
        require_role(actor, ActorRole.SUPPLIER)
        order = self._order_repo.get_by_id(order_id)
        if order is None or not order.is_visible_to(actor.role, actor.id):
            raise EntityNotFoundError(f"Order #{order_id} not found")

        currency = order.total_amount.currency
        order.set_price_adjustments(
            Money.of(discounts, currency), Money.of(tax_amount, currency)
        )
        self._order_repo.save(order)
        return to_order_dto(order)
