"""Application service: Delete Order use case (wholesaler).

Only a ``pending`` order may be deleted.  Its reserved stock goes back to
the products in the same stock transaction that removes the order.
"""

from __future__ import annotations

import logging

from tradeflow.application.dto import Actor
from tradeflow.application.order_workflow import OrderWorkflow, require_role
from tradeflow.domain.model.status import ActorRole
from tradeflow.domain.repository.order_repository import OrderRepository
from tradeflow.domain.repository.product_repository import ProductRepository

logger = logging.getLogger(__name__)


class DeleteOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        product_repo: ProductRepository,
    ) -> None:
        self._workflow = OrderWorkflow(order_repo, product_repo)

    def handle(self, order_id: int, actor: Actor) -> None:
        require_role(actor, ActorRole.WHOLESALER)
        wf = self._workflow

        order = wf.load_visible(order_id, actor)
        order.ensure_deletable()

        with wf.product_repo.transaction() as tx:
            wf.stock.restore_for_order(tx, order)
            wf.order_repo.delete(order)

        logger.info("Order %s deleted by wholesaler %s", order.order_number, actor.id)
