"""Shared plumbing for the status-changing use cases.

Every role's handler loads the order the same way (not visible to the
caller means not found) and commits an accepted transition the same way:
when the transition restores stock, the stock batch and the order write
run in one stock transaction so neither can land without the other.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from tradeflow.application.dto import Actor
from tradeflow.domain.exceptions import ConcurrencyConflict, EntityNotFoundError, ValidationError
from tradeflow.domain.model.order import Order
from tradeflow.domain.model.status import ActorRole
from tradeflow.domain.repository.order_repository import OrderRepository
from tradeflow.domain.repository.product_repository import ProductRepository
from tradeflow.domain.service.bulk_stock_service import BulkStockService
from tradeflow.domain.service.order_state_machine import OrderStateMachine, Transition

logger = logging.getLogger(__name__)


def require_role(actor: Actor, *roles: ActorRole) -> None:
    if actor.role not in roles:
        allowed = " or ".join(r.value for r in roles)
        raise ValidationError(f"This action requires the {allowed} role")


class OrderWorkflow:

    def __init__(
        self,
        order_repo: OrderRepository,
        product_repo: ProductRepository,
        state_machine: OrderStateMachine | None = None,
    ) -> None:
        self.order_repo = order_repo
        self.product_repo = product_repo
        self.state_machine = state_machine or OrderStateMachine()
        self.stock = BulkStockService(product_repo)

    def load_visible(self, order_id: int, actor: Actor) -> Order:
        order = self.order_repo.get_by_id(order_id)
        if order is None or not order.is_visible_to(actor.role, actor.id):
            raise EntityNotFoundError(f"Order #{order_id} not found")
        return order

    def commit(
        self,
        order: Order,
        transition: Transition,
        mutate: Callable[[], None],
    ) -> None:
        """Apply ``mutate`` to the order and persist it, with stock compensation.

        ``mutate`` performs the in-memory status change.  Any failure, be it
        a stock error or a stale version, leaves both stores unchanged.
        """
        try:
            if transition.restores_stock:
                with self.product_repo.transaction() as tx:
                    self.stock.restore_for_order(tx, order)
                    mutate()
                    self.order_repo.save(order)
            else:
                mutate()
                self.order_repo.save(order)
        except ConcurrencyConflict as exc:
            logger.warning(
                "Order %s: %s -> %s not applied (%s: %s)",
                order.order_number, transition.source.value, transition.target.value,
                type(exc).__name__, exc,
            )
            raise

        logger.info(
            "Order %s: %s -> %s by %s%s",
            order.order_number,
            transition.source.value,
            transition.target.value,
            transition.role.value,
            " (stock restored)" if transition.restores_stock else "",
        )
