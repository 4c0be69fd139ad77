"""Application service: Claim Return use case (transporter).

Any transporter may pick up an open return request, but only the first to
commit gets it.  The claim is a compare-and-swap on the order version: a
transporter that loses the race sees ``AlreadyAssigned`` and the order
keeps the winner's reference.
"""

from __future__ import annotations

import logging

from tradeflow.application.dto import Actor, OrderDTO, to_order_dto
from tradeflow.application.order_workflow import OrderWorkflow, require_role
from tradeflow.domain.exceptions import (
    AlreadyAssigned,
    ConcurrencyConflict,
    EntityNotFoundError,
)
from tradeflow.domain.model.status import ActorRole, OrderStatus
from tradeflow.domain.repository.order_repository import OrderRepository
from tradeflow.domain.repository.product_repository import ProductRepository

logger = logging.getLogger(__name__)


class ClaimReturnHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        product_repo: ProductRepository,
    ) -> None:
        self._workflow = OrderWorkflow(order_repo, product_repo)

    def handle(self, order_id: int, actor: Actor) -> OrderDTO:
        require_role(actor, ActorRole.TRANSPORTER)
        wf = self._workflow

        order = wf.order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")
        order.ensure_return_unclaimed()

        transition = wf.state_machine.check(
            order.status, OrderStatus.RETURN_ACCEPTED, ActorRole.RETURN_TRANSPORTER
        )

        try:
            wf.commit(order, transition, lambda: order.claim_return(transition, actor.id))
        except ConcurrencyConflict:
            current = wf.order_repo.get_by_id(order_id)
            if current is not None and current.return_transporter_id is not None:
                raise AlreadyAssigned(
                    f"Return for order {current.order_number} is already assigned"
                ) from None
            raise

        logger.info(
            "Return of order %s claimed by transporter %s", order.order_number, actor.id
        )
        return to_order_dto(order)
