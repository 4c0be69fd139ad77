"""Application service: Change Order Status use case (wholesaler, supplier).

The state machine decides whether the requested status is legal for the
caller's role; cancelling from ``pending`` or ``confirmed`` restores the
reserved stock in the same unit of work as the status change.
"""

from __future__ import annotations

from datetime import datetime

from tradeflow.application.dto import Actor, OrderDTO, to_order_dto
from tradeflow.application.order_workflow import OrderWorkflow, require_role
from tradeflow.domain.model.status import ActorRole, OrderStatus
from tradeflow.domain.repository.order_repository import OrderRepository
from tradeflow.domain.repository.product_repository import ProductRepository


class ChangeOrderStatusHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        product_repo: ProductRepository,
    ) -> None:
        self._workflow = OrderWorkflow(order_repo, product_repo)

    def handle(
        self,
        order_id: int,
        actor: Actor,
        status: str,
        reason: str | None = None,
        transporter_id: str | None = None,
        estimated_delivery_date: datetime | None = None,
    ) -> OrderDTO:
        require_role(actor, ActorRole.WHOLESALER, ActorRole.SUPPLIER)
        wf = self._workflow

        order = wf.load_visible(order_id, actor)
        transition = wf.state_machine.check(order.status, status, actor.role)

        if transition.target is OrderStatus.ASSIGNED_TO_TRANSPORTER:
            def mutate() -> None:
                order.assign_transporter(
                    transition,
                    transporter_id or "",
                    supplier_id=actor.id,
                    notes=reason,
                    estimated_delivery_date=estimated_delivery_date,
                )
        else:
            def mutate() -> None:
                order.apply_transition(transition, actor_id=actor.id, reason=reason)

        wf.commit(order, transition, mutate)
        return to_order_dto(order)
