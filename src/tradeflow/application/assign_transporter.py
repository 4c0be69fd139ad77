"""Application service: Assign Transporter use case (supplier)."""

from __future__ import annotations

from datetime import datetime

from tradeflow.application.dto import Actor, OrderDTO, to_order_dto
from tradeflow.application.order_workflow import OrderWorkflow, require_role
from tradeflow.domain.model.status import ActorRole, OrderStatus
from tradeflow.domain.repository.order_repository import OrderRepository
from tradeflow.domain.repository.product_repository import ProductRepository


class AssignTransporterHandler:

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
        transporter_id: str,
        notes: str | None = None,
        estimated_delivery_date: datetime | None = None,
    ) -> OrderDTO:
        """Hand a ``ready_for_delivery`` order to a delivery transporter."""
        require_role(actor, ActorRole.SUPPLIER)
        wf = self._workflow

        order = wf.load_visible(order_id, actor)
        transition = wf.state_machine.check(
            order.status, OrderStatus.ASSIGNED_TO_TRANSPORTER, actor.role
        )

        def mutate() -> None:
            order.assign_transporter(
                transition,
                transporter_id,
                supplier_id=actor.id,
                notes=notes,
                estimated_delivery_date=estimated_delivery_date,
            )

        wf.commit(order, transition, mutate)
        return to_order_dto(order)
