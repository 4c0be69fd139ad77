"""Application service: Transporter Status use case.

One endpoint serves both transporter workflows.  Which one applies is
decided by the order's current status together with the transporter
reference that matches the caller: the delivery carrier drives
``assigned_to_transporter -> ... -> delivered``; the carrier that claimed a
return drives ``return_accepted -> ... -> returned_to_supplier``.
"""

from __future__ import annotations

from tradeflow.application.dto import Actor, OrderDTO, to_order_dto
from tradeflow.application.order_workflow import OrderWorkflow, require_role
from tradeflow.domain.exceptions import EntityNotFoundError
from tradeflow.domain.model.status import ActorRole
from tradeflow.domain.repository.order_repository import OrderRepository
from tradeflow.domain.repository.product_repository import ProductRepository


class TransporterStatusHandler:

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
        notes: str | None = None,
    ) -> OrderDTO:
        require_role(actor, ActorRole.TRANSPORTER)
        wf = self._workflow

        order = wf.order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")
        role = order.transporter_role_for(actor.id)

        transition = wf.state_machine.check(order.status, status, role)

        def mutate() -> None:
            order.apply_transition(transition, actor_id=actor.id, reason=notes)

        wf.commit(order, transition, mutate)
        return to_order_dto(order)
