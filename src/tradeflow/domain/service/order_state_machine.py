"""Domain service: Order State Machine.

Owns the single role-scoped transition table.  Every handler that changes
an order's status asks ``OrderStateMachine.check`` first; the returned
``Transition`` tells the caller which side effects the change implies.
"""

from __future__ import annotations

from dataclasses import dataclass

from tradeflow.domain.exceptions import TransitionDenied, UnknownStatus, ValidationError
from tradeflow.domain.model.status import (
    STOCK_RESTORING_STATUSES,
    TERMINAL_STATUSES,
    TIMESTAMP_FIELDS,
    ActorRole,
    OrderStatus,
)

_S = OrderStatus
_R = ActorRole

TRANSITIONS: dict[OrderStatus, dict[ActorRole, frozenset[OrderStatus]]] = {
    _S.PENDING: {
        _R.WHOLESALER: frozenset({_S.CONFIRMED, _S.CANCELLED}),
        _R.SUPPLIER: frozenset({_S.CONFIRMED, _S.CANCELLED}),
    },
    _S.CONFIRMED: {
        _R.WHOLESALER: frozenset({_S.CANCELLED}),
        _R.SUPPLIER: frozenset({_S.IN_PRODUCTION, _S.CANCELLED}),
    },
    _S.IN_PRODUCTION: {
        _R.SUPPLIER: frozenset({_S.READY_FOR_DELIVERY, _S.CANCELLED}),
    },
    _S.READY_FOR_DELIVERY: {
        _R.SUPPLIER: frozenset({_S.ASSIGNED_TO_TRANSPORTER, _S.CANCELLED}),
    },
    _S.ASSIGNED_TO_TRANSPORTER: {
        _R.TRANSPORTER: frozenset({_S.ACCEPTED_BY_TRANSPORTER, _S.CANCELLED}),
    },
    _S.ACCEPTED_BY_TRANSPORTER: {
        _R.TRANSPORTER: frozenset({_S.IN_TRANSIT, _S.CANCELLED}),
    },
    _S.IN_TRANSIT: {
        _R.TRANSPORTER: frozenset({_S.DELIVERED, _S.CANCELLED}),
    },
    _S.DELIVERED: {
        _R.WHOLESALER: frozenset({_S.CERTIFIED, _S.RETURN_REQUESTED}),
    },
    _S.RETURN_REQUESTED: {
        _R.WHOLESALER: frozenset({_S.CANCELLED}),
        _R.RETURN_TRANSPORTER: frozenset({_S.RETURN_ACCEPTED}),
    },
    _S.RETURN_ACCEPTED: {
        _R.RETURN_TRANSPORTER: frozenset({_S.RETURN_IN_TRANSIT, _S.CANCELLED}),
    },
    _S.RETURN_IN_TRANSIT: {
        _R.RETURN_TRANSPORTER: frozenset({_S.RETURNED_TO_SUPPLIER, _S.CANCELLED}),
    },
}


@dataclass(frozen=True)
class Transition:
    """An accepted ``source -> target`` change made by ``role``."""

    source: OrderStatus
    target: OrderStatus
    role: ActorRole

    @property
    def restores_stock(self) -> bool:
        return (
            self.target is OrderStatus.CANCELLED
            and self.source in STOCK_RESTORING_STATUSES
        )

    @property
    def timestamp_field(self) -> str | None:
        return TIMESTAMP_FIELDS.get(self.target)


class OrderStateMachine:

    @staticmethod
    def parse_status(value: str | OrderStatus) -> OrderStatus:
        """Resolve a raw status value, raising UnknownStatus if it is not one."""
        if isinstance(value, OrderStatus):
            return value
        try:
            return OrderStatus(str(value).strip().lower())
        except ValueError:
            raise UnknownStatus(value) from None

    @staticmethod
    def parse_role(value: str | ActorRole) -> ActorRole:
        """Resolve the role a caller acts as.

        ``return_transporter`` is derived from the order a transporter acts
        on and cannot be claimed by a caller.
        """
        if isinstance(value, ActorRole):
            role = value
        else:
            try:
                role = ActorRole(str(value).strip().lower())
            except ValueError:
                raise ValidationError(f"Unknown actor role: {value!r}") from None
        if role is ActorRole.RETURN_TRANSPORTER:
            raise ValidationError(
                "The return_transporter role is derived from the order; act as 'transporter'"
            )
        return role

    @staticmethod
    def is_terminal(status: OrderStatus) -> bool:
        return status in TERMINAL_STATUSES

    @staticmethod
    def allowed_targets(current: OrderStatus, role: ActorRole) -> frozenset[OrderStatus]:
        return TRANSITIONS.get(current, {}).get(role, frozenset())

    def check(
        self,
        current: OrderStatus,
        requested: str | OrderStatus,
        role: ActorRole,
    ) -> Transition:
        """Validate ``current -> requested`` for ``role``.

        Raises UnknownStatus for values outside the enumeration and
        TransitionDenied for any pair missing from the table, which
        includes every request made against a terminal status.
        """
        target = self.parse_status(requested)
        if target not in self.allowed_targets(current, role):
            raise TransitionDenied(current.value, target.value, role.value)
        return Transition(source=current, target=target, role=role)
