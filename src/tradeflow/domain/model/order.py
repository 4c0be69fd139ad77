"""Order aggregate, the core of the domain.

The Order is an aggregate root that owns its line items, its event log and
its notes.  Legality of a status change is decided by the state machine;
the aggregate applies an accepted ``Transition`` and keeps every derived
field (amounts, full address, status timestamps) consistent.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from tradeflow.domain.exceptions import (
    AlreadyAssigned,
    ConcurrencyConflict,
    EntityNotFoundError,
    ValidationError,
)
from tradeflow.domain.model.derivations import (
    compose_full_address,
    compute_final_amount,
    compute_total_amount,
    generate_order_number,
)
from tradeflow.domain.model.status import (
    RETURN_WORKFLOW_STATUSES,
    TERMINAL_STATUSES,
    TIMESTAMP_FIELDS,
    ActorRole,
    OrderStatus,
    PaymentStatus,
)
from tradeflow.domain.model.value_objects import Money, Quantity

if TYPE_CHECKING:
    from tradeflow.domain.service.order_state_machine import Transition

MAX_ORDER_NOTES_LENGTH = 1000
MAX_NOTE_LENGTH = 1000


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ShippingAddress:
    street: str
    city: str
    country: str
    state: str = ""
    postal_code: str = ""

    @staticmethod
    def create(
        street: str | None,
        city: str | None,
        country: str | None,
        state: str | None = None,
        postal_code: str | None = None,
    ) -> ShippingAddress:
        missing = [
            name
            for name, value in (("street", street), ("city", city), ("country", country))
            if not value or not value.strip()
        ]
        if missing:
            raise ValidationError(
                "Complete shipping address is required (street, city, country); "
                f"missing: {', '.join(missing)}"
            )
        return ShippingAddress(
            street=street.strip(),
            city=city.strip(),
            country=country.strip(),
            state=(state or "").strip(),
            postal_code=(postal_code or "").strip(),
        )

    @property
    def full_address(self) -> str:
        return compose_full_address(
            self.street, self.city, self.state, self.country, self.postal_code
        )


@dataclass
class OrderLineItem:
    """Captures the price snapshot of a product at order-creation time.

    Neither ``quantity`` nor ``unit_price`` changes after creation, whatever
    happens to the product afterwards.
    """

    product_id: str
    product_name: str
    quantity: Quantity
    unit_price: Money  # locked at order-creation time

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity.value


@dataclass(frozen=True)
class StatusEvent:
    """One entry of the order's append-only status history."""

    timestamp: datetime
    from_status: OrderStatus | None
    to_status: OrderStatus
    actor_role: ActorRole
    actor_id: str | None = None
    reason: str = ""


@dataclass(frozen=True)
class OrderNote:
    timestamp: datetime
    actor_role: ActorRole
    text: str

    def __str__(self) -> str:
        return f"[{self.timestamp.isoformat()}] {self.text}"


@dataclass
class Order:
    """Aggregate root for a wholesaler's purchase order to a supplier.

    Use the ``Order.create()`` factory for new orders; it enforces all
    business rules.  The ``__init__`` stays simple so the repository can
    reconstitute persisted orders without re-validating.
    """

    id: int | None
    order_number: str
    wholesaler_id: str
    supplier_id: str
    items: list[OrderLineItem]
    shipping_address: ShippingAddress
    status: OrderStatus = OrderStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    discounts: Money = field(default_factory=Money.zero)
    tax_amount: Money = field(default_factory=Money.zero)
    order_notes: str = ""

    assigned_transporter_id: str | None = None
    return_transporter_id: str | None = None
    estimated_delivery_date: datetime | None = None
    return_reason: str = ""
    transporter_notes: str = ""
    return_notes: str = ""

    # One per status in TIMESTAMP_FIELDS, set the first time it is entered.
    confirmed_at: datetime | None = None
    production_started_at: datetime | None = None
    ready_for_delivery_at: datetime | None = None
    transporter_assigned_at: datetime | None = None
    transporter_accepted_at: datetime | None = None
    in_transit_at: datetime | None = None
    delivered_at: datetime | None = None
    cancelled_at: datetime | None = None
    certified_at: datetime | None = None
    return_requested_at: datetime | None = None
    return_accepted_at: datetime | None = None
    return_in_transit_at: datetime | None = None
    returned_to_supplier_at: datetime | None = None
    return_transporter_assigned_at: datetime | None = None

    events: list[StatusEvent] = field(default_factory=list)
    notes: list[OrderNote] = field(default_factory=list)
    version: int = 0
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        wholesaler_id: str,
        supplier_id: str,
        items: list[OrderLineItem],
        shipping_address: ShippingAddress,
        order_notes: str = "",
        now: datetime | None = None,
    ) -> Order:
        """Create a new ``pending`` order, enforcing all invariants."""
        if not wholesaler_id or not wholesaler_id.strip():
            raise ValidationError("Wholesaler ID is required")
        if not supplier_id or not supplier_id.strip():
            raise ValidationError("Supplier ID is required")
        if not items:
            raise ValidationError("Order must contain at least one item")

        order_notes = (order_notes or "").strip()
        if len(order_notes) > MAX_ORDER_NOTES_LENGTH:
            raise ValidationError(
                f"Order notes cannot exceed {MAX_ORDER_NOTES_LENGTH} characters"
            )

        now = now or _utcnow()
        order = Order(
            id=None,
            order_number=generate_order_number(int(now.timestamp() * 1000)),
            wholesaler_id=wholesaler_id.strip(),
            supplier_id=supplier_id.strip(),
            items=list(items),
            shipping_address=shipping_address,
            order_notes=order_notes,
            created_at=now,
            updated_at=now,
        )
        order.events.append(
            StatusEvent(
                timestamp=now,
                from_status=None,
                to_status=OrderStatus.PENDING,
                actor_role=ActorRole.WHOLESALER,
                actor_id=order.wholesaler_id,
            )
        )
        return order

    # --- State transitions ----------------------------------------------------

    def apply_transition(
        self,
        transition: Transition,
        actor_id: str | None = None,
        reason: str | None = None,
        now: datetime | None = None,
    ) -> None:
        """Move the order along an accepted transition.

        The transition must have been checked against this order's current
        status; a mismatch means the order changed underneath the caller.
        """
        if transition.source is not self.status:
            raise ConcurrencyConflict(
                f"Order {self.order_number} is {self.status.value}, "
                f"expected {transition.source.value}"
            )
        if (
            transition.target is OrderStatus.ASSIGNED_TO_TRANSPORTER
            and not self.assigned_transporter_id
        ):
            raise ValidationError(
                "A transporter must be specified to assign the order for delivery"
            )

        now = now or _utcnow()
        reason = (reason or "").strip()

        self.status = transition.target
        self._stamp(transition.target, now)
        self.events.append(
            StatusEvent(
                timestamp=now,
                from_status=transition.source,
                to_status=transition.target,
                actor_role=transition.role,
                actor_id=actor_id,
                reason=reason,
            )
        )

        if reason:
            self._append_note(
                f"Status changed from {transition.source.value} "
                f"to {transition.target.value}: {reason}",
                transition.role,
                now,
            )
            if transition.target is OrderStatus.RETURN_REQUESTED:
                self.return_reason = reason
            elif transition.role is ActorRole.TRANSPORTER:
                self.transporter_notes = reason
            elif transition.role is ActorRole.RETURN_TRANSPORTER:
                self.return_notes = reason

        self.updated_at = now

    def assign_transporter(
        self,
        transition: Transition,
        transporter_id: str,
        supplier_id: str | None = None,
        notes: str | None = None,
        estimated_delivery_date: datetime | None = None,
        now: datetime | None = None,
    ) -> None:
        """``ready_for_delivery -> assigned_to_transporter`` with its carrier."""
        if not transporter_id or not transporter_id.strip():
            raise ValidationError("Transporter ID is required")
        previous = self.assigned_transporter_id
        self.assigned_transporter_id = transporter_id.strip()
        try:
            self.apply_transition(transition, actor_id=supplier_id, reason=notes, now=now)
        except Exception:
            self.assigned_transporter_id = previous
            raise
        self.transporter_notes = (notes or "").strip()
        self.estimated_delivery_date = estimated_delivery_date

    def claim_return(
        self,
        transition: Transition,
        transporter_id: str,
        now: datetime | None = None,
    ) -> None:
        """First-acceptor-wins claim of a ``return_requested`` order."""
        if not transporter_id or not transporter_id.strip():
            raise ValidationError("Transporter ID is required")
        self.ensure_return_unclaimed()
        now = now or _utcnow()
        self.return_transporter_id = transporter_id.strip()
        try:
            self.apply_transition(transition, actor_id=self.return_transporter_id, now=now)
        except Exception:
            self.return_transporter_id = None
            raise
        self.return_transporter_assigned_at = now

    def ensure_return_unclaimed(self) -> None:
        if self.return_transporter_id is not None:
            raise AlreadyAssigned(
                f"Return for order {self.order_number} is already assigned"
            )

    # --- Other mutations ------------------------------------------------------

    def add_note(self, text: str, actor_role: ActorRole, now: datetime | None = None) -> OrderNote:
        text = (text or "").strip()
        if not text:
            raise ValidationError("Notes cannot be empty")
        if len(text) > MAX_NOTE_LENGTH:
            raise ValidationError(f"A note cannot exceed {MAX_NOTE_LENGTH} characters")
        now = now or _utcnow()
        note = self._append_note(text, actor_role, now)
        self.updated_at = now
        return note

    def set_price_adjustments(
        self,
        discounts: Money,
        tax_amount: Money,
        now: datetime | None = None,
    ) -> None:
        """Change discounts and tax before production starts."""
        if self.status not in (OrderStatus.PENDING, OrderStatus.CONFIRMED):
            raise ValidationError(
                f"Cannot change pricing of an order in {self.status.value} status"
            )
        # Validates that the final amount stays non-negative.
        compute_final_amount(self.total_amount, discounts, tax_amount)
        self.discounts = discounts
        self.tax_amount = tax_amount
        self.updated_at = now or _utcnow()

    def ensure_deletable(self) -> None:
        if self.status is not OrderStatus.PENDING:
            raise ValidationError("Only pending orders can be deleted")

    # --- Visibility -----------------------------------------------------------

    def is_visible_to(self, role: ActorRole, actor_id: str) -> bool:
        if role is ActorRole.WHOLESALER:
            return self.wholesaler_id == actor_id
        if role is ActorRole.SUPPLIER:
            return self.supplier_id == actor_id
        return actor_id in (self.assigned_transporter_id, self.return_transporter_id)

    def transporter_role_for(self, transporter_id: str) -> ActorRole:
        """Which transporter workflow ``transporter_id`` is acting in.

        The order's current status decides between the delivery and the
        return workflow; the caller must be the transporter referenced for
        that workflow.
        """
        is_delivery = (
            self.assigned_transporter_id is not None
            and self.assigned_transporter_id == transporter_id
        )
        is_return = (
            self.return_transporter_id is not None
            and self.return_transporter_id == transporter_id
        )
        if not (is_delivery or is_return):
            raise EntityNotFoundError("Order not found or not assigned to you")

        if self.status in RETURN_WORKFLOW_STATUSES:
            if is_return:
                return ActorRole.RETURN_TRANSPORTER
            raise EntityNotFoundError("Return order not assigned to you")
        if is_delivery:
            return ActorRole.TRANSPORTER
        return ActorRole.RETURN_TRANSPORTER

    # --- Computed properties --------------------------------------------------

    @property
    def total_amount(self) -> Money:
        currency = self.items[0].unit_price.currency if self.items else "USD"
        return compute_total_amount((item.line_total for item in self.items), currency)

    @property
    def final_amount(self) -> Money:
        return compute_final_amount(self.total_amount, self.discounts, self.tax_amount)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    # --- Internal helpers -----------------------------------------------------

    def _stamp(self, status: OrderStatus, now: datetime) -> None:
        name = TIMESTAMP_FIELDS.get(status)
        if name is not None and getattr(self, name) is None:
            setattr(self, name, now)

    def _append_note(self, text: str, actor_role: ActorRole, now: datetime) -> OrderNote:
        note = OrderNote(timestamp=now, actor_role=actor_role, text=text)
        self.notes.append(note)
        return note
