"""Unit tests for the role-scoped transition table."""

import pytest

from tradeflow.domain.exceptions import TransitionDenied, UnknownStatus, ValidationError
from tradeflow.domain.model.status import TERMINAL_STATUSES, ActorRole, OrderStatus
from tradeflow.domain.service.order_state_machine import TRANSITIONS, OrderStateMachine

SM = OrderStateMachine()


class TestCheck:

    @pytest.mark.parametrize(
        "current, requested, role",
        [
            (OrderStatus.PENDING, "confirmed", ActorRole.WHOLESALER),
            (OrderStatus.PENDING, "confirmed", ActorRole.SUPPLIER),
            (OrderStatus.CONFIRMED, "in_production", ActorRole.SUPPLIER),
            (OrderStatus.IN_PRODUCTION, "ready_for_delivery", ActorRole.SUPPLIER),
            (OrderStatus.ASSIGNED_TO_TRANSPORTER, "accepted_by_transporter", ActorRole.TRANSPORTER),
            (OrderStatus.IN_TRANSIT, "delivered", ActorRole.TRANSPORTER),
            (OrderStatus.DELIVERED, "certified", ActorRole.WHOLESALER),
            (OrderStatus.DELIVERED, "return_requested", ActorRole.WHOLESALER),
            (OrderStatus.RETURN_ACCEPTED, "return_in_transit", ActorRole.RETURN_TRANSPORTER),
            (OrderStatus.RETURN_IN_TRANSIT, "returned_to_supplier", ActorRole.RETURN_TRANSPORTER),
        ],
    )
    def test_allowed(self, current, requested, role):
        transition = SM.check(current, requested, role)
        assert transition.source is current
        assert transition.target.value == requested

    @pytest.mark.parametrize(
        "current, requested, role",
        [
            (OrderStatus.DELIVERED, "pending", ActorRole.WHOLESALER),
            (OrderStatus.CONFIRMED, "in_production", ActorRole.WHOLESALER),
            (OrderStatus.PENDING, "delivered", ActorRole.SUPPLIER),
            (OrderStatus.IN_TRANSIT, "delivered", ActorRole.SUPPLIER),
            (OrderStatus.DELIVERED, "return_requested", ActorRole.SUPPLIER),
            (OrderStatus.RETURN_REQUESTED, "return_accepted", ActorRole.TRANSPORTER),
        ],
    )
    def test_denied(self, current, requested, role):
        with pytest.raises(TransitionDenied, match="Cannot change status"):
            SM.check(current, requested, role)

    def test_unknown_status(self):
        with pytest.raises(UnknownStatus, match="shipped"):
            SM.check(OrderStatus.IN_TRANSIT, "shipped", ActorRole.TRANSPORTER)

    def test_status_is_case_insensitive(self):
        transition = SM.check(OrderStatus.PENDING, " Confirmed ", ActorRole.SUPPLIER)
        assert transition.target is OrderStatus.CONFIRMED


class TestTableShape:

    def test_terminal_statuses_have_no_exits(self):
        for status in TERMINAL_STATUSES:
            for role in ActorRole:
                assert SM.allowed_targets(status, role) == frozenset()
                assert SM.is_terminal(status)

    def test_every_target_is_a_known_status(self):
        for by_role in TRANSITIONS.values():
            for targets in by_role.values():
                assert targets <= set(OrderStatus)

    def test_every_non_terminal_status_can_be_cancelled(self):
        for status in OrderStatus:
            if status in TERMINAL_STATUSES or status is OrderStatus.DELIVERED:
                continue
            reachable = set().union(*TRANSITIONS[status].values())
            assert OrderStatus.CANCELLED in reachable, status


    def test_wholesaler_withdraws_unclaimed_return(self):
        transition = SM.check(OrderStatus.RETURN_REQUESTED, "cancelled", ActorRole.WHOLESALER)
        assert not transition.restores_stock
        assert transition.timestamp_field == "cancelled_at"

    def test_unclaimed_return_cannot_be_cancelled_by_others(self):
        for role in (ActorRole.SUPPLIER, ActorRole.TRANSPORTER, ActorRole.RETURN_TRANSPORTER):
            with pytest.raises(TransitionDenied):
                SM.check(OrderStatus.RETURN_REQUESTED, "cancelled", role)


class TestSideEffects:

    @pytest.mark.parametrize("source", [OrderStatus.PENDING, OrderStatus.CONFIRMED])
    def test_early_cancel_restores_stock(self, source):
        role = ActorRole.WHOLESALER
        assert SM.check(source, "cancelled", role).restores_stock

    def test_late_cancel_does_not_restore_stock(self):
        transition = SM.check(OrderStatus.IN_PRODUCTION, "cancelled", ActorRole.SUPPLIER)
        assert not transition.restores_stock

    def test_timestamp_field(self):
        transition = SM.check(OrderStatus.CONFIRMED, "in_production", ActorRole.SUPPLIER)
        assert transition.timestamp_field == "production_started_at"


class TestParseRole:

    def test_known_role(self):
        assert SM.parse_role("Supplier") is ActorRole.SUPPLIER

    def test_unknown_role(self):
        with pytest.raises(ValidationError, match="Unknown actor role"):
            SM.parse_role("admin")

    def test_return_transporter_cannot_be_claimed(self):
        with pytest.raises(ValidationError, match="derived from the order"):
            SM.parse_role("return_transporter")

    def test_return_transporter_enum_rejected(self):
        with pytest.raises(ValidationError):
            SM.parse_role(ActorRole.RETURN_TRANSPORTER)
