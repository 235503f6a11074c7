"""Unit tests for BusinessActionContext.

WHY: BusinessActionContext is what a coordinator hands from the first
phase of an action to the later ones. Its updated flag drives
re-persistence and its typed reads are what phase-two code relies on.

HOW: Tests cover writes and the updated flag, typed reads, building
from a call, and the persisted application-data round trip.
"""

from dataclasses import dataclass
from typing import Annotated, List, Optional

import pytest

from action_context.business import APPLICATION_DATA_KEY, BusinessActionContext
from action_context.core.directive import ContextParam
from action_context.errors import ConversionError


@dataclass
class Customer:
    customer_id: Annotated[str, ContextParam("customerId")]
    tier: Annotated[Optional[str], ContextParam()] = None


@dataclass
class Reservation:
    room: str
    nights: int


def reserve(
    reservation_id: Annotated[int, ContextParam("reservationId")],
    customer: Annotated[Customer, ContextParam(is_param_in_property=True)],
    rooms: Annotated[List[Reservation], ContextParam(param_name="firstRoom", index=0)],
    note: str = "",
):
    return True


class TestWrites:
    """add_action_context(s) merge values and track updates."""

    def test_new_context_is_not_updated(self):
        context = BusinessActionContext(xid="xid-1", action_name="reserve")
        assert context.is_updated is False
        assert context.action_context == {}

    def test_add_sets_updated(self):
        context = BusinessActionContext()
        assert context.add_action_context("k", "v") is True
        assert context.is_updated is True

    def test_add_same_value_keeps_flag(self):
        context = BusinessActionContext(action_context={"k": "v"})
        assert context.add_action_context("k", "v") is False
        assert context.is_updated is False

    def test_add_many(self):
        context = BusinessActionContext()
        assert context.add_action_contexts({"a": 1, "b": Reservation("101", 2)}) is True
        assert context.action_context == {"a": 1, "b": '{"room":"101","nights":2}'}
        assert context.is_updated is True


class TestReads:
    """get_action_context returns raw or decoded values."""

    def test_raw_value(self):
        context = BusinessActionContext(action_context={"orderId": 42})
        assert context.get_action_context("orderId") == 42

    def test_missing_key(self):
        assert BusinessActionContext().get_action_context("nope", int) is None

    def test_typed_value(self):
        context = BusinessActionContext()
        context.add_action_context("room", Reservation("101", 2))
        assert context.get_action_context("room", Reservation) == Reservation("101", 2)

    def test_conversion_error(self):
        context = BusinessActionContext(action_context={"room": "not json"})
        with pytest.raises(ConversionError):
            context.get_action_context("room", Reservation)


class TestFromCall:
    """from_call builds the context from a call's parameters."""

    def test_extracts_and_normalizes(self):
        context = BusinessActionContext.from_call(
            reserve,
            (5, Customer("C-1", "gold"), [Reservation("101", 2), Reservation("102", 1)]),
            xid="xid-9",
            action_name="reserve",
        )
        assert context.xid == "xid-9"
        assert context.action_name == "reserve"
        assert context.action_context == {
            "reservationId": 5,
            "customerId": "C-1",
            "tier": "gold",
            "firstRoom": '{"room":"101","nights":2}',
        }
        assert context.is_updated is False

    def test_typed_read_after_call(self):
        context = BusinessActionContext.from_call(
            reserve, (), {"reservation_id": 5, "customer": Customer("C-1"), "rooms": [Reservation("101", 2)]},
        )
        assert context.get_action_context("firstRoom", Reservation) == Reservation("101", 2)
        assert "tier" not in context.action_context


class TestApplicationData:
    """Contexts persist to JSON and restore with typed reads intact."""

    def test_round_trip(self):
        context = BusinessActionContext()
        context.add_action_contexts({"orderId": 42, "room": Reservation("101", 2)})

        data = context.to_application_data()
        restored = BusinessActionContext.from_application_data(data, xid="xid-1")

        assert restored.xid == "xid-1"
        assert restored.action_context == {"orderId": 42, "room": '{"room":"101","nights":2}'}
        assert restored.get_action_context("orderId", int) == 42
        assert restored.get_action_context("room", Reservation) == Reservation("101", 2)

    def test_serialized_shape(self):
        context = BusinessActionContext(action_context={"a": 1})
        assert context.to_application_data() == '{"%s":{"a":1}}' % APPLICATION_DATA_KEY

    @pytest.mark.parametrize("data", [None, "", '{"other": 1}'])
    def test_empty_inputs(self, data):
        assert BusinessActionContext.from_application_data(data).action_context == {}

    @pytest.mark.parametrize("data", ["[1, 2]", '{"actionContext": [1]}', "not json"])
    def test_invalid_inputs(self, data):
        with pytest.raises(ValueError):
            BusinessActionContext.from_application_data(data)
