"""Tests du passage de commande."""

import asyncio
from unittest.mock import MagicMock

import pytest
from bson import ObjectId
from fastapi import HTTPException

from conftest import make_line

from agrimart.models.schemas import Address, CheckoutRequest, OrderStatus, PaymentMethod, User
from agrimart.services.checkout import (
    PaymentFailed,
    build_order_documents,
    place_order,
    prefill_address,
    simulate_payment,
    validate_address,
)
from agrimart.state.session import Session
from agrimart.state.store import Action, ActionType, initial_state, reduce_all

ADDRESS = Address(doorNumber="12", street="Main Road", cityOrVillage="Nashik",
                  state="Maharashtra", pinCode="422001")


class FixedRandom:
    def __init__(self, value):
        self.value = value

    def random(self):
        return self.value


def cart_session(*lines, user=True):
    actions = [Action(type=ActionType.ADD_TO_CART, payload=line) for line in lines]
    if user:
        actions.insert(0, Action(type=ActionType.LOGIN_SUCCESS,
                                 payload=User(id="u1", username="ramesh", email="r@example.com")))
    return Session("user:u1", reduce_all(initial_state(), actions))


class TestPayment:
    def test_cash_on_delivery_skips_gateway(self):
        simulate_payment(PaymentMethod.cashOnDelivery, FixedRandom(0.99))

    def test_payment_succeeds_under_success_rate(self):
        simulate_payment(PaymentMethod.upi, FixedRandom(0.5))

    def test_payment_fails_over_success_rate(self):
        with pytest.raises(PaymentFailed):
            simulate_payment(PaymentMethod.netBanking, FixedRandom(0.95))


class TestAddress:
    def test_blank_field_rejected(self):
        with pytest.raises(HTTPException) as exc:
            validate_address(ADDRESS.model_copy(update={"pinCode": "  "}))
        assert exc.value.detail == "Please fill all address fields"

    def test_complete_address_accepted(self):
        validate_address(ADDRESS)

    def test_prefill_from_saved_address(self):
        assert prefill_address("12, Main Road, Nashik, Maharashtra, 422001") == ADDRESS

    def test_prefill_with_four_parts_leaves_pin_code_empty(self):
        assert prefill_address("12, Main Road, Nashik, Maharashtra").pinCode == ""

    def test_prefill_ignores_short_address(self):
        assert prefill_address("Nashik") == Address()
        assert prefill_address("") == Address()


def test_order_documents():
    lines = [make_line("p1", quantity=2, price=500.0), make_line("p2", price=100.0)]
    request = CheckoutRequest(shippingAddress=ADDRESS, paymentMethod=PaymentMethod.cashOnDelivery)

    order_doc, item_docs = build_order_documents("u1", lines, request)

    assert order_doc["order_status"] == OrderStatus.processing.value
    assert order_doc["total_amount"] == 1100.0
    assert order_doc["can_cancel"] is True
    assert order_doc["can_return"] is False
    assert [(d["position"], d["product_id"], d["status"]) for d in item_docs] == [
        (0, "p1", "pending"), (1, "p2", "pending")
    ]


def test_online_payment_order_starts_pending():
    request = CheckoutRequest(shippingAddress=ADDRESS, paymentMethod=PaymentMethod.upi)
    order_doc, _ = build_order_documents("u1", [make_line()], request)
    assert order_doc["order_status"] == "pending"


class TestPlaceOrder:
    def test_selected_lines_become_an_order(self, patch_db):
        order_id = ObjectId()
        patch_db.orders.insert_one.return_value = MagicMock(inserted_id=order_id)
        session = cart_session(
            make_line("p1", quantity=2, price=500.0),
            make_line("p2", selected=False),
        )
        request = CheckoutRequest(shippingAddress=ADDRESS, paymentMethod=PaymentMethod.cashOnDelivery)

        order = asyncio.run(place_order(patch_db, session, request))

        assert order.id == str(order_id)
        assert order.totalAmount == 1000.0
        assert [i.productId for i in order.items] == ["p1"]
        assert [l.productId for l in session.state.cart] == ["p2"]
        assert [o.id for o in session.state.orders] == [str(order_id)]

        item_docs = patch_db.order_items.insert_many.call_args.args[0]
        assert all(d["order_id"] == str(order_id) for d in item_docs)
        patch_db.sessions.update_one.assert_awaited_once()

    def test_requires_login(self, patch_db):
        session = cart_session(make_line("p1"), user=False)
        request = CheckoutRequest(shippingAddress=ADDRESS)

        with pytest.raises(HTTPException) as exc:
            asyncio.run(place_order(patch_db, session, request))
        assert exc.value.status_code == 401

    def test_requires_selected_items(self, patch_db):
        session = cart_session(make_line("p1", selected=False))
        request = CheckoutRequest(shippingAddress=ADDRESS)

        with pytest.raises(HTTPException) as exc:
            asyncio.run(place_order(patch_db, session, request))
        assert exc.value.detail == "No items selected for checkout"

    def test_failed_payment_keeps_cart(self, patch_db):
        session = cart_session(make_line("p1"))
        request = CheckoutRequest(shippingAddress=ADDRESS, paymentMethod=PaymentMethod.upi)

        with pytest.raises(HTTPException) as exc:
            asyncio.run(place_order(patch_db, session, request, rng=FixedRandom(0.999)))

        assert exc.value.status_code == 402
        assert len(session.state.cart) == 1
        patch_db.orders.insert_one.assert_not_awaited()
