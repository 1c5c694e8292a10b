"""Tests for presentation serializers and service wiring.

Run with: pytest tests/test_serializers.py -v
"""

from datetime import UTC, date, datetime, timedelta
from decimal import Decimal

import pytest
from django.test import override_settings

from ticketing.domain import Money, OrganizerProfile
from ticketing.domain.errors import EventNotFoundError
from ticketing.serializers import (
    EventSerializer,
    OrderSerializer,
    PriceBreakdownSerializer,
    UserSerializer,
    serialize_error,
)
from ticketing.services import OrderService
from ticketing.services.factory import build_services


class TestSerializers:
    def test_order_payload(self, order_service, buyer, event):
        order = order_service.create_order(
            buyer.id, event.id, ["Ana", "Bia"], ["ana@example.com", "bia@example.com"], "PROMO"
        )

        data = OrderSerializer(order).data

        assert data["status"] == "CONCLUDED"
        assert data["base_amount"] == "200.00"
        assert data["discount_amount"] == "50.00"
        assert data["total_amount"] == "157.50"
        assert [t["code"] for t in data["tickets"]] == [str(t.code) for t in order.tickets]
        assert data["tickets"][0]["unit_price"] == "100.00"

    def test_price_breakdown_payload(self, order_service, event):
        data = PriceBreakdownSerializer(order_service.preview_price(event.id, 1)).data

        assert data == {
            "base_amount": "100.00",
            "discount_amount": "0.00",
            "fee_amount": "5.00",
            "total_amount": "105.00",
            "coupon_valid": False,
        }

    def test_event_payload_hides_coupon_code(self, event):
        data = EventSerializer(event).data

        assert data["has_coupon"] is True
        assert "coupon_code" not in data
        assert data["status"] == "ACTIVE"

    def test_user_payload_hides_documents(self, buyer):
        data = UserSerializer(buyer).data

        assert data["kind"] == "STANDARD"
        assert "cpf" not in data
        assert data["orders"] == []

    def test_serialize_error(self):
        assert serialize_error(EventNotFoundError(3)) == {
            "code": "EVENT_NOT_FOUND",
            "message": "Event not found",
        }


class TestBuildServices:
    @override_settings(
        TICKETING={
            "STORE_BACKEND": "memory",
            "SERVICE_FEE_RATE": "0.10",
            "MAX_COUPON_DISCOUNT_RATIO": "0.5",
        }
    )
    def test_memory_backend_uses_configured_fee(self):
        services = build_services()
        organizer = services.users.register(
            name="Xogum",
            email="org@example.com",
            cpf="111.444.777-35",
            birth_date=date(1980, 1, 1),
            organizer=OrganizerProfile(cnpj="12.345.678/0001-90", bank_account="1234-5"),
        )
        event = services.events.create_event(
            organizer.id, "Gig", datetime.now(UTC) + timedelta(days=30), "100", 10
        )

        assert isinstance(services.orders, OrderService)
        assert services.orders.preview_price(event.id, 1).total_amount == Money(Decimal("110"))

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            build_services("redis")
