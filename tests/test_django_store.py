"""Integration tests for the Django ORM stores.

Run with: pytest tests/test_django_store.py -v
"""

from collections import Counter
from dataclasses import replace
from datetime import UTC, date, datetime, timedelta
from decimal import Decimal
from unittest import mock

import pytest

from ticketing import models
from ticketing.domain import Event, EventStatus, Money, OrderStatus, OrganizerProfile, User, UserKind
from ticketing.domain.errors import EmailAlreadyRegisteredError, InsufficientInventoryError
from ticketing.services import EventService, OrderService, UserService
from ticketing.stores.django_store import DjangoEventStore, DjangoUnitOfWork, DjangoUserStore

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def users() -> DjangoUserStore:
    return DjangoUserStore()


@pytest.fixture
def events() -> DjangoEventStore:
    return DjangoEventStore()


@pytest.fixture
def orders(users, events) -> OrderService:
    return OrderService(users, events, DjangoUnitOfWork(), clock=lambda: NOW)


@pytest.fixture
def catalog(users, events) -> EventService:
    return EventService(events, users, DjangoUnitOfWork(), clock=lambda: NOW)


@pytest.fixture
def organizer(users) -> User:
    return users.save(
        User(
            id=None,
            name="Xogum",
            email="org@example.com",
            kind=UserKind.ORGANIZER,
            organizer=OrganizerProfile(cnpj="12.345.678/0001-90", bank_account="1234-5"),
        )
    )


@pytest.fixture
def buyer(users) -> User:
    return users.save(User(id=None, name="Ana", email="ana@example.com", birth_date=date(1990, 1, 1)))


@pytest.fixture
def event(events, organizer) -> Event:
    return events.save(
        Event(
            id=None,
            organizer_id=organizer.id,
            name="Rock in Rio",
            starts_at=NOW + timedelta(days=30),
            unit_price=Money(Decimal("100.00")),
            capacity=10,
            tickets_available=10,
            coupon_code="PROMO",
            coupon_discount=Money(Decimal("50.00")),
        )
    )


@pytest.mark.django_db
class TestDjangoUserStore:
    def test_round_trips_organizer_profile(self, users, organizer):
        loaded = users.find_by_id(organizer.id)

        assert loaded.kind is UserKind.ORGANIZER
        assert loaded.organizer == OrganizerProfile(cnpj="12.345.678/0001-90", bank_account="1234-5")

    def test_find_by_email_ignores_case(self, users, buyer):
        assert users.find_by_email("ANA@example.com").id == buyer.id
        assert users.find_by_email("nobody@example.com") is None

    def test_delete_by_id(self, users, buyer):
        assert users.delete_by_id(buyer.id) is True
        assert users.delete_by_id(buyer.id) is False

    def test_organizer_with_events_is_not_deleted(self, users, organizer, event):
        assert users.delete_by_id(organizer.id) is False
        assert users.find_by_id(organizer.id) is not None

    def test_duplicate_email_maps_to_domain_error(self, users, buyer):
        with pytest.raises(EmailAlreadyRegisteredError):
            users.save(User(id=None, name="Other", email="ana@example.com"))

        assert models.User.objects.filter(email="ana@example.com").count() == 1

    def test_registration_racing_on_email(self, users, buyer):
        service = UserService(users, today=lambda: NOW.date())

        with mock.patch.object(users, "find_by_email", return_value=None):
            with pytest.raises(EmailAlreadyRegisteredError):
                service.register("Ana 2", "ana@example.com", "529.982.247-25", date(1990, 1, 1))

    def test_find_by_event(self, users, orders, buyer, organizer, event):
        orders.create_order(buyer.id, event.id, ["Ana"], ["ana@example.com"])

        assert [u.id for u in users.find_by_event(event.id)] == [buyer.id]


@pytest.mark.django_db
class TestDjangoEventStore:
    def test_find_by_name_containing(self, events, event):
        assert [e.id for e in events.find_by_name_containing("rio")] == [event.id]
        assert events.find_by_name_containing("jazz") == []

    def test_round_trip(self, events, event):
        loaded = events.find_by_id(event.id)

        assert loaded.unit_price == Money(Decimal("100"))
        assert loaded.status is EventStatus.ACTIVE
        assert loaded.created_at is not None

    def test_event_with_orders_is_not_deleted(self, events, orders, buyer, event):
        orders.create_order(buyer.id, event.id, ["Ana"], ["ana@example.com"])

        assert events.delete_by_id(event.id) is False
        assert events.find_by_id(event.id) is not None

    def test_event_without_orders_is_deleted(self, events, event):
        assert events.delete_by_id(event.id) is True
        assert events.delete_by_id(event.id) is False


@pytest.mark.django_db
class TestOrderFlowOverDjango:
    def test_order_persists_with_tickets(self, orders, users, events, buyer, event):
        order = orders.create_order(
            buyer.id, event.id, ["Ana", "Bia"], ["ana@example.com", "bia@example.com"], "PROMO"
        )

        assert models.Ticket.objects.filter(order_id=order.id).count() == 2
        assert events.find_by_id(event.id).tickets_available == 8
        stored = users.find_by_id(buyer.id).find_order(order.id)
        assert stored.total_amount == Money(Decimal("157.50"))
        assert [str(t.code) for t in stored.tickets] == [
            f"EV{event.id:04d}-00001",
            f"EV{event.id:04d}-00002",
        ]

    def test_failed_user_write_rolls_back_stock(self, orders, users, events, buyer, event):
        with mock.patch.object(users, "save", side_effect=RuntimeError("db down")):
            with pytest.raises(RuntimeError):
                orders.create_order(buyer.id, event.id, ["Ana"], ["ana@example.com"])

        assert events.find_by_id(event.id).tickets_available == 10

    def test_insufficient_inventory(self, orders, buyer, event):
        names = [f"G{i}" for i in range(11)]
        emails = [f"g{i}@example.com" for i in range(11)]

        with pytest.raises(InsufficientInventoryError):
            orders.create_order(buyer.id, event.id, names, emails)

    def test_cancel_order_and_cascade(self, orders, catalog, users, events, organizer, buyer, event):
        first = orders.create_order(buyer.id, event.id, ["Ana"], ["ana@example.com"])
        second = orders.create_order(buyer.id, event.id, ["Bia"], ["bia@example.com"])
        orders.cancel_order(buyer.id, first.id)
        assert events.find_by_id(event.id).tickets_available == 9

        catalog.cancel_event(event.id, organizer.id)

        stored = users.find_by_id(buyer.id)
        assert stored.find_order(first.id).status is OrderStatus.CANCELLED_BY_ORGANIZER
        assert stored.find_order(second.id).status is OrderStatus.CANCELLED_BY_ORGANIZER
        assert events.find_by_id(event.id).tickets_available == 0
        assert models.Ticket.objects.filter(order_id=second.id).count() == 1

    def test_cascade_saves_each_buyer_once(self, orders, catalog, users, organizer, buyer, event):
        bia = users.save(User(id=None, name="Bia", email="bia@example.com"))
        orders.create_order(buyer.id, event.id, ["Ana"], ["ana@example.com"])
        orders.create_order(buyer.id, event.id, ["Cris"], ["cris@example.com"])
        orders.create_order(bia.id, event.id, ["Bia"], ["bia@example.com"])

        with mock.patch.object(users, "save", wraps=users.save) as user_save:
            catalog.cancel_event(event.id, organizer.id)

        saved_ids = Counter(call.args[0].id for call in user_save.call_args_list)
        assert saved_ids == Counter({buyer.id: 1, bia.id: 1})
        assert set(models.Order.objects.values_list("status", flat=True)) == {
            OrderStatus.CANCELLED_BY_ORGANIZER.value
        }

    def test_stale_snapshot_keeps_organizer_cancellation(
        self, orders, catalog, users, organizer, buyer, event
    ):
        order = orders.create_order(buyer.id, event.id, ["Ana"], ["ana@example.com"])
        stale = users.find_by_id(buyer.id)
        catalog.cancel_event(event.id, organizer.id)

        saved = users.save(stale)

        assert saved.find_order(order.id).status is OrderStatus.CANCELLED_BY_ORGANIZER
        assert models.Order.objects.get(pk=order.id).status == OrderStatus.CANCELLED_BY_ORGANIZER.value

    def test_purchase_from_stale_snapshot_keeps_other_event_cancelled(
        self, orders, catalog, users, events, organizer, buyer, event
    ):
        other = events.save(replace(event, id=None, name="Jazz"))
        cancelled_order = orders.create_order(buyer.id, event.id, ["Ana"], ["ana@example.com"])
        stale = users.find_by_id(buyer.id)
        catalog.cancel_event(event.id, organizer.id)

        with mock.patch.object(users, "find_by_id", return_value=stale):
            orders.create_order(buyer.id, other.id, ["Ana"], ["ana@example.com"])

        stored = users.find_by_id(buyer.id)
        assert stored.find_order(cancelled_order.id).status is OrderStatus.CANCELLED_BY_ORGANIZER
        assert [o.status for o in stored.orders_for_event(other.id)] == [OrderStatus.CONCLUDED]
