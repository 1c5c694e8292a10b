"""Pytest configuration and shared fixtures."""

from datetime import UTC, date, datetime, timedelta
from decimal import Decimal

import pytest

from ticketing.domain import Event, Money, OrganizerProfile, User, UserKind
from ticketing.services import EventService, OrderService, UserService
from ticketing.stores import InMemoryEventStore, InMemoryUnitOfWork, InMemoryUserStore

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def user_store() -> InMemoryUserStore:
    return InMemoryUserStore()


@pytest.fixture
def event_store(user_store) -> InMemoryEventStore:
    return InMemoryEventStore(user_store)


@pytest.fixture
def unit_of_work(user_store, event_store) -> InMemoryUnitOfWork:
    return InMemoryUnitOfWork(user_store, event_store)


@pytest.fixture
def order_service(user_store, event_store, unit_of_work) -> OrderService:
    return OrderService(user_store, event_store, unit_of_work, clock=lambda: NOW)


@pytest.fixture
def event_service(user_store, event_store, unit_of_work) -> EventService:
    return EventService(event_store, user_store, unit_of_work, clock=lambda: NOW)


@pytest.fixture
def user_service(user_store) -> UserService:
    return UserService(user_store, today=lambda: NOW.date())


@pytest.fixture
def organizer(user_store) -> User:
    return user_store.save(
        User(
            id=None,
            name="Xogum Eventos",
            email="contato@xogum.com",
            kind=UserKind.ORGANIZER,
            organizer=OrganizerProfile(cnpj="12.345.678/0001-90", bank_account="1234-5"),
        )
    )


@pytest.fixture
def make_buyer(user_store):
    def _make(email: str = "ana@example.com", name: str = "Ana") -> User:
        return user_store.save(User(id=None, name=name, email=email, birth_date=date(1990, 5, 1)))

    return _make


@pytest.fixture
def buyer(make_buyer) -> User:
    return make_buyer()


@pytest.fixture
def make_event(event_store, organizer):
    def _make(
        capacity: int = 100,
        tickets_available: int | None = None,
        unit_price: str = "100",
        coupon_code: str | None = "PROMO",
        coupon_discount: str = "50",
        name: str = "Rock in Rio",
    ) -> Event:
        return event_store.save(
            Event(
                id=None,
                organizer_id=organizer.id,
                name=name,
                starts_at=NOW + timedelta(days=30),
                unit_price=Money(Decimal(unit_price)),
                capacity=capacity,
                tickets_available=capacity if tickets_available is None else tickets_available,
                coupon_code=coupon_code,
                coupon_discount=Money(Decimal(coupon_discount)),
            )
        )

    return _make


@pytest.fixture
def event(make_event) -> Event:
    return make_event()


@pytest.fixture
def participants():
    """Build matching participant name and email lists."""

    def _build(count: int) -> tuple[list[str], list[str]]:
        names = [f"Guest {i}" for i in range(1, count + 1)]
        emails = [f"guest{i}@example.com" for i in range(1, count + 1)]
        return names, emails

    return _build
