"""Wires services to the store backend named in settings.TICKETING."""

from dataclasses import dataclass
from decimal import Decimal

from django.conf import settings

from ticketing.domain.pricing import ServiceFeeStrategy
from ticketing.services.event_service import EventService
from ticketing.services.order_service import OrderService
from ticketing.services.user_service import UserService
from ticketing.stores.interfaces import EventStore, UnitOfWork, UserStore


@dataclass(frozen=True)
class Services:
    orders: OrderService
    events: EventService
    users: UserService


def _stores(backend: str) -> tuple[UserStore, EventStore, UnitOfWork]:
    if backend == "django":
        from ticketing.stores.django_store import (
            DjangoEventStore,
            DjangoUnitOfWork,
            DjangoUserStore,
        )

        return DjangoUserStore(), DjangoEventStore(), DjangoUnitOfWork()
    if backend == "memory":
        from ticketing.stores.memory_store import (
            InMemoryEventStore,
            InMemoryUnitOfWork,
            InMemoryUserStore,
        )

        users = InMemoryUserStore()
        events = InMemoryEventStore(users)
        return users, events, InMemoryUnitOfWork(users, events)
    raise ValueError(f"Unknown ticketing store backend: {backend!r}")


def build_services(backend: str | None = None) -> Services:
    """Build the three services over one shared set of stores."""
    config = settings.TICKETING
    users, events, uow = _stores(backend or config["STORE_BACKEND"])
    fee = ServiceFeeStrategy(Decimal(str(config["SERVICE_FEE_RATE"])))
    return Services(
        orders=OrderService(users, events, uow, fee_strategy=fee),
        events=EventService(
            events,
            users,
            uow,
            max_coupon_ratio=Decimal(str(config["MAX_COUPON_DISCOUNT_RATIO"])),
        ),
        users=UserService(users),
    )
