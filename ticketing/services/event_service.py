"""Event service - catalog queries, event creation and cancellation.

Cancelling an event cascades to every order placed for it.
"""

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from decimal import Decimal

from django.utils import timezone

from ticketing.domain import Event, Money, User
from ticketing.domain.errors import (
    EventAlreadyCancelledError,
    EventNotFoundError,
    InvalidEventError,
    NotEventOrganizerError,
    UserNotFoundError,
)
from ticketing.domain.models import OrderStatus
from ticketing.stores.interfaces import EventStore, UnitOfWork, UserStore

logger = logging.getLogger(__name__)

DEFAULT_MAX_COUPON_RATIO = Decimal("0.5")


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _newest_first(events: list[Event]) -> list[Event]:
    return sorted(events, key=lambda event: event.id or 0, reverse=True)


class EventService:
    """Service for event catalog operations."""

    def __init__(
        self,
        events: EventStore,
        users: UserStore,
        unit_of_work: UnitOfWork,
        max_coupon_ratio: Decimal = DEFAULT_MAX_COUPON_RATIO,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._events = events
        self._users = users
        self._uow = unit_of_work
        self._max_coupon_ratio = max_coupon_ratio
        self._clock = clock

    def create_event(
        self,
        organizer_id: int,
        name: str,
        starts_at: datetime,
        unit_price: Money | Decimal | str | int,
        capacity: int,
        location: str = "",
        description: str = "",
        category: str = "",
        image_url: str | None = None,
        coupon_code: str | None = None,
        coupon_discount: Money | Decimal | str | int = 0,
    ) -> Event:
        """Create an event with its whole capacity on sale.

        Raises:
            UserNotFoundError: If the organizer does not exist.
            NotEventOrganizerError: If the user is not an organizer.
            InvalidEventError: If a field breaks an event rule.
        """
        organizer = self._require_user(organizer_id)
        if not organizer.is_organizer:
            raise NotEventOrganizerError(organizer_id)

        if not name or not name.strip():
            raise InvalidEventError("Event name is required")
        if capacity <= 0:
            raise InvalidEventError("Capacity must be positive")
        if timezone.is_naive(starts_at):
            raise InvalidEventError("Event date must include a time zone")
        if starts_at < self._clock():
            raise InvalidEventError("Event date cannot be in the past")
        try:
            price = Money.of(unit_price)
            discount = Money.of(coupon_discount)
        except (TypeError, ValueError) as exc:
            raise InvalidEventError("Prices must be non-negative amounts") from exc
        if discount.amount > price.amount * self._max_coupon_ratio:
            raise InvalidEventError(
                f"Coupon discount cannot exceed {self._max_coupon_ratio:.0%} of the ticket price"
            )

        event = self._events.save(
            Event(
                id=None,
                organizer_id=organizer_id,
                name=name.strip(),
                starts_at=starts_at,
                unit_price=price,
                capacity=capacity,
                tickets_available=capacity,
                location=location,
                description=description,
                category=category,
                image_url=image_url,
                coupon_code=coupon_code.strip() if coupon_code and coupon_code.strip() else None,
                coupon_discount=discount,
                created_at=self._clock(),
            )
        )
        logger.info("Event %s created by organizer %s", event.id, organizer_id)
        return event

    def get_event(self, event_id: int) -> Event:
        """Return an event by ID.

        Raises:
            EventNotFoundError: If the event does not exist.
        """
        event = self._events.find_by_id(event_id) if event_id > 0 else None
        if event is None:
            raise EventNotFoundError(event_id)
        return event

    def list_events(self, query: str | None = None) -> list[Event]:
        """Return all events, or those matching query, newest first."""
        if query and query.strip():
            return self.search_by_name(query.strip())
        return _newest_first(self._events.find_all())

    def search_by_name(self, term: str) -> list[Event]:
        return _newest_first(self._events.find_by_name_containing(term))

    def list_for_organizer(self, organizer_id: int) -> list[Event]:
        events = [e for e in self._events.find_all() if e.organizer_id == organizer_id]
        return _newest_first(events)

    def cancel_event(self, event_id: int, organizer_id: int) -> Event:
        """Cancel an event and every order placed for it.

        Each affected buyer is saved once, however many orders they hold.

        Raises:
            EventNotFoundError: If the event does not exist.
            NotEventOrganizerError: If the requester does not own the event.
            EventAlreadyCancelledError: If the event is already cancelled.
        """
        with self._uow.atomic(), self._events.lock(event_id):
            event = self.get_event(event_id)
            if event.organizer_id != organizer_id:
                logger.warning(
                    "Rejected event cancellation: event=%s requester=%s", event_id, organizer_id
                )
                raise NotEventOrganizerError(organizer_id, event_id)
            if event.is_cancelled:
                raise EventAlreadyCancelledError(event_id)

            cancelled = self._events.save(event.cancel())

            affected_orders = 0
            for user in self._users.find_by_event(event_id):
                updated = user
                for order in user.orders_for_event(event_id):
                    if order.status is not OrderStatus.CANCELLED_BY_ORGANIZER:
                        updated = updated.replace_order(order.cancel_by_organizer())
                        affected_orders += 1
                if updated is not user:
                    self._users.save(updated)

        logger.info(
            "Event %s cancelled by organizer %s; %s orders cancelled",
            event_id, organizer_id, affected_orders,
        )
        return cancelled

    def _require_user(self, user_id: int) -> User:
        user = self._users.find_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user
