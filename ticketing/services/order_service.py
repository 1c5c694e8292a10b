"""Order service - purchase, cancellation and price preview.

Services:
- Depend only on interfaces (stores)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or domain errors

Stock is checked and decremented while holding the event's lock, inside
the same atomic block that persists the event and the buyer.
"""

import logging
from collections.abc import Callable, Sequence
from datetime import UTC, datetime

from ticketing.domain import (
    Event,
    Order,
    OrderStatus,
    PriceBreakdown,
    Ticket,
    TicketCode,
    User,
    quote,
)
from ticketing.domain.errors import (
    EventCancelledError,
    EventNotFoundError,
    InsufficientInventoryError,
    InvalidQuantityError,
    OrderNotCancellableError,
    OrderNotFoundError,
    ParticipantMismatchError,
    UserNotFoundError,
)
from ticketing.domain.pricing import PriceStrategy, ServiceFeeStrategy
from ticketing.stores.interfaces import EventStore, UnitOfWork, UserStore

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class OrderService:
    """Service for buying and cancelling tickets."""

    def __init__(
        self,
        users: UserStore,
        events: EventStore,
        unit_of_work: UnitOfWork,
        fee_strategy: PriceStrategy | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._users = users
        self._events = events
        self._uow = unit_of_work
        self._fee_strategy = fee_strategy or ServiceFeeStrategy()
        self._clock = clock

    def create_order(
        self,
        user_id: int,
        event_id: int,
        participant_names: Sequence[str],
        participant_emails: Sequence[str],
        coupon_code: str | None = None,
    ) -> Order:
        """Buy one ticket per participant and return the concluded order.

        Raises:
            ParticipantMismatchError: If names and emails differ in length or are empty.
            UserNotFoundError: If the user does not exist.
            EventNotFoundError: If the event does not exist.
            EventCancelledError: If the organizer cancelled the event.
            InsufficientInventoryError: If fewer tickets remain than requested.
        """
        if not participant_names or len(participant_names) != len(participant_emails):
            raise ParticipantMismatchError(len(participant_names), len(participant_emails))
        quantity = len(participant_names)

        with self._uow.atomic(), self._events.lock(event_id):
            user = self._require_user(user_id)
            event = self._require_event(event_id)
            if event.is_cancelled:
                raise EventCancelledError(event_id)

            if not event.can_supply(quantity):
                logger.warning(
                    "Rejected order: user=%s event=%s requested=%s available=%s",
                    user_id, event_id, quantity, event.tickets_available,
                )
                raise InsufficientInventoryError(event_id, quantity, event.tickets_available)

            price = quote(event, quantity, coupon_code, self._fee_strategy)
            now = self._clock()
            order = Order(
                id=None,
                user_id=user_id,
                event_id=event_id,
                quantity=quantity,
                base_amount=price.base_amount,
                discount_amount=price.discount_amount,
                fee_amount=price.fee_amount,
                total_amount=price.total_amount,
                status=OrderStatus.PENDING,
                created_at=now,
            )
            tickets = self._mint_tickets(event, participant_names, participant_emails, now)
            order = order.conclude(tickets)

            self._events.save(event.reserve(quantity))
            saved_user = self._users.save(user.with_order(order))

        order = saved_user.orders[-1]
        logger.info(
            "Order %s concluded: user=%s event=%s quantity=%s total=%s",
            order.id, user_id, event_id, quantity, order.total_amount,
        )
        return order

    def cancel_order(self, user_id: int, order_id: int) -> Order:
        """Cancel one of the user's own concluded orders and restock its tickets.

        Raises:
            UserNotFoundError: If the user does not exist.
            OrderNotFoundError: If the user has no order with that id.
            OrderNotCancellableError: If the order is not CONCLUDED.
            EventCancelledError: If the organizer already cancelled the event.
        """
        user = self._require_user(user_id)
        order = user.find_order(order_id)
        if order is None:
            raise OrderNotFoundError(order_id)

        with self._uow.atomic(), self._events.lock(order.event_id):
            # Re-read under the lock so a concurrent cancellation is seen.
            user = self._require_user(user_id)
            order = user.find_order(order_id)
            if order is None:
                raise OrderNotFoundError(order_id)
            if order.status is not OrderStatus.CONCLUDED:
                logger.warning(
                    "Rejected cancellation: order=%s status=%s", order_id, order.status.value
                )
                raise OrderNotCancellableError(order_id, order.status.value)

            event = self._require_event(order.event_id)
            if event.is_cancelled:
                raise EventCancelledError(event.id)

            self._events.save(event.release(order.quantity))
            cancelled = order.cancel_by_user()
            self._users.save(user.replace_order(cancelled))

        logger.info(
            "Order %s cancelled by user %s; %s tickets restocked for event %s",
            order_id, user_id, order.quantity, order.event_id,
        )
        return cancelled

    def preview_price(
        self, event_id: int, quantity: int, coupon_code: str | None = None
    ) -> PriceBreakdown:
        """Quote a purchase without touching inventory.

        Raises:
            EventNotFoundError: If the event does not exist.
            InvalidQuantityError: If quantity is not positive.
        """
        if quantity <= 0:
            raise InvalidQuantityError(quantity)
        event = self._require_event(event_id)
        return quote(event, quantity, coupon_code, self._fee_strategy)

    def get_order(self, user_id: int, order_id: int) -> Order:
        order = self._require_user(user_id).find_order(order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        return order

    def list_orders(self, user_id: int) -> list[Order]:
        """Return the user's orders, newest first."""
        user = self._require_user(user_id)
        return sorted(user.orders, key=lambda order: order.id or 0, reverse=True)

    def _mint_tickets(
        self,
        event: Event,
        names: Sequence[str],
        emails: Sequence[str],
        purchased_at: datetime,
    ) -> tuple[Ticket, ...]:
        first = event.next_ticket_sequence
        return tuple(
            Ticket(
                code=TicketCode.for_sequence(event.id, first + offset),
                event_id=event.id,
                participant_name=name,
                participant_email=email,
                purchased_at=purchased_at,
                unit_price=event.unit_price,
            )
            for offset, (name, email) in enumerate(zip(names, emails))
        )

    def _require_user(self, user_id: int) -> User:
        user = self._users.find_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    def _require_event(self, event_id: int) -> Event:
        event = self._events.find_by_id(event_id)
        if event is None:
            raise EventNotFoundError(event_id)
        return event

