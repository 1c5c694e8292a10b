"""Domain models representing persisted state.

These are pure domain objects with no API input rules.
Django ORM models are in ticketing/models.py (persistence layer).
State changes never mutate in place; they return a new instance.
"""

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum

from ticketing.domain.errors import InsufficientInventoryError
from ticketing.domain.value_objects import Money, TicketCode


class EventStatus(str, Enum):
    ACTIVE = "ACTIVE"
    CANCELLED = "CANCELLED"


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    CONCLUDED = "CONCLUDED"
    CANCELLED_BY_USER = "CANCELLED_BY_USER"
    CANCELLED_BY_ORGANIZER = "CANCELLED_BY_ORGANIZER"

    def may_replace(self, stored: "OrderStatus") -> bool:
        """Whether an order currently stored as `stored` may be written as this status."""
        return self is stored or stored in _ORDER_PREDECESSORS[self]


_ORDER_PREDECESSORS = {
    OrderStatus.PENDING: frozenset(),
    OrderStatus.CONCLUDED: frozenset({OrderStatus.PENDING}),
    OrderStatus.CANCELLED_BY_USER: frozenset({OrderStatus.CONCLUDED}),
    OrderStatus.CANCELLED_BY_ORGANIZER: frozenset(
        {OrderStatus.PENDING, OrderStatus.CONCLUDED, OrderStatus.CANCELLED_BY_USER}
    ),
}


class UserKind(str, Enum):
    STANDARD = "STANDARD"
    ORGANIZER = "ORGANIZER"


@dataclass(frozen=True)
class OrganizerProfile:
    """Fields only an organizer account carries."""

    cnpj: str
    bank_account: str


@dataclass(frozen=True)
class Event:
    """Domain representation of an Event and its ticket inventory."""

    id: int | None
    organizer_id: int
    name: str
    starts_at: datetime
    unit_price: Money
    capacity: int
    tickets_available: int
    location: str = ""
    description: str = ""
    category: str = ""
    image_url: str | None = None
    coupon_code: str | None = None
    coupon_discount: Money = field(default_factory=Money.zero)
    status: EventStatus = EventStatus.ACTIVE
    created_at: datetime | None = None

    def __post_init__(self) -> None:
        if self.capacity < 0:
            raise ValueError("Capacity cannot be negative")
        if not 0 <= self.tickets_available <= self.capacity:
            raise ValueError("Tickets available must be between 0 and capacity")

    @property
    def is_cancelled(self) -> bool:
        return self.status is EventStatus.CANCELLED

    @property
    def next_ticket_sequence(self) -> int:
        return self.capacity - self.tickets_available + 1

    def can_supply(self, quantity: int) -> bool:
        return self.tickets_available >= quantity

    def reserve(self, quantity: int) -> "Event":
        if not self.can_supply(quantity):
            raise InsufficientInventoryError(
                event_id=self.id, requested=quantity, available=self.tickets_available
            )
        return replace(self, tickets_available=self.tickets_available - quantity)

    def release(self, quantity: int) -> "Event":
        restored = min(self.capacity, self.tickets_available + quantity)
        return replace(self, tickets_available=restored)

    def cancel(self) -> "Event":
        return replace(self, status=EventStatus.CANCELLED, tickets_available=0)

    def coupon_matches(self, code: str | None) -> bool:
        """Coupons compare case-insensitively; blank codes never match."""
        if not code or not code.strip() or not self.coupon_code:
            return False
        return code.strip().casefold() == self.coupon_code.strip().casefold()


@dataclass(frozen=True)
class Ticket:
    """One admission unit bound to a participant."""

    code: TicketCode
    event_id: int
    participant_name: str
    participant_email: str
    purchased_at: datetime
    unit_price: Money


@dataclass(frozen=True)
class Order:
    """Domain representation of an Order (a purchase of N tickets)."""

    id: int | None
    user_id: int
    event_id: int
    quantity: int
    base_amount: Money
    total_amount: Money
    created_at: datetime
    discount_amount: Money = field(default_factory=Money.zero)
    fee_amount: Money = field(default_factory=Money.zero)
    status: OrderStatus = OrderStatus.PENDING
    tickets: tuple[Ticket, ...] = ()

    @property
    def is_active(self) -> bool:
        return self.status in (OrderStatus.PENDING, OrderStatus.CONCLUDED)

    def conclude(self, tickets: tuple[Ticket, ...]) -> "Order":
        return replace(self, status=OrderStatus.CONCLUDED, tickets=tickets)

    def cancel_by_user(self) -> "Order":
        return replace(self, status=OrderStatus.CANCELLED_BY_USER)

    def cancel_by_organizer(self) -> "Order":
        return replace(self, status=OrderStatus.CANCELLED_BY_ORGANIZER)


@dataclass(frozen=True)
class User:
    """Domain representation of a User.

    Organizers are users of kind ORGANIZER carrying an OrganizerProfile.
    """

    id: int | None
    name: str
    email: str
    kind: UserKind = UserKind.STANDARD
    organizer: OrganizerProfile | None = None
    cpf: str = ""
    phone: str = ""
    birth_date: date | None = None
    city: str = ""
    address: str = ""
    orders: tuple[Order, ...] = ()
    created_at: datetime | None = None

    def __post_init__(self) -> None:
        if self.kind is UserKind.ORGANIZER and self.organizer is None:
            raise ValueError("Organizer accounts need an organizer profile")
        if self.kind is UserKind.STANDARD and self.organizer is not None:
            raise ValueError("Only organizer accounts carry an organizer profile")

    @property
    def is_organizer(self) -> bool:
        return self.kind is UserKind.ORGANIZER

    def find_order(self, order_id: int) -> Order | None:
        return next((order for order in self.orders if order.id == order_id), None)

    def orders_for_event(self, event_id: int) -> tuple[Order, ...]:
        return tuple(order for order in self.orders if order.event_id == event_id)

    def with_order(self, order: Order) -> "User":
        return replace(self, orders=self.orders + (order,))

    def replace_order(self, updated: Order) -> "User":
        orders = tuple(updated if order.id == updated.id else order for order in self.orders)
        return replace(self, orders=orders)
