from ticketing.domain.models import (
    Event,
    EventStatus,
    Order,
    OrderStatus,
    OrganizerProfile,
    Ticket,
    User,
    UserKind,
)
from ticketing.domain.pricing import PriceBreakdown, quote
from ticketing.domain.value_objects import Money, TicketCode

__all__ = [
    "Event",
    "EventStatus",
    "Order",
    "OrderStatus",
    "OrganizerProfile",
    "Ticket",
    "User",
    "UserKind",
    "PriceBreakdown",
    "quote",
    "Money",
    "TicketCode",
]
