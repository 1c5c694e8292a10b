from ticketing.stores.interfaces import EventStore, UnitOfWork, UserStore
from ticketing.stores.memory_store import InMemoryEventStore, InMemoryUnitOfWork, InMemoryUserStore

__all__ = [
    "EventStore",
    "UserStore",
    "UnitOfWork",
    "InMemoryEventStore",
    "InMemoryUserStore",
    "InMemoryUnitOfWork",
]
