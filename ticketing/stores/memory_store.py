"""In-memory implementation of the stores.

Domain models are immutable, so the stores keep them as-is. Writes made
inside InMemoryUnitOfWork.atomic() are journaled per thread and undone if
the block raises.
"""

import itertools
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import replace
from typing import Generic, TypeVar

from ticketing.domain import Event, Order, User
from ticketing.domain.errors import EmailAlreadyRegisteredError
from ticketing.stores.interfaces import EventStore, UnitOfWork, UserStore

T = TypeVar("T")

_MISSING = object()


class _JournaledTable(Generic[T]):
    """Thread-safe id -> record map with an optional per-thread undo journal."""

    def __init__(self) -> None:
        self._rows: dict[int, T] = {}
        self._ids = itertools.count(1)
        self._mutex = threading.RLock()
        self._local = threading.local()

    def next_id(self) -> int:
        return next(self._ids)

    def get(self, key: int) -> T | None:
        with self._mutex:
            return self._rows.get(key)

    def values(self) -> list[T]:
        with self._mutex:
            return [self._rows[key] for key in sorted(self._rows)]

    def put(self, key: int, row: T) -> None:
        with self._mutex:
            self._record(key)
            self._rows[key] = row

    def pop(self, key: int) -> bool:
        with self._mutex:
            if key not in self._rows:
                return False
            self._record(key)
            del self._rows[key]
            return True

    def begin(self) -> None:
        self._local.journal = {}

    def rollback(self) -> None:
        journal = getattr(self._local, "journal", None) or {}
        with self._mutex:
            for key, previous in journal.items():
                if previous is _MISSING:
                    self._rows.pop(key, None)
                else:
                    self._rows[key] = previous

    def end(self) -> None:
        self._local.journal = None

    def _record(self, key: int) -> None:
        journal = getattr(self._local, "journal", None)
        if journal is not None and key not in journal:
            journal[key] = self._rows.get(key, _MISSING)


class InMemoryUserStore(UserStore):
    """Map-backed user store with storage-assigned user and order ids.

    Like the relational store, it keeps emails unique, never moves a stored
    order back to an earlier status and refuses to delete an organizer
    whose events are still stored.
    """

    def __init__(self) -> None:
        self.table: _JournaledTable[User] = _JournaledTable()
        self.events: "InMemoryEventStore | None" = None
        self._order_ids = itertools.count(1)
        self._save_lock = threading.RLock()

    def save(self, user: User) -> User:
        with self._save_lock:
            if self._email_taken(user):
                raise EmailAlreadyRegisteredError(user.email)
            if user.id is None:
                user = replace(user, id=self.table.next_id())
            stored = self.table.get(user.id)
            orders = tuple(self._reconcile(stored, order) for order in user.orders)
            user = replace(user, orders=orders)
            self.table.put(user.id, user)
            return user

    def _email_taken(self, user: User) -> bool:
        wanted = user.email.strip().casefold()
        return any(
            other.id != user.id and other.email.casefold() == wanted
            for other in self.table.values()
        )

    def _reconcile(self, stored: User | None, order: Order) -> Order:
        if order.id is None:
            return replace(order, id=next(self._order_ids))
        current = stored.find_order(order.id) if stored else None
        if current is not None and not order.status.may_replace(current.status):
            return current
        return order

    def find_by_id(self, user_id: int) -> User | None:
        return self.table.get(user_id)

    def find_by_email(self, email: str) -> User | None:
        wanted = email.strip().casefold()
        return next(
            (user for user in self.table.values() if user.email.casefold() == wanted),
            None,
        )

    def find_all(self) -> list[User]:
        return self.table.values()

    def delete_by_id(self, user_id: int) -> bool:
        if self.events is not None and any(
            event.organizer_id == user_id for event in self.events.find_all()
        ):
            return False
        return self.table.pop(user_id)


class InMemoryEventStore(EventStore):
    """Map-backed event store with one reentrant lock per event.

    Given the user store, it refuses to delete events that still have orders.
    """

    def __init__(self, users: InMemoryUserStore | None = None) -> None:
        self.table: _JournaledTable[Event] = _JournaledTable()
        self.users = users
        if users is not None:
            users.events = self
        self._locks: dict[int, threading.RLock] = {}
        self._locks_guard = threading.Lock()

    def save(self, event: Event) -> Event:
        if event.id is None:
            event = replace(event, id=self.table.next_id())
        self.table.put(event.id, event)
        return event

    def find_by_id(self, event_id: int) -> Event | None:
        return self.table.get(event_id)

    def find_all(self) -> list[Event]:
        return self.table.values()

    def delete_by_id(self, event_id: int) -> bool:
        if self.users is not None and self.users.find_by_event(event_id):
            return False
        return self.table.pop(event_id)

    def find_by_name_containing(self, term: str) -> list[Event]:
        needle = term.casefold()
        return [event for event in self.table.values() if needle in event.name.casefold()]

    @contextmanager
    def lock(self, event_id: int) -> Iterator[None]:
        with self._locks_guard:
            event_lock = self._locks.setdefault(event_id, threading.RLock())
        with event_lock:
            yield


class InMemoryUnitOfWork(UnitOfWork):
    """Serializes atomic blocks and undoes their writes on failure.

    Nested blocks join the outermost one.
    """

    def __init__(self, users: InMemoryUserStore, events: InMemoryEventStore) -> None:
        self._tables = (users.table, events.table)
        self._mutex = threading.RLock()
        self._local = threading.local()

    @contextmanager
    def atomic(self) -> Iterator[None]:
        if getattr(self._local, "depth", 0):
            self._local.depth += 1
            try:
                yield
            finally:
                self._local.depth -= 1
            return

        with self._mutex:
            for table in self._tables:
                table.begin()
            self._local.depth = 1
            try:
                yield
            except BaseException:
                for table in self._tables:
                    table.rollback()
                raise
            finally:
                self._local.depth = 0
                for table in self._tables:
                    table.end()
