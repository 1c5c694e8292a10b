"""Store interfaces (repository pattern).

Stores must be swappable and return domain models. A lookup miss returns
None; stores never raise domain errors.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager

from ticketing.domain import Event, User


class UserStore(ABC):
    """Interface for user persistence operations.

    A user's orders (and their tickets) are saved together with the user.
    """

    @abstractmethod
    def save(self, user: User) -> User:
        """Insert or update a user. Assigns ids to the user and to new orders.

        Raises EmailAlreadyRegisteredError if another user holds the email.
        Stored orders only move forward in their lifecycle; a stale order
        status in `user` is ignored.
        """
        ...

    @abstractmethod
    def find_by_id(self, user_id: int) -> User | None:
        """Return a user by ID, or None if not found."""
        ...

    @abstractmethod
    def find_by_email(self, email: str) -> User | None:
        """Return a user by email (case-insensitive), or None if not found."""
        ...

    @abstractmethod
    def find_all(self) -> list[User]:
        """Return all users ordered by id."""
        ...

    @abstractmethod
    def delete_by_id(self, user_id: int) -> bool:
        """Delete a user; an organizer whose events are stored is kept.

        Returns whether anything was removed.
        """
        ...

    def find_by_event(self, event_id: int) -> list[User]:
        """Return users holding at least one order for the event."""
        return [user for user in self.find_all() if user.orders_for_event(event_id)]


class EventStore(ABC):
    """Interface for event persistence operations."""

    @abstractmethod
    def save(self, event: Event) -> Event:
        """Insert or update an event. Assigns an id to new events."""
        ...

    @abstractmethod
    def find_by_id(self, event_id: int) -> Event | None:
        """Return an event by ID, or None if not found."""
        ...

    @abstractmethod
    def find_all(self) -> list[Event]:
        """Return all events ordered by id."""
        ...

    @abstractmethod
    def delete_by_id(self, event_id: int) -> bool:
        """Delete an event; an event that has orders is kept.

        Returns whether anything was removed.
        """
        ...

    @abstractmethod
    def find_by_name_containing(self, term: str) -> list[Event]:
        """Return events whose name contains term, ignoring case."""
        ...

    @abstractmethod
    def lock(self, event_id: int) -> AbstractContextManager[None]:
        """Hold an exclusive lock on one event's inventory for the block.

        Reads made inside the block see the latest committed stock.
        """
        ...


class UnitOfWork(ABC):
    """Groups several store writes into one commit."""

    @abstractmethod
    def atomic(self) -> AbstractContextManager[None]:
        """Writes in the block are all kept, or all discarded if it raises."""
        ...
