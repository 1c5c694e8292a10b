"""Django ORM implementation of the stores.

Rows are converted to domain models on the way out and back on the way in.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import replace
from decimal import Decimal

from django.db import IntegrityError, transaction
from django.db.models import Prefetch, ProtectedError, QuerySet

from ticketing import models
from ticketing.domain import (
    Event,
    EventStatus,
    Money,
    Order,
    OrderStatus,
    OrganizerProfile,
    Ticket,
    TicketCode,
    User,
    UserKind,
)
from ticketing.domain.errors import EmailAlreadyRegisteredError
from ticketing.stores.interfaces import EventStore, UnitOfWork, UserStore


def _money(value: Decimal) -> Money:
    return Money(Decimal(value))


def event_from_row(row: models.Event) -> Event:
    return Event(
        id=row.pk,
        organizer_id=row.organizer_id,
        name=row.name,
        description=row.description,
        location=row.location,
        category=row.category,
        starts_at=row.starts_at,
        unit_price=_money(row.unit_price),
        capacity=row.capacity,
        tickets_available=row.tickets_available,
        image_url=row.image_url,
        coupon_code=row.coupon_code,
        coupon_discount=_money(row.coupon_discount),
        status=EventStatus(row.status),
        created_at=row.created_at,
    )


def ticket_from_row(row: models.Ticket) -> Ticket:
    return Ticket(
        code=TicketCode(row.code),
        event_id=row.event_id,
        participant_name=row.participant_name,
        participant_email=row.participant_email,
        purchased_at=row.purchased_at,
        unit_price=_money(row.unit_price),
    )


def order_from_row(row: models.Order) -> Order:
    return Order(
        id=row.pk,
        user_id=row.user_id,
        event_id=row.event_id,
        quantity=row.quantity,
        base_amount=_money(row.base_amount),
        discount_amount=_money(row.discount_amount),
        fee_amount=_money(row.fee_amount),
        total_amount=_money(row.total_amount),
        status=OrderStatus(row.status),
        created_at=row.created_at,
        tickets=tuple(ticket_from_row(ticket) for ticket in row.tickets.all()),
    )


def user_from_row(row: models.User) -> User:
    kind = UserKind(row.kind)
    organizer = None
    if kind is UserKind.ORGANIZER:
        organizer = OrganizerProfile(cnpj=row.cnpj, bank_account=row.bank_account)
    return User(
        id=row.pk,
        name=row.name,
        email=row.email,
        kind=kind,
        organizer=organizer,
        cpf=row.cpf,
        phone=row.phone,
        birth_date=row.birth_date,
        city=row.city,
        address=row.address,
        orders=tuple(order_from_row(order) for order in row.orders.all()),
        created_at=row.created_at,
    )


def _users_with_orders():
    return models.User.objects.prefetch_related(
        Prefetch("orders", queryset=models.Order.objects.prefetch_related("tickets"))
    )


def _delete(rows: QuerySet) -> bool:
    """Delete the rows; rows other tables still point at are kept."""
    try:
        with transaction.atomic():
            deleted, _ = rows.delete()
    except ProtectedError:
        return False
    return deleted > 0


class DjangoUserStore(UserStore):
    """Relational user store; orders and tickets live in their own tables.

    Saving a user whose snapshot is stale never moves a stored order back to
    an earlier status; such orders keep what the database holds.
    """

    def save(self, user: User) -> User:
        profile = user.organizer
        try:
            with transaction.atomic():
                row, _ = models.User.objects.update_or_create(
                    pk=user.id,
                    defaults={
                        "name": user.name,
                        "email": user.email,
                        "kind": user.kind.value,
                        "cpf": user.cpf,
                        "phone": user.phone,
                        "birth_date": user.birth_date,
                        "city": user.city,
                        "address": user.address,
                        "cnpj": profile.cnpj if profile else "",
                        "bank_account": profile.bank_account if profile else "",
                    },
                )
                for order in user.orders:
                    self._save_order(row.pk, order)
                return user_from_row(_users_with_orders().get(pk=row.pk))
        except IntegrityError as exc:
            if models.User.objects.filter(email__iexact=user.email).exclude(pk=user.id).exists():
                raise EmailAlreadyRegisteredError(user.email) from exc
            raise

    def _save_order(self, user_id: int, order: Order) -> None:
        if order.id is not None:
            allowed = [status.value for status in OrderStatus if order.status.may_replace(status)]
            models.Order.objects.filter(pk=order.id, status__in=allowed).update(
                status=order.status.value
            )
            return

        row = models.Order.objects.create(
            user_id=user_id,
            event_id=order.event_id,
            quantity=order.quantity,
            base_amount=order.base_amount.amount,
            discount_amount=order.discount_amount.amount,
            fee_amount=order.fee_amount.amount,
            total_amount=order.total_amount.amount,
            status=order.status.value,
            created_at=order.created_at,
        )
        models.Ticket.objects.bulk_create(
            models.Ticket(
                order=row,
                code=str(ticket.code),
                event_id=ticket.event_id,
                participant_name=ticket.participant_name,
                participant_email=ticket.participant_email,
                purchased_at=ticket.purchased_at,
                unit_price=ticket.unit_price.amount,
            )
            for ticket in order.tickets
        )

    def find_by_id(self, user_id: int) -> User | None:
        row = _users_with_orders().filter(pk=user_id).first()
        return user_from_row(row) if row else None

    def find_by_email(self, email: str) -> User | None:
        row = _users_with_orders().filter(email__iexact=email.strip()).first()
        return user_from_row(row) if row else None

    def find_all(self) -> list[User]:
        return [user_from_row(row) for row in _users_with_orders()]

    def find_by_event(self, event_id: int) -> list[User]:
        rows = _users_with_orders().filter(orders__event_id=event_id).distinct()
        return [user_from_row(row) for row in rows]

    def delete_by_id(self, user_id: int) -> bool:
        return _delete(models.User.objects.filter(pk=user_id))


class DjangoEventStore(EventStore):
    """Relational event store; lock() takes a row lock for the transaction."""

    def save(self, event: Event) -> Event:
        row, _ = models.Event.objects.update_or_create(
            pk=event.id,
            defaults={
                "organizer_id": event.organizer_id,
                "name": event.name,
                "description": event.description,
                "location": event.location,
                "category": event.category,
                "starts_at": event.starts_at,
                "unit_price": event.unit_price.amount,
                "capacity": event.capacity,
                "tickets_available": event.tickets_available,
                "image_url": event.image_url,
                "coupon_code": event.coupon_code,
                "coupon_discount": event.coupon_discount.amount,
                "status": event.status.value,
            },
        )
        return replace(event, id=row.pk, created_at=row.created_at)

    def find_by_id(self, event_id: int) -> Event | None:
        row = models.Event.objects.filter(pk=event_id).first()
        return event_from_row(row) if row else None

    def find_all(self) -> list[Event]:
        return [event_from_row(row) for row in models.Event.objects.all()]

    def delete_by_id(self, event_id: int) -> bool:
        return _delete(models.Event.objects.filter(pk=event_id))

    def find_by_name_containing(self, term: str) -> list[Event]:
        rows = models.Event.objects.filter(name__icontains=term)
        return [event_from_row(row) for row in rows]

    @contextmanager
    def lock(self, event_id: int) -> Iterator[None]:
        # The row lock lasts until the outermost transaction ends.
        with transaction.atomic():
            list(models.Event.objects.select_for_update().filter(pk=event_id).values_list("pk"))
            yield


class DjangoUnitOfWork(UnitOfWork):
    @contextmanager
    def atomic(self) -> Iterator[None]:
        with transaction.atomic():
            yield
