"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/models.py.
"""

from django.db import models

from ticketing.domain.models import EventStatus, OrderStatus, UserKind


def _choices(enum_cls) -> list[tuple[str, str]]:
    return [(member.value, member.name.replace("_", " ").title()) for member in enum_cls]


class User(models.Model):
    """Persistence model for users and organizers."""

    name = models.CharField(max_length=255)
    email = models.EmailField(max_length=255, unique=True)
    kind = models.CharField(
        max_length=16, choices=_choices(UserKind), default=UserKind.STANDARD.value
    )
    cpf = models.CharField(max_length=14, blank=True)
    phone = models.CharField(max_length=11, blank=True)
    birth_date = models.DateField(blank=True, null=True)
    city = models.CharField(max_length=255, blank=True)
    address = models.CharField(max_length=255, blank=True)
    cnpj = models.CharField(max_length=18, blank=True)
    bank_account = models.CharField(max_length=64, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["id"]

    def __str__(self) -> str:
        return self.email


class Event(models.Model):
    """Persistence model for events and their ticket inventory."""

    organizer = models.ForeignKey(User, on_delete=models.PROTECT, related_name="events")
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    location = models.CharField(max_length=255, blank=True)
    category = models.CharField(max_length=100, blank=True)
    starts_at = models.DateTimeField()
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    capacity = models.PositiveIntegerField()
    tickets_available = models.PositiveIntegerField()
    image_url = models.URLField(max_length=500, blank=True, null=True)
    coupon_code = models.CharField(max_length=64, blank=True, null=True)
    coupon_discount = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    status = models.CharField(
        max_length=16, choices=_choices(EventStatus), default=EventStatus.ACTIVE.value
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(tickets_available__lte=models.F("capacity")),
                name="event_tickets_within_capacity",
            ),
        ]

    def __str__(self) -> str:
        return self.name


class Order(models.Model):
    """Persistence model for orders."""

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="orders")
    event = models.ForeignKey(Event, on_delete=models.PROTECT, related_name="orders")
    quantity = models.PositiveIntegerField()
    base_amount = models.DecimalField(max_digits=12, decimal_places=2)
    discount_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    fee_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    total_amount = models.DecimalField(max_digits=12, decimal_places=2)
    status = models.CharField(
        max_length=32, choices=_choices(OrderStatus), default=OrderStatus.PENDING.value
    )
    created_at = models.DateTimeField()

    class Meta:
        ordering = ["id"]
        indexes = [
            models.Index(fields=["event", "status"]),
        ]

    def __str__(self) -> str:
        return f"Order {self.pk} - {self.status}"


class Ticket(models.Model):
    """Persistence model for tickets; owned by their order."""

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="tickets")
    code = models.CharField(max_length=32)
    event = models.ForeignKey(Event, on_delete=models.PROTECT, related_name="tickets")
    participant_name = models.CharField(max_length=255)
    participant_email = models.EmailField(max_length=255)
    purchased_at = models.DateTimeField()
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)

    class Meta:
        ordering = ["id"]

    def __str__(self) -> str:
        return self.code
