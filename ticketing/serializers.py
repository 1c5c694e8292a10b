"""Serializers for transforming domain models to presentation payloads.

Output only: the presentation layer renders these, it never writes back
through them.
"""

from rest_framework import serializers

from ticketing.domain.errors import DomainError


class MoneyField(serializers.Field):
    """Renders Money as a two-decimal string."""

    def __init__(self, **kwargs) -> None:
        kwargs["read_only"] = True
        super().__init__(**kwargs)

    def to_representation(self, value) -> str:
        return str(value)


class TicketSerializer(serializers.Serializer):
    """Serializer for Ticket domain model."""

    code = serializers.CharField(source="code.value")
    event_id = serializers.IntegerField()
    participant_name = serializers.CharField()
    participant_email = serializers.EmailField()
    purchased_at = serializers.DateTimeField()
    unit_price = MoneyField()


class OrderSerializer(serializers.Serializer):
    """Serializer for Order domain model."""

    id = serializers.IntegerField()
    user_id = serializers.IntegerField()
    event_id = serializers.IntegerField()
    quantity = serializers.IntegerField()
    base_amount = MoneyField()
    discount_amount = MoneyField()
    fee_amount = MoneyField()
    total_amount = MoneyField()
    status = serializers.CharField(source="status.value")
    created_at = serializers.DateTimeField()
    tickets = TicketSerializer(many=True)


class PriceBreakdownSerializer(serializers.Serializer):
    base_amount = MoneyField()
    discount_amount = MoneyField()
    fee_amount = MoneyField()
    total_amount = MoneyField()
    coupon_valid = serializers.BooleanField()


class EventSerializer(serializers.Serializer):
    """Serializer for Event domain model. The coupon code itself stays private."""

    id = serializers.IntegerField()
    organizer_id = serializers.IntegerField()
    name = serializers.CharField()
    description = serializers.CharField()
    location = serializers.CharField()
    category = serializers.CharField()
    starts_at = serializers.DateTimeField()
    unit_price = MoneyField()
    capacity = serializers.IntegerField()
    tickets_available = serializers.IntegerField()
    image_url = serializers.CharField(allow_null=True)
    has_coupon = serializers.SerializerMethodField()
    status = serializers.CharField(source="status.value")

    def get_has_coupon(self, event) -> bool:
        return bool(event.coupon_code)


class UserSerializer(serializers.Serializer):
    """Serializer for User domain model; personal documents are not exposed."""

    id = serializers.IntegerField()
    name = serializers.CharField()
    email = serializers.EmailField()
    kind = serializers.CharField(source="kind.value")
    city = serializers.CharField()
    orders = OrderSerializer(many=True)


def serialize_error(error: DomainError) -> dict[str, str]:
    """User-safe payload for a domain error."""
    return {"code": error.code.value, "message": error.message}
