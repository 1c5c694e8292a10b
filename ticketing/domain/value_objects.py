"""Domain primitives that enforce validity at creation time."""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Self

CENT = Decimal("0.01")


@dataclass(frozen=True)
class Money:
    """Price representation with validation.

    Floats are refused so that amounts never pick up binary rounding noise.
    """

    amount: Decimal

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise TypeError("Money amount must be a Decimal")
        if self.amount < 0:
            raise ValueError("Money amount cannot be negative")

    @classmethod
    def of(cls, value: "Money | Decimal | int | str") -> Self:
        if isinstance(value, Money):
            return cls(value.amount)
        if isinstance(value, float):
            raise TypeError("Use Decimal or str for money, not float")
        try:
            return cls(Decimal(value))
        except InvalidOperation as exc:
            raise ValueError(f"Invalid money amount: {value!r}") from exc

    @classmethod
    def zero(cls) -> Self:
        return cls(Decimal("0"))

    def quantize(self) -> "Money":
        return Money(self.amount.quantize(CENT, rounding=ROUND_HALF_UP))

    def __str__(self) -> str:
        return f"{self.amount:.2f}"


@dataclass(frozen=True)
class TicketCode:
    """Human-readable ticket identifier, unique within one event."""

    value: str

    @classmethod
    def for_sequence(cls, event_id: int, sequence: int) -> Self:
        if sequence <= 0:
            raise ValueError("Ticket sequence must be positive")
        return cls(value=f"EV{event_id:04d}-{sequence:05d}")

    def __str__(self) -> str:
        return self.value
