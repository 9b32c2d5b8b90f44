"""Domain primitives that enforce validity at creation time."""

import secrets
from dataclasses import dataclass
from typing import Self
from uuid import UUID


@dataclass(frozen=True)
class EventId:
    """Unique identifier for an Event."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(str(value)))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class RegistrationId:
    """Unique identifier for a Registration."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(str(value)))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class TicketId:
    """Unique identifier for a Ticket."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(str(value)))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class UserId:
    """Identifier of a principal from the external identity store."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(str(value)))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Quantity:
    """Positive number of seats or tickets."""

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ValueError("Quantity must be an integer")
        if self.value < 1:
            raise ValueError("Quantity must be at least 1")


@dataclass(frozen=True)
class Capacity:
    """Non-negative integer representing remaining open seats."""

    value: int

    def __post_init__(self) -> None:
        if self.value < 0:
            raise ValueError("Capacity cannot be negative")

    def can_hold(self, quantity: Quantity) -> bool:
        return self.value >= quantity.value

    def reserve(self, quantity: Quantity) -> "Capacity":
        return Capacity(self.value - quantity.value)

    def release(self, quantity: Quantity) -> "Capacity":
        return Capacity(self.value + quantity.value)


@dataclass(frozen=True)
class TicketCode:
    """The scannable credential printed on a ticket."""

    value: str

    PREFIX = "TK-"

    def __post_init__(self) -> None:
        if not self.value or not self.value.strip():
            raise ValueError("Ticket code cannot be empty")

    @classmethod
    def generate(cls, nbytes: int = 10) -> Self:
        return cls(value=cls.PREFIX + secrets.token_hex(nbytes).upper())

    def __str__(self) -> str:
        return self.value
