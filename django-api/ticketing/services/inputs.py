"""Input parsing shared by services; maps malformed input to domain errors."""

from typing import TypeVar

from ticketing.domain import EventId, Quantity, RegistrationId, TicketCode, TicketId, UserId
from ticketing.domain.errors import InvalidIdError, InvalidQuantityError, MissingTicketCodeError

IdT = TypeVar("IdT", EventId, RegistrationId, TicketId, UserId)


def parse_id(id_type: type[IdT], value: object, field: str) -> IdT:
    if isinstance(value, id_type):
        return value
    try:
        return id_type.from_string(str(value))
    except (TypeError, ValueError):
        raise InvalidIdError(field) from None


def parse_quantity(value: object) -> Quantity:
    if isinstance(value, Quantity):
        return value
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidQuantityError()
    try:
        return Quantity(value)
    except ValueError:
        raise InvalidQuantityError() from None


def parse_code(value: object) -> TicketCode:
    if isinstance(value, TicketCode):
        return value
    if not isinstance(value, str):
        raise MissingTicketCodeError()
    try:
        return TicketCode(value.strip())
    except ValueError:
        raise MissingTicketCodeError() from None
