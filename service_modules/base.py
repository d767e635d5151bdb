"""
Base service utilities and shared imports.
All services should import from here for common functionality.
"""
import re
import uuid
import json
import logging
from decimal import Decimal
from typing import Callable, Optional

from sqlalchemy.orm import Session

from database import get_db_session
from exceptions import ValidationException

logger = logging.getLogger("fitmarket")

SessionFactory = Callable[[], Session]

# One currency symbol, then a non-negative amount with at most two decimals: "$10.00"
PRICE_PATTERN = r"^[^\d\s.,+-]\d+(\.\d{1,2})?$"

__all__ = [
    'uuid', 'json', 'logging', 'logger', 'Session', 'SessionFactory',
    'get_db_session', 'new_id', 'parse_id', 'insert_ignore', 'loads_list',
    'PRICE_PATTERN', 'parse_price',
    'loads_dict', 'booking_to_dict', 'finalized_to_dict', 'slot_key'
]


def new_id() -> str:
    return str(uuid.uuid4())


def parse_id(value: str, field: str = "id") -> str:
    """Validate an opaque uuid identifier and return it in canonical form."""
    try:
        return str(uuid.UUID(str(value)))
    except (ValueError, TypeError, AttributeError):
        raise ValidationException("Invalid id format", details={"field": field, "value": value})


def parse_price(price: Optional[str]) -> Decimal:
    """"$25.50" -> Decimal("25.50"). The first character is the currency symbol."""
    if price is None or price == "":
        return Decimal("0")
    if not isinstance(price, str) or not re.fullmatch(PRICE_PATTERN, price):
        raise ValueError(f"Unparseable price {price!r}")
    return Decimal(price[1:])


def insert_ignore(db: Session, model, values: dict) -> int:
    """INSERT ... ON CONFLICT DO NOTHING. Returns the number of rows inserted (0 or 1)."""
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    elif dialect == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
    else:
        raise NotImplementedError(f"insert_ignore is not supported on {dialect}")

    stmt = insert(model.__table__).values(**values).on_conflict_do_nothing()
    result = db.execute(stmt)
    return result.rowcount


def loads_list(raw) -> list:
    if not raw:
        return []
    try:
        value = json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        return []
    return value if isinstance(value, list) else []


def loads_dict(raw) -> dict:
    if not raw:
        return {}
    try:
        value = json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        return {}
    return value if isinstance(value, dict) else {}


def slot_key(day: str, time: str) -> tuple:
    # Must agree with the uq_trainer_slot constraint: exact match after trimming
    return (day.strip(), time.strip())


def booking_to_dict(booking) -> dict:
    return {
        "id": booking.id,
        "trainer_id": booking.trainer_id,
        "class_id": booking.class_id,
        "slot": {"day": booking.slot_day, "time": booking.slot_time},
        "price": booking.price,
        "payment_status": booking.payment_status,
        "details": loads_dict(booking.details_json),
        "created_at": booking.created_at,
    }


def finalized_to_dict(record) -> dict:
    """Serialize a finalized booking (trainer booked slot or ledger entry)."""
    return {
        "booking_id": record.booking_id,
        "trainer_id": record.trainer_id,
        "class_id": record.class_id,
        "slot": {"day": record.slot_day, "time": record.slot_time},
        "price": record.price,
        "payment_status": record.payment_status,
        "details": loads_dict(record.details_json),
        "user_id": record.user_id,
        "user_email": record.user_email,
        "user_name": record.user_name,
        "paid_at": record.paid_at,
    }
