"""
Booking Service - a member's payment history of pending and paid bookings.
"""
from typing import List

from .base import (
    json, logger, SessionFactory, get_db_session,
    new_id, parse_id, parse_price, booking_to_dict
)
from .slot_service import normalize_slot
from exceptions import DomainException, ValidationException, NotFoundException, ServiceException
from models_orm import UserORM, BookingORM, FitnessClassORM

# Keys stored in their own columns; anything else goes to details_json
BOOKING_COLUMNS = {"id", "trainer_id", "class_id", "slot", "price", "payment_status"}


class BookingService:
    """Service for recording and reading member bookings."""

    def __init__(self, session_factory: SessionFactory = get_db_session):
        self.session_factory = session_factory

    def record_pending_booking(self, member_email: str, booking_fields: dict) -> str:
        """
        Append a pending booking to the member's payment history.

        The slot is stored as given; whether the trainer actually offers it or
        whether it is already taken is not checked here.
        """
        if not booking_fields or not booking_fields.get("trainer_id") or not booking_fields.get("slot"):
            raise ValidationException("trainer_id and slot are required")

        trainer_id = parse_id(booking_fields["trainer_id"], "trainer_id")
        day, time = normalize_slot(booking_fields["slot"])
        class_id = booking_fields.get("class_id")
        if class_id:
            class_id = parse_id(class_id, "class_id")

        price = booking_fields.get("price") or None
        try:
            parse_price(price)
        except ValueError:
            raise ValidationException(
                "Price must be a currency symbol followed by an amount, e.g. $10.00",
                details={"price": price}
            )

        details = {k: v for k, v in booking_fields.items() if k not in BOOKING_COLUMNS}

        db = self.session_factory()
        try:
            member = db.query(UserORM).filter(UserORM.email == member_email.lower()).first()
            if not member:
                raise NotFoundException("Member not found", details={"email": member_email})

            trainer = db.query(UserORM).filter(
                UserORM.id == trainer_id,
                UserORM.role == "trainer"
            ).first()
            if not trainer:
                raise NotFoundException("Trainer not found", details={"trainer_id": trainer_id})

            if class_id and not db.query(FitnessClassORM.id).filter(FitnessClassORM.id == class_id).first():
                raise NotFoundException("Class not found", details={"class_id": class_id})

            booking_id = new_id()
            booking = BookingORM(
                id=booking_id,
                member_id=member.id,
                trainer_id=trainer_id,
                class_id=class_id,
                slot_day=day,
                slot_time=time,
                price=price,
                payment_status="pending",
                details_json=json.dumps(details, default=str)
            )
            db.add(booking)
            db.commit()

            logger.info(f"Recorded pending booking {booking_id} for {member.email} with trainer {trainer_id} ({day} {time})")
            return booking_id

        except DomainException:
            db.rollback()
            raise
        except Exception as e:
            db.rollback()
            logger.error(f"Error recording booking for {member_email}: {e}")
            raise ServiceException(f"Failed to record booking: {str(e)}")
        finally:
            db.close()

    def get_booking_by_id(self, booking_id: str) -> dict:
        """Find a booking in any member's payment history."""
        booking_id = parse_id(booking_id, "booking_id")
        db = self.session_factory()
        try:
            row = db.query(BookingORM, UserORM).join(
                UserORM, UserORM.id == BookingORM.member_id
            ).filter(BookingORM.id == booking_id).first()

            if not row:
                raise NotFoundException("Booking not found", details={"booking_id": booking_id})

            booking, member = row
            return {
                "name": member.name,
                "email": member.email,
                "booking": booking_to_dict(booking)
            }
        finally:
            db.close()

    def get_payment_history(self, member_email: str) -> List[dict]:
        """Get a member's bookings, newest first."""
        db = self.session_factory()
        try:
            member = db.query(UserORM).filter(UserORM.email == member_email.lower()).first()
            if not member:
                raise NotFoundException("Member not found", details={"email": member_email})

            bookings = db.query(BookingORM).filter(
                BookingORM.member_id == member.id
            ).order_by(BookingORM.created_at.desc()).all()
            return [booking_to_dict(b) for b in bookings]
        finally:
            db.close()


# Singleton instance
booking_service = BookingService()


def get_booking_service() -> BookingService:
    """Dependency injection helper."""
    return booking_service
