"""
Slot Service - a trainer's offered (day, time) slots and the cascade that
removes bookings when a slot goes away.
"""
from typing import Iterable, List, Tuple

from .base import (
    logger, Session, SessionFactory, get_db_session,
    parse_id, insert_ignore, slot_key
)
from exceptions import (
    DomainException, ValidationException, NotFoundException,
    ServiceException, DuplicateSlotsException
)
from models_orm import UserORM, TrainerSlotORM, BookedSlotORM, BookingORM


def normalize_slot(slot) -> Tuple[str, str]:
    """Accept a Slot model or a {"day", "time"} dict and return its (day, time) key."""
    if isinstance(slot, dict):
        day, time = slot.get("day"), slot.get("time")
    else:
        day, time = getattr(slot, "day", None), getattr(slot, "time", None)

    if not isinstance(day, str) or not isinstance(time, str) or not day.strip() or not time.strip():
        raise ValidationException("Each slot needs a day and a time", details={"slot": str(slot)})
    return slot_key(day, time)


def normalize_slots(slots: Iterable) -> List[Tuple[str, str]]:
    """Normalize and de-duplicate proposed slots, keeping their order."""
    keys = []
    for slot in slots:
        key = normalize_slot(slot)
        if key not in keys:
            keys.append(key)
    return keys


class SlotService:
    """Service for managing trainer slots."""

    def __init__(self, session_factory: SessionFactory = get_db_session):
        self.session_factory = session_factory

    def _get_trainer(self, db: Session, trainer_id: str) -> UserORM:
        trainer = db.query(UserORM).filter(
            UserORM.id == trainer_id,
            UserORM.role == "trainer"
        ).first()
        if not trainer:
            raise NotFoundException("Trainer not found", details={"trainer_id": trainer_id})
        return trainer

    def insert_slots(self, db: Session, trainer_id: str, keys: List[Tuple[str, str]]) -> int:
        """Insert-if-absent each slot. Does not commit. Returns how many rows were stored."""
        added = 0
        for day, time in keys:
            added += insert_ignore(db, TrainerSlotORM, {
                "trainer_id": trainer_id,
                "day": day,
                "time": time
            })
        return added

    def _existing_keys(self, db: Session, trainer_id: str) -> set:
        return {
            slot_key(s.day, s.time)
            for s in db.query(TrainerSlotORM).filter(TrainerSlotORM.trainer_id == trainer_id).all()
        }

    def _delete_booked_slots(self, db: Session, trainer_id: str, day: str, time: str) -> int:
        return db.query(BookedSlotORM).filter(
            BookedSlotORM.trainer_id == trainer_id,
            BookedSlotORM.slot_day == day,
            BookedSlotORM.slot_time == time
        ).delete(synchronize_session=False)

    # --- QUERIES ---

    def get_slots(self, trainer_id: str) -> List[dict]:
        """Get a trainer's slots in the order they were added."""
        trainer_id = parse_id(trainer_id, "trainer_id")
        db = self.session_factory()
        try:
            self._get_trainer(db, trainer_id)
            slots = db.query(TrainerSlotORM).filter(
                TrainerSlotORM.trainer_id == trainer_id
            ).order_by(TrainerSlotORM.id).all()
            return [{"day": s.day, "time": s.time} for s in slots]
        finally:
            db.close()

    # --- ADD ---

    def add_slots(self, trainer_id: str, proposed_slots) -> dict:
        """Append the proposed slots the trainer does not already offer."""
        if not trainer_id or not proposed_slots:
            raise ValidationException("trainer_id and a non-empty slots list are required")

        trainer_id = parse_id(trainer_id, "trainer_id")
        proposed = normalize_slots(proposed_slots)

        db = self.session_factory()
        try:
            self._get_trainer(db, trainer_id)

            existing = self._existing_keys(db, trainer_id)
            new_slots = [key for key in proposed if key not in existing]
            if not new_slots:
                raise DuplicateSlotsException(trainer_id)

            added = self.insert_slots(db, trainer_id, new_slots)
            db.commit()

            if added == 0:
                # A concurrent request stored the same slots between our read and write
                raise DuplicateSlotsException(trainer_id)

            logger.info(f"Added {added} slot(s) for trainer {trainer_id}")
            return {"added_count": added}

        except DomainException:
            db.rollback()
            raise
        except Exception as e:
            db.rollback()
            logger.error(f"Error adding slots for trainer {trainer_id}: {e}")
            raise ServiceException(f"Failed to add slots: {str(e)}")
        finally:
            db.close()

    # --- DELETE ---

    def delete_slot(self, trainer_id: str, slot) -> dict:
        """
        Remove a slot and every booking made against it.

        Three separate commits: the slot, the members' payment history
        entries, then the trainer's booked slots. A failure part way leaves
        the earlier steps applied; the error is logged and surfaced as a 500.
        """
        trainer_id = parse_id(trainer_id, "trainer_id")
        day, time = normalize_slot(slot)

        db = self.session_factory()
        step = "slot"
        try:
            self._get_trainer(db, trainer_id)

            slot_removed = db.query(TrainerSlotORM).filter(
                TrainerSlotORM.trainer_id == trainer_id,
                TrainerSlotORM.day == day,
                TrainerSlotORM.time == time
            ).delete(synchronize_session=False)
            db.commit()

            step = "member bookings"
            booked = db.query(BookedSlotORM).filter(
                BookedSlotORM.trainer_id == trainer_id,
                BookedSlotORM.slot_day == day,
                BookedSlotORM.slot_time == time
            ).all()

            if not slot_removed and not booked:
                raise NotFoundException("Slot not found", details={"trainer_id": trainer_id, "day": day, "time": time})

            member_entries_removed = 0
            for entry in booked:
                member_entries_removed += db.query(BookingORM).filter(
                    BookingORM.id == entry.booking_id,
                    BookingORM.member_id == entry.user_id
                ).delete(synchronize_session=False)
            db.commit()

            step = "trainer booked slots"
            deleted = self._delete_booked_slots(db, trainer_id, day, time)
            db.commit()

            logger.info(
                f"Deleted slot {day} {time} for trainer {trainer_id}: "
                f"{deleted} booked slot(s), {member_entries_removed} member entr(ies)"
            )
            return {
                "slot_removed": bool(slot_removed),
                "deleted_booking_count": deleted,
                "member_entries_removed": member_entries_removed
            }

        except DomainException:
            db.rollback()
            raise
        except Exception as e:
            db.rollback()
            logger.error(f"Slot cascade for trainer {trainer_id} failed at step '{step}': {e}")
            raise ServiceException(
                f"Failed to delete slot: {str(e)}",
                details={"failed_step": step}
            )
        finally:
            db.close()

    def delete_booking(self, trainer_id: str, booking_id: str, user_id: str) -> dict:
        """
        Remove one booking from the trainer's booked slots and the user's payment history.

        Both deletes are committed together even when only one side matched,
        so a NotFound naming the unmatched side can follow a real deletion on
        the other side. `trainer_matched` / `user_matched` in the error details
        say which rows were removed.
        """
        trainer_id = parse_id(trainer_id, "trainer_id")
        booking_id = parse_id(booking_id, "booking_id")
        user_id = parse_id(user_id, "user_id")

        db = self.session_factory()
        try:
            trainer_removed = db.query(BookedSlotORM).filter(
                BookedSlotORM.trainer_id == trainer_id,
                BookedSlotORM.booking_id == booking_id
            ).delete(synchronize_session=False)

            user_removed = db.query(BookingORM).filter(
                BookingORM.id == booking_id,
                BookingORM.member_id == user_id
            ).delete(synchronize_session=False)
            db.commit()

            if trainer_removed and user_removed:
                logger.info(f"Deleted booking {booking_id} for trainer {trainer_id} and user {user_id}")
                return {"booking_id": booking_id, "deleted": True}

            if not trainer_removed and not user_removed:
                side = "trainer and user"
            elif not trainer_removed:
                side = "trainer"
            else:
                side = "user"
            logger.warning(f"Booking {booking_id} not matched on {side} side")
            raise NotFoundException(
                f"Booking not found for {side}",
                details={"trainer_matched": bool(trainer_removed), "user_matched": bool(user_removed)}
            )

        except DomainException:
            db.rollback()
            raise
        except Exception as e:
            db.rollback()
            logger.error(f"Error deleting booking {booking_id}: {e}")
            raise ServiceException(f"Failed to delete booking: {str(e)}")
        finally:
            db.close()


# Singleton instance
slot_service = SlotService()


def get_slot_service() -> SlotService:
    """Dependency injection helper."""
    return slot_service
