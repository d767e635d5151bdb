from sqlalchemy import Column, String, Integer, ForeignKey, UniqueConstraint, Index
from database import Base
from datetime import datetime, timezone


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class UserORM(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=True)
    photo_url = Column(String, nullable=True)
    role = Column(String, index=True, default="member")  # member, trainer, admin

    # "password" for email registration, otherwise the social provider (google, github...)
    auth_provider = Column(String, default="password")
    hashed_password = Column(String, nullable=True)  # NULL for social accounts

    # Activity log
    created_at = Column(String, default=utc_now_iso)
    last_login = Column(String, nullable=True)


# --- TRAINERS ---

class TrainerApplicationORM(Base):
    """A user's request to become a trainer, reviewed by an admin."""
    __tablename__ = "trainer_applications"

    id = Column(String, primary_key=True, index=True)
    user_id = Column(String, ForeignKey("users.id"), index=True)
    status = Column(String, default="pending", index=True)  # pending, approved, rejected

    skills_json = Column(String, default="[]")  # JSON: ["yoga", "hiit"]
    certifications_json = Column(String, default="[]")  # JSON: ["ACE CPT"]
    slots_json = Column(String, default="[]")  # JSON: proposed [{"day": "Mon", "time": "10am"}]
    feedback = Column(String, nullable=True)  # Admin note on approval/rejection

    applied_at = Column(String, default=utc_now_iso)
    reviewed_at = Column(String, nullable=True)


class TrainerSlotORM(Base):
    """A (day, time) pair a trainer offers for booking."""
    __tablename__ = "trainer_slots"
    __table_args__ = (
        UniqueConstraint("trainer_id", "day", "time", name="uq_trainer_slot"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    trainer_id = Column(String, ForeignKey("users.id"), index=True, nullable=False)
    day = Column(String, nullable=False)   # e.g. "Mon"
    time = Column(String, nullable=False)  # e.g. "10am"
    created_at = Column(String, default=utc_now_iso)


# --- BOOKINGS & PAYMENTS ---

class BookingORM(Base):
    """An entry in a member's payment history. Pending until reconciled."""
    __tablename__ = "bookings"

    id = Column(String, primary_key=True, index=True)
    member_id = Column(String, ForeignKey("users.id"), index=True, nullable=False)
    trainer_id = Column(String, ForeignKey("users.id"), index=True, nullable=False)
    class_id = Column(String, ForeignKey("fitness_classes.id"), nullable=True)

    slot_day = Column(String, nullable=False)
    slot_time = Column(String, nullable=False)
    price = Column(String, nullable=True)  # Currency-formatted, e.g. "$10.00"

    payment_status = Column(String, default="pending", index=True)  # pending, paid
    details_json = Column(String, default="{}")  # Any other client-supplied fields

    created_at = Column(String, default=utc_now_iso)


class BookedSlotORM(Base):
    """Trainer-side copy of a finalized booking."""
    __tablename__ = "booked_slots"
    __table_args__ = (
        UniqueConstraint("trainer_id", "booking_id", name="uq_booked_slot_booking"),
        Index("ix_booked_slots_trainer_slot", "trainer_id", "slot_day", "slot_time"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    booking_id = Column(String, nullable=False)
    trainer_id = Column(String, ForeignKey("users.id"), nullable=False)
    class_id = Column(String, nullable=True)
    slot_day = Column(String, nullable=False)
    slot_time = Column(String, nullable=False)
    price = Column(String, nullable=True)
    payment_status = Column(String, default="paid")
    details_json = Column(String, default="{}")

    user_id = Column(String, ForeignKey("users.id"), index=True)
    user_email = Column(String)
    user_name = Column(String, nullable=True)
    paid_at = Column(String)


class PaymentORM(Base):
    """Payments ledger: canonical record of every finalized booking."""
    __tablename__ = "payments"

    id = Column(String, primary_key=True, index=True)
    booking_id = Column(String, unique=True, index=True, nullable=False)
    trainer_id = Column(String, index=True)
    class_id = Column(String, nullable=True)
    slot_day = Column(String)
    slot_time = Column(String)
    price = Column(String, nullable=True)
    payment_status = Column(String, index=True)  # paid (pending only for legacy imports)
    details_json = Column(String, default="{}")

    user_id = Column(String, index=True)
    user_email = Column(String)
    user_name = Column(String, nullable=True)
    paid_at = Column(String, index=True)


# --- CLASSES ---

class FitnessClassORM(Base):
    """Group class members can enroll in through a paid booking."""
    __tablename__ = "fitness_classes"

    id = Column(String, primary_key=True, index=True)
    class_name = Column(String, index=True)
    skills_json = Column(String, default="[]")
    difficulty_level = Column(String, nullable=True)  # beginner, intermediate, advanced
    status = Column(String, default="active", index=True)  # active, archived
    created_at = Column(String, default=utc_now_iso)


class ClassEnrollmentORM(Base):
    """membersEnrolled set of a class."""
    __tablename__ = "class_enrollments"
    __table_args__ = (
        UniqueConstraint("class_id", "user_id", name="uq_class_member"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    class_id = Column(String, ForeignKey("fitness_classes.id"), index=True, nullable=False)
    user_id = Column(String, ForeignKey("users.id"), index=True, nullable=False)
    enrolled_at = Column(String, default=utc_now_iso)
