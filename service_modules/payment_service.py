"""
Payment Service - turns a pending booking into a paid one and fans the
finalized record out to the trainer, the payments ledger and class enrollment.
Also owns the Stripe side: payment intents and webhooks.
"""
from decimal import Decimal
from typing import Optional

import stripe

from .base import (
    uuid, logger, Session, SessionFactory, get_db_session,
    new_id, parse_id, parse_price, insert_ignore, finalized_to_dict
)
from .class_service import ClassService
from config import Config
from exceptions import (
    DomainException, ValidationException, ServiceException,
    PaymentNotPendingException
)
from models_orm import UserORM, BookingORM, BookedSlotORM, PaymentORM, utc_now_iso

# Configure Stripe
stripe.api_key = Config.STRIPE_SECRET_KEY

RECENT_TRANSACTIONS_LIMIT = 6


def is_stripe_configured():
    """Check if Stripe API key is configured (not a placeholder)."""
    api_key = Config.STRIPE_SECRET_KEY
    return bool(api_key) and not api_key.startswith("your_") and len(api_key) > 20


class PaymentService:
    """Service for payment reconciliation and reporting."""

    def __init__(self, session_factory: SessionFactory = get_db_session, class_service: ClassService = None):
        self.session_factory = session_factory
        self.class_service = class_service or ClassService(session_factory)

    # --- RECONCILIATION ---

    def _build_finalized(self, booking: BookingORM, member: UserORM, paid_at: str) -> dict:
        return {
            "booking_id": booking.id,
            "trainer_id": booking.trainer_id,
            "class_id": booking.class_id,
            "slot_day": booking.slot_day,
            "slot_time": booking.slot_time,
            "price": booking.price,
            "payment_status": booking.payment_status,
            "details_json": booking.details_json or "{}",
            "user_id": member.id,
            "user_email": member.email,
            "user_name": member.name,
            "paid_at": paid_at
        }

    def _append_booked_slot(self, db: Session, finalized: dict) -> int:
        """Copy the finalized booking to the trainer. Failures are logged, never raised."""
        try:
            inserted = insert_ignore(db, BookedSlotORM, finalized)
            db.commit()
            return inserted
        except Exception as e:
            db.rollback()
            logger.error(
                f"Booking {finalized['booking_id']} is paid but could not be added to "
                f"trainer {finalized['trainer_id']} booked slots: {e}"
            )
            return 0

    def _insert_ledger(self, db: Session, finalized: dict) -> str:
        """Insert the canonical ledger record and return its id (existing id if already present)."""
        ledger_id = new_id()
        inserted = insert_ignore(db, PaymentORM, {"id": ledger_id, **finalized})
        db.commit()
        if inserted:
            return ledger_id
        return db.query(PaymentORM.id).filter(PaymentORM.booking_id == finalized["booking_id"]).scalar()

    def _enroll(self, class_id: str, user_id: str):
        try:
            self.class_service.enroll_member(class_id, user_id)
        except Exception as e:
            logger.error(f"Could not enroll user {user_id} in class {class_id}: {e}")

    def finalize(self, booking_id: str) -> dict:
        """
        Mark a pending booking as paid and propagate it.

        Steps, each committed on its own:
          1. pending -> paid on the member's booking (conditional, so only one caller wins)
          2. copy to the trainer's booked slots (best-effort)
          3. insert into the payments ledger (its id is returned)
          4. enroll the member in the booking's class, if any (best-effort)
        Nothing is rolled back if a later step fails.
        """
        booking_id = parse_id(booking_id, "payment_id")
        db = self.session_factory()
        try:
            flipped = db.query(BookingORM).filter(
                BookingORM.id == booking_id,
                BookingORM.payment_status == "pending"
            ).update({BookingORM.payment_status: "paid"}, synchronize_session=False)
            db.commit()

            if not flipped:
                logger.info(f"Finalize {booking_id}: not found or already paid")
                raise PaymentNotPendingException(booking_id)

            booking = db.query(BookingORM).filter(BookingORM.id == booking_id).first()
            member = db.query(UserORM).filter(UserORM.id == booking.member_id).first()
            if member is None:
                raise ServiceException(
                    "Booking marked paid but its member record is missing",
                    details={"booking_id": booking_id, "payment_status": "paid"}
                )

            finalized = self._build_finalized(booking, member, paid_at=utc_now_iso())

            self._append_booked_slot(db, finalized)

            try:
                ledger_id = self._insert_ledger(db, finalized)
            except Exception as e:
                db.rollback()
                logger.error(f"Booking {booking_id} is paid but the ledger insert failed: {e}")
                raise ServiceException(
                    f"Payment recorded but ledger update failed: {str(e)}",
                    details={"booking_id": booking_id, "payment_status": "paid"}
                )

            if booking.class_id:
                self._enroll(booking.class_id, member.id)

            logger.info(f"Finalized booking {booking_id} for {member.email}: ledger entry {ledger_id}")
            return {"inserted_ledger_id": ledger_id}

        except DomainException:
            db.rollback()
            raise
        except Exception as e:
            db.rollback()
            logger.error(f"Error finalizing booking {booking_id}: {e}")
            raise ServiceException(f"Failed to finalize payment: {str(e)}")
        finally:
            db.close()

    def reconcile_orphans(self) -> dict:
        """
        Repair paid bookings whose fan-out did not complete: re-insert the
        missing ledger entry and/or trainer booked slot.
        """
        db = self.session_factory()
        try:
            paid = db.query(BookingORM).filter(BookingORM.payment_status == "paid").all()
            ledger = {p.booking_id: p for p in db.query(PaymentORM).all()}
            booked = {
                (b.trainer_id, b.booking_id)
                for b in db.query(BookedSlotORM.trainer_id, BookedSlotORM.booking_id).all()
            }

            repaired_ledger = 0
            repaired_booked_slots = 0
            for booking in paid:
                missing_ledger = booking.id not in ledger
                missing_slot = (booking.trainer_id, booking.id) not in booked
                if not missing_ledger and not missing_slot:
                    continue

                member = db.query(UserORM).filter(UserORM.id == booking.member_id).first()
                if member is None:
                    logger.warning(f"Reconcile: booking {booking.id} has no member record, skipping")
                    continue

                paid_at = ledger[booking.id].paid_at if not missing_ledger else utc_now_iso()
                finalized = self._build_finalized(booking, member, paid_at=paid_at)

                if missing_slot:
                    repaired_booked_slots += self._append_booked_slot(db, finalized)
                if missing_ledger:
                    self._insert_ledger(db, finalized)
                    repaired_ledger += 1

            logger.info(
                f"Reconcile: checked {len(paid)} paid booking(s), repaired "
                f"{repaired_ledger} ledger and {repaired_booked_slots} booked slot entr(ies)"
            )
            return {
                "checked": len(paid),
                "repaired_ledger": repaired_ledger,
                "repaired_booked_slots": repaired_booked_slots
            }
        except Exception as e:
            db.rollback()
            logger.error(f"Error reconciling payments: {e}")
            raise ServiceException(f"Failed to reconcile payments: {str(e)}")
        finally:
            db.close()

    # --- REPORTING ---

    def payment_summary(self) -> dict:
        """Total of all paid ledger entries and the six most recent transactions."""
        db = self.session_factory()
        try:
            paid = db.query(PaymentORM).filter(PaymentORM.payment_status == "paid")

            total = Decimal("0")
            for payment in paid.all():
                total += parse_price(payment.price)

            recent = paid.order_by(PaymentORM.paid_at.desc()).limit(RECENT_TRANSACTIONS_LIMIT).all()
            return {
                "total_paid": float(total.quantize(Decimal("0.01"))),
                "recent_transactions": [
                    {"id": p.id, **finalized_to_dict(p)} for p in recent
                ]
            }
        except Exception as e:
            logger.error(f"Error building payment summary: {e}")
            raise ServiceException(f"Failed to build payment summary: {str(e)}")
        finally:
            db.close()

    # --- STRIPE ---

    def create_payment_intent(self, price: float, booking_id: Optional[str] = None, customer_email: Optional[str] = None) -> dict:
        """Ask Stripe for a card PaymentIntent and hand its client secret back."""
        amount = int(round(Decimal(str(price)) * 100))  # Convert dollars to cents
        if amount <= 0:
            raise ValidationException("Price must be greater than zero")

        metadata = {}
        if booking_id:
            metadata["booking_id"] = parse_id(booking_id, "booking_id")
        if customer_email:
            metadata["customer_email"] = customer_email

        if not is_stripe_configured():
            logger.info("Stripe not configured - returning test mode payment intent")
            test_id = f"pi_test_{uuid.uuid4().hex[:16]}"
            return {"client_secret": f"{test_id}_secret_{uuid.uuid4().hex[:12]}", "test_mode": True}

        try:
            intent = stripe.PaymentIntent.create(
                amount=amount,
                currency=Config.PAYMENT_CURRENCY,
                payment_method_types=["card"],
                metadata=metadata
            )
            logger.info(f"Created payment intent {intent.id} for {amount} cents")
            return {"client_secret": intent.client_secret, "test_mode": False}
        except stripe.StripeError as e:
            logger.error(f"Stripe error creating payment intent: {e}")
            raise ServiceException(f"Payment processor error: {str(e)}")

    def handle_webhook(self, payload: bytes, signature: str) -> dict:
        """Handle Stripe webhook events. A succeeded intent finalizes its booking."""
        webhook_secret = Config.STRIPE_WEBHOOK_SECRET
        if not webhook_secret:
            raise ServiceException("Stripe webhook secret is not configured")

        try:
            event = stripe.Webhook.construct_event(
                payload, signature, webhook_secret
            )
        except ValueError:
            raise ValidationException("Invalid payload")
        except stripe.SignatureVerificationError:
            raise ValidationException("Invalid signature")

        if event.type != "payment_intent.succeeded":
            return {"status": "ignored", "event_type": event.type}

        intent = event.data.object
        metadata = getattr(intent, "metadata", None) or {}
        booking_id = metadata.get("booking_id")
        if not booking_id:
            logger.warning(f"Payment intent {getattr(intent, 'id', '?')} succeeded without a booking_id")
            return {"status": "ignored", "event_type": event.type}

        try:
            booking_id = parse_id(booking_id, "booking_id")
        except ValidationException:
            # Stripe retries anything but a 2xx, and this id will never parse
            logger.warning(f"Payment intent {getattr(intent, 'id', '?')} carries a malformed booking_id {booking_id!r}")
            return {"status": "ignored", "event_type": event.type}

        try:
            result = self.finalize(booking_id)
        except PaymentNotPendingException:
            logger.info(f"Webhook for booking {booking_id}: already finalized")
            return {"status": "already_processed", "booking_id": booking_id}

        return {"status": "success", "booking_id": booking_id, **result}


# Singleton instance
payment_service = PaymentService()


def get_payment_service() -> PaymentService:
    """Dependency injection helper."""
    return payment_service
