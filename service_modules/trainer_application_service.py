"""
Trainer Application Service - members applying to become trainers and the
admin review that approves or rejects them.
"""
from typing import List, Optional

from .base import (
    json, logger, SessionFactory, get_db_session,
    new_id, parse_id, loads_list
)
from .slot_service import SlotService, normalize_slots
from exceptions import DomainException, ConflictException, NotFoundException, ServiceException
from models_orm import UserORM, TrainerApplicationORM, utc_now_iso

APPLICATION_STATUSES = ("pending", "approved", "rejected")


def application_to_dict(application: TrainerApplicationORM, user: UserORM = None) -> dict:
    data = {
        "id": application.id,
        "user_id": application.user_id,
        "status": application.status,
        "skills": loads_list(application.skills_json),
        "certifications": loads_list(application.certifications_json),
        "slots": loads_list(application.slots_json),
        "feedback": application.feedback,
        "applied_at": application.applied_at,
        "reviewed_at": application.reviewed_at
    }
    if user is not None:
        data["user_email"] = user.email
        data["user_name"] = user.name
    return data


class TrainerApplicationService:
    """Service for the trainer application lifecycle."""

    def __init__(self, session_factory: SessionFactory = get_db_session, slot_service: SlotService = None):
        self.session_factory = session_factory
        self.slot_service = slot_service or SlotService(session_factory)

    def apply(self, user_id: str, skills: List[str], certifications: List[str], slots) -> dict:
        """Submit a pending application. A rejected applicant may apply again."""
        keys = normalize_slots(slots or [])
        db = self.session_factory()
        try:
            user = db.query(UserORM).filter(UserORM.id == user_id).first()
            if not user:
                raise NotFoundException("User not found", details={"user_id": user_id})
            if user.role != "member":
                raise ConflictException(f"A {user.role} cannot apply to become a trainer")

            open_application = db.query(TrainerApplicationORM).filter(
                TrainerApplicationORM.user_id == user_id,
                TrainerApplicationORM.status.in_(["pending", "approved"])
            ).first()
            if open_application:
                raise ConflictException(
                    f"Application already {open_application.status}",
                    details={"application_id": open_application.id}
                )

            application = TrainerApplicationORM(
                id=new_id(),
                user_id=user_id,
                status="pending",
                skills_json=json.dumps(list(dict.fromkeys(skills or []))),
                certifications_json=json.dumps(certifications or []),
                slots_json=json.dumps([{"day": d, "time": t} for d, t in keys])
            )
            db.add(application)
            db.commit()
            db.refresh(application)

            logger.info(f"Trainer application {application.id} submitted by {user.email}")
            return application_to_dict(application)
        except DomainException:
            db.rollback()
            raise
        except Exception as e:
            db.rollback()
            logger.error(f"Error submitting trainer application for {user_id}: {e}")
            raise ServiceException(f"Failed to submit application: {str(e)}")
        finally:
            db.close()

    def list_applications(self, status: Optional[str] = None) -> List[dict]:
        db = self.session_factory()
        try:
            query = db.query(TrainerApplicationORM, UserORM).join(
                UserORM, UserORM.id == TrainerApplicationORM.user_id
            )
            if status:
                query = query.filter(TrainerApplicationORM.status == status)
            rows = query.order_by(TrainerApplicationORM.applied_at.desc()).all()
            return [application_to_dict(a, u) for a, u in rows]
        finally:
            db.close()

    def _get_pending(self, db, application_id: str) -> TrainerApplicationORM:
        application = db.query(TrainerApplicationORM).filter(
            TrainerApplicationORM.id == application_id
        ).first()
        if not application:
            raise NotFoundException("Application not found", details={"application_id": application_id})
        if application.status != "pending":
            raise ConflictException(
                f"Application already {application.status}",
                details={"application_id": application_id}
            )
        return application

    def approve(self, application_id: str, feedback: Optional[str] = None) -> dict:
        """pending -> approved. The user becomes a trainer and the proposed slots are registered."""
        application_id = parse_id(application_id, "application_id")
        db = self.session_factory()
        try:
            application = self._get_pending(db, application_id)
            user = db.query(UserORM).filter(UserORM.id == application.user_id).first()

            application.status = "approved"
            application.feedback = feedback
            application.reviewed_at = utc_now_iso()
            user.role = "trainer"

            slots = loads_list(application.slots_json)
            added = self.slot_service.insert_slots(db, user.id, normalize_slots(slots)) if slots else 0
            db.commit()
            db.refresh(application)

            logger.info(f"Approved trainer application {application_id} for {user.email} ({added} slot(s))")
            return application_to_dict(application, user)
        except DomainException:
            db.rollback()
            raise
        except Exception as e:
            db.rollback()
            logger.error(f"Error approving application {application_id}: {e}")
            raise ServiceException(f"Failed to approve application: {str(e)}")
        finally:
            db.close()

    def reject(self, application_id: str, feedback: Optional[str] = None) -> dict:
        """pending -> rejected."""
        application_id = parse_id(application_id, "application_id")
        db = self.session_factory()
        try:
            application = self._get_pending(db, application_id)
            application.status = "rejected"
            application.feedback = feedback
            application.reviewed_at = utc_now_iso()
            db.commit()
            db.refresh(application)

            logger.info(f"Rejected trainer application {application_id}")
            return application_to_dict(application)
        except DomainException:
            db.rollback()
            raise
        except Exception as e:
            db.rollback()
            logger.error(f"Error rejecting application {application_id}: {e}")
            raise ServiceException(f"Failed to reject application: {str(e)}")
        finally:
            db.close()


# Singleton instance
trainer_application_service = TrainerApplicationService()


def get_trainer_application_service() -> TrainerApplicationService:
    """Dependency injection helper."""
    return trainer_application_service
