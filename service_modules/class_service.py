"""
Class Service - group classes and their enrolled members.
"""
from .base import (
    json, logger, SessionFactory, get_db_session,
    new_id, parse_id, insert_ignore, loads_list
)
from exceptions import DomainException, NotFoundException, ServiceException
from models_orm import FitnessClassORM, ClassEnrollmentORM


class ClassService:
    """Service for fitness classes."""

    def __init__(self, session_factory: SessionFactory = get_db_session):
        self.session_factory = session_factory

    def create_class(self, class_name: str, skills: list, difficulty_level: str) -> dict:
        db = self.session_factory()
        try:
            fitness_class = FitnessClassORM(
                id=new_id(),
                class_name=class_name.strip(),
                skills_json=json.dumps(sorted(set(skills or []))),
                difficulty_level=difficulty_level,
                status="active"
            )
            db.add(fitness_class)
            db.commit()
            logger.info(f"Created class {fitness_class.id} ({fitness_class.class_name})")
            return {"id": fitness_class.id, "class_name": fitness_class.class_name}
        except Exception as e:
            db.rollback()
            logger.error(f"Error creating class: {e}")
            raise ServiceException(f"Failed to create class: {str(e)}")
        finally:
            db.close()

    def get_class(self, class_id: str) -> dict:
        class_id = parse_id(class_id, "class_id")
        db = self.session_factory()
        try:
            fitness_class = db.query(FitnessClassORM).filter(FitnessClassORM.id == class_id).first()
            if not fitness_class:
                raise NotFoundException("Class not found", details={"class_id": class_id})

            members = db.query(ClassEnrollmentORM.user_id).filter(
                ClassEnrollmentORM.class_id == class_id
            ).order_by(ClassEnrollmentORM.id).all()

            return {
                "id": fitness_class.id,
                "class_name": fitness_class.class_name,
                "skills": loads_list(fitness_class.skills_json),
                "difficulty_level": fitness_class.difficulty_level,
                "status": fitness_class.status,
                "members_enrolled": [m.user_id for m in members]
            }
        finally:
            db.close()

    def enroll_member(self, class_id: str, user_id: str) -> bool:
        """Add the user to the class's member set. Returns False if already enrolled."""
        db = self.session_factory()
        try:
            exists = db.query(FitnessClassORM.id).filter(FitnessClassORM.id == class_id).first()
            if not exists:
                raise NotFoundException("Class not found", details={"class_id": class_id})

            inserted = insert_ignore(db, ClassEnrollmentORM, {"class_id": class_id, "user_id": user_id})
            db.commit()
            if inserted:
                logger.info(f"Enrolled user {user_id} in class {class_id}")
            return bool(inserted)
        except DomainException:
            db.rollback()
            raise
        except Exception as e:
            db.rollback()
            logger.error(f"Error enrolling user {user_id} in class {class_id}: {e}")
            raise ServiceException(f"Failed to enroll member: {str(e)}")
        finally:
            db.close()


# Singleton instance
class_service = ClassService()


def get_class_service() -> ClassService:
    """Dependency injection helper."""
    return class_service
