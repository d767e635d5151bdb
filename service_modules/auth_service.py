"""
Auth Service - handles user registration, email/password login and social login.
"""
from .base import (
    logger, SessionFactory, get_db_session, new_id
)
from auth import verify_password, get_password_hash, create_access_token
from exceptions import DomainException, ConflictException, NotFoundException, UnauthorizedException, ServiceException
from models_orm import UserORM, TrainerApplicationORM, utc_now_iso


def user_to_dict(user: UserORM, application: TrainerApplicationORM = None) -> dict:
    data = {
        "id": user.id,
        "email": user.email,
        "name": user.name,
        "photo_url": user.photo_url,
        "role": user.role,
        "auth_provider": user.auth_provider,
        "activity_log": {
            "created_at": user.created_at,
            "last_login": user.last_login
        }
    }
    if application is not None:
        data["trainer_application"] = {
            "id": application.id,
            "status": application.status,
            "feedback": application.feedback
        }
    return data


class AuthService:
    """Service for managing authentication and user registration."""

    def __init__(self, session_factory: SessionFactory = get_db_session):
        self.session_factory = session_factory

    def _token_for(self, user: UserORM) -> dict:
        token = create_access_token({"sub": user.email, "role": user.role})
        return {
            "access_token": token,
            "token_type": "bearer",
            "role": user.role,
            "user_id": user.id,
            "email": user.email
        }

    def register(self, email: str, password: str, name: str = None, photo_url: str = None) -> dict:
        """Register a new member with email and password."""
        email = email.lower()
        db = self.session_factory()
        try:
            if db.query(UserORM).filter(UserORM.email == email).first():
                raise ConflictException("Email already registered", details={"email": email})

            user = UserORM(
                id=new_id(),
                email=email,
                name=name or email.split("@")[0],
                photo_url=photo_url,
                role="member",
                auth_provider="password",
                hashed_password=get_password_hash(password)
            )
            db.add(user)
            db.commit()
            db.refresh(user)

            logger.info(f"Registered user {email}")
            return user_to_dict(user)
        except DomainException:
            db.rollback()
            raise
        except Exception as e:
            db.rollback()
            logger.error(f"Registration failed for {email}: {e}")
            raise ServiceException(f"Registration failed: {str(e)}")
        finally:
            db.close()

    def login(self, email: str, password: str) -> dict:
        """Authenticate with email and password and record the login."""
        email = email.lower()
        db = self.session_factory()
        try:
            user = db.query(UserORM).filter(UserORM.email == email).first()
            if not user or not verify_password(password, user.hashed_password):
                raise UnauthorizedException("Invalid email or password")

            user.last_login = utc_now_iso()
            db.commit()
            db.refresh(user)
            return self._token_for(user)
        except DomainException:
            db.rollback()
            raise
        finally:
            db.close()

    def social_login(self, email: str, name: str = None, photo_url: str = None, provider: str = "google") -> dict:
        """
        Log in a user whose identity was already verified by a social provider,
        creating the account on first sight.
        """
        email = email.lower()
        db = self.session_factory()
        try:
            user = db.query(UserORM).filter(UserORM.email == email).first()
            if user is None:
                user = UserORM(
                    id=new_id(),
                    email=email,
                    name=name or email.split("@")[0],
                    photo_url=photo_url,
                    role="member",
                    auth_provider=provider
                )
                db.add(user)
                logger.info(f"Created {provider} account for {email}")
            elif photo_url and not user.photo_url:
                user.photo_url = photo_url

            user.last_login = utc_now_iso()
            db.commit()
            db.refresh(user)
            return self._token_for(user)
        except Exception as e:
            db.rollback()
            logger.error(f"Social login failed for {email}: {e}")
            raise ServiceException(f"Social login failed: {str(e)}")
        finally:
            db.close()

    def get_profile(self, email: str) -> dict:
        db = self.session_factory()
        try:
            user = db.query(UserORM).filter(UserORM.email == email.lower()).first()
            if not user:
                raise NotFoundException("User not found", details={"email": email})
            application = db.query(TrainerApplicationORM).filter(
                TrainerApplicationORM.user_id == user.id
            ).order_by(TrainerApplicationORM.applied_at.desc()).first()
            return user_to_dict(user, application)
        finally:
            db.close()


# Singleton instance
auth_service = AuthService()


def get_auth_service() -> AuthService:
    """Dependency injection helper."""
    return auth_service
