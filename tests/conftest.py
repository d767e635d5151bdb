import os
import sys
import uuid

import pytest

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from auth import create_access_token, get_password_hash
from database import Base, get_db, init_db
from models_orm import UserORM
from service_modules.auth_service import AuthService, get_auth_service
from service_modules.booking_service import BookingService, get_booking_service
from service_modules.class_service import ClassService, get_class_service
from service_modules.payment_service import PaymentService, get_payment_service
from service_modules.slot_service import SlotService, get_slot_service
from service_modules.trainer_application_service import (
    TrainerApplicationService, get_trainer_application_service
)


@pytest.fixture
def engine():
    # One shared in-memory connection so every session sees the same data
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture
def TestingSessionLocal(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def slot_service(TestingSessionLocal):
    return SlotService(TestingSessionLocal)


@pytest.fixture
def booking_service(TestingSessionLocal):
    return BookingService(TestingSessionLocal)


@pytest.fixture
def class_service(TestingSessionLocal):
    return ClassService(TestingSessionLocal)


@pytest.fixture
def payment_service(TestingSessionLocal, class_service):
    return PaymentService(TestingSessionLocal, class_service)


@pytest.fixture
def auth_service(TestingSessionLocal):
    return AuthService(TestingSessionLocal)


@pytest.fixture
def application_service(TestingSessionLocal, slot_service):
    return TrainerApplicationService(TestingSessionLocal, slot_service)


@pytest.fixture
def make_user(TestingSessionLocal):
    def _make(role="member", email=None, name=None, password=None):
        db = TestingSessionLocal()
        user = UserORM(
            id=str(uuid.uuid4()),
            email=email or f"{role}_{uuid.uuid4().hex[:8]}@example.com",
            name=name or role.title(),
            role=role,
            hashed_password=get_password_hash(password) if password else None
        )
        db.add(user)
        db.commit()
        data = {"id": user.id, "email": user.email, "name": user.name, "role": user.role}
        db.close()
        return data
    return _make


@pytest.fixture
def auth_headers():
    def _headers(user):
        token = create_access_token({"sub": user["email"], "role": user["role"]})
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture
def client(TestingSessionLocal, slot_service, booking_service, class_service,
           payment_service, auth_service, application_service):
    from main import app

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_slot_service] = lambda: slot_service
    app.dependency_overrides[get_booking_service] = lambda: booking_service
    app.dependency_overrides[get_class_service] = lambda: class_service
    app.dependency_overrides[get_payment_service] = lambda: payment_service
    app.dependency_overrides[get_auth_service] = lambda: auth_service
    app.dependency_overrides[get_trainer_application_service] = lambda: application_service

    yield TestClient(app)

    app.dependency_overrides.clear()
