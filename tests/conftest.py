import os

# Set testing environment before the application is imported
os.environ["TESTING"] = "1"
os.environ["TEST_DATABASE_URL"] = "sqlite:///./test.db"
os.environ["ENVIRONMENT"] = "test"

import pytest
from fastapi.testclient import TestClient

from clinic_api.main import app
from clinic_api.core.database import Base, SessionLocal, engine, redis_client
from clinic_api.core.security import UserRole, create_user_token, get_password_hash
from clinic_api.models.user import User

DEFAULT_PASSWORD = "Secret123"


class Account:
    """A seeded user plus ready-made auth headers."""

    def __init__(self, user: User):
        self.id = user.id
        self.email = user.email
        self.role = user.role
        token = create_user_token(user.id, user.email, user.role)
        self.headers = {"Authorization": f"Bearer {token.access_token}"}


@pytest.fixture(scope="function")
def test_db():
    # Create tables
    Base.metadata.create_all(bind=engine)
    redis_client.flushall()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session(test_db):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(test_db):
    with TestClient(app, base_url="http://testserver") as test_client:
        yield test_client


@pytest.fixture
def make_account(db_session):
    """Insert a user directly and return it as an ``Account``."""
    def factory(name, email, role=UserRole.PATIENT, is_approved=True, **fields):
        user = User(
            name=name,
            email=email,
            password_hash=get_password_hash(DEFAULT_PASSWORD),
            role=role,
            is_approved=is_approved,
            **fields
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return Account(user)

    return factory


@pytest.fixture
def admin(make_account):
    return make_account("Ada Admin", "admin@clinic.org", UserRole.ADMIN)


@pytest.fixture
def doctor(make_account):
    return make_account(
        "Dr. Grey", "grey@clinic.org", UserRole.DOCTOR,
        specialization="Cardiology", license_id="MD-1001"
    )


@pytest.fixture
def other_doctor(make_account):
    return make_account(
        "Dr. House", "house@clinic.org", UserRole.DOCTOR,
        specialization="Neurology", license_id="MD-1002"
    )


@pytest.fixture
def pharmacist(make_account):
    return make_account(
        "Phil Pharma", "phil@clinic.org", UserRole.PHARMACIST, license_id="PH-2001"
    )


@pytest.fixture
def patient(make_account):
    return make_account("Pat Patient", "pat@clinic.org")


@pytest.fixture
def other_patient(make_account):
    return make_account("Quinn Patient", "quinn@clinic.org")


@pytest.fixture
def book(client):
    """Book an appointment as ``account`` and return the response body."""
    def factory(account, doctor_id, date="2030-05-01", time="10:00 AM", type="Regular Checkup"):
        response = client.post(
            "/api/v1/appointments",
            json={"doctor_id": doctor_id, "date": date, "time": time, "type": type},
            headers=account.headers
        )
        assert response.status_code == 201, response.json()
        return response.json()

    return factory
