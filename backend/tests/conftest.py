"""
Test configuration and shared fixtures for the booking backend test suite.

Each test gets its own in-memory SQLite database with all tables created
from the models. Email, PDF and the event feed are replaced by recording
fakes from ``tests.utils``.
"""

import os

# Must be set before core.database creates the application engine
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from datetime import timedelta
from typing import Generator, Optional, Tuple

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from core.constants import APPROVAL_APPROVED, ROLE_ADMIN, ROLE_BUSINESS, ROLE_CUSTOMER
from core.database import Base, enable_sqlite_foreign_keys, get_db
from models import Booking, Doctor, Slot, User
from utils.datetime_utils import local_now
from utils.rate_limiter import booking_limiter, public_cancel_limiter
from tests.utils import FakeEmailService, FakePDFService, RecordingEventPublisher


@pytest.fixture(scope="function")
def db_engine():
    """
    In-memory SQLite engine for one test.

    StaticPool keeps a single connection so every session sees the same database.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine) -> Generator[Session, None, None]:
    """Provide a database session for a test."""
    TestingSession = sessionmaker(bind=db_engine, autoflush=False, expire_on_commit=False)
    session = TestingSession()

    yield session

    session.close()


@pytest.fixture
def event_recorder() -> RecordingEventPublisher:
    return RecordingEventPublisher()


@pytest.fixture
def fake_email() -> FakeEmailService:
    return FakeEmailService()


@pytest.fixture
def fake_pdf() -> FakePDFService:
    return FakePDFService()


@pytest.fixture
def slot_service(event_recorder, fake_email):
    from services.slot_service import SlotService
    return SlotService(event_recorder, fake_email)


@pytest.fixture
def booking_service(event_recorder, fake_email, fake_pdf):
    from services.booking_service import BookingService
    return BookingService(event_recorder, fake_email, fake_pdf)


@pytest.fixture
def rating_service(event_recorder):
    from services.rating_service import RatingService
    return RatingService(event_recorder)


@pytest.fixture
def admin_service(event_recorder):
    from services.admin_service import AdminService
    return AdminService(event_recorder)


@pytest.fixture(autouse=True)
def reset_rate_limiters():
    """Rate limiter counters are process-global; start every test from zero."""
    booking_limiter.reset()
    public_cancel_limiter.reset()
    yield
    booking_limiter.reset()
    public_cancel_limiter.reset()


@pytest.fixture
def client(db_session, event_recorder, fake_email, fake_pdf) -> Generator[TestClient, None, None]:
    """
    TestClient wired to the test database and the recording fakes.

    The lifespan (background scheduler) is not started.
    """
    from main import app
    from api.dependencies import get_email_service, get_event_publisher, get_pdf_service

    app.dependency_overrides[get_db] = lambda: db_session
    app.dependency_overrides[get_event_publisher] = lambda: event_recorder
    app.dependency_overrides[get_email_service] = lambda: fake_email
    app.dependency_overrides[get_pdf_service] = lambda: fake_pdf

    yield TestClient(app)

    app.dependency_overrides.clear()


# Helper functions for creating test data
def future_date(days: int = 3) -> str:
    """A slot date ``days`` from today in the application timezone."""
    return (local_now() + timedelta(days=days)).date().isoformat()


def create_user(
    db_session: Session,
    name: str = "Test Customer",
    email: str = "customer@example.com",
    role: str = ROLE_CUSTOMER,
    approval_status: str = APPROVAL_APPROVED,
    is_active: bool = True
) -> User:
    """Create and commit a user."""
    user = User(
        name=name,
        email=email,
        role=role,
        approval_status=approval_status,
        is_active=is_active
    )
    db_session.add(user)
    db_session.commit()
    return user


def create_admin(db_session: Session, email: str = "admin@example.com") -> User:
    return create_user(db_session, name="Test Admin", email=email, role=ROLE_ADMIN)


def create_provider_with_profile(
    db_session: Session,
    name: str = "Dr. Test",
    email: str = "doctor@example.com",
    role: str = ROLE_BUSINESS,
    approval_status: str = APPROVAL_APPROVED,
    is_active: bool = True,
    with_profile: bool = True
) -> Tuple[User, Optional[Doctor]]:
    """
    Create a provider account and, optionally, its public Doctor profile.

    Returns:
        Tuple of (User, Doctor or None)
    """
    user = create_user(
        db_session, name=name, email=email, role=role,
        approval_status=approval_status, is_active=is_active
    )
    doctor = None
    if with_profile:
        doctor = Doctor(
            business_id=user.id,
            name=name,
            location="Main Street Clinic",
            department="Cardiology",
            rating=0.0,
            rating_count=0
        )
        db_session.add(doctor)
        db_session.commit()
    return user, doctor


def create_slot(
    db_session: Session,
    provider: User,
    date: Optional[str] = None,
    time: str = "10:00",
    duration: int = 30,
    price: float = 500.0,
    department: str = "Cardiology",
    is_booked: bool = False,
    doctor_email: str = "",
    doctor_contact_email: str = "clinic@example.com"
) -> Slot:
    """Create and commit a slot owned by ``provider``."""
    slot = Slot(
        business_id=provider.id,
        date=date or future_date(),
        time=time,
        duration=duration,
        price=price,
        department=department,
        doctor_name=provider.name,
        doctor_location="Main Street Clinic",
        doctor_rating=4.5,
        doctor_email=doctor_email,
        doctor_contact_email=doctor_contact_email,
        is_booked=is_booked
    )
    db_session.add(slot)
    db_session.commit()
    return slot


def create_booking(
    db_session: Session,
    slot: Slot,
    booking_number: str = "ZARVO-0000AAAA",
    customer_email: str = "customer@example.com",
    status: str = "booked"
) -> Booking:
    """Insert a booking directly (marks the slot booked when active)."""
    booking = Booking(
        slot_id=slot.id,
        business_id=slot.business_id,
        customer_name="Test Customer",
        customer_email=customer_email,
        customer_phone="+15550100",
        customer_age=34,
        customer_gender="Female",
        doctor_name=slot.doctor_name,
        doctor_location=slot.doctor_location,
        doctor_rating=slot.doctor_rating,
        fee=slot.price,
        booking_number=booking_number,
        status=status
    )
    if status == "booked":
        slot.is_booked = True
    db_session.add(booking)
    db_session.commit()
    return booking
