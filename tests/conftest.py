"""
Shared fixtures: a throwaway SQLite file database, sessions and a few
ready-made entities. DATABASE_URL must be set before booking_core is imported
because the engine is built at import time.
"""
import os
import tempfile

_db_dir = tempfile.mkdtemp(prefix="booking_core_tests_")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_db_dir, 'booking_core.db')}"
os.environ["AUTO_CREATE_TABLES"] = "false"

from datetime import date, datetime, time

import pytest
from fastapi.testclient import TestClient

from booking_core.config.database import SessionLocal, drop_db, init_db
from booking_core.models.availability import AvailabilityType
from booking_core.services.availability.availability_rule_service import AvailabilityRuleService
from booking_core.services.business.business_service import BusinessService
from booking_core.services.user.user_service import OwnerService, UserService

# 2030-01-07 is a Monday; "now" sits a few days earlier so lead-time and
# max-advance policies pass by default.
MONDAY = date(2030, 1, 7)
NOW = datetime(2030, 1, 1, 8, 0)


@pytest.fixture(autouse=True)
def schema():
    init_db()
    yield
    drop_db()


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def session_factory():
    """For tests that need one session per thread"""
    return SessionLocal


@pytest.fixture
def owner(db):
    return OwnerService.create_owner(db, email="owner@example.com", name="Olga", surname="Owner")


@pytest.fixture
def business(db, owner):
    return BusinessService.create_business(
        db,
        owner_id=owner.id,
        name="Barber X",
        place_id="place-x",
        address="1 Main St",
        latitude=41.0,
        longitude=29.0,
        timezone="UTC",
    )


@pytest.fixture
def user(db):
    return UserService.create_user(db, email="alice@example.com", name="Alice")


@pytest.fixture
def other_user(db):
    return UserService.create_user(db, email="bob@example.com", name="Bob")


@pytest.fixture
def monday_hours(db, business):
    """Open Mondays 09:00-17:00"""
    return AvailabilityRuleService.create_rule(
        db,
        business.id,
        availability_type=AvailabilityType.RECURRING_WEEKLY,
        day_of_week=0,
        start_time=time(9, 0),
        end_time=time(17, 0),
    )


@pytest.fixture
def client():
    from booking_core.main import app

    return TestClient(app)
