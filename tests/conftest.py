# tests/conftest.py
import os

os.environ["SKIP_DB_INIT"] = "1"
os.environ["ADMIN_API_TOKEN"] = "test-admin-token"

import uuid
from datetime import datetime
from zoneinfo import ZoneInfo

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.db import Base, get_db, init_db
from app.dependencies import get_clock, get_dispatcher
from app.main import app
from app.models import Booking, Scent, UnavailableSlot

BRISBANE = ZoneInfo("Australia/Brisbane")
# Tuesday 10:00 in Brisbane
FIXED_NOW = datetime(2026, 3, 10, 10, 0, tzinfo=BRISBANE)
TODAY = "2026-03-10"
TOMORROW = "2026-03-11"
IN_5_DAYS = "2026-03-15"
ADMIN_HEADERS = {"Authorization": "Bearer test-admin-token"}


def fixed_clock():
    return FIXED_NOW


def booking_payload(**overrides):
    payload = {
        "name": "Jordan Smith",
        "mobile": "0412 345 678",
        "address": "12 Example St, Brisbane QLD 4000",
        "returningCustomer": False,
        "vehicleYear": "2019",
        "vehicleMake": "Toyota",
        "vehicleModel": "Corolla",
        "serviceType": "both",
        "scent": "Vanilla",
        "specialRequests": "Dog hair in the back seat",
        "date": IN_5_DAYS,
        "timeOfDay": "morning",
    }
    payload.update(overrides)
    return payload


class RecordingDispatcher:
    def __init__(self):
        self.messages = []

    def dispatch(self, message):
        self.messages.append(message)


@pytest.fixture(scope="function")
def test_engine(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'test.db'}", connect_args={"check_same_thread": False})
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def test_db_session(test_engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


@pytest.fixture(scope="function")
def client(test_db_session, dispatcher):
    def override_get_db():
        try:
            yield test_db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: fixed_clock
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
def admin_client(client):
    client.headers.update(ADMIN_HEADERS)
    return client


@pytest.fixture
def seeded_catalog(test_engine):
    init_db(bind=test_engine)


# Factories
@pytest.fixture
def make_booking(test_db_session):
    def _make_booking(date=IN_5_DAYS, time_of_day="morning", status="pending", **fields):
        values = {
            "name": "Existing Customer",
            "mobile": "0498765432",
            "address": "1 Test Rd, Brisbane",
            "vehicle_year": "2015",
            "vehicle_make": "Mazda",
            "vehicle_model": "3",
            "service_type": "interior",
            "scent": "none",
        }
        values.update(fields)
        b = Booking(id=str(uuid.uuid4()), date=date, time_of_day=time_of_day, status=status, **values)
        test_db_session.add(b)
        test_db_session.commit()
        return b
    return _make_booking


@pytest.fixture
def make_block(test_db_session):
    def _make_block(date=IN_5_DAYS, time_of_day="all"):
        u = UnavailableSlot(id=str(uuid.uuid4()), date=date, time_of_day=time_of_day)
        test_db_session.add(u)
        test_db_session.commit()
        return u
    return _make_block


@pytest.fixture
def make_scent(test_db_session):
    def _make_scent(name="Vanilla", enabled=True):
        s = Scent(id=str(uuid.uuid4()), name=name, enabled=enabled)
        test_db_session.add(s)
        test_db_session.commit()
        return s
    return _make_scent
