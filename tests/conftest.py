from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from barber_agenda.booking import BookingService
from barber_agenda.config import Settings
from barber_agenda.core import ConflictGuard
from barber_agenda.db import create_db_engine, init_db
from barber_agenda.main import create_app
from barber_agenda.store import AppointmentStore

TZ = ZoneInfo("America/Sao_Paulo")
ADMIN_EMAIL = "admin@barber.test"
ADMIN_PASSWORD = "admin-password"
CRON_SECRET = "cron-secret"


def local(year, month, day, hour=0, minute=0) -> datetime:
    return datetime(year, month, day, hour, minute, tzinfo=TZ)


def make_settings(**overrides) -> Settings:
    values = dict(
        DATABASE_URL="sqlite://",
        SECRET_KEY="test-secret",
        ADMIN_EMAIL=ADMIN_EMAIL,
        ADMIN_PASSWORD=ADMIN_PASSWORD,
        CRON_SECRET=CRON_SECRET,
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def session(settings):
    engine = create_db_engine(settings)
    init_db(engine)
    with Session(engine) as session:
        yield session
    engine.dispose()


@pytest.fixture
def store(session) -> AppointmentStore:
    return AppointmentStore(session)


@pytest.fixture
def booking(store) -> BookingService:
    # Frozen clock so the 2024 dates used in tests are in the future
    frozen = datetime(2024, 4, 1, 12, 0, tzinfo=timezone.utc)
    return BookingService(store, ConflictGuard(store, TZ), TZ, now=lambda: frozen)


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


def login(client: TestClient, email: str, password: str) -> dict:
    response = client.post("/auth/login", data={"username": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


def register(client: TestClient, email: str, username: str, phone: str = None, password: str = "client-password") -> dict:
    response = client.post(
        "/users",
        json={"email": email, "password": password, "username": username, "phone": phone},
    )
    assert response.status_code == 201, response.text
    return login(client, email, password)


@pytest.fixture
def admin_headers(client) -> dict:
    return login(client, ADMIN_EMAIL, ADMIN_PASSWORD)


@pytest.fixture
def ana_headers(client) -> dict:
    return register(client, "ana@example.com", "Ana", phone="+55 (17) 99665-8986")
