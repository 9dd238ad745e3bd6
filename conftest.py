import os
import tempfile

# Point the application at a throwaway database before it is imported
os.environ.setdefault("DATABASE_URL", "sqlite:///" + os.path.join(tempfile.mkdtemp(), "inventory_test.db"))
os.environ.setdefault("LOCK_TIMEOUT_SECONDS", "30")

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from inventory_app.database.database import Base, create_db_engine, create_session_factory, get_db
from inventory_app.models import Item, Reservation, ReservationStatus
from inventory_app.utils.clock import get_clock


class FakeClock:
    """Controllable clock shared by the services under test."""

    def __init__(self, start=None):
        self.now = start or datetime(2026, 1, 15, 12, 0, 0)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def engine(tmp_path):
    engine = create_db_engine(f"sqlite:///{tmp_path / 'test.db'}", lock_timeout_seconds=30)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_item(session_factory, clock):
    """Insert an item directly and return its id."""
    def _make_item(total_quantity=10, name="Test Item"):
        session = session_factory()
        try:
            item = Item(name=name, total_quantity=total_quantity, created_at=clock(), updated_at=clock())
            session.add(item)
            session.commit()
            return item.id
        finally:
            session.close()
    return _make_item


@pytest.fixture
def make_reservation(session_factory, clock):
    """Insert a reservation row directly, bypassing admission, and return its id."""
    def _make_reservation(item_id, quantity=1, status=ReservationStatus.PENDING, expires_in=timedelta(minutes=10)):
        session = session_factory()
        try:
            now = clock()
            reservation = Reservation(
                item_id=item_id,
                customer_id="customer_fixture",
                quantity=quantity,
                status=status.value,
                created_at=now,
                expires_at=now + expires_in,
            )
            session.add(reservation)
            session.commit()
            return reservation.id
        finally:
            session.close()
    return _make_reservation


@pytest.fixture
def client(session_factory, clock):
    from inventory_app.main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
