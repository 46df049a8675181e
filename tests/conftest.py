import os
import tempfile
from datetime import datetime, timedelta, timezone

# baza aplikacji (app.main tworzy tabele przy imporcie) - zawsze lokalny sqlite
os.environ["DATABASE_URL"] = f"sqlite:///{tempfile.mkdtemp(prefix='cart-tests-')}/app.db"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

import app.data.models  # noqa: F401
from app.data.database import Base, build_engine
from app.services.cart_service import CartService


class SteppingClock:
    """Każde now() przesuwa czas o krok, timestampy są rosnące i przewidywalne."""

    def __init__(self, start=datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc), step=timedelta(seconds=1)):
        self.current = start
        self.step = step

    def now(self) -> datetime:
        self.current += self.step
        return self.current


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'cart.db'}")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False)


@pytest.fixture
def clock():
    return SteppingClock()


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def service(session_factory, clock, sleeps):
    return CartService(session_factory, clock, sleep=sleeps.append)


@pytest.fixture
def client(service):
    from app.api.routers.carts import get_service
    from app.main import app

    app.dependency_overrides[get_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()
