import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("VAPID_PUBLIC_KEY", "test-public-key")
os.environ.setdefault("VAPID_PRIVATE_KEY", "test-private-key")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("SERVICE_KEY", "test-service-key")
os.environ.setdefault("COOKIE_SECURE", "false")
os.environ.setdefault("PBKDF2_ITER", "1000")

import pytest
from fastapi.testclient import TestClient
from pywebpush import WebPushException
from sqlalchemy.pool import StaticPool

from kitchen import database
from kitchen.config import reset_settings
from kitchen.models import Profile, PushSubscription
from kitchen.security import create_access_token, get_password_hash


@pytest.fixture(autouse=True)
def _settings():
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def db():
    engine = database.configure_engine("sqlite://", poolclass=StaticPool)
    database.init_db()
    session = database.SessionLocal()
    try:
        yield session
    finally:
        session.close()
        database.Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    from kitchen.main import app

    def _get_db():
        yield db

    app.dependency_overrides[database.get_db] = _get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_profile(db):
    counter = {"n": 0}

    def _make(role="employee", work_location="Main Office", subscribed=True, password="secret123"):
        counter["n"] += 1
        n = counter["n"]
        p = Profile(
            email=f"user{n}@karmic.co.in",
            full_name=f"User {n}",
            employee_id=f"E{n:03d}",
            password_hash=get_password_hash(password),
            role=role,
            work_location=work_location,
        )
        db.add(p)
        db.commit()
        if subscribed:
            db.add(PushSubscription(user_id=p.id, endpoint=f"https://push.example/{p.id}",
                                    p256dh="p256", auth="auth"))
            db.commit()
        db.refresh(p)
        return p

    return _make


def auth_headers(profile) -> dict:
    token = create_access_token({"sub": str(profile.id), "email": profile.email, "role": profile.role})
    return {"Authorization": f"Bearer {token}"}


SERVICE_HEADERS = {"Authorization": "Bearer test-service-key"}


class FakeResponse:
    def __init__(self, status_code):
        self.status_code = status_code
        self.text = ""


class FakePush:
    """Records deliveries; endpoints listed in `gone`/`broken` raise."""

    def __init__(self):
        self.sent = []
        self.gone = set()
        self.broken = set()

    def __call__(self, subscription, payload):
        endpoint = subscription["endpoint"]
        if endpoint in self.gone:
            raise WebPushException("Push failed: 410 Gone", response=FakeResponse(410))
        if endpoint in self.broken:
            raise WebPushException("Push failed: 500", response=FakeResponse(500))
        self.sent.append((endpoint, payload))


@pytest.fixture
def fake_push(monkeypatch):
    fake = FakePush()
    monkeypatch.setattr("kitchen.services.dispatcher.send_web_push", fake)
    return fake
