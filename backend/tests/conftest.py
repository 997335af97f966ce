# tests/conftest.py
import os

# Settings are read at import time, so configure before importing the app
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["JWT_ACCESS_SECRET"] = "test-access-secret"
os.environ["JWT_REFRESH_SECRET"] = "test-refresh-secret"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["RATE_LIMIT_STORAGE_URI"] = "memory://"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient

from gnet_auth.database import Base, SessionLocal, engine
from gnet_auth.main import app
from gnet_auth.models import User
from gnet_auth.services.email_service import EmailService, get_email_service
from gnet_auth.utils.exceptions import MailDeliveryError
from gnet_auth.utils.security import get_password_hash


class FakeMailer(EmailService):
    """Records outgoing mail instead of calling Resend"""

    def __init__(self):
        super().__init__(api_key="test-key")
        self.sent = []
        self.fail = False

    async def deliver(self, to, subject, html):
        if self.fail:
            raise MailDeliveryError("Email sending failed: provider unavailable")
        self.sent.append({"to": to, "subject": subject, "html": html})
        return {"id": f"test-{len(self.sent)}"}


@pytest.fixture(autouse=True)
def database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def client(mailer):
    app.dependency_overrides[get_email_service] = lambda: mailer
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def registration():
    return {
        "name": "Alice",
        "email": "a@x.com",
        "phone": "1234567890",
        "password": "password1",
        "cpassword": "password1",
    }


@pytest.fixture
def make_user(db):
    def _make_user(email, role="user", password="password1", name="Test User", is_verified=True):
        user = User(
            name=name,
            email=email,
            phone="9876543210",
            password_hash=get_password_hash(password),
            role=role,
            is_verified=is_verified,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make_user


@pytest.fixture
def login(client):
    def _login(email, password="password1"):
        resp = client.post("/api/auth/login", json={"email": email, "password": password})
        assert resp.status_code == 200, resp.json()
        return resp.json()["data"]
    return _login
