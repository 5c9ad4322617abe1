import os
import re
import tempfile
from datetime import datetime, timedelta, timezone

import pytest

_DB_DIR = tempfile.mkdtemp(prefix="datasprint-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ["JWT_SECRET"] = "test-secret-key-for-datasprint-suite-0123456789"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["OTP_DEBUG"] = "false"
os.environ["SEED_ADMIN_EMAIL"] = "admin@datasprint.dev"
os.environ["APP_ENV"] = "test"

from fastapi.testclient import TestClient  # noqa: E402

from datasprint.database import Base, engine, init_db  # noqa: E402
from datasprint.main import app  # noqa: E402
from datasprint.routers.deps import get_email_dispatcher, get_otp_store  # noqa: E402
from datasprint.services.email import EmailDispatcher, EmailSendError  # noqa: E402
from datasprint.services.otp import OtpStore  # noqa: E402

CODE_PATTERN = re.compile(r"\b(\d{6})\b")


class FakeClock:
    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime.now(timezone.utc)

    def __call__(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current = self.current + timedelta(seconds=seconds)


class RecordingDispatcher(EmailDispatcher):
    def __init__(self) -> None:
        super().__init__(
            api_key="test-key",
            sender="noreply@datasprint.dev",
            sender_name="DATASPRINT",
            event_name="DATASPRINT 3.0",
        )
        self.sent: list[dict] = []
        self.fail = False

    def send_email(self, to, subject, text, html=None):
        if self.fail:
            raise EmailSendError("Failed to send email")
        self.sent.append({"to": to, "subject": subject, "text": text})
        return "test-message-id"

    def last_code(self, to: str | None = None) -> str:
        for message in reversed(self.sent):
            if to is None or message["to"] == to:
                match = CODE_PATTERN.search(message["text"])
                if match:
                    return match.group(1)
        raise AssertionError("no code was mailed")


@pytest.fixture(autouse=True)
def fresh_database():
    Base.metadata.drop_all(bind=engine)
    init_db()
    yield


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def otp_store(clock):
    return OtpStore(clock=clock)


@pytest.fixture
def mailer():
    return RecordingDispatcher()


@pytest.fixture
def client(otp_store, mailer):
    app.dependency_overrides[get_otp_store] = lambda: otp_store
    app.dependency_overrides[get_email_dispatcher] = lambda: mailer
    yield TestClient(app)
    app.dependency_overrides.clear()


def team_payload(**overrides) -> dict:
    payload = {
        "username": "lead@datasprint",
        "password": "Secret1",
        "teamName": "Alpha",
        "email": "a@x.com",
        "name": "Ada Lovelace",
        "phone": "9876543210",
        "college": "Sprint Institute",
        "dept": "CSE",
        "year": "3",
        "m1Name": "Bob",
        "m1Email": "bob@x.com",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def register(client):
    def _register(**overrides) -> dict:
        response = client.post("/api/auth/register", json=team_payload(**overrides))
        assert response.status_code == 201, response.text
        return response.json()

    return _register


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
