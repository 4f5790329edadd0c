import os

os.environ.setdefault("APP_ENV", "testing")

import pytest  # noqa: E402

from api import create_app  # noqa: E402
from models import storage  # noqa: E402
from models.user import User  # noqa: E402
from utils.mailer import NotificationError  # noqa: E402
from utils.security import hash_password  # noqa: E402

PASSWORD = "correctpw"


class RecordingMailer:
    """Stands in for EmailSender; keeps what would have been sent."""

    def __init__(self):
        self.outbox = []
        self.fail = False

    def send(self, to, subject, text, html=None):
        if self.fail:
            raise NotificationError("relay unavailable")
        self.outbox.append({"to": to, "subject": subject, "text": text})

    def last_to(self, address):
        for message in reversed(self.outbox):
            if message["to"] == address:
                return message
        return None


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def app(mailer):
    """Fresh app and in-memory database per test."""
    app = create_app("testing", mailer=mailer)
    yield app
    storage.close()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    def _make(username, password=PASSWORD, email=None, mfa=False, active=True):
        with app.app_context():
            user = User(
                username=username,
                email=email or f"{username}@example.com",
                password_hash=hash_password(password),
                mfa_enabled=mfa,
                is_active=active,
            )
            storage.new(user)
            storage.save()
            return user

    return _make


@pytest.fixture
def alice(make_user):
    return make_user("alice")


@pytest.fixture
def mfa_user(make_user):
    return make_user("mfa_user", mfa=True)


@pytest.fixture
def login(client):
    """POST /api/auth/login, optionally from a given client address."""
    def _login(username, password, ip="127.0.0.1"):
        return client.post(
            "/api/auth/login",
            json={"username": username, "password": password},
            environ_base={"REMOTE_ADDR": ip},
        )

    return _login


@pytest.fixture
def tokens_for(login):
    def _tokens(username, password=PASSWORD, ip="127.0.0.1"):
        resp = login(username, password, ip=ip)
        assert resp.status_code == 200, resp.get_json()
        return resp.get_json()

    return _tokens


def bearer(token):
    return {"Authorization": f"Bearer {token}"}
