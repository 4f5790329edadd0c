"""AuthClient against the real app over httpx's WSGI transport."""
import os
import stat

import httpx
import pytest

from auth_client import AuthClient, AuthClientError, FileTokenStorage, MemoryTokenStorage
from auth_client.client import NETWORK_ERROR, REFRESH_TOKEN_KEY, TOKEN_KEY
from services import mfa
from tests.conftest import PASSWORD, bearer


@pytest.fixture
def auth_client(app):
    http = httpx.Client(transport=httpx.WSGITransport(app=app), base_url="http://testserver")
    with AuthClient(http=http) as c:
        yield c


def _unreachable(request):
    raise httpx.ConnectError("connection refused", request=request)


@pytest.fixture
def offline_client():
    http = httpx.Client(transport=httpx.MockTransport(_unreachable), base_url="http://testserver")
    with AuthClient(http=http) as c:
        yield c


class TestLogin:
    def test_session_login_uses_session_store(self, auth_client, alice):
        auth_client.login("alice", PASSWORD)

        assert auth_client.is_authenticated()
        assert auth_client.session.get(TOKEN_KEY)
        assert auth_client.session.get(REFRESH_TOKEN_KEY)
        assert auth_client.durable.get(TOKEN_KEY) is None

    def test_remembered_login_uses_durable_store(self, auth_client, alice):
        auth_client.login("alice", PASSWORD, remember=True)

        assert auth_client.durable.get(TOKEN_KEY)
        assert auth_client.session.get(TOKEN_KEY) is None

    def test_new_login_replaces_tokens_in_other_store(self, auth_client, alice):
        auth_client.login("alice", PASSWORD, remember=True)
        auth_client.login("alice", PASSWORD)

        assert auth_client.durable.get(TOKEN_KEY) is None
        assert auth_client.get_token() == auth_client.session.get(TOKEN_KEY)

    def test_server_message_is_surfaced(self, auth_client, alice):
        with pytest.raises(AuthClientError) as excinfo:
            auth_client.login("alice", "wrongpw")

        assert excinfo.value.status == 401
        assert excinfo.value.error == "AUTHENTICATION_ERROR"
        assert excinfo.value.message == "Usuário ou senha inválidos"
        assert not auth_client.is_authenticated()

    def test_network_failure(self, offline_client):
        with pytest.raises(AuthClientError) as excinfo:
            offline_client.login("alice", PASSWORD)

        assert excinfo.value.status is None
        assert excinfo.value.message == NETWORK_ERROR


class TestMfa:
    def test_challenge_then_verify(self, auth_client, mfa_user, monkeypatch):
        monkeypatch.setattr(mfa, "generate_code", lambda: "424242")

        challenge = auth_client.login("mfa_user", PASSWORD)
        assert challenge["requireMfa"] is True
        assert not auth_client.is_authenticated()

        auth_client.verify_mfa("424242", challenge["mfa_token"], remember=True)
        assert auth_client.durable.get(TOKEN_KEY)

    def test_bad_code(self, auth_client, mfa_user):
        auth_client.login("mfa_user", PASSWORD)
        with pytest.raises(AuthClientError) as excinfo:
            auth_client.verify_mfa("000000")
        assert excinfo.value.message == "Código inválido ou expirado"


class TestRefresh:
    def test_rotates_within_same_store(self, auth_client, alice):
        auth_client.login("alice", PASSWORD, remember=True)
        old = auth_client.get_token()

        new = auth_client.refresh()

        assert new != old
        assert auth_client.durable.get(TOKEN_KEY) == new
        assert auth_client.session.get(TOKEN_KEY) is None

    def test_rejected_refresh_clears_tokens(self, auth_client, alice):
        auth_client.login("alice", PASSWORD)
        stale = auth_client.get_refresh_token()
        auth_client.refresh()
        auth_client.session.set(REFRESH_TOKEN_KEY, stale)

        with pytest.raises(AuthClientError) as excinfo:
            auth_client.refresh()

        assert excinfo.value.status == 401
        assert auth_client.get_token() is None
        assert auth_client.get_refresh_token() is None

    def test_network_failure_keeps_tokens(self, offline_client):
        offline_client.save_tokens({"token": "a", "refresh_token": "r"})
        with pytest.raises(AuthClientError):
            offline_client.refresh()
        assert offline_client.get_refresh_token() == "r"

    def test_nothing_to_refresh(self, auth_client):
        with pytest.raises(AuthClientError):
            auth_client.refresh()


class TestLogout:
    def test_revokes_and_clears(self, auth_client, client, alice):
        auth_client.login("alice", PASSWORD)
        token = auth_client.get_token()

        auth_client.logout()

        assert not auth_client.is_authenticated()
        assert client.get("/api/auth/me", headers=bearer(token)).status_code == 401

    def test_clears_even_when_server_unreachable(self, offline_client):
        offline_client.save_tokens({"token": "a", "refresh_token": "r"}, remember=True)

        offline_client.logout()

        assert offline_client.get_token() is None
        assert offline_client.get_refresh_token() is None


def test_password_reset_request(auth_client):
    resp = auth_client.request_password_reset("nobody@example.com")
    assert resp["message"].startswith("Se o e-mail estiver cadastrado")


class TestFileTokenStorage:
    def test_persists_across_instances(self, tmp_path):
        path = tmp_path / "tokens.json"
        FileTokenStorage(path).set(TOKEN_KEY, "abc")

        assert FileTokenStorage(path).get(TOKEN_KEY) == "abc"

    def test_file_is_private(self, tmp_path):
        path = tmp_path / "tokens.json"
        FileTokenStorage(path).set(TOKEN_KEY, "abc")
        assert stat.S_IMODE(os.stat(path).st_mode) == 0o600

    def test_remove(self, tmp_path):
        store = FileTokenStorage(tmp_path / "tokens.json")
        store.set(TOKEN_KEY, "abc")
        store.set(REFRESH_TOKEN_KEY, "def")
        store.remove(TOKEN_KEY)

        assert store.get(TOKEN_KEY) is None
        assert store.get(REFRESH_TOKEN_KEY) == "def"

    def test_missing_or_corrupt_file(self, tmp_path):
        path = tmp_path / "tokens.json"
        assert FileTokenStorage(path).get(TOKEN_KEY) is None
        path.write_text("{not json")
        assert FileTokenStorage(path).get(TOKEN_KEY) is None

    def test_client_with_file_store(self, app, alice, tmp_path):
        http = httpx.Client(transport=httpx.WSGITransport(app=app), base_url="http://testserver")
        durable = FileTokenStorage(tmp_path / "tokens.json")
        with AuthClient(http=http, durable=durable, session=MemoryTokenStorage()) as c:
            c.login("alice", PASSWORD, remember=True)

        reopened = AuthClient(http=httpx.Client(), durable=FileTokenStorage(tmp_path / "tokens.json"))
        assert reopened.is_authenticated()
        reopened.close()
