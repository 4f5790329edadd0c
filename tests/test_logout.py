"""Logout: revocation of the presented pair."""
from datetime import timedelta

from models import storage
from models.auth_token import AuthToken
from tests.conftest import bearer


def _logout(client, token=None):
    headers = bearer(token) if token is not None else {}
    return client.post("/api/auth/logout", headers=headers)


def test_logout_without_header(client):
    resp = _logout(client)
    assert resp.status_code == 401
    assert resp.get_json()["message"] == "Token não fornecido"


def test_logout_with_malformed_header(client):
    resp = client.post("/api/auth/logout", headers={"Authorization": "Token abc"})
    assert resp.status_code == 401


def test_logout_revokes_pair(app, client, alice, tokens_for):
    pair = tokens_for("alice")

    resp = _logout(client, pair["token"])

    assert resp.status_code == 200
    assert resp.get_json()["message"] == "Logout realizado com sucesso"
    assert client.get("/api/auth/me", headers=bearer(pair["token"])).status_code == 401
    refresh = client.post("/api/auth/refresh-token", json={"refresh_token": pair["refresh_token"]})
    assert refresh.status_code == 401

    with app.app_context():
        (row,) = storage.get_session().query(AuthToken).filter_by(user_id=alice.id).all()
    assert row.revoked is True
    assert row.revoked_at is not None


def test_logout_leaves_other_sessions(client, alice, tokens_for):
    first = tokens_for("alice")
    second = tokens_for("alice")

    _logout(client, first["token"])

    assert client.get("/api/auth/me", headers=bearer(second["token"])).status_code == 200


def test_logout_is_acknowledged_for_unusable_tokens(client):
    resp = _logout(client, "garbage")
    assert resp.status_code == 200
    assert resp.get_json()["message"] == "Logout realizado com sucesso"


def test_logout_twice(client, alice, tokens_for):
    token = tokens_for("alice")["token"]
    assert _logout(client, token).status_code == 200
    assert _logout(client, token).status_code == 200


def test_expired_access_token_still_revokes_refresh(app, client, alice, tokens_for):
    app.config["ACCESS_TOKEN_EXPIRES"] = timedelta(seconds=-5)
    pair = tokens_for("alice")

    assert _logout(client, pair["token"]).status_code == 200

    refresh = client.post("/api/auth/refresh-token", json={"refresh_token": pair["refresh_token"]})
    assert refresh.status_code == 401
