"""
AuthClient: calls the gateway's /api/auth endpoints and keeps the returned
tokens in caller-supplied storage.

Two stores are injected: ``durable`` for "remember me" logins and
``session`` otherwise. Reads look in durable first, then session.
"""
from __future__ import annotations

import logging
from typing import Any

import httpx

from auth_client.storage import MemoryTokenStorage, TokenStorage

logger = logging.getLogger(__name__)

TOKEN_KEY = "token"
REFRESH_TOKEN_KEY = "refresh_token"
NETWORK_ERROR = "Não foi possível conectar ao servidor. Tente novamente."


class AuthClientError(Exception):
    """Request failed. ``status`` is None for transport failures."""

    def __init__(self, message: str, status: int | None = None, error: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.error = error


class AuthClient:
    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        *,
        durable: TokenStorage | None = None,
        session: TokenStorage | None = None,
        http: httpx.Client | None = None,
        timeout: float = 10.0,
    ) -> None:
        self.durable = durable or MemoryTokenStorage()
        self.session = session or MemoryTokenStorage()
        self._http = http or httpx.Client(base_url=base_url, timeout=timeout)

    # --- transport -------------------------------------------------------

    def _post(self, path: str, json: dict | None = None, headers: dict | None = None) -> dict[str, Any]:
        try:
            response = self._http.post(path, json=json, headers=headers)
        except httpx.RequestError as exc:
            logger.error("auth request %s failed: %s", path, exc)
            raise AuthClientError(NETWORK_ERROR) from exc

        try:
            data = response.json()
        except ValueError:
            data = {}
        if response.is_error:
            raise AuthClientError(
                data.get("message") or f"Erro {response.status_code}",
                status=response.status_code,
                error=data.get("error"),
            )
        return data

    # --- storage ---------------------------------------------------------

    def _store(self, remember: bool) -> TokenStorage:
        return self.durable if remember else self.session

    def save_tokens(self, data: dict, remember: bool = False) -> None:
        # Drop any pair held in the other store so reads never mix generations
        self.remove_tokens()
        store = self._store(remember)
        if data.get("token"):
            store.set(TOKEN_KEY, data["token"])
        if data.get("refresh_token"):
            store.set(REFRESH_TOKEN_KEY, data["refresh_token"])

    def remove_tokens(self) -> None:
        for store in (self.durable, self.session):
            store.remove(TOKEN_KEY)
            store.remove(REFRESH_TOKEN_KEY)

    def get_token(self) -> str | None:
        return self.durable.get(TOKEN_KEY) or self.session.get(TOKEN_KEY)

    def get_refresh_token(self) -> str | None:
        return self.durable.get(REFRESH_TOKEN_KEY) or self.session.get(REFRESH_TOKEN_KEY)

    def is_authenticated(self) -> bool:
        return bool(self.get_token())

    # --- operations ------------------------------------------------------

    def login(self, username: str, password: str, remember: bool = False) -> dict:
        """Returns the server body; tokens are stored unless MFA is required."""
        data = self._post("/api/auth/login", json={"username": username, "password": password})
        if not data.get("requireMfa"):
            self.save_tokens(data, remember)
        return data

    def verify_mfa(self, code: str, mfa_token: str | None = None, remember: bool = False) -> dict:
        payload = {"code": code}
        if mfa_token:
            payload["mfa_token"] = mfa_token
        data = self._post("/api/auth/mfa/verify", json=payload)
        self.save_tokens(data, remember)
        return data

    def refresh(self) -> str:
        """Rotate the stored refresh token; returns the new access token.

        On rejection the stored tokens are cleared before the error propagates.
        """
        refresh_token = self.get_refresh_token()
        if not refresh_token:
            raise AuthClientError("Refresh token não disponível")
        remember = self.durable.get(REFRESH_TOKEN_KEY) is not None

        try:
            data = self._post("/api/auth/refresh-token", json={"refresh_token": refresh_token})
        except AuthClientError as exc:
            if exc.status is not None:
                self.remove_tokens()
            raise
        self.save_tokens(data, remember)
        return data["token"]

    def logout(self) -> None:
        """Tell the server, then always forget the local tokens."""
        token = self.get_token()
        try:
            if token:
                self._post("/api/auth/logout", headers={"Authorization": f"Bearer {token}"})
        except AuthClientError as exc:
            logger.warning("server-side logout failed: %s", exc.message)
        finally:
            self.remove_tokens()

    def request_password_reset(self, email: str) -> dict:
        return self._post("/api/auth/password/reset-request", json={"email": email})

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "AuthClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
