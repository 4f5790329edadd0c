from __future__ import annotations

from typing import Optional


class AuthServiceError(Exception):
    """Base class for gateway errors; api.errors renders them as the JSON envelope.

    Each subclass fixes an HTTP status and a stable error code. Messages are
    shown to end users as-is, so they stay generic wherever detail would let a
    caller tell existing accounts from missing ones.
    """

    status_code: int = 400
    error_code: str = "BAD_REQUEST"

    def __init__(self, message: str, *, detail: Optional[dict] = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail or {}


class ValidationError(AuthServiceError):
    status_code = 400
    error_code = "VALIDATION_ERROR"


class AuthenticationError(AuthServiceError):
    status_code = 401
    error_code = "AUTHENTICATION_ERROR"


class LockoutError(AuthServiceError):
    """Too many failed password checks for one account."""
    status_code = 401
    error_code = "ACCOUNT_LOCKED"


class RateLimitError(AuthServiceError):
    status_code = 429
    error_code = "RATE_LIMITED"

    def __init__(self, message: str, *, retry_after: int = 0, detail: Optional[dict] = None) -> None:
        super().__init__(message, detail=detail)
        self.retry_after = retry_after


class NotFoundError(AuthServiceError):
    status_code = 404
    error_code = "NOT_FOUND"


class InternalError(AuthServiceError):
    status_code = 500
    error_code = "INTERNAL_ERROR"


# User-facing messages
INVALID_CREDENTIALS = "Usuário ou senha inválidos"
ACCOUNT_DISABLED = "Conta desativada. Entre em contato com o suporte."
ACCOUNT_LOCKED = "Conta bloqueada. Tente novamente em 30 minutos."
TOO_MANY_LOGINS = "Muitas tentativas de login. Tente novamente em 15 minutos."
INVALID_MFA_CODE = "Código inválido ou expirado"
INVALID_REFRESH_TOKEN = "Refresh token inválido ou expirado"
INVALID_RESET_TOKEN = "Token de redefinição inválido ou expirado"
USER_NOT_FOUND = "Usuário não encontrado"
USER_NOT_FOUND_OR_INACTIVE = "Usuário não encontrado ou desativado"
MISSING_TOKEN = "Token não fornecido"
INTERNAL = "Erro interno do servidor"
