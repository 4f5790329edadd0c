from __future__ import annotations
from functools import wraps
from flask import request, g, current_app
from services.errors import AuthenticationError, RateLimitError, MISSING_TOKEN, TOO_MANY_LOGINS
from services.tokens import authenticate_access_token


def bearer_token() -> str | None:
    """Token from an `Authorization: Bearer <token>` header, or None."""
    auth = request.headers.get("Authorization", "")
    if not auth.startswith("Bearer "):
        return None
    token = auth.split(" ", 1)[1].strip()
    return token or None


def jwt_required():
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            token = bearer_token()
            if not token:
                raise AuthenticationError(MISSING_TOKEN)
            user, claims = authenticate_access_token(token)
            g.current_user = user
            g.current_token_jti = claims.get("jti")
            return fn(*args, **kwargs)

        return wrapper

    return decorator


def rate_limited(name: str, message: str = TOO_MANY_LOGINS):
    """
    Throttle the view per client address using the limiter registered as
    app.extensions["rate_limiters"][name]. Runs before any body parsing.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            limiter = current_app.extensions["rate_limiters"][name]
            client = request.remote_addr or "unknown"
            allowed, retry_after = limiter.hit(f"{name}:{client}")
            if not allowed:
                current_app.logger.warning("rate limit hit limiter=%s client=%s", name, client)
                raise RateLimitError(message, retry_after=retry_after)
            return fn(*args, **kwargs)

        return wrapper

    return decorator
