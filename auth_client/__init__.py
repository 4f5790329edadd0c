"""Client-side helper for the /api/auth endpoints."""
from auth_client.client import AuthClient, AuthClientError
from auth_client.storage import FileTokenStorage, MemoryTokenStorage, TokenStorage

__all__ = [
    "AuthClient",
    "AuthClientError",
    "FileTokenStorage",
    "MemoryTokenStorage",
    "TokenStorage",
]
