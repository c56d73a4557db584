"""Bearer token verification."""

from src.crm.core.security.crypto import ACCESS_TOKEN_TYPE, create_access_token, decode_token

__all__ = [
    "ACCESS_TOKEN_TYPE",
    "create_access_token",
    "decode_token",
]
