from .config import settings, get_settings
from .security import (
    create_access_token,
    verify_access_token,
    create_password_reset_token,
    verify_password_reset_token,
    verify_password,
    get_password_hash
)
from .session import Session

__all__ = [
    "settings",
    "get_settings",
    "create_access_token",
    "verify_access_token",
    "create_password_reset_token",
    "verify_password_reset_token",
    "verify_password",
    "get_password_hash",
    "Session"
]
