"""
Local account registration.

Accounts are stored in the session's client storage, one blob per username
under "user:<username>". Only a bcrypt password hash is kept. There is no
login or session token; registering simply records the account, and
registering the same username again replaces the previous record.
"""

import logging
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from .models import MAX_PASSWORD_BYTES, RegisteredUser
from .storage import ClientStorage

logger = logging.getLogger(__name__)

USER_KEY_PREFIX = "user:"


class ValidationError(ValueError):
    """
    Exception raised for invalid registration input.

    Attributes:
        message: User-facing explanation
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


def user_key(username: str) -> str:
    return f"{USER_KEY_PREFIX}{username}"


def register_user(storage: ClientStorage, username: str, password: str) -> RegisteredUser:
    """
    Register (or re-register) a local account.

    Args:
        storage: Client storage for the current session
        username: Account name; surrounding whitespace is ignored
        password: Plain password, hashed before it is stored

    Returns:
        The stored RegisteredUser

    Raises:
        ValidationError: If either field is empty or the password is too long
        StorageError: If the storage backend fails
    """
    username = (username or "").strip()
    if not username or not password:
        raise ValidationError("Please fill in every field.")
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes.")

    user = RegisteredUser.create(username, password)
    storage.set_item(user_key(username), user.model_dump_json())
    logger.info("Registered local account %r for session %s", username, storage.session_id)
    return user


def get_registered_user(storage: ClientStorage, username: str) -> Optional[RegisteredUser]:
    """
    Read a registered account.

    Returns:
        RegisteredUser, or None if absent or the stored record is unreadable
    """
    raw = storage.get_item(user_key(username.strip()))
    if raw is None:
        return None
    try:
        return RegisteredUser.model_validate_json(raw)
    except PydanticValidationError as e:
        logger.warning("Stored account %r is unreadable, treating as absent: %s", username, e)
        return None
