"""
StudyOS Assistant — Accounts and session identity.

The session identity only namespaces storage keys; it is not a security
boundary. Credentials are kept in plain text under the global ``accounts``
key, exactly like the browser version of the app.
"""

from __future__ import annotations

import json
import logging
import re

from studyos.core.errors import AuthenticationError, InvalidInputError
from studyos.data.db import ACCOUNTS_KEY, CURRENT_USER_KEY, LocalStorage

logger = logging.getLogger(__name__)

_SPECIAL_CHARS = re.compile(r'[!@#$%^&*(),.?":{}|<>]')

PASSWORD_RULES = (
    "Invalid password! Password must contain at least five alphabets, "
    "one number, and one special character"
)


def validate_password(password: str) -> bool:
    """At least 5 letters, one digit, one special character, 7+ chars."""
    letters = re.findall(r"[a-zA-Z]", password)
    return (
        len(letters) >= 5
        and re.search(r"[0-9]", password) is not None
        and _SPECIAL_CHARS.search(password) is not None
        and len(password) >= 7
    )


class AccountService:
    """Register, log in and log out against the local account map."""

    def __init__(self, storage: LocalStorage) -> None:
        self._storage = storage

    def _accounts(self) -> dict[str, str]:
        raw = self._storage.get_item(ACCOUNTS_KEY)
        if not raw:
            return {}
        try:
            accounts = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Malformed accounts map, treating as empty")
            return {}
        return accounts if isinstance(accounts, dict) else {}

    def current_user(self) -> str | None:
        return self._storage.current_identity()

    def register(self, email: str, password: str, confirm_password: str) -> str:
        """Create (or overwrite) an account and log it in."""
        email = (email or "").strip()
        if not email or not password:
            raise InvalidInputError("Please fill in all fields")
        if not validate_password(password):
            raise InvalidInputError(PASSWORD_RULES)
        if password != confirm_password:
            raise InvalidInputError("Passwords do not match")

        accounts = self._accounts()
        accounts[email] = password
        self._storage.set_item(ACCOUNTS_KEY, json.dumps(accounts))
        logger.info("Account created for %s", email)
        return self._start_session(email)

    def login(self, email: str, password: str) -> str:
        """Start a session. Unknown identity and wrong password fail the same way."""
        email = (email or "").strip()
        if not email or not password:
            raise InvalidInputError("Please fill in all fields")
        if self._accounts().get(email) != password:
            logger.warning("Failed login attempt")
            raise AuthenticationError("Invalid email or password")
        return self._start_session(email)

    def logout(self) -> None:
        """End the session but keep the user's data for the next login."""
        user = self.current_user()
        self._storage.remove_item(CURRENT_USER_KEY)
        if user:
            logger.info("User %s logged out", user)

    def _start_session(self, email: str) -> str:
        self._storage.set_item(CURRENT_USER_KEY, email)
        logger.info("Session started for %s", email)
        return email
