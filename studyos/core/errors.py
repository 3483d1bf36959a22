"""Error taxonomy shared by the core services and the bot.

Nothing here is fatal: the bot catches ``StudyOSError`` and replies with
its message. Malformed stored data and unparseable chat commands never
raise at all.
"""

from __future__ import annotations


class StudyOSError(Exception):
    """Base class for user-facing failures."""


class InvalidInputError(StudyOSError):
    """Required manual input is missing or invalid. Nothing was saved."""


class AuthenticationError(StudyOSError):
    """Login failed. The message never says which credential was wrong."""


class NotFoundError(StudyOSError):
    """An explicit operation referenced a record that does not exist."""
