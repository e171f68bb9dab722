"""Console login/logout.

Authentication and validation history are session-scoped: logging out
drops both. Only the optional "remember me" e-mail hint outlives a
session, in a caller-supplied mapping.
"""

from __future__ import annotations

import logging
from collections.abc import MutableMapping

from fleetvision._constants import DEFAULT_REMEMBER_ME_NAMESPACE
from fleetvision.directory import Directory
from fleetvision.exceptions import AuthenticationError
from fleetvision.models.directory import User
from fleetvision.state.store import ValidationRecordStore

_logger = logging.getLogger(__name__)


class AuthService:
    def __init__(
        self,
        directory: Directory,
        records: ValidationRecordStore,
        *,
        hint_store: MutableMapping[str, str] | None = None,
        namespace: str = DEFAULT_REMEMBER_ME_NAMESPACE,
    ) -> None:
        self._directory = directory
        self._records = records
        self._hints: MutableMapping[str, str] = hint_store if hint_store is not None else {}
        self._hint_key = f"{namespace}:remembered_email"
        self._current_user: User | None = None

    @property
    def current_user(self) -> User | None:
        return self._current_user

    @property
    def is_authenticated(self) -> bool:
        return self._current_user is not None

    def login(self, email: str, password: str, *, remember: bool = False) -> User:
        """Authenticate by e-mail (case-insensitive) and password."""
        user = self._directory.find_user_by_email(email)
        if user is None:
            raise AuthenticationError("E-mail not found in the system.")
        if not user.is_active:
            raise AuthenticationError("This user is deactivated. Contact the administrator.")
        if not user.check_password(password):
            raise AuthenticationError("Incorrect password. Try again.")

        if remember:
            self._hints[self._hint_key] = user.email
        else:
            self._hints.pop(self._hint_key, None)
        self._current_user = user
        _logger.info("User %s logged in", user.id)
        return user

    def logout(self) -> None:
        """End the session and drop the validation history."""
        if self._current_user is not None:
            _logger.info("User %s logged out", self._current_user.id)
        self._current_user = None
        self._records.clear()

    def remembered_email(self) -> str | None:
        return self._hints.get(self._hint_key)
