"""Process-wide holder of the authentication token and user identity."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Optional

from kcat_portal.interfaces.schemas import Session, User
from kcat_portal.utils.logger import get_logger

logger = get_logger(__name__)


class SessionStore:
    """Owns the current session. Optionally mirrors it to a JSON file.

    Components read the token right before each request instead of caching
    it, so a logout between two calls is observed by the second one.
    """

    def __init__(self, path: Optional[Path] = None) -> None:
        self._path = Path(path).expanduser() if path else None
        self._session: Optional[Session] = None
        if self._path is not None:
            self._session = self._restore()

    def get_token(self) -> Optional[str]:
        return self._session.token if self._session else None

    def get_user(self) -> Optional[User]:
        return self._session.user if self._session else None

    @property
    def is_authenticated(self) -> bool:
        return self._session is not None

    def set_session(self, token: str, user: User) -> None:
        if not token:
            raise ValueError("Session token must be a non-empty string")
        self._session = Session(token=token, user=user)
        logger.info("session.set", user_id=user.id, username=user.username)
        if self._path is not None:
            self._write(self._session.model_dump_json())

    def clear(self) -> None:
        had_session = self._session is not None
        self._session = None
        if self._path is not None and self._path.exists():
            self._path.unlink()
        if had_session:
            logger.info("session.cleared")

    def _write(self, data: str) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        # Owner-only: the file holds a bearer token.
        fd = os.open(self._path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w") as handle:
            handle.write(data)
        os.chmod(self._path, 0o600)

    def _restore(self) -> Optional[Session]:
        if self._path is None or not self._path.exists():
            return None
        try:
            return Session.model_validate(json.loads(self._path.read_text()))
        except ValueError as exc:
            # Unreadable session data counts as logged out.
            logger.warning("session.restore_failed", path=str(self._path), error=str(exc))
            self._path.unlink()
            return None


__all__ = ["SessionStore"]
