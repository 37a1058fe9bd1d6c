"""
Client-side authentication state.

A Session holds the bearer token and the signed-in user. It is passed
explicitly to the ApiClient; SessionStore is the only place it touches disk.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

DEFAULT_SESSION_FILE = Path.home() / ".social-serve" / "session.json"


@dataclass
class Session:
    token: Optional[str] = None
    user: Optional[Dict[str, Any]] = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def auth_headers(self) -> Dict[str, str]:
        """Authorization header for the current token, or nothing when signed out."""
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    def sign_in(self, token: str, user: Dict[str, Any]) -> None:
        self.token = token
        self.user = user

    def sign_out(self) -> None:
        self.token = None
        self.user = None

    def update_user(self, changes: Dict[str, Any]) -> None:
        """Merge changes into the cached user (no-op when signed out)."""
        if self.user is not None:
            self.user = {**self.user, **changes}


@dataclass
class SessionStore:
    """
    Durable storage for a Session as a small JSON file.

    Only the token is persisted; the user is re-fetched from /auth/me after
    loading so a stale profile is never trusted.
    """

    path: Path = field(default_factory=lambda: Path(os.getenv("SOCIAL_SERVE_SESSION_FILE", DEFAULT_SESSION_FILE)))

    def load(self) -> Session:
        """
        Read the stored session.

        Returns:
            Session: With the stored token, or an empty session when the file
            is missing or unreadable.
        """
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return Session()
        except (OSError, ValueError) as e:
            logging.warning(f"Ignoring unreadable session file {self.path}: {e}")
            return Session()

        token = data.get("token") if isinstance(data, dict) else None
        return Session(token=token if isinstance(token, str) and token else None)

    def save(self, session: Session) -> None:
        if not session.token:
            self.clear()
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # The token is a credential: owner-only from the moment the file exists
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        os.fchmod(fd, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump({"token": session.token}, f)

    def clear(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
