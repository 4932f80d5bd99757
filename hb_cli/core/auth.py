"""Phone-number sessions for Health Buddie CLI."""

from __future__ import annotations

import json
import logging
import re
import time
import uuid
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from hb_cli.core.api import APIError, HealthBuddieAPI
from hb_cli.core.config import resolve_api_base, resolve_session_store
from hb_cli.core.constants import SESSION_SCHEMA_VERSION
from hb_cli.utils.date_ranges import parse_timestamp, utc_now

logger = logging.getLogger(__name__)

_PHONE_RE = re.compile(r"^\+?\d{7,15}$")


class AuthError(RuntimeError):
    """Raised when authentication fails."""


@dataclass(frozen=True)
class User:
    id: str
    phone_number: str
    created_at: datetime
    last_active: datetime
    verified: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "phoneNumber": self.phone_number,
            "createdAt": self.created_at.isoformat(),
            "lastActive": self.last_active.isoformat(),
            "verified": self.verified,
        }


@dataclass(frozen=True)
class Session:
    token: str
    user: User
    schema_version: int = SESSION_SCHEMA_VERSION

    def to_dict(self) -> Dict[str, Any]:
        return {
            "schemaVersion": self.schema_version,
            "token": self.token,
            "user": self.user.to_dict(),
        }


def normalize_phone_number(raw: str) -> str:
    """Strip separators and validate a phone number."""
    cleaned = re.sub(r"[\s\-().]", "", raw or "")
    if not _PHONE_RE.match(cleaned):
        raise AuthError(f"Invalid phone number: {raw!r}")
    return cleaned


def _user_from_dict(payload: Dict[str, Any], phone_number: str = "") -> User:
    now = utc_now()
    created = payload.get("createdAt")
    last_active = payload.get("lastActive")
    return User(
        id=str(payload.get("id") or f"user-{int(time.time() * 1000)}"),
        phone_number=str(payload.get("phoneNumber") or phone_number),
        created_at=parse_timestamp(created) if created else now,
        last_active=parse_timestamp(last_active) if last_active else now,
        verified=bool(payload.get("verified", True)),
    )


class SessionStore:
    """Session persisted as one JSON document."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def load(self) -> Optional[Session]:
        """Return the stored session; unreadable or outdated files are cleared."""
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text())
            if not isinstance(data, dict):
                raise ValueError("session must be an object")
            if data.get("schemaVersion") != SESSION_SCHEMA_VERSION:
                raise ValueError(f"unsupported schema version {data.get('schemaVersion')!r}")
            user_data = data.get("user")
            if not isinstance(user_data, dict) or not user_data.get("phoneNumber"):
                raise ValueError("no phone number in stored session")
            token = str(data.get("token") or "")
            if not token:
                raise ValueError("no token in stored session")
            return Session(token=token, user=_user_from_dict(user_data))
        except ValueError as exc:
            logger.warning("Discarding session file %s: %s", self.path, exc)
            self.clear()
            return None

    def save(self, session: Session) -> Path:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(session.to_dict(), indent=2) + "\n")
        return self.path

    def clear(self) -> bool:
        if self.path.exists():
            self.path.unlink()
            return True
        return False


class HealthBuddieAuth:
    """Login/logout against the session store, optionally through the backend."""

    def __init__(
        self,
        config: Dict[str, Any],
        store: Optional[SessionStore] = None,
    ) -> None:
        self.config = config
        self.store = store or SessionStore(resolve_session_store(config))

    def _remote_login(self, phone_number: str) -> Session:
        api_cfg = self.config.get("api", {})
        api = HealthBuddieAPI(
            base_url=resolve_api_base(self.config),
            max_retries=int(api_cfg.get("max_retries", 3)),
            timeout_seconds=int(api_cfg.get("timeout_seconds", 30)),
        )
        try:
            data = api.login(phone_number)
        except APIError as exc:
            raise AuthError(f"Login failed: {exc}") from exc

        token = data.get("token") if isinstance(data, dict) else None
        if not token:
            raise AuthError("Login response did not include a token")
        user_data = data.get("user") if isinstance(data.get("user"), dict) else {}
        return Session(token=str(token), user=_user_from_dict(user_data, phone_number=phone_number))

    def _local_login(self, phone_number: str) -> Session:
        now = utc_now()
        stamp = int(now.timestamp() * 1000)
        user = User(
            id=f"user-{stamp}",
            phone_number=phone_number,
            created_at=now,
            last_active=now,
        )
        return Session(token=f"demo-token-{stamp}-{uuid.uuid4().hex[:8]}", user=user)

    def login(self, phone_number: str) -> Session:
        """Create and store a session for the phone number."""
        normalized = normalize_phone_number(phone_number)
        if self.config.get("auth", {}).get("remote_login", False):
            session = self._remote_login(normalized)
        else:
            session = self._local_login(normalized)
        self.store.save(session)
        logger.debug("Session saved to %s", self.store.path)
        return session

    def logout(self) -> bool:
        """Delete the stored session."""
        return self.store.clear()

    def current(self) -> Optional[Session]:
        return self.store.load()

    def require_session(self) -> Session:
        session = self.current()
        if session is None:
            raise AuthError("Not logged in. Run `hb login --phone <number>` first.")
        return session
