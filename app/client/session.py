"""
Client-side session state.

Holds the signed-in identity, the sort preference and the last fetched
course list. Identity and sort preference survive restarts in a small JSON
file; the course list is always refetched from the API.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from jose import jwt
from jose.exceptions import JOSEError

from app.utils.sorting import SortConfig, sort_courses
from app.utils.timeslots import format_time_range

logger = logging.getLogger("app.client.session")


def _default_session_path() -> Path:
    return Path.home() / ".class-schedule" / "session.json"


@dataclass(frozen=True)
class UserIdentity:
    email: str
    name: Optional[str]
    image_url: Optional[str]
    token: str

    def to_dict(self) -> Dict[str, Any]:
        return {"email": self.email, "name": self.name, "imageUrl": self.image_url, "token": self.token}

    @classmethod
    def from_dict(cls, data: Any) -> Optional["UserIdentity"]:
        if not isinstance(data, dict):
            return None
        email, token = data.get("email"), data.get("token")
        if not isinstance(email, str) or not isinstance(token, str) or not email or not token:
            return None
        return cls(email=email, name=data.get("name"), image_url=data.get("imageUrl"), token=token)


def identity_from_credential(credential: str) -> UserIdentity:
    """
    Read the profile claims out of a Google ID token without verifying it.
    The API verifies the token on every request; this is only for display.
    """
    try:
        claims = jwt.get_unverified_claims(credential)
    except JOSEError as exc:
        raise ValueError("credential is not a JWT") from exc
    email = claims.get("email")
    if not email:
        raise ValueError("credential has no email claim")
    return UserIdentity(email=email, name=claims.get("name"), image_url=claims.get("picture"), token=credential)


@dataclass
class Session:
    path: Path = field(default_factory=_default_session_path)
    user: Optional[UserIdentity] = None
    sort: SortConfig = field(default_factory=SortConfig)
    courses: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @classmethod
    def load(cls, path: str | Path | None = None) -> "Session":
        """
        Missing or unreadable file -> signed out, default sort.
        """
        session = cls(path=Path(path) if path is not None else _default_session_path())
        if not session.path.exists():
            return session
        try:
            data = json.loads(session.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError, UnicodeDecodeError) as exc:
            logger.warning("Ignoring unreadable session file %s: %s", session.path, exc)
            return session
        if not isinstance(data, dict):
            return session
        session.user = UserIdentity.from_dict(data.get("user"))
        session.sort = SortConfig.from_dict(data.get("sortConfig"))
        return session

    def save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "user": self.user.to_dict() if self.user else None,
            "sortConfig": self.sort.to_dict(),
        }
        self.path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")

    def login(self, user: UserIdentity) -> None:
        self.user = user
        self.courses = []
        self.save()

    def logout(self) -> None:
        self.user = None
        self.courses = []
        self.save()

    def select_sort(self, key: str) -> SortConfig:
        self.sort = self.sort.select(key)
        self.save()
        return self.sort

    def sorted_courses(self) -> List[Dict[str, Any]]:
        return sort_courses(self.courses, self.sort)

    def display_rows(self) -> List[Dict[str, Any]]:
        """Sorted courses with the time column in 12h form."""
        rows = []
        for course in self.sorted_courses():
            row = dict(course)
            row["time"] = format_time_range(course.get("time"))
            rows.append(row)
        return rows
